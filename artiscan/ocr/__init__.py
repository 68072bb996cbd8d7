"""
Recognition Module for Artifact Scanner

Pluggable text recognition for single-line detail-pane fields.

Usage:
    from artiscan.ocr import create_recognizer

    # Load the pretrained model
    recognizer = create_recognizer(model_path="models/recognizer.pt",
                                   meta_path="models/recognizer.json")

    # Recognize one field crop
    result = recognizer.recognize(crop)
    print(result.text, result.confidence)
"""

# Public API - Result types
from .result import (
    RecognitionResult,
    RawFieldSet,
)

# Public API - Base class for custom recognizers
from .base import FieldRecognizer

# Public API - Factory functions
from .factory import (
    create_recognizer,
    register_recognizer,
    available_recognizers,
)

# Input contract and decoding
from .preprocess import NormalizationSpec, normalize_image
from .decode import ctc_greedy_decode

# Debug utilities
from .debug import DEBUG_DIR, save_debug_image, get_confidence_color

__all__ = [
    # Result types
    "RecognitionResult",
    "RawFieldSet",
    # Base class
    "FieldRecognizer",
    # Factory
    "create_recognizer",
    "register_recognizer",
    "available_recognizers",
    # Preprocessing / decoding
    "NormalizationSpec",
    "normalize_image",
    "ctc_greedy_decode",
    # Debug
    "DEBUG_DIR",
    "save_debug_image",
    "get_confidence_color",
]
