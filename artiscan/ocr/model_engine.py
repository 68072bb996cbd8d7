"""
Transformer Recognition Engine

Runs the pretrained TextRecognitionNet on normalized field crops.

The weights ship as two files treated as versioned external data:
    recognizer.pt    torch state dict
    recognizer.json  metadata: version, input contract, vocabulary and
                     network hyper-parameters, e.g.

    {
        "version": "2024.1",
        "input_height": 32, "input_width": 384, "channels": 1,
        "blank_index": 0,
        "vocabulary": ["<blank>", "0", "1", ...],
        "d_model": 256, "nhead": 8, "num_layers": 4
    }
"""

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import torch
from PIL import Image

from artiscan.errors import ModelLoadError
from .base import FieldRecognizer
from .decode import ctc_greedy_decode, softmax
from .network import TextRecognitionNet
from .preprocess import NormalizationSpec, to_batch
from .result import RecognitionResult

logger = logging.getLogger(__name__)

DEFAULT_WEIGHTS = Path("models/recognizer.pt")
DEFAULT_METADATA = Path("models/recognizer.json")


@dataclass(frozen=True)
class ModelMetadata:
    """Everything about the weights that is not a tensor."""
    version: str
    vocabulary: List[str]
    blank_index: int = 0
    input_height: int = 32
    input_width: int = 384
    channels: int = 1
    d_model: int = 256
    nhead: int = 8
    num_layers: int = 4

    @property
    def normalization(self) -> NormalizationSpec:
        return NormalizationSpec(height=self.input_height, width=self.input_width, channels=self.channels)

    @classmethod
    def from_dict(cls, data: dict) -> 'ModelMetadata':
        try:
            meta = cls(
                version=str(data["version"]),
                vocabulary=list(data["vocabulary"]),
                blank_index=int(data.get("blank_index", 0)),
                input_height=int(data.get("input_height", 32)),
                input_width=int(data.get("input_width", 384)),
                channels=int(data.get("channels", 1)),
                d_model=int(data.get("d_model", 256)),
                nhead=int(data.get("nhead", 8)),
                num_layers=int(data.get("num_layers", 4)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ModelLoadError(f"Invalid model metadata: {e}") from e

        if not 0 <= meta.blank_index < len(meta.vocabulary):
            raise ModelLoadError("blank_index outside the vocabulary")
        return meta

    @classmethod
    def load(cls, path: Path) -> 'ModelMetadata':
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return cls.from_dict(json.load(f))
        except (OSError, json.JSONDecodeError) as e:
            raise ModelLoadError(f"Failed to read model metadata {path}: {e}") from e


def build_network(meta: ModelMetadata) -> TextRecognitionNet:
    """Instantiate an untrained network matching the metadata."""
    return TextRecognitionNet(
        num_classes=len(meta.vocabulary),
        input_height=meta.input_height,
        in_channels=meta.channels,
        d_model=meta.d_model,
        nhead=meta.nhead,
        num_layers=meta.num_layers,
    )


def load_network(weights_path: Path, meta: ModelMetadata, device: str = "cpu") -> TextRecognitionNet:
    """
    Build the network and load pretrained weights.

    Raises:
        ModelLoadError: If the file is missing or does not fit the metadata
    """
    net = build_network(meta)
    try:
        state = torch.load(weights_path, map_location=device)
        net.load_state_dict(state)
    except (OSError, RuntimeError) as e:
        raise ModelLoadError(f"Failed to load weights {weights_path}: {e}") from e
    return net.to(device).eval()


class TransformerRecognizer(FieldRecognizer):
    """
    Field recognizer backed by TextRecognitionNet.

    Example:
        recognizer = TransformerRecognizer.from_files("models/recognizer.pt",
                                                      "models/recognizer.json")
        result = recognizer.recognize(crop)
        print(result.text, result.confidence)
    """

    def __init__(self, net: torch.nn.Module, meta: ModelMetadata, device: str = "cpu"):
        """
        Args:
            net: Network in eval mode returning (N, T, num_classes) scores
            meta: Metadata the network was trained with
            device: torch device string
        """
        self._net = net
        self._meta = meta
        self._device = torch.device(device)
        self._spec = meta.normalization

    @classmethod
    def from_files(cls, weights_path: Optional[Path] = None, meta_path: Optional[Path] = None,
                   device: str = "cpu") -> 'TransformerRecognizer':
        weights_path = Path(weights_path or DEFAULT_WEIGHTS)
        meta_path = Path(meta_path or DEFAULT_METADATA)
        meta = ModelMetadata.load(meta_path)
        net = load_network(weights_path, meta, device)
        logger.info(f"Loaded recognizer {meta.version} ({len(meta.vocabulary)} classes) on {device}")
        return cls(net, meta, device)

    @property
    def name(self) -> str:
        return "transformer"

    @property
    def metadata(self) -> ModelMetadata:
        return self._meta

    def recognize(self, image: Image.Image) -> RecognitionResult:
        return self.recognize_batch([image])[0]

    def recognize_batch(self, images: Sequence[Image.Image]) -> List[RecognitionResult]:
        """
        Recognize all crops of one frame in a single forward pass.
        """
        if not images:
            return []

        start_time = time.perf_counter()
        batch = torch.from_numpy(to_batch(images, self._spec)).to(self._device)
        with torch.no_grad():
            logits = self._net(batch)
        probs = softmax(logits.float().cpu().numpy())

        results = []
        for sequence in probs:
            text, confidence = ctc_greedy_decode(sequence, self._meta.vocabulary, self._meta.blank_index)
            results.append(RecognitionResult(text=text, confidence=confidence))

        logger.debug(f"Recognized {len(images)} fields in {(time.perf_counter() - start_time) * 1000:.1f}ms")
        return results

    def configure(self, **kwargs) -> None:
        """
        Configure engine parameters.

        Args:
            device: Move the network to another torch device
        """
        if 'device' in kwargs:
            self._device = torch.device(kwargs['device'])
            self._net.to(self._device)
