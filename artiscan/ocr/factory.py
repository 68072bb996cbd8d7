"""
Field Recognizer Factory

Factory for creating recognizer instances.
"""

from pathlib import Path
from typing import Dict, List, Type, Union

from .base import FieldRecognizer


# Registry of available recognizers (dotted "module.Class" or a class)
_RECOGNIZER_REGISTRY: Dict[str, Union[str, Type[FieldRecognizer]]] = {
    "transformer": "model_engine.TransformerRecognizer",
}

# Cache for loaded recognizer classes
_RECOGNIZER_CACHE: Dict[str, Type[FieldRecognizer]] = {}


def _load_recognizer_class(engine_type: str) -> Type[FieldRecognizer]:
    """Lazily load a recognizer class by type."""
    if engine_type in _RECOGNIZER_CACHE:
        return _RECOGNIZER_CACHE[engine_type]

    entry = _RECOGNIZER_REGISTRY[engine_type]
    if isinstance(entry, str):
        module_name, class_name = entry.rsplit(".", 1)

        # Import the module dynamically (keeps torch out of plain imports)
        import importlib
        module = importlib.import_module(f".{module_name}", package=__package__)
        engine_class = getattr(module, class_name)
    else:
        engine_class = entry

    _RECOGNIZER_CACHE[engine_type] = engine_class
    return engine_class


def create_recognizer(engine_type: str = "transformer", **config) -> FieldRecognizer:
    """
    Create a field recognizer by type.

    Args:
        engine_type: Recognizer type identifier. Available types:
            - "transformer" (default): CNN + self-attention CTC model
        **config: Engine-specific configuration options:
            For "transformer":
                - model_path: Path to the torch state dict
                - meta_path: Path to the JSON metadata
                - device: torch device (default "cpu")

    Returns:
        Configured FieldRecognizer instance

    Raises:
        ValueError: If engine_type is not recognized
        ModelLoadError: If the weights cannot be loaded

    Example:
        recognizer = create_recognizer(model_path="models/recognizer.pt",
                                       meta_path="models/recognizer.json")
        result = recognizer.recognize(crop)
    """
    if engine_type not in _RECOGNIZER_REGISTRY:
        available = ", ".join(_RECOGNIZER_REGISTRY.keys())
        raise ValueError(f"Unknown recognizer type: {engine_type}. Available: {available}")

    engine_class = _load_recognizer_class(engine_type)

    model_path = config.pop("model_path", None)
    meta_path = config.pop("meta_path", None)
    device = config.pop("device", "cpu")
    if hasattr(engine_class, "from_files"):
        recognizer = engine_class.from_files(
            Path(model_path) if model_path else None,
            Path(meta_path) if meta_path else None,
            device=device,
        )
    else:
        recognizer = engine_class()

    # Apply remaining config
    if config:
        recognizer.configure(**config)

    return recognizer


def register_recognizer(name: str, engine_class: type) -> None:
    """
    Register a custom recognizer type.

    Args:
        name: Recognizer type identifier
        engine_class: FieldRecognizer subclass

    Example:
        from artiscan.ocr import register_recognizer, FieldRecognizer

        class MyRecognizer(FieldRecognizer):
            ...

        register_recognizer("custom", MyRecognizer)
    """
    if not issubclass(engine_class, FieldRecognizer):
        raise TypeError(f"{engine_class} must be a subclass of FieldRecognizer")
    _RECOGNIZER_REGISTRY[name] = engine_class
    _RECOGNIZER_CACHE.pop(name, None)


def available_recognizers() -> List[str]:
    """
    List available recognizer types.

    Returns:
        List of registered recognizer type names
    """
    return list(_RECOGNIZER_REGISTRY.keys())
