"""
Scan Error Taxonomy

Fatal errors (layout, window, configuration, model) end a scan in the
FAILED state. Per-item errors are absorbed by the scan controller and
counted as skipped items.
"""

from typing import Optional


class ScanError(Exception):
    """Base class for every error raised by the scan pipeline."""


class ConfigError(ScanError):
    """Invalid configuration value."""


class WindowNotFound(ScanError):
    """The game window could not be located."""


class UnsupportedAspectRatio(ScanError):
    """Window size does not match any supported aspect-ratio class."""

    def __init__(self, width: int, height: int):
        super().__init__(f"Unsupported window size {width}x{height}")
        self.width = width
        self.height = height


class CaptureUnavailable(ScanError):
    """Window is occluded, minimized, off-screen or the grab failed."""


class ModelLoadError(ScanError):
    """Recognition weights or metadata could not be loaded."""


class ItemError(ScanError):
    """Base class for errors that only affect the current item."""


class UnreadableRarity(ItemError):
    """Star count could not be resolved to a value in 1..5."""

    def __init__(self, stars: int):
        super().__init__(f"Unreadable rarity (counted {stars} stars)")
        self.stars = stars


class LowConfidence(ItemError):
    """A recognized field fell below the configured confidence floor."""

    def __init__(self, field_name: str, confidence: float):
        super().__init__(f"Low confidence on '{field_name}': {confidence:.3f}")
        self.field_name = field_name
        self.confidence = confidence


class MalformedField(ItemError):
    """A recognized string could not be parsed for the named field."""

    def __init__(self, field_name: str, text: Optional[str] = None):
        detail = f": {text!r}" if text is not None else ""
        super().__init__(f"Malformed field '{field_name}'{detail}")
        self.field_name = field_name
        self.text = text


class SkippedItem(ItemError):
    """An item was given up on after exhausting its retries."""

    def __init__(self, page: int, cell_index: int, reason: str):
        super().__init__(f"Skipped page {page} cell {cell_index}: {reason}")
        self.page = page
        self.cell_index = cell_index
        self.reason = reason


class CancellationRequested(ScanError):
    """The user asked to stop the scan. Not a failure."""
