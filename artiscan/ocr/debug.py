"""
Recognition Debug Utilities

Functions for saving annotated detail-pane images and managing debug output.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from .result import RawFieldSet

logger = logging.getLogger(__name__)


# Debug settings
DEBUG_DIR = Path("./debug")
MAX_DEBUG_IMAGES = 50

# Confidence thresholds for coloring
HIGH_CONFIDENCE = 0.95
MEDIUM_CONFIDENCE = 0.80


def get_confidence_color(confidence: float) -> str:
    """
    Get color code for confidence level.

    Args:
        confidence: Confidence value 0.0-1.0

    Returns:
        Hex color code string
    """
    if confidence >= HIGH_CONFIDENCE:
        return "#4CAF50"  # Green
    elif confidence >= MEDIUM_CONFIDENCE:
        return "#FFC107"  # Yellow
    else:
        return "#d32f2f"  # Red


def _load_font(size: int):
    try:
        return ImageFont.truetype("arial.ttf", size)
    except OSError:
        return ImageFont.load_default()


def save_debug_image(pane: Image.Image, fields: dict, raw: Optional[RawFieldSet],
                     path: Optional[Path] = None) -> Path:
    """
    Save the detail pane annotated with field boxes and recognized text.

    Args:
        pane: Captured detail-pane image
        fields: Mapping of field name to FieldRegion (pane-relative)
        raw: Recognition output for the same frame (can be None)
        path: Output file path; defaults to a timestamped file in DEBUG_DIR

    Returns:
        Path of the written file
    """
    DEBUG_DIR.mkdir(parents=True, exist_ok=True)
    if path is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")[:-3]
        path = DEBUG_DIR / f"debug_{timestamp}.png"

    # Pane on the left, annotations in a strip on the right
    strip_width = 360
    canvas = Image.new("RGB", (pane.width + strip_width, pane.height), "white")
    canvas.paste(pane.convert("RGB"), (0, 0))
    draw = ImageDraw.Draw(canvas)
    font = _load_font(12)

    for name, region in fields.items():
        left, top, right, bottom = region.box
        result = raw.fields.get(name) if raw else None
        color = get_confidence_color(result.confidence) if result else "blue"
        draw.rectangle([left, top, right - 1, bottom - 1], outline=color, width=1)

        if result is not None:
            label = f"{name}: {result.text!r} ({result.confidence * 100:.0f}%)"
        elif raw is not None and name == "star":
            label = f"{name}: {raw.stars}"
        else:
            label = name
        draw.text((pane.width + 5, top), label, fill=color, font=font)

    canvas.save(path, "PNG")
    _cleanup_debug_images()
    return Path(path)


def _cleanup_debug_images() -> None:
    """Remove old debug images, keeping only the most recent MAX_DEBUG_IMAGES."""
    if not DEBUG_DIR.exists():
        return

    # Get all debug images sorted by modification time
    debug_files = sorted(
        DEBUG_DIR.glob("debug_*.png"),
        key=lambda p: p.stat().st_mtime,
        reverse=True
    )

    # Remove old files
    for old_file in debug_files[MAX_DEBUG_IMAGES:]:
        try:
            old_file.unlink()
        except OSError:
            logger.debug(f"Could not remove {old_file}")
