"""
Item Reader

Captures the detail pane of the currently selected item once, slices it
into field crops using the resolved layout and runs the recognizer over
every text field. All crops of an item come from the same frame.
"""

import logging
import re
import time
from typing import Optional

import cv2
import numpy as np
from PIL import Image

from artiscan.errors import UnreadableRarity
from artiscan.layout import LayoutTable, STAR, TEXT_FIELDS
from artiscan.ocr import FieldRecognizer, RawFieldSet, save_debug_image
from artiscan.window_capture import FrameSource

logger = logging.getLogger(__name__)


# Rarity stars are drawn in a saturated yellow (~#FFCC32)
STAR_HUE_RANGE = (15, 35)       # OpenCV hue, 0-180
STAR_MIN_SATURATION = 120
STAR_MIN_VALUE = 150
STAR_MIN_AREA_REL = 0.08        # of crop_height ** 2

COUNT_PATTERN = re.compile(r"(\d[\d,.]*)\s*/\s*(\d[\d,.]*)")


def count_stars(star_crop: Image.Image) -> int:
    """
    Count rarity stars in the star field crop.

    Thresholds yellow pixels in HSV and counts connected blobs large enough
    to be a star.
    """
    rgb = np.asarray(star_crop.convert("RGB"))
    if rgb.size == 0:
        return 0

    hsv = cv2.cvtColor(rgb, cv2.COLOR_RGB2HSV)
    lower = np.array([STAR_HUE_RANGE[0], STAR_MIN_SATURATION, STAR_MIN_VALUE], dtype=np.uint8)
    upper = np.array([STAR_HUE_RANGE[1], 255, 255], dtype=np.uint8)
    mask = cv2.inRange(hsv, lower, upper)

    contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    min_area = max(4.0, STAR_MIN_AREA_REL * rgb.shape[0] ** 2)
    return sum(1 for cnt in contours if cv2.contourArea(cnt) >= min_area)


def parse_item_count(text: str) -> Optional[int]:
    """
    Parse the inventory count label.

    Example:
        >>> parse_item_count("Artifacts 1,234/1500")
        1234
    """
    match = COUNT_PATTERN.search(text)
    if not match:
        return None
    digits = re.sub(r"[,.]", "", match.group(1))
    return int(digits) if digits else None


class ItemReader:
    """
    Reads the selected item's detail pane into a RawFieldSet.

    Example:
        reader = ItemReader(window_system, recognizer)
        raw = reader.read_current_item(layout)
        print(raw.text("name"), raw.stars)
    """

    def __init__(self, frame_source: FrameSource, recognizer: FieldRecognizer, dump: bool = False):
        """
        Args:
            frame_source: Screen capture primitive
            recognizer: Field recognizer
            dump: Save an annotated debug image for every item read
        """
        self.frame_source = frame_source
        self.recognizer = recognizer
        self.dump = dump

    def capture_pane(self, layout: LayoutTable) -> Image.Image:
        """Capture the detail pane. Raises CaptureUnavailable."""
        return self.frame_source.capture(layout.pane_rect)

    def read_current_item(self, layout: LayoutTable, frame: Optional[Image.Image] = None) -> RawFieldSet:
        """
        Read every field of the selected item from one frame.

        Args:
            layout: Resolved layout table
            frame: Already captured pane image; captured here when None

        Returns:
            RawFieldSet with one RecognitionResult per text field

        Raises:
            UnreadableRarity: If the star count is not in 1..5
            CaptureUnavailable: If the capture fails
        """
        start_time = time.perf_counter()
        pane = frame if frame is not None else self.capture_pane(layout)

        stars = count_stars(pane.crop(layout.field(STAR).box))
        if not 1 <= stars <= 5:
            if self.dump:
                save_debug_image(pane, layout.fields, None)
            raise UnreadableRarity(stars)

        crops = [pane.crop(layout.field(name).box) for name in TEXT_FIELDS]
        results = self.recognizer.recognize_batch(crops)

        raw = RawFieldSet(
            fields=dict(zip(TEXT_FIELDS, results)),
            stars=stars,
            processing_time_ms=(time.perf_counter() - start_time) * 1000,
        )

        if self.dump:
            save_debug_image(pane, layout.fields, raw)
        return raw

    def read_item_count(self, layout: LayoutTable) -> Optional[int]:
        """
        Read the inventory count label ("Artifacts 1234/1500").

        Returns:
            Current item count, or None if it cannot be read
        """
        image = self.frame_source.capture(layout.count_rect)
        result = self.recognizer.recognize(image)
        count = parse_item_count(result.text)
        logger.info(f"Item count label: {result.text!r} -> {count}")
        return count
