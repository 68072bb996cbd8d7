"""
Test script for the item reader

Covers:
1. Star counting on drawn rarity stars
2. Inventory count label parsing
3. Reading a pane through a fake frame source and recognizer
4. Debug dumps

Usage:
    python test_item_reader.py
"""

import sys
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from artiscan.errors import UnreadableRarity
from artiscan.item_reader import ItemReader, count_stars, parse_item_count
from artiscan.layout import STAR, TEXT_FIELDS, LayoutResolver, WindowGeometry
from artiscan.ocr import FieldRecognizer, RecognitionResult
from artiscan.window_capture import FrameSource


STAR_COLOR = (255, 204, 50)
PANE_BACKGROUND = (60, 50, 45)


def draw_stars(image: Image.Image, box, count: int) -> None:
    left, top, right, bottom = box
    radius = (bottom - top) // 2 - 3
    cy = (top + bottom) // 2
    draw = ImageDraw.Draw(image)
    for i in range(count):
        cx = left + radius + 4 + i * (2 * radius + 8)
        draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius], fill=STAR_COLOR)


class PaneSource(FrameSource):
    """Returns a prepared pane for the pane rect, blank images elsewhere."""

    def __init__(self, pane: Image.Image, pane_rect):
        self.pane = pane
        self.pane_rect = pane_rect
        self.captured = []

    def capture(self, rect):
        self.captured.append(rect)
        if tuple(rect) == tuple(self.pane_rect):
            return self.pane.copy()
        return Image.new("RGB", (rect[2], rect[3]), PANE_BACKGROUND)


class EchoRecognizer(FieldRecognizer):
    """Returns 'field<i>' for the i-th crop and a fixed label for recognize()."""

    def __init__(self, label="Artifacts 1,234/1500"):
        self.label = label
        self.batches = []

    @property
    def name(self):
        return "echo"

    def recognize(self, image):
        return RecognitionResult(self.label, 0.9)

    def recognize_batch(self, images):
        self.batches.append([img.size for img in images])
        return [RecognitionResult(f"field{i}", 0.9) for i in range(len(images))]


@pytest.fixture
def layout():
    return LayoutResolver().resolve(WindowGeometry(0, 0, 1600, 900))


def make_pane(layout, stars: int) -> Image.Image:
    _, _, w, h = layout.pane_rect
    pane = Image.new("RGB", (w, h), PANE_BACKGROUND)
    draw_stars(pane, layout.field(STAR).box, stars)
    return pane


# =============================================================================
# Star counting
# =============================================================================

@pytest.mark.parametrize("stars", [1, 2, 3, 4, 5])
def test_count_stars(stars):
    crop = Image.new("RGB", (160, 28), PANE_BACKGROUND)
    draw_stars(crop, (0, 0, 160, 28), stars)
    assert count_stars(crop) == stars


def test_count_stars_ignores_specks_and_other_colors():
    crop = Image.new("RGB", (160, 28), PANE_BACKGROUND)
    draw = ImageDraw.Draw(crop)
    draw.point([(5, 5), (6, 5)], fill=STAR_COLOR)                   # too small
    draw.ellipse([40, 4, 60, 24], fill=(80, 140, 255))               # blue blob
    assert count_stars(crop) == 0


# =============================================================================
# Count label
# =============================================================================

@pytest.mark.parametrize("text,expected", [
    ("Artifacts 1,234/1500", 1234),
    ("Artifacts 87/1500", 87),
    ("圣遗物 1.500 / 1.500", 1500),
    ("Artifacts", None),
    ("", None),
])
def test_parse_item_count(text, expected):
    assert parse_item_count(text) == expected


# =============================================================================
# ItemReader
# =============================================================================

def test_read_current_item(layout):
    print("\n" + "="*60)
    print("TEST: ItemReader")
    print("="*60)

    source = PaneSource(make_pane(layout, 4), layout.pane_rect)
    recognizer = EchoRecognizer()
    raw = ItemReader(source, recognizer).read_current_item(layout)
    print(f"  stars={raw.stars}, fields={list(raw.fields)}")

    assert raw.stars == 4
    assert list(raw.fields) == list(TEXT_FIELDS)
    assert raw.text(TEXT_FIELDS[0]) == "field0"
    # One capture, one batched recognition for all text fields
    assert source.captured == [layout.pane_rect]
    assert len(recognizer.batches) == 1
    assert len(recognizer.batches[0]) == len(TEXT_FIELDS)


def test_read_uses_given_frame(layout):
    source = PaneSource(make_pane(layout, 1), layout.pane_rect)
    raw = ItemReader(source, EchoRecognizer()).read_current_item(layout, make_pane(layout, 5))
    assert raw.stars == 5
    assert source.captured == []


def test_unreadable_rarity(layout):
    source = PaneSource(make_pane(layout, 0), layout.pane_rect)
    recognizer = EchoRecognizer()
    with pytest.raises(UnreadableRarity) as info:
        ItemReader(source, recognizer).read_current_item(layout)
    assert info.value.stars == 0
    assert recognizer.batches == []


def test_read_item_count(layout):
    source = PaneSource(make_pane(layout, 5), layout.pane_rect)
    reader = ItemReader(source, EchoRecognizer("Artifacts 412/1500"))
    assert reader.read_item_count(layout) == 412
    assert source.captured == [layout.count_rect]


def test_dump_writes_debug_image(layout, tmp_path, monkeypatch):
    monkeypatch.setattr("artiscan.ocr.debug.DEBUG_DIR", tmp_path)
    source = PaneSource(make_pane(layout, 3), layout.pane_rect)
    ItemReader(source, EchoRecognizer(), dump=True).read_current_item(layout)

    written = list(tmp_path.glob("debug_*.png"))
    assert len(written) == 1
    _, _, w, h = layout.pane_rect
    assert Image.open(written[0]).height == h


def main():
    """Run all tests."""
    print("="*60)
    print("ITEM READER TESTS")
    print("="*60)

    table = LayoutResolver().resolve(WindowGeometry(0, 0, 1600, 900))
    results = []
    for name, fn in [
        ("Read Item", lambda: test_read_current_item(table)),
        ("Given Frame", lambda: test_read_uses_given_frame(table)),
        ("Item Count", lambda: test_read_item_count(table)),
    ]:
        try:
            fn()
            results.append((name, True))
        except AssertionError as e:
            print(f"  FAILED: {e}")
            results.append((name, False))

    print("\n" + "="*60)
    print("SUMMARY")
    print("="*60)
    for name, passed in results:
        print(f"  {name}: [{'PASS' if passed else 'FAIL'}]")
    return 0 if all(passed for _, passed in results) else 1


if __name__ == "__main__":
    sys.exit(main())
