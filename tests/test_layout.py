"""
Test script for layout resolution

Checks, for every supported aspect ratio and several resolutions:
1. Aspect ratio detection (and rejection of unsupported sizes)
2. Grid cells, pane and count label never overlap
3. Field regions stay inside the pane and never overlap each other
4. Offsets shift screen-space rectangles only

Usage:
    python test_layout.py
"""

import sys
from itertools import combinations
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from artiscan.errors import UnsupportedAspectRatio
from artiscan.layout import (
    AspectRatio,
    LayoutResolver,
    REFERENCE_LAYOUTS,
    TEXT_FIELDS,
    WindowGeometry,
    detect_aspect_ratio,
    rect_contains,
    rects_overlap,
    scale_rect,
)


RESOLUTIONS = {
    AspectRatio.R16_9: [(1280, 720), (1600, 900), (1920, 1080), (2560, 1440), (3840, 2160)],
    AspectRatio.R8_5: [(1440, 900), (1680, 1050), (1920, 1200), (2560, 1600)],
    AspectRatio.R4_3: [(1024, 768), (1280, 960), (1600, 1200)],
    AspectRatio.R43_18: [(2580, 1080), (3440, 1440)],
    AspectRatio.R7_3: [(2520, 1080), (3360, 1440)],
}

ALL_CASES = [(aspect, size) for aspect, sizes in RESOLUTIONS.items() for size in sizes]


def test_aspect_detection():
    """Every listed resolution maps to its ratio."""
    print("\n" + "="*60)
    print("TEST: Aspect detection")
    print("="*60)

    for aspect, (w, h) in ALL_CASES:
        detected = detect_aspect_ratio(w, h)
        print(f"  {w}x{h}: {detected.label if detected else None}")
        assert detected is aspect

    # 3440x1440 is 21.5:9, sold as "21:9" and rendered with the 43:18 layout
    assert detect_aspect_ratio(3440, 1440) is AspectRatio.R43_18
    assert detect_aspect_ratio(1366, 768) is AspectRatio.R16_9  # within tolerance


def test_unsupported_ratio():
    print("\n" + "="*60)
    print("TEST: Unsupported ratio")
    print("="*60)

    for w, h in [(1000, 1000), (1080, 1920), (1280, 1024)]:
        with pytest.raises(UnsupportedAspectRatio) as info:
            LayoutResolver().resolve(WindowGeometry(0, 0, w, h))
        print(f"  {w}x{h}: {info.value}")
        assert info.value.width == w and info.value.height == h


@pytest.mark.parametrize("aspect,size", ALL_CASES)
def test_regions_do_not_overlap(aspect, size):
    w, h = size
    table = LayoutResolver().resolve(WindowGeometry(0, 0, w, h))
    assert table.aspect is aspect
    assert len(table.cells) == REFERENCE_LAYOUTS[aspect].cols * REFERENCE_LAYOUTS[aspect].rows

    window = (0, 0, w, h)
    screen_regions = [c.rect for c in table.cells] + [table.pane_rect, table.count_rect]
    for rect in screen_regions:
        assert rect_contains(window, rect), f"{rect} outside {window}"
        assert rect[2] > 0 and rect[3] > 0
    for a, b in combinations(screen_regions, 2):
        assert not rects_overlap(a, b), f"{a} overlaps {b} at {w}x{h}"


@pytest.mark.parametrize("aspect,size", ALL_CASES)
def test_fields_inside_pane(aspect, size):
    w, h = size
    table = LayoutResolver().resolve(WindowGeometry(0, 0, w, h))
    _, _, pw, ph = table.pane_rect
    pane_local = (0, 0, pw, ph)

    regions = list(table.fields.values())
    for region in regions:
        assert rect_contains(pane_local, region.rect), f"{region.name} {region.rect} outside pane {pane_local}"
    for a, b in combinations(regions, 2):
        assert not rects_overlap(a.rect, b.rect), f"{a.name} overlaps {b.name}"


def test_row_major_order():
    print("\n" + "="*60)
    print("TEST: Row-major cell order")
    print("="*60)

    table = LayoutResolver().resolve(WindowGeometry(0, 0, 1920, 1080))
    cells = list(table.cells_for_page())
    assert [c.index for c in cells] == list(range(table.page_size))
    assert cells[0].row == 0 and cells[0].col == 0
    assert cells[table.cols].row == 1 and cells[table.cols].col == 0
    # Left to right within a row, top to bottom across rows
    assert cells[0].center[0] < cells[1].center[0]
    assert cells[0].center[1] < cells[table.cols].center[1]
    assert table.row_height > cells[0].rect[3]
    print(f"  {table.rows}x{table.cols} grid, row height {table.row_height}")


def test_offsets_move_screen_regions_only():
    print("\n" + "="*60)
    print("TEST: Window origin and offsets")
    print("="*60)

    geometry = WindowGeometry(100, 50, 1600, 900)
    base = LayoutResolver().resolve(geometry)
    shifted = LayoutResolver((7, -3)).resolve(geometry)

    assert base.cells[0].rect[0] == 100 + 90
    assert shifted.cells[0].rect[:2] == (base.cells[0].rect[0] + 7, base.cells[0].rect[1] - 3)
    assert shifted.pane_rect[:2] == (base.pane_rect[0] + 7, base.pane_rect[1] - 3)
    assert shifted.fields == base.fields
    print(f"  pane {base.pane_rect} -> {shifted.pane_rect}")


def test_scale_rect_keeps_adjacent_edges():
    # Adjacent rectangles stay adjacent after rounding
    a = scale_rect((0, 0, 95, 10), 1.2)
    b = scale_rect((95, 0, 95, 10), 1.2)
    assert a[0] + a[2] == b[0]


def test_text_fields_available():
    table = LayoutResolver().resolve(WindowGeometry(0, 0, 1600, 900))
    assert [r.name for r in table.text_fields()] == list(TEXT_FIELDS)


def main():
    """Run all tests."""
    print("="*60)
    print("LAYOUT TESTS")
    print("="*60)

    results = []
    for name, fn in [
        ("Aspect Detection", test_aspect_detection),
        ("Unsupported Ratio", test_unsupported_ratio),
        ("Row-Major Order", test_row_major_order),
        ("Offsets", test_offsets_move_screen_regions_only),
    ]:
        try:
            fn()
            results.append((name, True))
        except AssertionError as e:
            print(f"  FAILED: {e}")
            results.append((name, False))

    overlap_ok = True
    for aspect, size in ALL_CASES:
        try:
            test_regions_do_not_overlap(aspect, size)
            test_fields_inside_pane(aspect, size)
        except AssertionError as e:
            print(f"  {aspect.label} {size}: FAILED: {e}")
            overlap_ok = False
    results.append(("Non-overlap / Containment", overlap_ok))

    print("\n" + "="*60)
    print("SUMMARY")
    print("="*60)
    for name, passed in results:
        print(f"  {name}: [{'PASS' if passed else 'FAIL'}]")
    return 0 if all(passed for _, passed in results) else 1


if __name__ == "__main__":
    sys.exit(main())
