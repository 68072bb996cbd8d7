"""
Diagnostic script for saved game screenshots.

Resolves the layout from the screenshot size, crops the detail pane, counts
the rarity stars, runs the recognizer on every text field and tries to parse
the result. Writes an annotated copy of the pane next to the screenshot.

Example:
    python tools/debug_ocr.py screenshots/inventory_1600x900.png
    python tools/debug_ocr.py shot.png --model models/recognizer.pt --offset-y 4
"""

import argparse
import sys
from pathlib import Path

from PIL import Image

sys.path.insert(0, str(Path(__file__).parent.parent))

from artiscan.errors import ScanError
from artiscan.item_reader import count_stars
from artiscan.layout import LayoutResolver, STAR, TEXT_FIELDS, WindowGeometry
from artiscan.ocr import RawFieldSet, create_recognizer, save_debug_image
from artiscan.parsing import RecordParser


def analyze_image(image_path: Path, model_path: str, offset) -> int:
    """Analyze one screenshot and print what the scanner would read."""
    print(f"\n{'='*60}")
    print(f"Analyzing: {image_path}")
    print(f"{'='*60}")

    img = Image.open(image_path).convert("RGB")
    try:
        layout = LayoutResolver(offset).resolve(WindowGeometry(0, 0, img.width, img.height))
    except ScanError as e:
        print(f"Layout: {e}")
        return 1

    print(f"Layout: {layout.aspect.label}, scale {layout.scale:.3f}, grid {layout.rows}x{layout.cols}")
    print(f"Pane:   {layout.pane_rect}")

    pane = img.crop(_box(layout.pane_rect))
    stars = count_stars(pane.crop(layout.field(STAR).box))
    print(f"Stars:  {stars}")

    meta_path = str(Path(model_path).with_suffix(".json"))
    try:
        recognizer = create_recognizer(model_path=model_path, meta_path=meta_path)
    except ScanError as e:
        print(f"Recognizer unavailable ({e}), saving layout only")
        out = save_debug_image(pane, layout.fields, None, image_path.with_suffix(".debug.png"))
        print(f"Saved:  {out}")
        return 1

    crops = [pane.crop(layout.field(name).box) for name in TEXT_FIELDS]
    raw = RawFieldSet(fields=dict(zip(TEXT_FIELDS, recognizer.recognize_batch(crops))), stars=stars)

    print("\nFields:")
    for name in TEXT_FIELDS:
        result = raw.fields[name]
        print(f"  {name:<16} {result.confidence * 100:5.1f}%  {result.text!r}")

    try:
        record = RecordParser().parse(raw)
        print(f"\nParsed: {record.describe()}")
    except ScanError as e:
        print(f"\nParse failed: {e}")

    out = save_debug_image(pane, layout.fields, raw, image_path.with_suffix(".debug.png"))
    print(f"Saved:  {out}")
    return 0


def _box(rect):
    x, y, w, h = rect
    return (x, y, x + w, y + h)


def main():
    parser = argparse.ArgumentParser(description="Analyze saved inventory screenshots")
    parser.add_argument("images", nargs="+", type=Path, help="Full-window screenshots")
    parser.add_argument("--model", default="models/recognizer.pt", help="Recognizer weights")
    parser.add_argument("--offset-x", type=int, default=0)
    parser.add_argument("--offset-y", type=int, default=0)
    args = parser.parse_args()

    status = 0
    for image_path in args.images:
        status |= analyze_image(image_path, args.model, (args.offset_x, args.offset_y))
    sys.exit(status)


if __name__ == "__main__":
    main()
