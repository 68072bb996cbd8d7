"""
Layout Resolver

Converts a detected window rectangle into the coordinate table used by the
scanner: item-grid cell rectangles, the detail pane, the inventory count
label and the detail-pane field regions.

Every reference layout is measured at a window height of 900 px and scaled
to the actual window size. Rectangles are scaled by rounding their edges,
not their sizes, so reference regions that do not overlap never overlap
after scaling and stay inside the pane.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from artiscan.errors import UnsupportedAspectRatio


REFERENCE_HEIGHT = 900

# Relative tolerance when matching width/height against a supported ratio
ASPECT_TOLERANCE = 0.01

Rect = Tuple[int, int, int, int]  # (x, y, width, height)


class AspectRatio(Enum):
    """Supported window aspect-ratio classes as (width, height) terms."""
    R16_9 = (16, 9)
    R8_5 = (8, 5)
    R4_3 = (4, 3)
    R43_18 = (43, 18)
    R7_3 = (7, 3)

    @property
    def ratio(self) -> float:
        w, h = self.value
        return w / h

    @property
    def label(self) -> str:
        w, h = self.value
        return f"{w}:{h}"


def detect_aspect_ratio(width: int, height: int) -> Optional[AspectRatio]:
    """
    Match a window size against the supported aspect ratios.

    Returns:
        The closest AspectRatio within ASPECT_TOLERANCE, or None
    """
    if width <= 0 or height <= 0:
        return None
    actual = width / height
    best = min(AspectRatio, key=lambda a: abs(a.ratio - actual))
    if abs(best.ratio - actual) / best.ratio <= ASPECT_TOLERANCE:
        return best
    return None


@dataclass(frozen=True)
class WindowGeometry:
    """Client-area rectangle of the game window in screen coordinates."""
    left: int
    top: int
    width: int
    height: int

    @property
    def aspect(self) -> Optional[AspectRatio]:
        return detect_aspect_ratio(self.width, self.height)

    @property
    def rect(self) -> Rect:
        return self.left, self.top, self.width, self.height


@dataclass(frozen=True)
class GridCell:
    """A single inventory grid cell, row-major within a page."""
    index: int
    row: int
    col: int
    rect: Rect  # screen coordinates

    @property
    def center(self) -> Tuple[int, int]:
        x, y, w, h = self.rect
        return x + w // 2, y + h // 2


@dataclass(frozen=True)
class FieldRegion:
    """Named rectangle relative to the detail-pane origin."""
    name: str
    rect: Rect

    @property
    def box(self) -> Tuple[int, int, int, int]:
        """PIL crop box (left, upper, right, lower)."""
        x, y, w, h = self.rect
        return x, y, x + w, y + h


# Field names, in pane order
NAME = "name"
MAIN_STAT_NAME = "main_stat_name"
MAIN_STAT_VALUE = "main_stat_value"
STAR = "star"
LEVEL = "level"
SUB_STATS = ("sub_stat_1", "sub_stat_2", "sub_stat_3", "sub_stat_4")
EQUIP = "equip"

# Fields read by the recognizer (the star field is counted from pixels)
TEXT_FIELDS = (NAME, MAIN_STAT_NAME, MAIN_STAT_VALUE, LEVEL) + SUB_STATS + (EQUIP,)

# Detail pane size and field table at reference scale (pane-relative)
PANE_SIZE_REF = (420, 700)
PANE_FIELDS_REF: Dict[str, Rect] = {
    NAME: (20, 8, 380, 36),
    MAIN_STAT_NAME: (20, 100, 200, 24),
    MAIN_STAT_VALUE: (20, 126, 200, 40),
    STAR: (20, 172, 160, 28),
    LEVEL: (20, 240, 60, 26),
    SUB_STATS[0]: (30, 284, 360, 28),
    SUB_STATS[1]: (30, 316, 360, 28),
    SUB_STATS[2]: (30, 348, 360, 28),
    SUB_STATS[3]: (30, 380, 360, 28),
    EQUIP: (40, 660, 340, 30),
}


@dataclass(frozen=True)
class ReferenceLayout:
    """Window-relative layout of one aspect-ratio class at height 900."""
    width: int
    cols: int
    rows: int
    grid_origin: Tuple[int, int]   # top-left of cell (0, 0)
    cell_size: Tuple[int, int]
    cell_gap: Tuple[int, int]
    pane_origin: Tuple[int, int]
    count_rect: Rect               # "Artifacts 1234/1500" label


REFERENCE_LAYOUTS: Dict[AspectRatio, ReferenceLayout] = {
    AspectRatio.R16_9: ReferenceLayout(
        width=1600, cols=8, rows=5, grid_origin=(90, 105), cell_size=(95, 117),
        cell_gap=(12, 14), pane_origin=(1065, 90), count_rect=(1300, 40, 200, 30),
    ),
    AspectRatio.R8_5: ReferenceLayout(
        width=1440, cols=7, rows=5, grid_origin=(80, 105), cell_size=(95, 117),
        cell_gap=(12, 14), pane_origin=(940, 90), count_rect=(1150, 40, 200, 30),
    ),
    AspectRatio.R4_3: ReferenceLayout(
        width=1200, cols=6, rows=5, grid_origin=(60, 105), cell_size=(95, 117),
        cell_gap=(12, 14), pane_origin=(730, 90), count_rect=(930, 40, 200, 30),
    ),
    AspectRatio.R43_18: ReferenceLayout(
        width=2150, cols=8, rows=5, grid_origin=(365, 105), cell_size=(95, 117),
        cell_gap=(12, 14), pane_origin=(1460, 90), count_rect=(1690, 40, 200, 30),
    ),
    AspectRatio.R7_3: ReferenceLayout(
        width=2100, cols=8, rows=5, grid_origin=(340, 105), cell_size=(95, 117),
        cell_gap=(12, 14), pane_origin=(1430, 90), count_rect=(1660, 40, 200, 30),
    ),
}


def _scale_edge(value: int, scale: float) -> int:
    return int(round(value * scale))


def scale_rect(rect: Rect, scale: float) -> Rect:
    """Scale a rectangle by rounding its edges (keeps adjacency stable)."""
    x, y, w, h = rect
    left = _scale_edge(x, scale)
    top = _scale_edge(y, scale)
    right = _scale_edge(x + w, scale)
    bottom = _scale_edge(y + h, scale)
    return left, top, right - left, bottom - top


def rects_overlap(a: Rect, b: Rect) -> bool:
    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    return ax < bx + bw and bx < ax + aw and ay < by + bh and by < ay + ah


def rect_contains(outer: Rect, inner: Rect) -> bool:
    ox, oy, ow, oh = outer
    ix, iy, iw, ih = inner
    return ox <= ix and oy <= iy and ix + iw <= ox + ow and iy + ih <= oy + oh


@dataclass(frozen=True)
class LayoutTable:
    """
    Resolved layout for one scan.

    Grid cells, pane and count label are in screen coordinates; field
    regions are relative to the pane origin.
    """
    geometry: WindowGeometry
    aspect: AspectRatio
    scale: float
    cols: int
    rows: int
    cells: Tuple[GridCell, ...]
    pane_rect: Rect
    count_rect: Rect
    fields: Dict[str, FieldRegion] = field(default_factory=dict)

    @property
    def page_size(self) -> int:
        return self.cols * self.rows

    def cells_for_page(self) -> Iterator[GridCell]:
        """Cells in row-major order (top-to-bottom, left-to-right)."""
        return iter(self.cells)

    def field(self, name: str) -> FieldRegion:
        return self.fields[name]

    def text_fields(self) -> List[FieldRegion]:
        return [self.fields[name] for name in TEXT_FIELDS]

    @property
    def row_height(self) -> int:
        """Distance between two grid rows in pixels."""
        if self.rows < 2:
            return self.cells[0].rect[3]
        return self.cells[self.cols].rect[1] - self.cells[0].rect[1]


class LayoutResolver:
    """
    Pure resolver from window geometry to LayoutTable.

    Example:
        >>> table = LayoutResolver().resolve(WindowGeometry(0, 0, 1920, 1080))
        >>> table.aspect.label, table.page_size
        ('16:9', 40)
    """

    def __init__(self, offset: Tuple[int, int] = (0, 0)):
        """
        Args:
            offset: Manual (x, y) correction applied to the window origin
        """
        self.offset = offset

    def resolve(self, geometry: WindowGeometry) -> LayoutTable:
        """
        Build the layout table for a window.

        Raises:
            UnsupportedAspectRatio: If the size matches no supported ratio
        """
        aspect = geometry.aspect
        if aspect is None:
            raise UnsupportedAspectRatio(geometry.width, geometry.height)

        ref = REFERENCE_LAYOUTS[aspect]
        scale = geometry.height / REFERENCE_HEIGHT
        origin_x = geometry.left + self.offset[0]
        origin_y = geometry.top + self.offset[1]

        cells = []
        gx, gy = ref.grid_origin
        cw, ch = ref.cell_size
        dx, dy = ref.cell_gap
        for row in range(ref.rows):
            for col in range(ref.cols):
                x, y, w, h = scale_rect((gx + col * (cw + dx), gy + row * (ch + dy), cw, ch), scale)
                cells.append(GridCell(
                    index=row * ref.cols + col,
                    row=row,
                    col=col,
                    rect=(origin_x + x, origin_y + y, w, h),
                ))

        px = _scale_edge(ref.pane_origin[0], scale)
        py = _scale_edge(ref.pane_origin[1], scale)
        _, _, pw, ph = scale_rect((0, 0) + PANE_SIZE_REF, scale)
        cx, cy, cw2, ch2 = scale_rect(ref.count_rect, scale)

        # Pane-relative fields, scaled on their own so rounding does not
        # depend on where the pane sits in the window
        fields_table = {
            name: FieldRegion(name, scale_rect(rect, scale))
            for name, rect in PANE_FIELDS_REF.items()
        }

        return LayoutTable(
            geometry=geometry,
            aspect=aspect,
            scale=scale,
            cols=ref.cols,
            rows=ref.rows,
            cells=tuple(cells),
            pane_rect=(origin_x + px, origin_y + py, pw, ph),
            count_rect=(origin_x + cx, origin_y + cy, cw2, ch2),
            fields=fields_table,
        )
