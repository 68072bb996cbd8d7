"""
Scan Controller Module - State machine driving one inventory scan.

State Flow:
    IDLE -> LOCATING_WINDOW -> SCANNING -> COMPLETED
                 |                 |
                 +-----> FAILED <--+      (window / layout / capture errors)

    any state -> CANCELLED                 (cancellation polled between cells)

Per page the controller selects every grid cell in row-major order, waits
for the detail pane to settle, reads and parses the item, filters it and
deduplicates it by fingerprint. After the last cell it scrolls one page
down. A page that yields nothing new (the list has wrapped or ended)
completes the scan.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, List, Optional

import numpy as np
from PIL import Image

from artiscan.errors import (
    CancellationRequested,
    CaptureUnavailable,
    LowConfidence,
    MalformedField,
    ScanError,
    SkippedItem,
    UnreadableRarity,
    UnsupportedAspectRatio,
    WindowNotFound,
)
from artiscan.input_driver import InputDriver
from artiscan.item_reader import ItemReader
from artiscan.layout import GridCell, LayoutResolver, LayoutTable
from artiscan.parsing import ItemRecord, RecordParser
from artiscan.parsing.parser import field_texts
from artiscan.settings import ScanConfig
from artiscan.window_capture import WindowSystem
from .session import ScanSession, fingerprint

logger = logging.getLogger(__name__)


__all__ = [
    "ScanState",
    "ScanProgress",
    "ScanResult",
    "ScanController",
    "frames_stable",
]


class ScanState(Enum):
    """
    Scan states.

    States:
        IDLE: Created, not started
        LOCATING_WINDOW: Resolving window geometry and layout
        SCANNING: Visiting cells and scrolling
        COMPLETED: List exhausted or a configured limit reached
        CANCELLED: User asked to stop
        FAILED: Window, layout or capture could not be recovered
    """
    IDLE = auto()
    LOCATING_WINDOW = auto()
    SCANNING = auto()
    COMPLETED = auto()
    CANCELLED = auto()
    FAILED = auto()

    @property
    def is_terminal(self) -> bool:
        return self in (ScanState.COMPLETED, ScanState.CANCELLED, ScanState.FAILED)


@dataclass
class ScanProgress:
    """Snapshot emitted after every cell visit."""
    state: ScanState
    page: int
    cell_index: int
    kept: int
    skipped: int
    duplicates: int
    filtered: int
    last_record: Optional[ItemRecord] = None


@dataclass
class ScanResult:
    """Outcome of a scan. Records are kept whatever the terminal state."""
    state: ScanState
    records: List[ItemRecord] = field(default_factory=list)
    skipped: List[SkippedItem] = field(default_factory=list)
    error: Optional[str] = None
    pages: int = 0
    elapsed_sec: float = 0.0

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def frames_stable(a: Image.Image, b: Image.Image, tolerance: float) -> bool:
    """True when two captures differ by at most `tolerance` mean absolute pixel value."""
    if a.size != b.size:
        return False
    diff = np.abs(np.asarray(a, dtype=np.int16) - np.asarray(b, dtype=np.int16))
    return float(diff.mean()) <= tolerance


class _ScanFinished(Exception):
    """Internal: a completion condition was met."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ScanController:
    """
    Drives input, capture, recognition and parsing for one scan.

    Example:
        controller = ScanController(config, window_system, driver, reader)
        result = controller.run()
        if result.state is ScanState.COMPLETED:
            export(result.records)
    """

    # Poll interval while waiting for two identical pane captures
    STABILITY_POLL_SEC = 0.02

    def __init__(self,
                 config: ScanConfig,
                 window_system: WindowSystem,
                 input_driver: InputDriver,
                 reader: ItemReader,
                 parser: Optional[RecordParser] = None,
                 resolver: Optional[LayoutResolver] = None,
                 on_progress: Optional[Callable[[ScanProgress], None]] = None,
                 on_state: Optional[Callable[[ScanState], None]] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        """
        Args:
            config: Read-only scan configuration
            window_system: Window lookup and capture capability
            input_driver: Synthetic input and cancellation polling
            reader: Item reader bound to the same frame source
            parser: Record parser (default RecordParser())
            resolver: Layout resolver (default uses config offsets)
            on_progress: Called after every cell visit
            on_state: Called on every state transition
            sleep: Sleep function (injectable for tests)
            clock: Monotonic clock (injectable for tests)
        """
        self.config = config
        self.window_system = window_system
        self.input = input_driver
        self.reader = reader
        self.parser = parser or RecordParser()
        self.resolver = resolver or LayoutResolver((config.offset_x, config.offset_y))
        self._on_progress = on_progress
        self._on_state = on_state
        self._sleep = sleep
        self._clock = clock

        self._state = ScanState.IDLE
        self._session: Optional[ScanSession] = None
        self._max_items = config.max_items
        self._settle_delay = config.settle_delay

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def session(self) -> Optional[ScanSession]:
        return self._session

    def _transition(self, new_state: ScanState) -> None:
        logger.info(f"State: {self._state.name} -> {new_state.name}")
        self._state = new_state
        if self._on_state:
            self._on_state(new_state)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self) -> ScanResult:
        """
        Run the scan to a terminal state.

        Never raises once started; the outcome is in ScanResult.state and
        every record accumulated before termination is returned. Errors
        outside the scan taxonomy (recognizer, image library) end in FAILED
        like a lost window.
        """
        if self._state is not ScanState.IDLE:
            raise RuntimeError("A ScanController runs only once")

        start = self._clock()
        self._session = ScanSession()
        error: Optional[str] = None

        try:
            self._check_cancel()
            self._transition(ScanState.LOCATING_WINDOW)
            layout = self._locate()

            self._check_cancel()
            self._transition(ScanState.SCANNING)
            reason = self._scan(layout)
            logger.info(f"Scan complete: {reason}")
            self._transition(ScanState.COMPLETED)

        except CancellationRequested:
            self._session.cancelled = True
            logger.info("Scan cancelled by user")
            self._transition(ScanState.CANCELLED)

        except (WindowNotFound, UnsupportedAspectRatio, CaptureUnavailable) as e:
            error = str(e)
            logger.error(f"Scan failed: {e}")
            self._transition(ScanState.FAILED)

        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            logger.exception("Scan stopped by an unexpected error")
            self._transition(ScanState.FAILED)

        session = self._session
        result = ScanResult(
            state=self._state,
            records=list(session.records),
            skipped=list(session.skipped),
            error=error,
            pages=session.page + 1,
            elapsed_sec=self._clock() - start,
        )
        logger.info(
            f"{result.state.name}: {len(result.records)} kept, {result.skipped_count} skipped, "
            f"{session.filtered} filtered, {session.duplicates} duplicates in {result.elapsed_sec:.1f}s"
        )
        return result

    # ------------------------------------------------------------------
    # LOCATING_WINDOW
    # ------------------------------------------------------------------

    def _locate(self) -> LayoutTable:
        geometry = self.window_system.locate()
        logger.info(f"Window: left={geometry.left}, top={geometry.top}, "
                    f"width={geometry.width}, height={geometry.height}")
        layout = self.resolver.resolve(geometry)
        logger.info(f"Layout {layout.aspect.label}, scale {layout.scale:.3f}, "
                    f"grid {layout.rows}x{layout.cols}")
        if self.window_system.is_cloud:
            self._settle_delay = self.config.cloud_settle_delay
            logger.info(f"Cloud client detected, settle delay {self._settle_delay:.2f}s")
        self.window_system.activate()

        if not self._max_items and self.config.read_item_count:
            try:
                count = self.reader.read_item_count(layout)
            except CaptureUnavailable as e:
                logger.warning(f"Could not read item count: {e}")
                count = None
            if count:
                self._max_items = count
        return layout

    # ------------------------------------------------------------------
    # SCANNING
    # ------------------------------------------------------------------

    def _scan(self, layout: LayoutTable) -> str:
        session = self._session
        try:
            while True:
                new_in_page, duplicate_in_page = self._scan_page(layout)

                if new_in_page == 0:
                    if duplicate_in_page:
                        return "list wrapped, no new items in the last page"
                    return "no readable items in the last page"

                self._check_cancel()
                self.input.scroll(-self.config.scroll_clicks_per_row * layout.rows)
                self._sleep(self.config.scroll_settle_delay)
                session.page += 1
                session.scroll_offset += layout.rows
                logger.debug(f"Scrolled to page {session.page}")
        except _ScanFinished as done:
            return done.reason

    def _scan_page(self, layout: LayoutTable):
        """
        Visit every cell of the visible page.

        The list clamps at its end, so the last scroll may move fewer rows
        than requested. A duplicate whose first position is known pins the
        real top row of the page; positions of new items and skipped cells
        are recorded against it when the page is done, so an item revisited
        in the overlap is skipped only once.

        Returns:
            (number of never-seen parsed items, whether a duplicate was met).
            Skipped cells count as neither, so a page of empty or unreadable
            cells ends the scan.
        """
        session = self._session
        top_row = session.scroll_offset
        new_in_page = 0
        duplicate_in_page = False
        placed = []
        pending_skips = []

        try:
            for cell in layout.cells_for_page():
                self._check_limits(cell, top_row, self._new_skips(pending_skips, top_row))
                self._check_cancel()

                session.cells_visited += 1
                record = None
                try:
                    record = self._read_cell(layout, cell)
                except SkippedItem as skipped:
                    pending_skips.append((cell, skipped))

                if record is not None:
                    fp = fingerprint(record)
                    if session.observe(record):
                        new_in_page += 1
                        placed.append((fp, cell))
                        if self._passes_filters(record):
                            session.keep(record)
                            logger.debug(f"Kept: {record.describe()}")
                        else:
                            session.filtered += 1
                    else:
                        duplicate_in_page = True
                        top_row = self._align_page(top_row, session.positions.get(fp), cell, layout)
                        logger.debug(f"Duplicate at page {session.page} cell {cell.index}")

                self._emit_progress(cell, record, self._new_skips(pending_skips, top_row))
        finally:
            if top_row != session.scroll_offset:
                logger.debug(f"Page {session.page} starts at row {top_row}, "
                             f"not {session.scroll_offset} (list end)")
                session.scroll_offset = top_row
            for fp, cell in placed:
                session.place(fp, (top_row + cell.row, cell.col))
            for cell, skipped in pending_skips:
                if session.skip(skipped, (top_row + cell.row, cell.col)):
                    logger.warning(str(skipped))
                else:
                    logger.debug(f"Cell {cell.index} of page {session.page} was skipped before")

        return new_in_page, duplicate_in_page

    @staticmethod
    def _align_page(top_row: int, known, cell: GridCell, layout: LayoutTable) -> int:
        """Top row implied by a duplicate at `cell`, if it fits a clamped scroll."""
        if known is None:
            return top_row
        row, col = known
        implied = row - cell.row
        if col == cell.col and max(0, top_row - layout.rows) <= implied < top_row:
            return implied
        return top_row

    def _passes_filters(self, record: ItemRecord) -> bool:
        return record.rarity >= self.config.min_rarity and record.level >= self.config.min_level

    def _new_skips(self, pending_skips, top_row: int) -> int:
        """Skipped cells of this page at positions not reported before."""
        skipped_at = self._session.skipped_at
        return sum(1 for cell, _ in pending_skips if (top_row + cell.row, cell.col) not in skipped_at)

    def _check_limits(self, cell: GridCell, top_row: int, pending_skipped: int = 0) -> None:
        session = self._session
        if self.config.max_rows and top_row + cell.row >= self.config.max_rows:
            raise _ScanFinished(f"reached max rows ({self.config.max_rows})")
        if self._max_items and session.items_seen + pending_skipped >= self._max_items:
            raise _ScanFinished(f"reached item count ({self._max_items})")

    def _check_cancel(self) -> None:
        if self.input.poll_cancellation():
            raise CancellationRequested()

    def _emit_progress(self, cell: GridCell, record: Optional[ItemRecord], pending_skipped: int = 0) -> None:
        if not self._on_progress:
            return
        session = self._session
        self._on_progress(ScanProgress(
            state=self._state,
            page=session.page,
            cell_index=cell.index,
            kept=len(session.records),
            skipped=len(session.skipped) + pending_skipped,
            duplicates=session.duplicates,
            filtered=session.filtered,
            last_record=record,
        ))

    # ------------------------------------------------------------------
    # Per-cell pipeline
    # ------------------------------------------------------------------

    def _read_cell(self, layout: LayoutTable, cell: GridCell) -> ItemRecord:
        """
        Select a cell and read its item, re-capturing on unreadable frames.

        Raises:
            SkippedItem: After the retries are used up or on a parse error
            CaptureUnavailable: If the window cannot be captured at all
        """
        self.input.move_and_click(cell.center)
        frame = self._wait_settled(layout)

        reason = "unknown"
        for attempt in range(self.config.recognition_retries + 1):
            if attempt:
                self._sleep(self._settle_delay)
                frame = self._capture(layout)
            try:
                raw = self.reader.read_current_item(layout, frame)
                worst_field, confidence = raw.min_confidence()
                if confidence < self.config.min_confidence:
                    raise LowConfidence(worst_field, confidence)
            except (UnreadableRarity, LowConfidence) as e:
                reason = str(e)
                logger.debug(f"Cell {cell.index} attempt {attempt + 1}: {e}")
                continue

            try:
                return self.parser.parse(raw)
            except MalformedField as e:
                logger.debug(f"Unparsed fields: {field_texts(raw)}")
                raise SkippedItem(self._session.page, cell.index, str(e)) from e

        raise SkippedItem(self._session.page, cell.index, reason)

    def _capture(self, layout: LayoutTable) -> Image.Image:
        """Capture the pane, retrying a bounded number of times."""
        last_error: Optional[ScanError] = None
        for attempt in range(self.config.capture_retries + 1):
            try:
                return self.reader.capture_pane(layout)
            except CaptureUnavailable as e:
                last_error = e
                logger.warning(f"Capture failed (attempt {attempt + 1}): {e}")
                self.window_system.activate()
                self._sleep(self._settle_delay)
        raise last_error

    def _wait_settled(self, layout: LayoutTable) -> Image.Image:
        """
        Sleep the settle delay, then wait for two consecutive identical captures.

        Gives up after max_settle_wait and returns the latest frame.
        """
        self._sleep(self._settle_delay)
        previous = self._capture(layout)
        if self.config.max_settle_wait <= 0:
            return previous

        deadline = self._clock() + self.config.max_settle_wait
        while self._clock() < deadline:
            self._sleep(self.STABILITY_POLL_SEC)
            current = self._capture(layout)
            if frames_stable(previous, current, self.config.stability_tolerance):
                return current
            previous = current

        logger.debug("Pane did not settle, using latest frame")
        return previous
