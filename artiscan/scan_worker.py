"""
Scan Worker Module for Artifact Scanner

Provides a background QThread worker that builds the scan components, runs
the scan controller and exports the result. Communicates with the UI via Qt
signals for thread-safe status updates.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from PyQt5.QtCore import QThread, pyqtSignal

from artiscan import export
from artiscan.errors import ScanError
from artiscan.input_driver import CancelKeyListener, CancellationToken, PyAutoGUIInputDriver
from artiscan.item_reader import ItemReader
from artiscan.ocr import create_recognizer
from artiscan.scanner import ScanController, ScanProgress, ScanResult, ScanState
from artiscan.settings import ScanConfig
from artiscan.window_capture import create_window_system, set_dpi_awareness


# Configure module logger
logger = logging.getLogger(__name__)


STATUS_TEXT = {
    ScanState.IDLE: "Idle",
    ScanState.LOCATING_WINDOW: "Locating window...",
    ScanState.SCANNING: "Scanning",
    ScanState.COMPLETED: "Completed",
    ScanState.CANCELLED: "Cancelled",
    ScanState.FAILED: "Failed",
}


def build_controller(config: ScanConfig, settings: Dict[str, Any], token: CancellationToken,
                     on_progress=None, on_state=None) -> ScanController:
    """
    Wire the real window system, input driver, recognizer and reader.

    Args:
        config: Validated scan configuration
        settings: Settings dict (model paths, device)
        token: Cancellation token shared with the key listener / UI
        on_progress: Optional per-cell progress callback
        on_state: Optional state transition callback

    Raises:
        ModelLoadError: If the recognizer weights cannot be loaded
        WindowNotFound: If no window adapter fits this host
    """
    set_dpi_awareness()
    window_system = create_window_system(config.window_rect)
    recognizer = create_recognizer(
        "transformer",
        model_path=settings.get("model_path"),
        meta_path=settings.get("model_meta_path"),
        device=settings.get("device", "cpu"),
    )
    reader = ItemReader(window_system, recognizer, dump=config.dump)
    driver = PyAutoGUIInputDriver(token, move_duration=config.move_duration)
    return ScanController(
        config,
        window_system,
        driver,
        reader,
        on_progress=on_progress,
        on_state=on_state,
    )


class ScanWorker(QThread):
    """
    Background worker thread for one scan.

    Signals:
        status_changed(str): Emitted on every state transition
        window_changed(str): Emitted once the window has been located
        progress_changed(int, int, int, int): (page, kept, skipped, duplicates)
        error_occurred(str): Emitted when the scan fails or cannot start
        scan_finished(object): Emitted with the ScanResult (None if it never ran)

    Example:
        worker = ScanWorker(config, settings)
        worker.status_changed.connect(ui.set_status)
        worker.start()
        # ...
        worker.request_stop()
        worker.wait()
    """

    # Signals for UI updates (thread-safe)
    status_changed = pyqtSignal(str)
    window_changed = pyqtSignal(str)
    progress_changed = pyqtSignal(int, int, int, int)
    error_occurred = pyqtSignal(str)
    scan_finished = pyqtSignal(object)

    def __init__(self, config: ScanConfig, settings: Dict[str, Any]):
        """
        Initialize the scan worker.

        Args:
            config: Scan configuration
            settings: Settings dict for the model and output options
        """
        super().__init__()
        self.config = config
        self.settings = settings
        self._token = CancellationToken()
        self._listener: Optional[CancelKeyListener] = None
        self.result: Optional[ScanResult] = None
        self._controller: Optional[ScanController] = None

    def run(self):
        """Build components, run the scan and export. Called when thread starts."""
        logger.info("Scan worker started")
        self._listener = CancelKeyListener(self._token, self.config.cancel_key)
        self._listener.start()

        try:
            self._controller = build_controller(
                self.config,
                self.settings,
                self._token,
                on_progress=self._on_progress,
                on_state=self._on_state,
            )
            self.result = self._controller.run()

            if self.result.state is ScanState.FAILED:
                self.error_occurred.emit(self.result.error or "Scan failed")
            self._export(self.result)
        except ScanError as e:
            logger.error(f"Scan could not start: {e}")
            self.error_occurred.emit(str(e))
            self.status_changed.emit(STATUS_TEXT[ScanState.FAILED])
        except Exception as e:
            logger.exception("Error in scan worker")
            self.error_occurred.emit(str(e))
            self.status_changed.emit(STATUS_TEXT[ScanState.FAILED])
        finally:
            self._listener.stop()
            self.scan_finished.emit(self.result)
            logger.info("Scan worker stopped")

    def _export(self, result: ScanResult) -> None:
        if not result.records:
            logger.info("Nothing to export")
            return
        try:
            paths = export.save(
                result.records,
                Path(self.settings.get("output_dir", ".")),
                self.settings.get("output_format", "mona"),
            )
        except (OSError, ValueError) as e:
            logger.error(f"Export failed: {e}")
            self.error_occurred.emit(f"Export failed: {e}")
            return
        self.status_changed.emit(
            f"{STATUS_TEXT[result.state]}: {len(result.records)} saved to {paths[0].parent}"
        )

    def _on_state(self, state: ScanState) -> None:
        self.status_changed.emit(STATUS_TEXT[state])
        if state is ScanState.SCANNING:
            window_system = self._controller.window_system
            describe = getattr(window_system, "get_status_string", None)
            self.window_changed.emit(describe() if describe else "Detected")

    def _on_progress(self, progress: ScanProgress) -> None:
        self.progress_changed.emit(progress.page, progress.kept, progress.skipped, progress.duplicates)

    def request_stop(self):
        """
        Request the scan to stop.

        The controller notices at the next cell boundary and returns CANCELLED
        with the records collected so far. Use wait() to block until stopped.
        """
        logger.info("Stop requested")
        self._token.cancel()

    def is_running(self) -> bool:
        return self.isRunning()
