"""
Artifact Scanner - Entry Point

Launches the Control UI window (default) or runs one scan headless.

Example:
    python main.py
    python main.py --headless --min-star 5 -f good -o out/
    python main.py --headless --max-row 3 --dump --verbose
    python main.py --capture-only -o captures/
"""

import sys
import logging
import argparse
from pathlib import Path
from typing import Any, Dict, Optional

from artiscan import export
from artiscan.errors import ConfigError, ScanError
from artiscan.input_driver import CancelKeyListener, CancellationToken
from artiscan.scanner import ScanResult, ScanState
from artiscan.settings import ScanConfig, load_settings, save_settings


logger = logging.getLogger(__name__)

EXIT_CODES = {
    ScanState.COMPLETED: 0,
    ScanState.CANCELLED: 130,
    ScanState.FAILED: 1,
}


def setup_logging(verbose: bool = False) -> None:
    """Configure logging - output to both console and file."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=[
            logging.StreamHandler(),  # Console output
            logging.FileHandler("scan.log", mode='w', encoding='utf-8')  # File output
        ]
    )


class Application:
    """
    GUI application controller.

    Manages the lifecycle of the UI and the scan worker thread,
    connecting signals between them.
    """

    def __init__(self, settings: Dict[str, Any], overrides: Dict[str, Any]):
        """
        Args:
            settings: Persistent settings (saved back on changes)
            overrides: CLI values applied on top of settings for each scan
        """
        self.settings = settings
        self.overrides = overrides
        self.window = None
        self.worker = None

    def setup(self):
        """Set up the UI and connect signals."""
        from artiscan.control_ui import ControlWindow

        self.window = ControlWindow()
        self.window.start_requested.connect(self._on_start)
        self.window.stop_requested.connect(self._on_stop)
        self.window.shutdown_requested.connect(self._on_shutdown)
        self.window.min_rarity_changed.connect(self._on_min_rarity_changed)

        min_rarity = self.overrides.get("min_rarity") or self.settings.get("min_rarity", 4)
        self.window.set_min_rarity(min_rarity)
        logger.info("Application initialized")

    def _on_start(self):
        """Handle start button click."""
        from artiscan.scan_worker import ScanWorker

        if self.worker and self.worker.isRunning():
            logger.warning("Worker already running")
            return

        try:
            config = ScanConfig.from_settings(self.settings, **self.overrides)
        except ConfigError as e:
            logger.error(f"Invalid configuration: {e}")
            self.window.set_status(f"Error: {e}")
            return

        logger.info("Starting scan worker")
        self.worker = ScanWorker(config, self.settings)
        self.worker.status_changed.connect(self.window.set_status)
        self.worker.window_changed.connect(self.window.set_window_info)
        self.worker.progress_changed.connect(self.window.set_progress)
        self.worker.error_occurred.connect(self._on_error)
        self.worker.scan_finished.connect(self._on_finished)
        self.worker.start()

        self.window.set_running(True)

    def _on_stop(self):
        """Handle stop button click."""
        if not self.worker or not self.worker.isRunning():
            logger.warning("Worker not running")
            return

        logger.info("Stopping scan worker")
        self.worker.request_stop()
        self.worker.wait(5000)

        if self.worker.isRunning():
            logger.warning("Worker did not stop gracefully, terminating")
            self.worker.terminate()
            self.worker.wait()

    def _on_finished(self, result: Optional[ScanResult]):
        if result is not None:
            logger.info(f"Scan finished: {result.state.name}, {len(result.records)} records, "
                        f"{result.skipped_count} skipped")
        self.window.set_running(False)
        if self.worker:
            self.worker.wait()
        self.worker = None

    def _on_shutdown(self):
        """Handle window close."""
        logger.info("Shutdown requested")
        self._on_stop()

    def _on_error(self, error_msg: str):
        """Handle worker error."""
        logger.error(f"Worker error: {error_msg}")
        self.window.set_status(f"Error: {error_msg}")

    def _on_min_rarity_changed(self, stars: int):
        logger.info(f"Minimum rarity changed to: {stars}")
        self.overrides.pop("min_rarity", None)
        self.settings["min_rarity"] = stars
        save_settings(self.settings)

    def run(self) -> int:
        self.window.show()
        return 0


def run_headless(settings: Dict[str, Any], overrides: Dict[str, Any]) -> int:
    """
    Run one scan without the UI.

    Returns:
        Process exit code: 0 completed, 130 cancelled, 1 failed
    """
    from artiscan.scan_worker import build_controller

    try:
        config = ScanConfig.from_settings(settings, **overrides)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CODES[ScanState.FAILED]

    token = CancellationToken()
    listener = CancelKeyListener(token, config.cancel_key)
    listener.start()
    try:
        controller = build_controller(config, settings, token)
        result = controller.run()
    except ScanError as e:
        logger.error(f"Scan could not start: {e}")
        return EXIT_CODES[ScanState.FAILED]
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return EXIT_CODES[ScanState.CANCELLED]
    finally:
        listener.stop()

    if result.records:
        try:
            export.save(result.records, Path(settings["output_dir"]), settings["output_format"])
        except OSError as e:
            logger.error(f"Export failed: {e}")
            return EXIT_CODES[ScanState.FAILED]

    for skipped in result.skipped:
        logger.info(f"Skipped: {skipped}")
    return EXIT_CODES.get(result.state, 1)


def run_capture_only(settings: Dict[str, Any], overrides: Dict[str, Any]) -> int:
    """
    Save window and pane screenshots to the output directory and exit.

    Returns:
        Process exit code: 0 saved, 1 failed
    """
    from artiscan.layout import LayoutResolver
    from artiscan.window_capture import create_window_system, save_captures, set_dpi_awareness

    try:
        config = ScanConfig.from_settings(settings, **overrides)
        set_dpi_awareness()
        window_system = create_window_system(config.window_rect)
        save_captures(window_system, Path(settings["output_dir"]),
                      LayoutResolver((config.offset_x, config.offset_y)))
    except (ConfigError, ScanError, OSError) as e:
        logger.error(f"Capture failed: {e}")
        return EXIT_CODES[ScanState.FAILED]
    return EXIT_CODES[ScanState.COMPLETED]


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Artifact Scanner - Reads the in-game artifact inventory and exports it"
    )
    parser.add_argument("--max-row", type=int, dest="max_rows",
                        help="Stop after this many grid rows (default: no limit)")
    parser.add_argument("--max-items", type=int, dest="max_items",
                        help="Stop after this many items (default: read the count label)")
    parser.add_argument("--min-star", type=int, choices=range(1, 6), dest="min_rarity",
                        help="Keep items with at least this many stars (default: 4)")
    parser.add_argument("--min-level", type=int, dest="min_level",
                        help="Keep items at or above this level (default: 0)")
    parser.add_argument("--settle-delay", type=float, dest="settle_delay",
                        help="Seconds to wait after selecting a cell (default: 0.08)")
    parser.add_argument("--cloud-settle-delay", type=float, dest="cloud_settle_delay",
                        help="Settle delay used with the cloud client (default: 0.3)")
    parser.add_argument("--output-dir", "-o", dest="output_dir",
                        help="Directory for the exported files (default: .)")
    parser.add_argument("--output-format", "-f", choices=export.FORMATS, dest="output_format",
                        help="Export format (default: mona)")
    parser.add_argument("--offset-x", type=int, dest="offset_x",
                        help="Horizontal layout offset in pixels")
    parser.add_argument("--offset-y", type=int, dest="offset_y",
                        help="Vertical layout offset in pixels")
    parser.add_argument("--model", dest="model_path",
                        help="Path to recognizer weights (metadata next to it as .json)")
    parser.add_argument("--dump", action="store_true", default=None,
                        help="Save an annotated debug image for every item")
    parser.add_argument("--capture-only", action="store_true",
                        help="Only save window and pane screenshots, do not scan")
    parser.add_argument("--headless", action="store_true",
                        help="Run one scan without the control window")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug logging")
    return parser.parse_args(argv)


def apply_args(settings: Dict[str, Any], args) -> Dict[str, Any]:
    """
    Fold CLI flags into settings.

    Output and model options go straight into `settings`; scan options are
    returned as overrides for ScanConfig.from_settings().
    """
    if args.output_dir is not None:
        settings["output_dir"] = args.output_dir
    if args.output_format is not None:
        settings["output_format"] = args.output_format
    if args.model_path is not None:
        settings["model_path"] = args.model_path
        settings["model_meta_path"] = str(Path(args.model_path).with_suffix(".json"))

    return {
        "max_rows": args.max_rows,
        "max_items": args.max_items,
        "min_rarity": args.min_rarity,
        "min_level": args.min_level,
        "settle_delay": args.settle_delay,
        "cloud_settle_delay": args.cloud_settle_delay,
        "offset_x": args.offset_x,
        "offset_y": args.offset_y,
        "dump": args.dump,
    }


def main():
    """Initialize and run the Artifact Scanner."""
    args = parse_args()
    setup_logging(args.verbose)

    settings = load_settings()
    overrides = apply_args(settings, args)

    if args.capture_only:
        sys.exit(run_capture_only(settings, overrides))
    if args.headless:
        sys.exit(run_headless(settings, overrides))

    from PyQt5.QtWidgets import QApplication

    app = QApplication(sys.argv)

    application = Application(settings, overrides)
    application.setup()
    application.run()

    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
