"""
Scanner Package - Drives the inventory grid and collects item records.

Public API:
    - ScanController: State machine for one scan
    - ScanState: IDLE / LOCATING_WINDOW / SCANNING / COMPLETED / CANCELLED / FAILED
    - ScanProgress: Per-cell progress snapshot
    - ScanResult: Terminal state plus every record collected
    - ScanSession: Accumulated records, fingerprints and counters

Usage:
    from artiscan.scanner import ScanController, ScanState

    controller = ScanController(config, window_system, driver, reader)
    result = controller.run()
    print(result.state.name, len(result.records))
"""

from .session import ScanSession, fingerprint
from .controller import (
    ScanController,
    ScanProgress,
    ScanResult,
    ScanState,
    frames_stable,
)

__all__ = [
    "ScanController",
    "ScanProgress",
    "ScanResult",
    "ScanState",
    "ScanSession",
    "fingerprint",
    "frames_stable",
]
