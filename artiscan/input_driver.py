"""
Input Driver Module

Synthetic pointer input for selecting inventory cells and scrolling the
grid, plus the cooperative cancellation signal polled by the scanner.
Timing between actions is the caller's concern; every call here returns
as soon as the event is issued.
"""

import ctypes
import logging
import sys
import threading
from abc import ABC, abstractmethod
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


# Virtual key codes for the supported cancel keys
VK_CODES = {
    'esc': 0x1B,
    'f10': 0x79,
    'f11': 0x7A,
    'f12': 0x7B,
    'pause': 0x13,
    'end': 0x23,
}


class CancellationToken:
    """
    Thread-safe cancellation flag.

    Set from any thread (key listener, UI stop button); only ever polled
    by the scan thread, never waited on.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def reset(self) -> None:
        self._event.clear()


class InputDriver(ABC):
    """Issues synthetic input events and reports user cancellation."""

    def __init__(self, token: Optional[CancellationToken] = None):
        self.token = token or CancellationToken()

    @abstractmethod
    def move_and_click(self, point: Tuple[int, int]) -> None:
        """Move the pointer to a screen point and left-click it."""

    @abstractmethod
    def scroll(self, amount: int) -> None:
        """Scroll the wheel; negative amounts scroll down."""

    def poll_cancellation(self) -> bool:
        """Return True once the user asked to abort. Never blocks."""
        return self.token.is_cancelled()


class PyAutoGUIInputDriver(InputDriver):
    """
    Input driver backed by PyAutoGUI (requires window focus, moves cursor).
    """

    def __init__(self, token: Optional[CancellationToken] = None, move_duration: float = 0.0):
        super().__init__(token)
        # Imported here: pyautogui needs a display at import time
        import pyautogui
        pyautogui.PAUSE = 0
        pyautogui.FAILSAFE = False
        self._gui = pyautogui
        self.move_duration = move_duration

    def move_and_click(self, point: Tuple[int, int]) -> None:
        x, y = point
        self._gui.moveTo(x, y, duration=self.move_duration)
        self._gui.click()

    def scroll(self, amount: int) -> None:
        self._gui.scroll(amount)


def _key_down(vk_code: int) -> bool:
    # High bit of GetAsyncKeyState indicates key is down
    return bool(ctypes.windll.user32.GetAsyncKeyState(vk_code) & 0x8000)  # type: ignore[attr-defined]


class CancelKeyListener(threading.Thread):
    """
    Daemon thread that sets a CancellationToken when the cancel key is down.

    Only available on Windows; elsewhere start() logs and returns without
    running, and the UI stop button remains the way to cancel.

    Example:
        >>> token = CancellationToken()
        >>> listener = CancelKeyListener(token, key="esc")
        >>> listener.start()
        ...
        >>> listener.stop()
    """

    POLL_INTERVAL_SEC = 0.03

    def __init__(self, token: CancellationToken, key: str = "esc"):
        super().__init__(name="cancel-key-listener", daemon=True)
        key = key.lower()
        if key not in VK_CODES:
            raise ValueError(f"Unknown cancel key: {key}. Available: {', '.join(VK_CODES)}")
        self.token = token
        self.key = key
        self._stop_event = threading.Event()

    def start(self) -> None:
        if sys.platform != "win32":
            logger.warning("Cancel key listener needs Windows, cancel key disabled")
            return
        super().start()

    def run(self) -> None:
        vk_code = VK_CODES[self.key]
        logger.info(f"Press '{self.key}' to stop the scan")
        while not self._stop_event.wait(self.POLL_INTERVAL_SEC):
            if _key_down(vk_code):
                logger.info("Cancel key pressed")
                self.token.cancel()
                return

    def stop(self) -> None:
        self._stop_event.set()
