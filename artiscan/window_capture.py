"""
Window Capture Module for Artifact Scanner

Locates the game window and captures screen regions from it.
Uses the Windows API via ctypes for window management, psutil for process
lookup and mss for screen capture. Hosts without the Windows API use a
fixed, user-configured rectangle instead.
"""

import ctypes
import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import mss
from mss.exception import ScreenShotError
import psutil
from PIL import Image

from artiscan.errors import CaptureUnavailable, WindowNotFound
from artiscan.layout import LayoutResolver, Rect, WindowGeometry

logger = logging.getLogger(__name__)

# Local clients first, then the cloud client
GAME_PROCESS_NAMES = ("GenshinImpact.exe", "YuanShen.exe", "Genshin Impact Cloud Game.exe")
GAME_WINDOW_TITLES = ("Genshin Impact", "原神", "云·原神")

SW_RESTORE = 9


@dataclass
class WindowInfo:
    """Information about a detected window."""
    hwnd: int
    pid: int
    title: str
    rect: Tuple[int, int, int, int]  # client area (x, y, width, height) in screen coordinates
    is_cloud: bool = False


class FrameSource(ABC):
    """Captures still images of screen rectangles. No retry logic."""

    @abstractmethod
    def capture(self, rect: Rect) -> Image.Image:
        """
        Capture a screen rectangle.

        Args:
            rect: (x, y, width, height) in screen coordinates

        Returns:
            RGB PIL Image of the region

        Raises:
            CaptureUnavailable: If the window is occluded, minimized or off-screen
        """


class WindowSystem(FrameSource):
    """Capability interface: window geometry query, capture and focus."""

    @abstractmethod
    def locate(self) -> WindowGeometry:
        """
        Find the game window.

        Raises:
            WindowNotFound: If no matching window exists
        """

    def activate(self) -> None:
        """Bring the window to the foreground. Default does nothing."""

    @property
    def is_cloud(self) -> bool:
        """True when the window belongs to the cloud streaming client."""
        return False


def grab_region(rect: Rect) -> Image.Image:
    """
    Capture a screen region using mss.

    Raises:
        CaptureUnavailable: If the region is empty or the grab fails
    """
    x, y, width, height = rect
    if width <= 0 or height <= 0:
        raise CaptureUnavailable(f"Empty capture region {rect}")

    try:
        with mss.mss() as sct:
            monitor = {
                "left": x,
                "top": y,
                "width": width,
                "height": height
            }
            screenshot = sct.grab(monitor)
            return Image.frombytes(
                "RGB",
                (screenshot.width, screenshot.height),
                screenshot.rgb
            )
    except ScreenShotError as e:
        raise CaptureUnavailable(f"Screen grab failed: {e}") from e


def get_process_ids(process_names: Sequence[str] = GAME_PROCESS_NAMES) -> List[int]:
    """
    Get all process IDs whose name matches one of process_names.

    Example:
        >>> get_process_ids(["GenshinImpact.exe"])
        [12345]
    """
    wanted = {name.lower() for name in process_names}
    pids = []
    for proc in psutil.process_iter(['pid', 'name']):
        try:
            name = proc.info['name']
            if name and name.lower() in wanted:
                pids.append(proc.info['pid'])
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            continue
    return pids


def _user32():
    return ctypes.windll.user32  # type: ignore[attr-defined]


def _get_window_thread_process_id(hwnd: int) -> int:
    """Get the process ID associated with a window handle."""
    from ctypes import wintypes
    pid = wintypes.DWORD()
    _user32().GetWindowThreadProcessId(hwnd, ctypes.byref(pid))
    return pid.value


def _get_window_text(hwnd: int) -> str:
    """Get the title text of a window."""
    length = _user32().GetWindowTextLengthW(hwnd) + 1
    buffer = ctypes.create_unicode_buffer(length)
    _user32().GetWindowTextW(hwnd, buffer, length)
    return buffer.value


def get_client_rect(hwnd: int) -> Optional[Tuple[int, int, int, int]]:
    """
    Get the client area of a window in screen coordinates.

    Returns:
        Tuple of (x, y, width, height) or None if the window is gone
    """
    from ctypes import wintypes
    rect = wintypes.RECT()
    if not _user32().GetClientRect(hwnd, ctypes.byref(rect)):
        return None
    point = wintypes.POINT(0, 0)
    if not _user32().ClientToScreen(hwnd, ctypes.byref(point)):
        return None
    return (point.x, point.y, rect.right - rect.left, rect.bottom - rect.top)


def set_dpi_awareness() -> None:
    """Make window rectangles report physical pixels on scaled displays."""
    if sys.platform != "win32":
        return
    try:
        ctypes.windll.shcore.SetProcessDpiAwareness(2)  # type: ignore[attr-defined]
    except (AttributeError, OSError):
        _user32().SetProcessDPIAware()


def find_game_window(
    process_names: Sequence[str] = GAME_PROCESS_NAMES,
    titles: Sequence[str] = GAME_WINDOW_TITLES,
) -> Optional[WindowInfo]:
    """
    Find the main game window by owning process, falling back to title.

    Returns:
        WindowInfo if found, None otherwise
    """
    from ctypes import wintypes

    pids = set(get_process_ids(process_names))

    windows = []
    enum_callback = ctypes.WINFUNCTYPE(ctypes.c_bool, wintypes.HWND, wintypes.LPARAM)

    @enum_callback
    def callback(hwnd, lparam):
        if _user32().IsWindowVisible(hwnd):
            windows.append(hwnd)
        return True

    _user32().EnumWindows(callback, 0)

    for hwnd in windows:
        pid = _get_window_thread_process_id(hwnd)
        title = _get_window_text(hwnd)
        if pid not in pids and title not in titles:
            continue
        rect = get_client_rect(hwnd)
        if rect and rect[2] > 0 and rect[3] > 0:
            return WindowInfo(
                hwnd=hwnd,
                pid=pid,
                title=title,
                rect=rect,
                is_cloud="云" in title or "Cloud" in title,
            )

    return None


class GameWindowCapture(WindowSystem):
    """
    Tracks the game window through the Windows API.

    Example:
        >>> capture = GameWindowCapture()
        >>> geometry = capture.locate()
        >>> image = capture.capture(geometry.rect)
    """

    def __init__(self,
                 process_names: Sequence[str] = GAME_PROCESS_NAMES,
                 titles: Sequence[str] = GAME_WINDOW_TITLES):
        self.process_names = tuple(process_names)
        self.titles = tuple(titles)
        self.window_info: Optional[WindowInfo] = None

    def locate(self) -> WindowGeometry:
        set_dpi_awareness()
        self.window_info = find_game_window(self.process_names, self.titles)
        if self.window_info is None:
            raise WindowNotFound("Game window not found, make sure the game is running")
        logger.info(f"Found window: {self.window_info.title} (pid {self.window_info.pid})")
        x, y, w, h = self.window_info.rect
        return WindowGeometry(x, y, w, h)

    def activate(self) -> None:
        if not self.window_info:
            return
        hwnd = self.window_info.hwnd
        _user32().ShowWindow(hwnd, SW_RESTORE)
        _user32().SetForegroundWindow(hwnd)

    @property
    def is_cloud(self) -> bool:
        return bool(self.window_info and self.window_info.is_cloud)

    def capture(self, rect: Rect) -> Image.Image:
        if not self.window_info:
            raise CaptureUnavailable("No window tracked")

        hwnd = self.window_info.hwnd
        if not _user32().IsWindow(hwnd):
            raise CaptureUnavailable("Window closed")
        if _user32().IsIconic(hwnd):
            raise CaptureUnavailable("Window minimized")
        if _user32().GetForegroundWindow() != hwnd:
            raise CaptureUnavailable("Window is not in the foreground")
        return grab_region(rect)

    def get_status_string(self) -> str:
        """
        Get a human-readable status string for UI display.

        Returns:
            Status string like "Genshin Impact (1920x1080)" or "Not detected"
        """
        if not self.window_info:
            return "Not detected"
        _, _, width, height = self.window_info.rect
        return f"{self.window_info.title} ({width}x{height})"


class FixedRegionCapture(WindowSystem):
    """Window system for a user-supplied rectangle (any host with a screen)."""

    def __init__(self, rect: Rect):
        self.rect = rect

    def locate(self) -> WindowGeometry:
        x, y, w, h = self.rect
        if w <= 0 or h <= 0:
            raise WindowNotFound(f"Configured window rect {self.rect} is empty")
        return WindowGeometry(x, y, w, h)

    def capture(self, rect: Rect) -> Image.Image:
        return grab_region(rect)

    def get_status_string(self) -> str:
        x, y, w, h = self.rect
        return f"Fixed region ({w}x{h} at {x},{y})"


def create_window_system(window_rect: Optional[Rect] = None) -> WindowSystem:
    """
    Pick the window system adapter for this host.

    Args:
        window_rect: Explicit (x, y, width, height); required off Windows

    Raises:
        WindowNotFound: On hosts without the Windows API and no window_rect
    """
    if window_rect is not None:
        return FixedRegionCapture(tuple(window_rect))
    if sys.platform == "win32":
        return GameWindowCapture()
    raise WindowNotFound("Automatic window lookup needs Windows; set window_rect in config.json")


def save_captures(window_system: WindowSystem, output_dir: Path,
                  resolver: Optional[LayoutResolver] = None) -> List[Path]:
    """
    Save one screenshot of the window and of its detail pane, without scanning.

    Used to check the window rectangle and layout offsets.

    Returns:
        Paths written (window.png, pane.png)

    Raises:
        WindowNotFound, UnsupportedAspectRatio, CaptureUnavailable
    """
    geometry = window_system.locate()
    layout = (resolver or LayoutResolver()).resolve(geometry)
    window_system.activate()

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for name, rect in (("window", geometry.rect), ("pane", layout.pane_rect)):
        path = output_dir / f"{name}.png"
        window_system.capture(rect).save(path)
        written.append(path)
        logger.info(f"Saved {name} capture to {path}")
    return written
