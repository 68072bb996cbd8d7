"""
Settings Module for Artifact Scanner

Provides persistent storage for user preferences using JSON and the
read-only ScanConfig record handed to the scan controller.
Settings are stored in config.json in the working directory.
"""

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Any, Optional, Tuple

from artiscan.errors import ConfigError
from artiscan.input_driver import VK_CODES

logger = logging.getLogger(__name__)

# Settings file location (working directory)
SETTINGS_FILE = Path("config.json")

# Default settings
DEFAULT_SETTINGS: Dict[str, Any] = {
    "min_rarity": 4,
    "min_level": 0,
    "max_rows": 0,
    "max_items": 0,
    "read_item_count": True,
    "settle_delay": 0.08,
    "cloud_settle_delay": 0.3,
    "max_settle_wait": 0.8,
    "stability_tolerance": 1.5,
    "scroll_clicks_per_row": 5,
    "scroll_settle_delay": 0.08,
    "recognition_retries": 3,
    "capture_retries": 3,
    "min_confidence": 0.5,
    "move_duration": 0.0,
    "cancel_key": "esc",
    "offset_x": 0,
    "offset_y": 0,
    "window_rect": None,
    "model_path": "models/recognizer.pt",
    "model_meta_path": "models/recognizer.json",
    "device": "cpu",
    "output_dir": ".",
    "output_format": "mona",
    "dump": False,
}


def load_settings() -> Dict[str, Any]:
    """
    Load settings from config.json.

    Returns:
        Settings dictionary. Returns defaults if file missing or invalid.
    """
    if not SETTINGS_FILE.exists():
        logger.debug("Settings file not found, using defaults")
        return DEFAULT_SETTINGS.copy()

    try:
        with open(SETTINGS_FILE, 'r', encoding='utf-8') as f:
            settings = json.load(f)

        # Merge with defaults to handle missing keys
        result = DEFAULT_SETTINGS.copy()
        result.update(settings)
        logger.debug(f"Settings loaded: {result}")
        return result

    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Failed to load settings: {e}, using defaults")
        return DEFAULT_SETTINGS.copy()


def save_settings(settings: Dict[str, Any]) -> None:
    """
    Save settings to config.json.

    Args:
        settings: Settings dictionary to save
    """
    try:
        with open(SETTINGS_FILE, 'w', encoding='utf-8') as f:
            json.dump(settings, f, indent=2)
        logger.debug(f"Settings saved: {settings}")
    except IOError as e:
        logger.error(f"Failed to save settings: {e}")


@dataclass(frozen=True)
class ScanConfig:
    """
    Read-only configuration for one scan.

    A value of 0 for max_rows / max_items means "no limit".
    Delays are in seconds. cloud_settle_delay replaces settle_delay when
    the located window belongs to the cloud streaming client.
    """
    min_rarity: int = 4
    min_level: int = 0
    max_rows: int = 0
    max_items: int = 0
    read_item_count: bool = True
    settle_delay: float = 0.08
    cloud_settle_delay: float = 0.3
    max_settle_wait: float = 0.8
    stability_tolerance: float = 1.5
    scroll_clicks_per_row: int = 5
    scroll_settle_delay: float = 0.08
    recognition_retries: int = 3
    capture_retries: int = 3
    min_confidence: float = 0.5
    move_duration: float = 0.0
    cancel_key: str = "esc"
    offset_x: int = 0
    offset_y: int = 0
    window_rect: Optional[Tuple[int, int, int, int]] = None
    dump: bool = False

    def __post_init__(self):
        if not 1 <= self.min_rarity <= 5:
            raise ConfigError(f"min_rarity must be 1..5, got {self.min_rarity}")
        if not 0 <= self.min_level <= 20:
            raise ConfigError(f"min_level must be 0..20, got {self.min_level}")
        for name in ("max_rows", "max_items", "recognition_retries", "capture_retries"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")
        for name in ("settle_delay", "cloud_settle_delay", "max_settle_wait",
                     "scroll_settle_delay", "move_duration"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative")
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ConfigError(f"min_confidence must be 0..1, got {self.min_confidence}")
        if self.scroll_clicks_per_row <= 0:
            raise ConfigError("scroll_clicks_per_row must be positive")
        if self.window_rect is not None and len(self.window_rect) != 4:
            raise ConfigError("window_rect must be [left, top, width, height]")
        if str(self.cancel_key).lower() not in VK_CODES:
            raise ConfigError(f"cancel_key must be one of {', '.join(VK_CODES)}")

    @classmethod
    def from_settings(cls, settings: Dict[str, Any], **overrides: Any) -> 'ScanConfig':
        """
        Build a ScanConfig from a settings dict, ignoring unrelated keys.

        Args:
            settings: Dictionary as returned by load_settings()
            **overrides: Values that take precedence (e.g. CLI flags); None is ignored

        Returns:
            Validated ScanConfig

        Raises:
            ConfigError: If a value is out of range or of the wrong type
        """
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in settings.items() if k in known}
        values.update({k: v for k, v in overrides.items() if k in known and v is not None})

        try:
            if values.get("window_rect") is not None:
                values["window_rect"] = tuple(int(v) for v in values["window_rect"])
            return cls(**values)
        except (TypeError, ValueError) as e:
            raise ConfigError(str(e)) from e
