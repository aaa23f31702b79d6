"""Shared constants for focusdim."""

import os
from pathlib import Path

__all__ = [
    "ALL_WINDOWS_CRITERIA",
    "CONFIG_FILE",
    "CONFIG_SECTION",
    "DEFAULT_BACKEND",
    "DEFAULT_DIM_OPACITY",
    "FOCUSED_OPACITY",
    "IPC_MAX_RETRIES",
    "IPC_RETRY_DELAY_MULTIPLIER",
    "WINDOW_EVENT",
]

# Config file path - use XDG_CONFIG_HOME with fallback to ~/.config
_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
CONFIG_FILE = _xdg_config_home / "focusdim" / "config.toml"
CONFIG_SECTION = "focusdim"

# Opacity levels
FOCUSED_OPACITY = 1.0
DEFAULT_DIM_OPACITY = 0.7

# Matches every window having a title
ALL_WINDOWS_CRITERIA = 'title=".*"'

DEFAULT_BACKEND = "sway"

WINDOW_EVENT = "window"

# IPC retry settings
IPC_MAX_RETRIES = 3
IPC_RETRY_DELAY_MULTIPLIER = 0.5
