"""Configuration schema of the `[focusdim]` section."""

from .adapters.discovery import DISCOVERIES
from .constants import DEFAULT_BACKEND, DEFAULT_DIM_OPACITY
from .validation import ConfigField, ConfigItems

__all__ = ["FOCUSDIM_CONFIG_SCHEMA", "validate_opacity"]


def validate_opacity(value: float) -> list[str]:
    """Opacity must be within [0, 1]."""
    if not 0.0 <= float(value) <= 1.0:
        return [f"{value} is out of range, use a value between 0.0 and 1.0"]
    return []


FOCUSDIM_CONFIG_SCHEMA = ConfigItems(
    ConfigField(
        "dim_opacity",
        float,
        default=DEFAULT_DIM_OPACITY,
        description="Opacity of the windows which lost the focus",
        validator=validate_opacity,
    ),
    ConfigField(
        "backend",
        str,
        default=DEFAULT_BACKEND,
        description="How to find the window manager socket",
        choices=list(DISCOVERIES),
    ),
    ConfigField(
        "socket_path",
        str,
        default="",
        description="IPC socket path, skips discovery when set",
    ),
    ConfigField(
        "restore_on_exit",
        bool,
        default=True,
        description="Make every window opaque again when exiting",
    ),
)
