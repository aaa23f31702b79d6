"""Configuration file loading."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

import aiofiles

from .config import Configuration
from .constants import CONFIG_FILE, CONFIG_SECTION
from .models import ExitCode, FocusdimError
from .schema import FOCUSDIM_CONFIG_SCHEMA
from .validation import ConfigValidator

if TYPE_CHECKING:
    import logging

__all__ = ["ConfigLoader"]


class ConfigLoader:
    """Loads the TOML configuration file and validates the `[focusdim]` section.

    Without an explicit file name, a missing default file just means "use
    the defaults".
    """

    def __init__(self, log: logging.Logger) -> None:
        self.log = log

    async def load(self, config_filename: str = "", overrides: dict[str, Any] | None = None) -> Configuration:
        """Load and validate the configuration.

        Args:
            config_filename: Optional path to the config file, defaults to CONFIG_FILE
            overrides: Values taking precedence over the file (command line options)

        Raises:
            FocusdimError: if the file can't be read or the configuration is invalid
        """
        if config_filename:
            fname = Path(os.path.expandvars(config_filename)).expanduser()
            if not fname.exists():
                self.log.critical("Config file not found: %s", fname)
                raise FocusdimError(ExitCode.CONFIG_ERROR)
        else:
            fname = CONFIG_FILE

        raw = await self._load_config_file(fname) if fname.exists() else {}
        section = dict(raw.get(CONFIG_SECTION, {}))
        section.update(overrides or {})

        validator = ConfigValidator(section, CONFIG_SECTION, self.log)
        validator.warn_unknown_keys(FOCUSDIM_CONFIG_SCHEMA)
        errors = validator.validate(FOCUSDIM_CONFIG_SCHEMA)
        if section.get("backend") == "static" and not section.get("socket_path"):
            errors.append(f"[{CONFIG_SECTION}] Config error for 'socket_path': required with backend = \"static\"")
        for error in errors:
            self.log.error(error)
        if errors:
            raise FocusdimError(ExitCode.CONFIG_ERROR)

        return Configuration(section, logger=self.log, schema=FOCUSDIM_CONFIG_SCHEMA)

    async def _load_config_file(self, fname: Path) -> dict[str, Any]:
        """Read and parse a single TOML file."""
        self.log.info("Loading %s", fname)
        try:
            async with aiofiles.open(fname, encoding="utf-8") as f:
                content = await f.read()
        except OSError as e:
            self.log.critical("Can't read %s: %s", fname, e)
            raise FocusdimError(ExitCode.CONFIG_ERROR) from e
        try:
            return tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            self.log.critical("Problem reading %s: %s", fname, e)
            raise FocusdimError(ExitCode.CONFIG_ERROR) from e
