"""Backend adapter interface."""

import asyncio
from abc import ABC, abstractmethod
from logging import Logger
from typing import Any

from ..models import CommandResult, Node


class WindowManagerBackend(ABC):
    """Abstract base class for window manager backends.

    All methods that perform logging require a `log` parameter to be passed.
    This allows the calling code (via BackendProxy) to inject the appropriate
    logger for traceability.
    """

    @abstractmethod
    async def get_tree(self, *, log: Logger) -> Node:
        """Return a fresh snapshot of the layout tree.

        Args:
            log: Logger to use for this operation
        """

    @abstractmethod
    async def run_command(self, command: str, *, log: Logger) -> list[CommandResult]:
        """Run a command, return one result per executed command.

        Args:
            command: The command, using the window manager grammar
            log: Logger to use for this operation
        """

    @abstractmethod
    async def open_events(self, events: list[str], *, log: Logger) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        """Open a connection subscribed to `events`.

        Args:
            events: Event names, eg: ["window"]
            log: Logger to use for this operation
        """

    @abstractmethod
    async def read_event(self, reader: asyncio.StreamReader, *, log: Logger) -> tuple[str, dict[str, Any]] | None:
        """Wait for the next event on `reader`, None when the stream ended.

        Args:
            reader: A reader returned by `open_events`
            log: Logger to use for this operation
        """
