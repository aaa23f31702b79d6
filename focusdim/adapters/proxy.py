"""Backend proxy that injects a component logger into all calls.

Each component (tree queries, opacity commands, events) gets its own
BackendProxy with its own logger, while sharing the underlying backend.
"""

import asyncio
from logging import Logger
from typing import TYPE_CHECKING, Any

from ..models import CommandResult, Node

if TYPE_CHECKING:
    from .backend import WindowManagerBackend


class BackendProxy:
    """Proxy that injects the component logger into all backend calls.

    Attributes:
        log: The logger to use for all backend operations
    """

    def __init__(self, backend: "WindowManagerBackend", log: Logger) -> None:
        """Initialize the proxy.

        Args:
            backend: The underlying backend to delegate calls to
            log: The logger to inject into all backend calls
        """
        self._backend = backend
        self.log = log

    async def get_tree(self) -> Node:
        """Return a fresh snapshot of the layout tree."""
        return await self._backend.get_tree(log=self.log)

    async def run_command(self, command: str) -> list[CommandResult]:
        """Run a command using the window manager grammar.

        Args:
            command: The command to run
        """
        return await self._backend.run_command(command, log=self.log)

    async def open_events(self, events: list[str]) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        """Open a connection subscribed to `events`.

        Args:
            events: Event names
        """
        return await self._backend.open_events(events, log=self.log)

    async def read_event(self, reader: asyncio.StreamReader) -> tuple[str, dict[str, Any]] | None:
        """Wait for the next event on `reader`.

        Args:
            reader: A reader returned by `open_events`
        """
        return await self._backend.read_event(reader, log=self.log)
