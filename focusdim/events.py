"""Window event source."""

import asyncio
import contextlib
from typing import Self

from .adapters.proxy import BackendProxy
from .constants import WINDOW_EVENT
from .models import WindowEvent

__all__ = ["EventSource"]


class EventSource:
    """Yields window events one at a time, in emission order.

    Usable as an async context manager (opens and closes the subscription) and
    as an async iterator (stops at the end of the stream).
    """

    reader: asyncio.StreamReader | None = None
    writer: asyncio.StreamWriter | None = None

    def __init__(self, backend: BackendProxy) -> None:
        self.backend = backend
        self.log = backend.log

    async def open(self) -> None:
        """Subscribe to window events."""
        self.reader, self.writer = await self.backend.open_events([WINDOW_EVENT])

    async def close(self) -> None:
        """Release the subscription."""
        if self.writer is not None:
            self.writer.close()
            with contextlib.suppress(OSError):
                await self.writer.wait_closed()
        self.reader = self.writer = None

    async def next_event(self) -> WindowEvent | None:
        """Wait for the next window event, None once the stream ended."""
        assert self.reader is not None, "event source not opened"
        while True:
            event = await self.backend.read_event(self.reader)
            if event is None:
                return None
            name, payload = event
            if name != WINDOW_EVENT or "container" not in payload:
                self.log.info("Unrecognized event: %s %s", name, payload)
                continue
            try:
                return WindowEvent.from_json(payload)
            except (KeyError, TypeError, ValueError):
                self.log.exception("Malformed %s event: %s", name, payload)

    async def __aenter__(self) -> Self:
        await self.open()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    def __aiter__(self) -> Self:
        return self

    async def __anext__(self) -> WindowEvent:
        event = await self.next_event()
        if event is None:
            raise StopAsyncIteration
        return event
