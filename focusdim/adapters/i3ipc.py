"""i3 IPC protocol backend, shared by i3 and sway."""

import asyncio
import json
from logging import Logger
from typing import Any

from ..ipc import MessageType, get_event_stream, ipc_request, read_event
from ..models import CommandResult, Node
from .backend import WindowManagerBackend


class I3IpcBackend(WindowManagerBackend):
    """Backend talking to the socket at `socket_path`."""

    def __init__(self, socket_path: str) -> None:
        self.socket_path = socket_path

    async def get_tree(self, *, log: Logger) -> Node:
        reply = await ipc_request(self.socket_path, MessageType.GET_TREE, logger=log)
        if not isinstance(reply, dict):
            msg = f"unexpected tree reply: {type(reply).__name__}"
            raise ConnectionError(msg)
        return Node.from_json(reply)

    async def run_command(self, command: str, *, log: Logger) -> list[CommandResult]:
        reply = await ipc_request(self.socket_path, MessageType.RUN_COMMAND, command, logger=log)
        if not isinstance(reply, list):
            msg = f"unexpected command reply: {reply!r}"
            raise ConnectionError(msg)
        return [CommandResult.from_json(item) for item in reply]

    async def open_events(self, events: list[str], *, log: Logger) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        return await get_event_stream(self.socket_path, events, log)

    async def read_event(self, reader: asyncio.StreamReader, *, log: Logger) -> tuple[str, dict[str, Any]] | None:
        event = await read_event(reader)
        if event is not None:
            log.debug("event %s: %s", event[0], json.dumps(event[1])[:200])
        return event
