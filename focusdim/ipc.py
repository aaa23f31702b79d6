"""Interact with i3 / sway using the IPC socket."""

__all__ = [
    "EventType",
    "IpcProtocolError",
    "MessageType",
    "get_event_stream",
    "ipc_connection",
    "ipc_request",
    "pack_message",
    "read_event",
    "read_message",
]

import asyncio
import contextlib
import json
import struct
from collections.abc import AsyncIterator, Callable
from enum import IntEnum
from logging import Logger
from typing import Any

from .constants import IPC_MAX_RETRIES, IPC_RETRY_DELAY_MULTIPLIER

MAGIC = b"i3-ipc"
# magic, payload length, message type (native byte order)
HEADER = struct.Struct("=6sII")
EVENT_MASK = 1 << 31


class MessageType(IntEnum):
    """Request types of the IPC protocol."""

    RUN_COMMAND = 0
    SUBSCRIBE = 2
    GET_TREE = 4


class EventType(IntEnum):
    """Event types, sent with the high bit of the message type set."""

    WORKSPACE = 0
    OUTPUT = 1
    MODE = 2
    WINDOW = 3
    BARCONFIG_UPDATE = 4
    BINDING = 5
    SHUTDOWN = 6
    TICK = 7


class IpcProtocolError(ConnectionError):
    """The peer sent something which isn't a valid IPC frame."""


def pack_message(msg_type: int, payload: str | bytes = b"") -> bytes:
    """Frame `payload` as a message of type `msg_type`."""
    if isinstance(payload, str):
        payload = payload.encode()
    return HEADER.pack(MAGIC, len(payload), msg_type) + payload


async def read_message(reader: asyncio.StreamReader) -> tuple[int, Any] | None:
    """Read one frame, returns (message type, decoded payload).

    Returns None if the stream ended cleanly before a new frame.
    """
    try:
        header = await reader.readexactly(HEADER.size)
    except asyncio.IncompleteReadError as e:
        if not e.partial:
            return None
        msg = f"truncated header: {e.partial!r}"
        raise IpcProtocolError(msg) from e
    magic, length, msg_type = HEADER.unpack(header)
    if magic != MAGIC:
        msg = f"invalid magic: {magic!r}"
        raise IpcProtocolError(msg)
    try:
        payload = await reader.readexactly(length)
    except asyncio.IncompleteReadError as e:
        msg = f"truncated payload ({len(e.partial)}/{length} bytes)"
        raise IpcProtocolError(msg) from e
    try:
        return msg_type, json.loads(payload.decode("utf-8", errors="replace")) if payload else None
    except json.JSONDecodeError as e:
        msg = f"invalid JSON payload: {e}"
        raise IpcProtocolError(msg) from e


@contextlib.asynccontextmanager
async def ipc_connection(socket_path: str, logger: Logger) -> AsyncIterator[tuple[asyncio.StreamReader, asyncio.StreamWriter]]:
    """Context manager for a connection to the window manager socket."""
    try:
        reader, writer = await asyncio.open_unix_connection(socket_path)
    except (FileNotFoundError, ConnectionRefusedError) as e:
        logger.critical("IPC socket %s not reachable! is the window manager running ?", socket_path)
        raise ConnectionError(socket_path) from e
    try:
        yield reader, writer
    finally:
        writer.close()
        with contextlib.suppress(OSError):
            await writer.wait_closed()


def retry_on_reset(func: Callable) -> Callable:
    """Retry on reset wrapper."""

    async def wrapper(*args, logger: Logger, **kwargs) -> Any:  # noqa: ANN401
        exc = None
        for count in range(IPC_MAX_RETRIES):
            try:
                return await func(*args, **kwargs, logger=logger)
            except ConnectionResetError as e:  # noqa: PERF203
                exc = e
                logger.warning("ipc connection problem, retrying...")
                await asyncio.sleep(IPC_RETRY_DELAY_MULTIPLIER * count)
        logger.error("ipc connection failed.")
        raise ConnectionResetError from exc

    return wrapper


@retry_on_reset
async def ipc_request(socket_path: str, msg_type: MessageType, payload: str = "", *, logger: Logger) -> Any:  # noqa: ANN401
    """Send one request and return the decoded reply."""
    logger.debug("%s %s", msg_type.name, payload)
    async with ipc_connection(socket_path, logger) as (reader, writer):
        writer.write(pack_message(msg_type, payload))
        await writer.drain()
        message = await read_message(reader)
    if message is None:
        msg = f"connection closed before {msg_type.name} reply"
        raise ConnectionResetError(msg)
    reply_type, reply = message
    if reply_type != msg_type:
        msg = f"unexpected reply type {reply_type} to {msg_type.name}"
        raise IpcProtocolError(msg)
    return reply


async def get_event_stream(socket_path: str, events: list[str], logger: Logger) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Return a new connection subscribed to `events`."""
    try:
        reader, writer = await asyncio.open_unix_connection(socket_path)
    except (FileNotFoundError, ConnectionRefusedError) as e:
        logger.critical("IPC socket %s not reachable! is the window manager running ?", socket_path)
        raise ConnectionError(socket_path) from e
    try:
        writer.write(pack_message(MessageType.SUBSCRIBE, json.dumps(events)))
        await writer.drain()
        message = await read_message(reader)
        if message is None or message[0] != MessageType.SUBSCRIBE or not (message[1] or {}).get("success"):
            msg = f"subscription to {events} refused: {message}"
            raise IpcProtocolError(msg)
    except BaseException:
        writer.close()
        raise
    logger.debug("subscribed to %s", events)
    return reader, writer


async def read_event(reader: asyncio.StreamReader) -> tuple[str, dict[str, Any]] | None:
    """Wait for the next event, returns (event name, payload) or None at end of stream.

    Replies to anything else than events are skipped.
    """
    while True:
        message = await read_message(reader)
        if message is None:
            return None
        msg_type, payload = message
        if not msg_type & EVENT_MASK:
            continue
        code = msg_type & ~EVENT_MASK
        try:
            name = EventType(code).name.lower()
        except ValueError:
            name = f"event_{code}"
        return name, payload or {}
