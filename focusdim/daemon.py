"""Daemon: wires the components together and runs the event loop."""

import asyncio
import contextlib
import signal
from collections.abc import AsyncIterator

from .adapters.backend import WindowManagerBackend
from .adapters.discovery import EndpointDiscovery, get_discovery
from .adapters.i3ipc import I3IpcBackend
from .adapters.proxy import BackendProxy
from .config import Configuration
from .constants import DEFAULT_DIM_OPACITY
from .events import EventSource
from .focus import FocusState, FocusTracker
from .logging_setup import get_logger
from .models import ExitCode, FocusdimError, WindowEvent
from .opacity import OpacityEmitter
from .tree import TreeQuery

__all__ = ["FocusDaemon", "restoring_opacity", "run_daemon"]


@contextlib.asynccontextmanager
async def restoring_opacity(emitter: OpacityEmitter, enabled: bool = True) -> AsyncIterator[OpacityEmitter]:
    """Make every window opaque again when leaving the block, whatever the reason.

    Nothing is sent if the windows were never dimmed.
    """
    try:
        yield emitter
    finally:
        if enabled and emitter.all_dimmed:
            try:
                await emitter.restore_all()
            except OSError as e:
                emitter.log.warning("Can't restore opacity: %s", e)


class FocusDaemon:
    """Main app object."""

    def __init__(self, backend: WindowManagerBackend, config: Configuration) -> None:
        self.log = get_logger()
        self.config = config
        self.state = FocusState()
        self.emitter = OpacityEmitter(BackendProxy(backend, get_logger("opacity")))
        self.tree = TreeQuery(BackendProxy(backend, get_logger("tree")))
        self.events = EventSource(BackendProxy(backend, get_logger("events")))
        self.tracker = FocusTracker(
            self.tree,
            self.emitter,
            self.state,
            config.get_float("dim_opacity", DEFAULT_DIM_OPACITY),
            get_logger("focus"),
        )
        self.stopped = asyncio.Event()

    def stop(self) -> None:
        """Ask the loop to exit after the current event."""
        self.log.info("Stopping")
        self.stopped.set()

    def install_signal_handlers(self) -> None:
        """Stop on SIGINT and SIGTERM."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self.stop)

    async def _next_or_stop(self) -> WindowEvent | None:
        """Wait for the next event, or None if stopped or the stream ended."""
        next_event = asyncio.create_task(self.events.next_event())
        stop_wait = asyncio.create_task(self.stopped.wait())
        try:
            done, _ = await asyncio.wait({next_event, stop_wait}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (next_event, stop_wait):
                task.cancel()
            await asyncio.gather(next_event, stop_wait, return_exceptions=True)
        if next_event in done and not next_event.cancelled():
            return next_event.result()
        return None

    async def read_events_loop(self) -> None:
        """Consume window events until stopped or the stream ends."""
        while not self.stopped.is_set():
            try:
                event = await self._next_or_stop()
            except OSError as e:
                self.log.error("Event stream broken: %s", e)  # noqa: TRY400
                return
            if event is None:
                if not self.stopped.is_set():
                    self.log.warning("Event stream ended")
                return
            try:
                await self.tracker.handle_event(event)
            except Exception:  # pylint: disable=W0718
                self.log.exception("Unhandled error processing %s event on %d", event.change, event.container.id)

    async def run(self) -> None:
        """Start tracking and process events, windows are restored on exit.

        Raises:
            FocusdimError: if the window manager can't be reached at startup
        """
        async with restoring_opacity(self.emitter, self.config.get_bool("restore_on_exit", True)):
            try:
                await self.tracker.start()
                await self.events.open()
            except OSError as e:
                self.log.critical("Error getting focused node & workspace: %s", e)
                raise FocusdimError(ExitCode.CONNECTION_ERROR) from e
            try:
                await self.read_events_loop()
            finally:
                await self.events.close()


async def run_daemon(config: Configuration, discovery: EndpointDiscovery | None = None) -> None:
    """Find the window manager and run the daemon until stopped.

    Args:
        config: The loaded configuration
        discovery: Socket discovery strategy, defaults to the configured one
    """
    log = get_logger("startup")
    if discovery is None:
        discovery = get_discovery(config.get_str("backend"), config.get_str("socket_path"))
    if not await discovery.is_running(log=log):
        log.warning("%s doesn't seem to be running, trying anyway", discovery.name)
    try:
        socket_path = await discovery.resolve_endpoint(log=log)
    except ConnectionError as e:
        log.critical("Can't find the window manager socket: %s", e)
        raise FocusdimError(ExitCode.CONNECTION_ERROR) from e
    log.info("Using socket %s", socket_path)

    daemon = FocusDaemon(I3IpcBackend(socket_path), config)
    daemon.install_signal_handlers()
    daemon.log.debug("[ initialized ]".center(80, "="))
    await daemon.run()
