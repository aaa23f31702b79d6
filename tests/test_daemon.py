import asyncio
import signal
from unittest.mock import AsyncMock, Mock

import pytest

from focusdim.config import Configuration
from focusdim.daemon import FocusDaemon, restoring_opacity, run_daemon
from focusdim.models import CommandResult, ExitCode, FocusdimError
from focusdim.opacity import OpacityEmitter
from focusdim.schema import FOCUSDIM_CONFIG_SCHEMA

from .testtools import commands, window_event

DIM_ALL = '[title=".*"] opacity set 0.70'
RESTORE_ALL = '[title=".*"] opacity set 1.00'


@pytest.fixture
def make_config(test_logger):
    def _make(**values):
        return Configuration(values, logger=test_logger, schema=FOCUSDIM_CONFIG_SCHEMA)

    return _make


@pytest.fixture
def daemon(backend, make_config):
    return FocusDaemon(backend, make_config())


@pytest.mark.asyncio
async def test_full_session(daemon, backend):
    backend.read_event.side_effect = [("window", window_event(11)), None]
    await daemon.run()
    assert commands(backend.run_command) == [
        DIM_ALL,
        '[con_id="12"] opacity set 1.00',
        '[con_id="11"] opacity set 1.00',
        '[con_id="12"] opacity set 0.70',
        RESTORE_ALL,
    ]
    backend.open_events.assert_awaited_once()
    assert backend.open_events.await_args.args[0] == ["window"]
    events_writer = backend.open_events.return_value[1]
    events_writer.close.assert_called_once()


@pytest.mark.asyncio
async def test_configured_opacity(backend, make_config):
    await FocusDaemon(backend, make_config(dim_opacity=0.35)).run()
    assert commands(backend.run_command) == ['[title=".*"] opacity set 0.35', '[con_id="12"] opacity set 1.00', RESTORE_ALL]


@pytest.mark.asyncio
async def test_startup_failure(daemon, backend):
    backend.get_tree.side_effect = ConnectionError("/run/wm.sock")
    with pytest.raises(FocusdimError) as exc:
        await daemon.run()
    assert exc.value.args[0] == ExitCode.CONNECTION_ERROR
    backend.run_command.assert_not_called()
    backend.open_events.assert_not_called()


@pytest.mark.asyncio
async def test_subscription_failure_restores(daemon, backend):
    backend.open_events.side_effect = ConnectionError("refused")
    with pytest.raises(FocusdimError):
        await daemon.run()
    assert commands(backend.run_command)[-1] == RESTORE_ALL


@pytest.mark.asyncio
async def test_stop_while_waiting(daemon, backend):
    async def wait_forever(*_, **__):
        daemon.stop()
        await asyncio.Event().wait()

    backend.read_event.side_effect = wait_forever
    await asyncio.wait_for(daemon.run(), timeout=5)
    assert commands(backend.run_command)[-1] == RESTORE_ALL


@pytest.mark.asyncio
async def test_broken_stream_restores(daemon, backend):
    backend.read_event.side_effect = [("window", window_event(21)), ConnectionResetError()]
    await daemon.run()
    assert commands(backend.run_command)[-2:] == ['[con_id="21"] opacity set 1.00', RESTORE_ALL]


@pytest.mark.asyncio
async def test_malformed_event_is_skipped(daemon, backend):
    backend.read_event.side_effect = [
        ("window", {"change": "focus", "container": {"name": "no id"}}),
        ("window", window_event(11)),
        None,
    ]
    await daemon.run()
    assert commands(backend.run_command)[2:] == [
        '[con_id="11"] opacity set 1.00',
        '[con_id="12"] opacity set 0.70',
        RESTORE_ALL,
    ]


@pytest.mark.asyncio
async def test_handler_error_does_not_stop_the_loop(daemon, backend):
    backend.read_event.side_effect = [("window", window_event(11)), ("window", window_event(21)), None]
    ok = [CommandResult(success=True)]
    # dim all, brighten 12, then brighten 11 fails unexpectedly
    backend.run_command.side_effect = [ok, ok, TypeError("boom"), ok, ok]
    await daemon.run()
    assert commands(backend.run_command)[3:] == ['[con_id="21"] opacity set 1.00', RESTORE_ALL]
    assert daemon.state.last_focused.id == 21


@pytest.mark.asyncio
async def test_no_restore_when_disabled(backend, make_config):
    await FocusDaemon(backend, make_config(restore_on_exit=False)).run()
    assert RESTORE_ALL not in commands(backend.run_command)


@pytest.mark.asyncio
async def test_signal_handlers(daemon, mocker):
    add_signal_handler = mocker.patch.object(asyncio.get_running_loop(), "add_signal_handler")
    daemon.install_signal_handlers()
    assert [c.args for c in add_signal_handler.call_args_list] == [
        (signal.SIGINT, daemon.stop),
        (signal.SIGTERM, daemon.stop),
    ]


@pytest.mark.asyncio
async def test_restoring_opacity(proxy):
    emitter = OpacityEmitter(proxy)
    with pytest.raises(RuntimeError):
        async with restoring_opacity(emitter):
            await emitter.dim_all(0.7)
            raise RuntimeError("boom")
    assert commands(proxy.run_command) == [DIM_ALL, RESTORE_ALL]
    assert not emitter.all_dimmed


@pytest.mark.asyncio
async def test_restoring_opacity_not_dimmed(proxy):
    async with restoring_opacity(OpacityEmitter(proxy)):
        pass
    proxy.run_command.assert_not_called()


@pytest.mark.asyncio
async def test_restoring_opacity_failure_is_logged(proxy):
    emitter = OpacityEmitter(proxy)
    async with restoring_opacity(emitter):
        await emitter.dim_all(0.7)
        proxy.run_command.side_effect = ConnectionResetError
    assert proxy.run_command.await_count == 2


@pytest.fixture
def discovery():
    found = Mock(name="discovery")
    found.name = "sway"
    found.is_running = AsyncMock(return_value=True)
    found.resolve_endpoint = AsyncMock(return_value="/run/wm.sock")
    return found


@pytest.mark.asyncio
async def test_run_daemon(discovery, backend, make_config, mocker):
    backend_class = mocker.patch("focusdim.daemon.I3IpcBackend", return_value=backend)
    install = mocker.patch.object(FocusDaemon, "install_signal_handlers")
    await run_daemon(make_config(), discovery)
    backend_class.assert_called_once_with("/run/wm.sock")
    install.assert_called_once()
    assert commands(backend.run_command)[-1] == RESTORE_ALL


@pytest.mark.asyncio
async def test_run_daemon_not_running(discovery, backend, make_config, mocker):
    discovery.is_running.return_value = False
    mocker.patch("focusdim.daemon.I3IpcBackend", return_value=backend)
    mocker.patch.object(FocusDaemon, "install_signal_handlers")
    await run_daemon(make_config(), discovery)
    discovery.resolve_endpoint.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_daemon_without_socket(discovery, make_config, mocker):
    discovery.resolve_endpoint.side_effect = ConnectionError("sway socket not detected")
    backend_class = mocker.patch("focusdim.daemon.I3IpcBackend")
    with pytest.raises(FocusdimError) as exc:
        await run_daemon(make_config(), discovery)
    assert exc.value.args[0] == ExitCode.CONNECTION_ERROR
    backend_class.assert_not_called()


@pytest.mark.asyncio
async def test_run_daemon_uses_configured_socket(backend, make_config, mocker):
    backend_class = mocker.patch("focusdim.daemon.I3IpcBackend", return_value=backend)
    mocker.patch.object(FocusDaemon, "install_signal_handlers")
    await run_daemon(make_config(backend="static", socket_path="/tmp/wm.sock"))
    backend_class.assert_called_once_with("/tmp/wm.sock")
