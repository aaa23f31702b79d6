"""Window manager socket discovery.

Each strategy knows how to find the IPC socket of a running window manager
and how to tell whether that window manager is running at all.
"""

import asyncio
import os
from abc import ABC, abstractmethod
from logging import Logger
from pathlib import Path

__all__ = [
    "DISCOVERIES",
    "EndpointDiscovery",
    "EnvironmentDiscovery",
    "I3Discovery",
    "StaticDiscovery",
    "SwayDiscovery",
    "get_discovery",
]


class EndpointDiscovery(ABC):
    """Finds the control socket of a window manager instance."""

    name: str = ""

    @abstractmethod
    async def resolve_endpoint(self, *, log: Logger) -> str:
        """Return the socket path, raise ConnectionError if it can't be found.

        Args:
            log: Logger to use for this operation
        """

    @abstractmethod
    async def is_running(self, *, log: Logger) -> bool:
        """Return True if the window manager seems to be running.

        Args:
            log: Logger to use for this operation
        """


class CommandDiscovery(EndpointDiscovery):
    """Asks the window manager binary for its socket path."""

    socket_command: str
    process_pattern: str

    @staticmethod
    async def _run(command: str) -> tuple[int, str]:
        """Run a shell command, returns (return code, combined output)."""
        proc = await asyncio.create_subprocess_shell(
            command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
        stdout, _ = await proc.communicate()
        return proc.returncode or 0, stdout.decode(errors="replace").strip()

    async def resolve_endpoint(self, *, log: Logger) -> str:
        """Return the socket path printed by `socket_command`.

        Args:
            log: Logger to use for this operation
        """
        try:
            code, output = await self._run(self.socket_command)
        except OSError as e:
            log.error("Can't run %s: %s", self.socket_command, e)
            msg = f"getting {self.name} socket path: {e}"
            raise ConnectionError(msg) from e
        if code != 0 or not output:
            msg = f"getting {self.name} socket path: exit code {code} (output: {output})"
            log.error(msg)
            raise ConnectionError(msg)
        return output

    async def is_running(self, *, log: Logger) -> bool:
        """Count matching processes with pgrep, exactly one is expected.

        Args:
            log: Logger to use for this operation
        """
        try:
            code, output = await self._run(f"pgrep -c '{self.process_pattern}'")
        except OSError as e:
            log.warning("%s running: %s", self.name, e)
            return False
        if code != 0:
            log.info("%s running: exit code %d (output: %s)", self.name, code, output)
        return output == "1"


class SwayDiscovery(CommandDiscovery):
    """Sway: `sway --get-socketpath`."""

    name = "sway"
    socket_command = "sway --get-socketpath"
    process_pattern = "sway$"


class I3Discovery(CommandDiscovery):
    """i3: `i3 --get-socketpath`."""

    name = "i3"
    socket_command = "i3 --get-socketpath"
    process_pattern = "i3$"


class EnvironmentDiscovery(EndpointDiscovery):
    """Reads the socket path exported by the window manager ($SWAYSOCK, $I3SOCK)."""

    name = "env"
    variables = ("SWAYSOCK", "I3SOCK")

    def _find(self) -> str | None:
        for var in self.variables:
            value = os.environ.get(var)
            if value:
                return value
        return None

    async def resolve_endpoint(self, *, log: Logger) -> str:
        path = self._find()
        if path is None:
            msg = f"none of {', '.join(self.variables)} is set"
            log.error(msg)
            raise ConnectionError(msg)
        return path

    async def is_running(self, *, log: Logger) -> bool:
        path = self._find()
        return path is not None and Path(path).exists()


class StaticDiscovery(EndpointDiscovery):
    """A socket path given in the configuration."""

    name = "static"

    def __init__(self, socket_path: str) -> None:
        self.socket_path = socket_path

    async def resolve_endpoint(self, *, log: Logger) -> str:
        if not self.socket_path:
            msg = "no socket_path configured"
            log.error(msg)
            raise ConnectionError(msg)
        return os.path.expanduser(os.path.expandvars(self.socket_path))

    async def is_running(self, *, log: Logger) -> bool:  # noqa: ARG002
        return bool(self.socket_path) and Path(os.path.expanduser(os.path.expandvars(self.socket_path))).exists()


DISCOVERIES: dict[str, type[EndpointDiscovery]] = {
    "sway": SwayDiscovery,
    "i3": I3Discovery,
    "env": EnvironmentDiscovery,
    "static": StaticDiscovery,
}


def get_discovery(name: str, socket_path: str = "") -> EndpointDiscovery:
    """Return the discovery strategy called `name`.

    A non-empty `socket_path` always wins over the named strategy.
    """
    if socket_path:
        return StaticDiscovery(socket_path)
    if name not in DISCOVERIES:
        msg = f"unknown backend {name!r}, expected one of {', '.join(DISCOVERIES)}"
        raise ValueError(msg)
    if name == "static":
        return StaticDiscovery(socket_path)
    return DISCOVERIES[name]()
