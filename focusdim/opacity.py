"""Opacity commands."""

from dataclasses import dataclass

from .adapters.proxy import BackendProxy
from .constants import ALL_WINDOWS_CRITERIA, FOCUSED_OPACITY

__all__ = ["OpacityEmitter", "Selector", "format_opacity_command"]


@dataclass(frozen=True)
class Selector:
    """Command criteria matching the windows to update."""

    criteria: str

    @classmethod
    def all_windows(cls) -> "Selector":
        """Match every window."""
        return cls(ALL_WINDOWS_CRITERIA)

    @classmethod
    def container(cls, con_id: int) -> "Selector":
        """Match the container with this exact id."""
        return cls(f'con_id="{int(con_id)}"')

    def __str__(self) -> str:
        return self.criteria


def format_opacity_command(selector: Selector, opacity: float) -> str:
    """Return the `opacity set` command for `selector`.

    Raises:
        ValueError: if `opacity` isn't within [0, 1]
    """
    if not 0.0 <= opacity <= 1.0:
        msg = f"opacity must be within [0, 1], got {opacity}"
        raise ValueError(msg)
    return f"[{selector}] opacity set {opacity:.2f}"


class OpacityEmitter:
    """Sends opacity commands.

    Transport errors are propagated. Commands which ran but were reported as
    unsuccessful (eg: the window closed in the meantime, so nothing matched)
    are only logged.
    """

    all_dimmed = False
    "True while windows may still carry the dim opacity set by `dim_all`"

    def __init__(self, backend: BackendProxy) -> None:
        self.backend = backend
        self.log = backend.log

    async def set_opacity(self, selector: Selector, opacity: float) -> bool:
        """Set `opacity` on windows matching `selector`, returns True if it applied."""
        command = format_opacity_command(selector, opacity)
        results = await self.backend.run_command(command)
        self.log.debug('Result of "%s": %s', command, results)
        failures = [result for result in results if not result.success]
        if failures:
            self.log.debug(
                '"%s" unsuccessful: %s',
                command,
                "; ".join(f"parse error: {f.error}" if f.parse_error else f.error for f in failures),
            )
            return False
        return True

    async def brighten(self, con_id: int) -> bool:
        """Make the container fully opaque."""
        return await self.set_opacity(Selector.container(con_id), FOCUSED_OPACITY)

    async def dim(self, con_id: int, opacity: float) -> bool:
        """Set the container to the dim `opacity`."""
        return await self.set_opacity(Selector.container(con_id), opacity)

    async def dim_all(self, opacity: float) -> bool:
        """Set every window to `opacity`."""
        applied = await self.set_opacity(Selector.all_windows(), opacity)
        self.all_dimmed = True
        return applied

    async def restore_all(self) -> bool:
        """Make every window fully opaque again."""
        applied = await self.set_opacity(Selector.all_windows(), FOCUSED_OPACITY)
        self.all_dimmed = False
        return applied
