"""Types from the i3 / sway IPC API."""

from dataclasses import dataclass, field
from enum import IntEnum, StrEnum
from typing import Any

__all__ = [
    "CommandResult",
    "ExitCode",
    "FocusdimError",
    "Node",
    "NodeType",
    "WindowEvent",
]


class NodeType(StrEnum):
    """Container kinds found in a layout tree."""

    ROOT = "root"
    OUTPUT = "output"
    CON = "con"
    FLOATING_CON = "floating_con"
    WORKSPACE = "workspace"
    DOCKAREA = "dockarea"


@dataclass
class Node:
    """Snapshot of a container of the layout tree."""

    id: int
    name: str = ""
    type: str = NodeType.CON
    focused: bool = False
    focus: list[int] = field(default_factory=list)
    nodes: list["Node"] = field(default_factory=list, repr=False)
    floating_nodes: list["Node"] = field(default_factory=list, repr=False)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Node":
        """Build a node (and its children) from a decoded IPC reply."""
        return cls(
            id=int(data["id"]),
            name=data.get("name") or "",
            type=data.get("type", NodeType.CON),
            focused=bool(data.get("focused", False)),
            focus=list(data.get("focus", [])),
            nodes=[cls.from_json(child) for child in data.get("nodes", [])],
            floating_nodes=[cls.from_json(child) for child in data.get("floating_nodes", [])],
        )

    @property
    def is_workspace(self) -> bool:
        """True if this node is a workspace."""
        return self.type == NodeType.WORKSPACE

    def children(self) -> list["Node"]:
        """Tiling children first, then floating ones."""
        return self.nodes + self.floating_nodes


@dataclass(frozen=True)
class WindowEvent:
    """A `window` event: what changed and on which container."""

    change: str
    container: Node

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "WindowEvent":
        """Build an event from a decoded event payload."""
        return cls(change=str(data.get("change", "")), container=Node.from_json(data["container"]))


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one command of a RUN_COMMAND request."""

    success: bool
    error: str = ""
    parse_error: bool = False

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "CommandResult":
        """Build a result from a decoded reply item."""
        return cls(
            success=bool(data.get("success", False)),
            error=str(data.get("error", "")),
            parse_error=bool(data.get("parse_error", False)),
        )


class FocusdimError(BaseException):
    """Used for errors which already triggered logging."""


class ExitCode(IntEnum):
    """Process exit codes."""

    SUCCESS = 0
    USAGE_ERROR = 1  # invalid command line
    CONNECTION_ERROR = 3  # cannot reach the window manager at startup
    CONFIG_ERROR = 4  # unreadable or invalid configuration
