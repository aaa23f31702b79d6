"""Layout tree queries: focused container and owning workspaces."""

from logging import Logger

from .adapters.proxy import BackendProxy
from .models import Node

__all__ = ["TreeQuery", "find_focused", "find_workspace_of"]


def find_focused(tree: Node) -> tuple[Node | None, Node | None]:
    """Follow the focus stack down from `tree`, returns (focused node, its workspace).

    The workspace is the last workspace passed on the way down, so it is None
    if the focused node isn't inside one (eg: nothing is open yet).
    """
    workspace: Node | None = None
    node: Node | None = tree
    while node is not None:
        if node.is_workspace:
            workspace = node
        if node.focused:
            return node, workspace
        if not node.focus:
            return None, workspace
        first = node.focus[0]
        node = next((child for child in node.children() if child.id == first), None)
    return None, workspace


def find_workspace_of(tree: Node, con_id: int) -> Node | None:
    """Return the workspace owning the container `con_id`.

    Returns None if no such container exists (it was closed already) or if it
    doesn't belong to any workspace. A workspace owns itself.

    The owner is the nearest enclosing workspace, not the last workspace seen
    earlier in the walk: a container outside any workspace (eg: on a dock
    area) gets None instead of an unrelated sibling workspace.
    """

    def _walk(node: Node, workspace: Node | None) -> tuple[bool, Node | None]:
        for child in node.children():
            current = child if child.is_workspace else workspace
            if child.id == con_id:
                return True, current
            found, owner = _walk(child, current)
            if found:
                return True, owner
        return False, None

    return _walk(tree, tree if tree.is_workspace else None)[1]


class TreeQuery:
    """Read-only queries against the window manager layout tree."""

    def __init__(self, backend: BackendProxy) -> None:
        self.backend = backend

    @property
    def log(self) -> Logger:
        """Logger of the underlying proxy."""
        return self.backend.log

    async def fetch_tree(self) -> Node:
        """Return a fresh tree snapshot, raises ConnectionError on transport failure."""
        return await self.backend.get_tree()

    async def focused_and_workspace(self) -> tuple[Node | None, Node | None]:
        """Return the currently focused container and its workspace."""
        focused, workspace = find_focused(await self.fetch_tree())
        self.log.debug("focused: %s on workspace %s", focused, workspace)
        return focused, workspace

    async def workspace_of(self, con_id: int) -> Node | None:
        """Return the workspace currently owning `con_id`, None if it's gone."""
        workspace = find_workspace_of(await self.fetch_tree(), con_id)
        if workspace is None:
            self.log.debug("no workspace found for container %d", con_id)
        return workspace
