"""Focus tracking: decides which window to brighten and which one to dim."""

from dataclasses import dataclass
from logging import Logger

from .models import Node, WindowEvent
from .opacity import OpacityEmitter
from .tree import TreeQuery

__all__ = ["FOCUS_CHANGE", "FocusState", "FocusTracker"]

FOCUS_CHANGE = "focus"


@dataclass
class FocusState:
    """Last focused window and the workspace it was on when it got the focus.

    Both are set, or both are None.
    """

    last_focused: Node | None = None
    last_focused_workspace: Node | None = None

    @property
    def is_tracking(self) -> bool:
        """True once a focused window has been recorded."""
        return self.last_focused is not None

    def record(self, node: Node | None, workspace: Node | None) -> None:
        """Remember `node` as focused on `workspace` (forgets both if one is missing)."""
        if node is None or workspace is None:
            self.last_focused = self.last_focused_workspace = None
        else:
            self.last_focused = node
            self.last_focused_workspace = workspace


class FocusTracker:
    """Consumes window events and drives the opacity of the windows.

    The focused window is kept fully opaque. The previously focused one is
    dimmed if the focus stayed on the same workspace, otherwise it is left
    untouched since it isn't visible anymore.

    Note: a window left opaque on a workspace the user switched away from
    stays opaque until it gets and loses the focus again.
    """

    def __init__(self, tree: TreeQuery, emitter: OpacityEmitter, state: FocusState, dim_opacity: float, log: Logger) -> None:
        self.tree = tree
        self.emitter = emitter
        self.state = state
        self.dim_opacity = dim_opacity
        self.log = log

    async def start(self) -> None:
        """Dim every window, then brighten the focused one and start tracking it.

        Raises:
            ConnectionError: if the initial tree can't be fetched
        """
        focused, workspace = await self.tree.focused_and_workspace()
        await self.emitter.dim_all(self.dim_opacity)
        if focused is not None:
            await self.emitter.brighten(focused.id)
        self.state.record(focused, workspace)
        if self.state.is_tracking:
            self.log.info("Tracking %s on workspace %s", focused, workspace)
        else:
            self.log.info("Nothing focused yet")

    async def handle_event(self, event: WindowEvent) -> bool:
        """Process one window event, returns True if the tracked state changed."""
        node = event.container
        self.log.debug("Got WindowEvent: %s(%d) - %s", event.change, node.id, node.name)
        if event.change != FOCUS_CHANGE:
            self.log.info("Ignoring %s event on %d", event.change, node.id)
            return False

        state = self.state
        if state.last_focused is not None and state.last_focused.id == node.id:
            return False

        try:
            await self.emitter.brighten(node.id)
        except OSError:
            self.log.exception("Error brightening node (ID: %d)", node.id)

        try:
            workspace = await self.tree.workspace_of(node.id)
        except OSError as e:
            self.log.error("Error getting node (ID: %d) workspace: %s", node.id, e)  # noqa: TRY400
            return False
        if workspace is None:
            self.log.info("Node (ID: %d) vanished before its workspace was known", node.id)
            return False

        previous, previous_workspace = state.last_focused, state.last_focused_workspace
        if previous is not None and previous_workspace is not None and previous_workspace.id == workspace.id:
            try:
                await self.emitter.dim(previous.id, self.dim_opacity)
            except OSError:
                self.log.exception("Error dimming node (ID: %d)", previous.id)

        state.record(node, workspace)
        return True
