import time
from dataclasses import dataclass
from typing import Callable, Optional

from treerings.layout import PackedNode, PackedTree
from treerings.transitions import EasingFunction, Transition, ViewTransform, cubic_out


@dataclass(frozen=True)
class FocusState:
    focused_node_id: Optional[int]
    view_transform: ViewTransform

    @property
    def is_root(self) -> bool:
        return self.focused_node_id is None


def root_transform(tree: PackedTree) -> ViewTransform:
    """Identity scale shifted by the tree's margin.

    This is the margin the layout actually used: 0 when the requested margin left no interior,
    in which case the root view covers the whole viewport.
    """
    return ViewTransform(tree.margin, tree.margin, 1.0)



def focus_transform(tree: PackedTree, node: Optional[PackedNode]) -> ViewTransform:
    """Transform under which the node's circle fills the interior box, centred."""
    if node is None or node.radius <= 0:
        return root_transform(tree)
    scale = min(tree.interior_width, tree.interior_height) / (2 * node.radius)
    return ViewTransform(
        tree.margin + tree.interior_width / 2 - node.cx * scale,
        tree.margin + tree.interior_height / 2 - node.cy * scale,
        scale,
    )


class FocusController:
    """Click-to-zoom navigation: Root or FocusedOn(node id).

    `click` and `reset` are accepted from any state. Each one starts an animated transition
    from wherever the view currently is, replacing any transition still running. The caller
    drives the animation by calling `tick` once per frame.

    Parameters
    ----------
    tree: PackedTree
        Current layout.

    duration_ms: float (default 300)
        Length of a transition. 0 applies transforms instantly.

    easing: callable (default ease-out cubic)
        Maps linear progress in [0, 1] to eased progress.

    clock: callable (default `time.monotonic`)
        Returns the current time in seconds.
    """

    def __init__(
        self,
        tree: PackedTree,
        duration_ms: float = 300,
        easing: EasingFunction = cubic_out,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.tree = tree
        self.duration_ms = duration_ms
        self.easing = easing
        self.clock = clock
        self.focused_node_id: Optional[int] = None
        self.transform = root_transform(tree)
        self._transition: Optional[Transition] = None

    @property
    def state(self) -> FocusState:
        return FocusState(self.focused_node_id, self.transform)

    @property
    def is_animating(self) -> bool:
        return self._transition is not None

    @property
    def top_level_id(self) -> Optional[int]:
        """The ring currently acting as the top level: the focused node, else the root."""
        if self.focused_node_id is not None:
            return self.focused_node_id
        return self.tree.root.node_id if self.tree.root is not None else None

    @property
    def visible_label_id(self) -> Optional[int]:
        """Node whose label may be shown now. None while a transition runs."""
        if self.is_animating:
            return None
        return self.top_level_id

    def click(self, node_id: int, now: Optional[float] = None) -> bool:
        node = self.tree.get(node_id)
        if node is None:
            return False
        self.focused_node_id = node_id
        self._start(focus_transform(self.tree, node), now)
        return True

    def reset(self, now: Optional[float] = None):
        self.focused_node_id = None
        self._start(root_transform(self.tree), now)

    def tick(self, now: Optional[float] = None) -> ViewTransform:
        """Advance the running transition to `now` and return the transform to draw."""
        if self._transition is None:
            return self.transform
        now = self.clock() if now is None else now
        self.transform = self._transition.value_at(now)
        if self._transition.finished(now):
            self._transition = None
        return self.transform

    def rebuild(self, tree: PackedTree):
        """Switch to a freshly packed tree without animation.

        The focus survives only if a node with the same id and kind label exists in the new
        tree; the view then snaps to its new circle. Otherwise the state goes back to Root.
        """
        old = self.tree.get(self.focused_node_id)
        self.tree = tree
        self._transition = None
        new = tree.get(self.focused_node_id)
        if old is None or new is None or new.name != old.name:
            self.focused_node_id = None
            self.transform = root_transform(tree)
        else:
            self.transform = focus_transform(tree, new)

    def _start(self, target: ViewTransform, now: Optional[float]):
        now = self.clock() if now is None else now
        # sample the running transition first so the new one starts where the view is
        current = self.tick(now)
        self._transition = Transition(current, target, now, self.duration_ms, self.easing)
        if self.duration_ms <= 0:
            self.tick(now)
