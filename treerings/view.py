import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Union

import matplotlib.pyplot as plt

from treerings.focus import FocusController, FocusState
from treerings.hierarchy import (
    ChildrenAccessor,
    KindAccessor,
    collect_source_nodes,
    default_children_of,
    default_kind_of,
    flatten_tree,
)
from treerings.hover import HoverBridge, HoverListener
from treerings.layout import PackedNode, PackedTree, font_size_for_depth, pack_hierarchy
from treerings.rendering import Renderer
from treerings.transitions import Easing, EasingFunction, ViewTransform, resolve_easing
from treerings.utils import format_count, format_time, time_function_call


@dataclass
class ViewParameters:
    viewport_width: float = 800
    viewport_height: float = 600
    margin: float = 50
    min_label_radius: float = 30
    base_font_size: float = 40
    min_font_size: float = 24
    font_size_depth_step: float = 3
    transition_duration_ms: float = 300
    easing: Union[str, Easing, EasingFunction] = Easing.cubic_out
    max_padding_fraction: Optional[float] = 0.25
    label_inset: float = 5
    char_width_ratio: float = 0.6

    def __post_init__(self):
        if self.viewport_width <= 0 or self.viewport_height <= 0:
            raise ValueError(
                f"The viewport must have a positive size, "
                f"got {self.viewport_width}x{self.viewport_height}."
            )
        if self.margin < 0:
            raise ValueError(f"The margin can not be negative, got {self.margin}.")
        if self.min_font_size <= 0 or self.base_font_size < self.min_font_size:
            raise ValueError(
                f"Font sizes must satisfy 0 < min_font_size <= base_font_size, "
                f"got {self.min_font_size} and {self.base_font_size}."
            )
        if self.font_size_depth_step < 0:
            raise ValueError("font_size_depth_step can not be negative.")
        if self.transition_duration_ms < 0:
            raise ValueError("transition_duration_ms can not be negative.")
        if self.max_padding_fraction is not None and not 0 <= self.max_padding_fraction <= 1:
            raise ValueError(
                f"max_padding_fraction must lie in [0, 1], got {self.max_padding_fraction}."
            )
        if self.min_label_radius < 0 or self.label_inset < 0:
            raise ValueError("min_label_radius and label_inset can not be negative.")
        if self.char_width_ratio <= 0:
            raise ValueError("char_width_ratio must be positive.")
        resolve_easing(self.easing)

    def font_size(self, depth: int) -> float:
        return font_size_for_depth(
            depth, self.base_font_size, self.font_size_depth_step, self.min_font_size
        )


class RingsView:
    """Interactive circle packing view of an externally owned tree.

    Wires the layout, the renderer, the click-to-zoom controller and the hover bridge. The
    external tree is only read during `set_tree`; hover events identify nodes by their pre-order
    index (`source_ref`), which `resolve` maps back to the external node.

    Parameters
    ----------
    parameters: ViewParameters, optional
        Viewport, label and animation settings.

    kind_of, children_of: callable
        Accessors of the external tree. Defaults read Python `ast` nodes.

    hover_listener: callable, optional
        Receives the hovered node's `source_ref`, or None when the pointer leaves it.

    ax: matplotlib Axes, optional
        Where to draw. A figure of the viewport size is created otherwise.

    clock: callable (default `time.monotonic`)

    verbose: bool (default False)
        If true, print progress messages.
    """

    def __init__(
        self,
        parameters: Optional[ViewParameters] = None,
        kind_of: KindAccessor = default_kind_of,
        children_of: ChildrenAccessor = default_children_of,
        hover_listener: Optional[HoverListener] = None,
        ax=None,
        clock: Callable[[], float] = time.monotonic,
        verbose: bool = False,
    ):
        self.parameters = parameters if parameters is not None else ViewParameters()
        self.kind_of = kind_of
        self.children_of = children_of
        self.verbose = verbose
        self.hover = HoverBridge(hover_listener)

        p = self.parameters
        self.renderer = Renderer(
            ax,
            min_label_radius=p.min_label_radius,
            label_inset=p.label_inset,
            char_width_ratio=p.char_width_ratio,
            font_size=p.font_size,
        )
        self.renderer.on_enter = self._on_enter
        self.renderer.on_leave = self._on_leave
        self.renderer.on_click = self._on_click

        self.tree = self._pack(None)
        self.controller = FocusController(
            self.tree, p.transition_duration_ms, resolve_easing(p.easing), clock
        )
        self._source_nodes: List[Any] = []

    @property
    def state(self) -> FocusState:
        return self.controller.state

    @property
    def figure(self):
        return self.renderer.figure

    def set_hover_listener(self, listener: Optional[HoverListener]):
        self.hover.set_listener(listener)

    def set_tree(self, root: Any) -> PackedTree:
        """Lay out and draw a new external tree. Focus survives when its node still exists."""
        hierarchy = flatten_tree(root, self.kind_of, self.children_of)
        self._source_nodes = collect_source_nodes(root, self.children_of)
        self.tree = self._pack(hierarchy)
        self.controller.rebuild(self.tree)

        _, seconds = time_function_call(
            self.renderer.draw,
            self.tree,
            self.controller.transform,
            self.controller.visible_label_id,
        )
        if self.verbose:
            print(f"Drew {format_count(len(self.tree))} rings in {format_time(seconds)}.")
        self.renderer.add_reset_button(self.reset)
        self._sync_controls()
        return self.tree

    def resolve(self, source_ref: Optional[int]) -> Optional[Any]:
        """External node of a hover reference, None if it is not part of the current tree."""
        if source_ref is None or not 0 <= source_ref < len(self._source_nodes):
            return None
        return self._source_nodes[source_ref]

    def click(self, node_id: int, now: Optional[float] = None) -> bool:
        """Zoom onto a ring. Also relays the ring as hovered."""
        node = self.tree.get(node_id)
        if node is None:
            return False
        self.hover.enter(node.source_ref)
        self.controller.click(node_id, now)
        self._animate(now)
        return True

    def reset(self, now: Optional[float] = None):
        """Zoom back out to the whole tree."""
        self.controller.reset(now)
        self._animate(now)

    def on_frame(self, now: Optional[float] = None) -> ViewTransform:
        """Advance the animation by one frame. Stops the frame timer once the view settles."""
        transform = self.controller.tick(now)
        self.renderer.set_view(transform, self.controller.visible_label_id)
        if not self.controller.is_animating:
            self.renderer.stop_timer()
        return transform

    def breadcrumbs(self) -> List[str]:
        """Kind labels from the root down to the focused ring."""
        top = self.controller.top_level_id
        if top is None:
            return []
        return [node.name for node in self.tree.ancestors(top)]

    def focused_node(self) -> Optional[PackedNode]:
        return self.tree.get(self.controller.focused_node_id)

    def save(self, path, **kwargs):
        self.renderer.save(path, **kwargs)

    def show(self):
        plt.show()

    def _pack(self, hierarchy) -> PackedTree:
        p = self.parameters
        return pack_hierarchy(
            hierarchy,
            p.viewport_width,
            p.viewport_height,
            p.margin,
            padding=p.font_size,
            max_padding_fraction=p.max_padding_fraction,
            verbose=self.verbose,
        )

    def _animate(self, now: Optional[float]):
        self._sync_controls()
        self.on_frame(now)
        if self.controller.is_animating:
            self.renderer.start_timer(self.on_frame)

    def _sync_controls(self):
        self.renderer.set_reset_visible(not self.controller.state.is_root)
        self.renderer.set_breadcrumbs(self.breadcrumbs())

    def _on_enter(self, node: PackedNode):
        self.hover.enter(node.source_ref)

    def _on_leave(self, node: Optional[PackedNode]):
        self.hover.leave()

    def _on_click(self, node: PackedNode):
        self.click(node.node_id)
