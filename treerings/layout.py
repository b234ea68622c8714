import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from treerings.hierarchy import HierarchyNode
from treerings.packing import pack_siblings
from treerings.utils import format_count, format_time, time_function_call

PaddingFunction = Callable[[int], float]


def font_size_for_depth(
    depth: int,
    base_font_size: float = 40.0,
    font_size_depth_step: float = 3.0,
    min_font_size: float = 24.0,
) -> float:
    """Label font size of a ring at the given depth: shrinks linearly with depth down to a floor."""
    return max(base_font_size - depth * font_size_depth_step, min_font_size)


@dataclass(frozen=True, eq=False)
class PackedNode:
    """A hierarchy node with its circle.

    `x`, `y` locate the centre relative to the parent's centre (for the root: relative to the
    interior frame origin, i.e. the viewport shifted by the margin). `cx`, `cy` are the same
    centre in absolute interior frame coordinates.
    """

    name: str
    value: float
    aggregate: float
    source_ref: int
    x: float
    y: float
    cx: float
    cy: float
    radius: float
    depth: int
    children: Tuple["PackedNode", ...] = field(default=(), repr=False)

    @property
    def node_id(self) -> int:
        return self.source_ref

    @property
    def is_leaf(self) -> bool:
        return len(self.children) == 0


class PackedTree:
    """Immutable result of `pack_hierarchy`: the packed root plus lookup helpers."""

    def __init__(
        self,
        root: Optional[PackedNode],
        nodes: Tuple[PackedNode, ...],
        parent_ids: Dict[int, Optional[int]],
        viewport_width: float,
        viewport_height: float,
        margin: float,
        interior_width: float,
        interior_height: float,
    ):
        self.root = root
        self.nodes = nodes
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.margin = margin
        self.interior_width = interior_width
        self.interior_height = interior_height
        self._parent_ids = parent_ids
        self._by_id: Dict[int, PackedNode] = {node.node_id: node for node in nodes}
        self.max_depth = max((node.depth for node in nodes), default=0)

    def __len__(self):
        return len(self.nodes)

    def __contains__(self, node_id) -> bool:
        return node_id in self._by_id

    @property
    def is_empty(self) -> bool:
        return self.root is None

    def get(self, node_id: Optional[int]) -> Optional[PackedNode]:
        if node_id is None:
            return None
        return self._by_id.get(node_id)

    def parent_of(self, node_id: int) -> Optional[PackedNode]:
        return self.get(self._parent_ids.get(node_id))

    def ancestors(self, node_id: int) -> List[PackedNode]:
        """Path from the root down to the node, both included. Empty for unknown ids."""
        path = []
        current = self.get(node_id)
        while current is not None:
            path.append(current)
            current = self.parent_of(current.node_id)
        return path[::-1]

    def hit_test(self, x: float, y: float) -> Optional[PackedNode]:
        """Deepest circle containing the interior frame point (x, y), or None."""
        node = self.root
        if node is None or not _circle_contains(node, x, y):
            return None
        while True:
            inner = next((c for c in node.children if _circle_contains(c, x, y)), None)
            if inner is None:
                return node
            node = inner


def _circle_contains(node: PackedNode, x: float, y: float) -> bool:
    return node.radius > 0 and math.hypot(x - node.cx, y - node.cy) <= node.radius


def _sanitize_weight(value) -> float:
    try:
        weight = float(value)
    except (TypeError, ValueError):
        return 1.0
    if not math.isfinite(weight) or weight <= 0:
        return 1.0
    return weight


def _flatten_preorder(root: HierarchyNode):
    nodes: List[HierarchyNode] = []
    parents: List[int] = []
    depths: List[int] = []
    children_idx: List[List[int]] = []
    stack = [(root, -1, 0)]
    while stack:
        node, p, d = stack.pop()
        i = len(nodes)
        nodes.append(node)
        parents.append(p)
        depths.append(d)
        children_idx.append([])
        if p >= 0:
            children_idx[p].append(i)
        for child in reversed(node.children):
            stack.append((child, i, d + 1))
    return nodes, np.array(parents, dtype=np.int64), np.array(depths, dtype=np.int64), children_idx


def subtree_aggregates(weights: np.ndarray, parents: np.ndarray, depths: np.ndarray) -> np.ndarray:
    """Sum every node's weight into all its ancestors, one depth level at a time (deepest first)."""
    agg = np.asarray(weights, float).copy()
    if len(agg) <= 1:
        return agg
    order = np.argsort(-depths, kind="stable")
    bounds = np.flatnonzero(np.diff(depths[order])) + 1
    for level in np.split(order, bounds):
        if depths[level[0]] == 0:
            break
        np.add.at(agg, parents[level], agg[level])
    return agg


def _pack_children_inside_parent(
    child_aggregates: np.ndarray, parent_radius: float, padding: float
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Children centres (relative to the parent centre) and radii, scaled into the parent.

    Base radii are sqrt(aggregate) so the area follows the weight. The padding (pixels) is
    turned into an inflation of the base radii with the scale of an unpadded first pass, the
    inflated set is packed again, and the result is scaled so the inflated enclosure plus one
    more inflation fits the parent exactly.
    """
    m = len(child_aggregates)
    if parent_radius <= 0:
        return np.zeros((m, 2), float), np.zeros(m, float)

    order = np.argsort(-child_aggregates, kind="stable")
    rho = np.sqrt(child_aggregates[order])

    P, e = pack_siblings(rho)
    q = 0.0
    if padding > 0:
        q = padding * e / (2 * parent_radius)
        P, e = pack_siblings(rho + q)
    s = parent_radius / (e + q)

    centers = np.empty((m, 2), float)
    radii = np.empty(m, float)
    centers[order] = P * s
    radii[order] = rho * s
    return centers, radii


def pack_hierarchy(
    root: Optional[HierarchyNode],
    viewport_width: float = 800,
    viewport_height: float = 600,
    margin: float = 50,
    padding: PaddingFunction = font_size_for_depth,
    max_padding_fraction: Optional[float] = 0.25,
    verbose: bool = False,
) -> PackedTree:
    """
    Lay out a hierarchy as nested, non-overlapping circles fitted to a viewport.

    Parameters
    ----------
    root: HierarchyNode or None
        The hierarchy. `None` gives an empty layout.

    viewport_width, viewport_height: float (default 800, 600)
        Size of the drawing surface in pixels.

    margin: float (default 50)
        Space kept free on every side; the root circle fills the remaining interior box. If the
        margin leaves no interior the layout uses the whole viewport instead.

    padding: callable (default `font_size_for_depth`)
        Pixels of separation reserved between the children of a node at a given depth, and
        between them and the node's edge. Leaves room for the node's curved label.

    max_padding_fraction: float or None (default 0.25)
        Caps the padding to this fraction of the parent radius so that deep rings do not
        collapse. None disables the cap.

    verbose: bool (default False)
        If true, print progress messages.

    Returns
    -------
    tree: PackedTree
        Coordinates are given in the interior frame, whose origin sits at (margin, margin) in
        the viewport. Identical inputs give identical outputs.
    """
    interior_width = viewport_width - 2 * margin
    interior_height = viewport_height - 2 * margin
    if interior_width <= 0 or interior_height <= 0:
        if verbose:
            print(
                f"A margin of {margin} leaves no room in a {viewport_width}x{viewport_height} "
                f"viewport, laying out over the whole viewport."
            )
        margin = 0
        interior_width, interior_height = viewport_width, viewport_height

    if root is None:
        return PackedTree(
            None, (), {}, viewport_width, viewport_height, margin, interior_width, interior_height
        )

    nodes, parents, depths, children_idx = _flatten_preorder(root)
    n = len(nodes)
    if verbose:
        print(f"Packing {format_count(n)} nodes over {int(depths.max()) + 1} levels...")

    weights = np.array([_sanitize_weight(node.value) for node in nodes], float)
    agg = subtree_aggregates(weights, parents, depths)

    (radii, local, absolute), elapsed = time_function_call(
        _place_circles,
        agg,
        depths,
        children_idx,
        interior_width,
        interior_height,
        padding,
        max_padding_fraction,
    )
    if verbose:
        print(f"Circles placed in {format_time(elapsed)}.")

    packed: List[Optional[PackedNode]] = [None] * n
    for i in range(n - 1, -1, -1):
        node = nodes[i]
        packed[i] = PackedNode(
            name=node.name,
            value=float(weights[i]),
            aggregate=float(agg[i]),
            source_ref=node.source_ref,
            x=float(local[i, 0]),
            y=float(local[i, 1]),
            cx=float(absolute[i, 0]),
            cy=float(absolute[i, 1]),
            radius=float(radii[i]),
            depth=int(depths[i]),
            children=tuple(packed[k] for k in children_idx[i]),
        )

    parent_ids = {
        packed[i].node_id: (packed[parents[i]].node_id if parents[i] >= 0 else None)
        for i in range(n)
    }

    return PackedTree(
        packed[0],
        tuple(packed),
        parent_ids,
        viewport_width,
        viewport_height,
        margin,
        interior_width,
        interior_height,
    )


def _place_circles(
    agg: np.ndarray,
    depths: np.ndarray,
    children_idx: List[List[int]],
    interior_width: float,
    interior_height: float,
    padding: PaddingFunction,
    max_padding_fraction: Optional[float],
):
    """Top-down pass: the root fills the interior box, every node packs its children inside."""
    n = len(agg)
    radii = np.zeros(n, float)
    local = np.zeros((n, 2), float)
    absolute = np.zeros((n, 2), float)
    radii[0] = max(min(interior_width, interior_height) / 2, 0.0)
    absolute[0] = (interior_width / 2, interior_height / 2)
    local[0] = absolute[0]

    for i in range(n):
        kids = children_idx[i]
        if not kids:
            continue
        parent_radius = float(radii[i])
        pad = float(padding(int(depths[i])))
        if not math.isfinite(pad) or pad < 0:
            pad = 0.0
        if max_padding_fraction is not None:
            pad = min(pad, max_padding_fraction * parent_radius)

        centers, kid_radii = _pack_children_inside_parent(agg[kids], parent_radius, pad)
        local[kids] = centers
        absolute[kids] = absolute[i] + centers
        radii[kids] = kid_radii

    return radii, local, absolute
