import ast
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple

KindAccessor = Callable[[Any], str]
ChildrenAccessor = Callable[[Any], Iterable[Any]]

_EXHAUSTED = object()


def default_kind_of(node: Any) -> str:
    return type(node).__name__


def default_children_of(node: Any) -> Iterable[Any]:
    return ast.iter_child_nodes(node)


@dataclass(frozen=True, eq=False)
class HierarchyNode:
    """Generic weighted tree node used as layout input.

    `source_ref` is the pre-order index of the external node it was built from. It is a lookup
    key only: the external tree is never referenced from here, see `collect_source_nodes`.
    """

    name: str
    value: float = 1.0
    children: Tuple["HierarchyNode", ...] = field(default=(), repr=False)
    source_ref: int = 0

    @property
    def is_leaf(self) -> bool:
        return len(self.children) == 0


def flatten_tree(
    root: Any,
    kind_of: KindAccessor = default_kind_of,
    children_of: ChildrenAccessor = default_children_of,
) -> Optional[HierarchyNode]:
    """Convert an externally owned tree into a `HierarchyNode` tree.

    Parameters
    ----------
    root: Any
        Root of the external tree, e.g. an `ast.Module`. `None` stands for an empty tree.

    kind_of: callable (default `type(node).__name__`)
        Returns the kind label of a node, used as the hierarchy node name.

    children_of: callable (default `ast.iter_child_nodes`)
        Returns the ordered children of a node.

    Returns
    -------
    hierarchy: HierarchyNode or None
        Every external node becomes one hierarchy node of unit value, children kept in order.
        The traversal is iterative, so arbitrarily deep trees do not hit the recursion limit.
    """
    if root is None:
        return None

    next_ref = 1
    # frame: (external node, its pre-order index, pending children iterator, built children)
    stack: List[Tuple[Any, int, Iterator[Any], List[HierarchyNode]]] = [
        (root, 0, iter(children_of(root)), [])
    ]
    while True:
        node, ref, pending, built = stack[-1]
        child = next(pending, _EXHAUSTED)
        if child is not _EXHAUSTED:
            stack.append((child, next_ref, iter(children_of(child)), []))
            next_ref += 1
            continue

        stack.pop()
        flat = HierarchyNode(
            name=str(kind_of(node)), value=1.0, children=tuple(built), source_ref=ref
        )
        if not stack:
            return flat
        stack[-1][3].append(flat)


def collect_source_nodes(
    root: Any, children_of: ChildrenAccessor = default_children_of
) -> List[Any]:
    """List the external nodes in pre-order, so that `nodes[source_ref]` resolves a reference.

    The list belongs to the caller, which owns the external tree anyway.
    """
    if root is None:
        return []
    nodes = []
    stack = [iter([root])]
    while stack:
        node = next(stack[-1], _EXHAUSTED)
        if node is _EXHAUSTED:
            stack.pop()
            continue
        nodes.append(node)
        stack.append(iter(children_of(node)))
    return nodes


def iter_hierarchy(root: Optional[HierarchyNode]) -> Iterator[HierarchyNode]:
    """Pre-order iteration without recursion."""
    if root is None:
        return
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))
