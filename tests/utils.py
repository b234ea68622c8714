from typing import List, Optional

import numpy as np

from treerings.layout import PackedTree

# SYNTHETIC TREES


class Node:
    """Minimal external tree node with a kind label and ordered children."""

    def __init__(self, kind: str, children: Optional[List["Node"]] = None):
        self.kind = kind
        self.children = children if children is not None else []

    def __repr__(self):
        return f"Node({self.kind!r}, {len(self.children)} children)"


def kind_of(node: Node) -> str:
    return node.kind


def children_of(node: Node) -> List[Node]:
    return node.children


def example_tree() -> Node:
    """A with children B and C, C with the single child D. Pre-order ids: A0 B1 C2 D3."""
    return Node("A", [Node("B"), Node("C", [Node("D")])])


def generate_random_tree(n_nodes: int, seed: int = 0, kinds=("Expr", "Call", "Name", "Load")) -> Node:
    """Random tree: every new node is attached to a uniformly chosen earlier node."""
    rng = np.random.default_rng(seed)
    nodes = [Node("Module")]
    for i in range(1, n_nodes):
        parent = nodes[rng.integers(0, i)]
        child = Node(kinds[rng.integers(0, len(kinds))])
        parent.children.append(child)
        nodes.append(child)
    return nodes[0]


def generate_chain(depth: int) -> Node:
    """A path of `depth` nodes, built bottom-up."""
    node = Node("Leaf")
    for _ in range(depth - 1):
        node = Node("Link", [node])
    return node


# GEOMETRY CHECKS


def containment_violations(tree: PackedTree, tol: float = 1e-6) -> int:
    """Number of children sticking out of their parent's circle."""
    violations = 0
    for node in tree.nodes:
        for child in node.children:
            d = np.hypot(child.cx - node.cx, child.cy - node.cy)
            if d + child.radius > node.radius + tol * max(node.radius, 1.0):
                violations += 1
    return violations


def overlap_violations(tree: PackedTree, tol: float = 1e-6) -> int:
    """Number of overlapping sibling pairs."""
    violations = 0
    for node in tree.nodes:
        kids = node.children
        for i in range(len(kids)):
            for j in range(i + 1, len(kids)):
                a, b = kids[i], kids[j]
                d = np.hypot(a.cx - b.cx, a.cy - b.cy)
                if d < a.radius + b.radius - tol * max(node.radius, 1.0):
                    violations += 1
    return violations
