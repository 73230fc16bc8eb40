from typing import Callable, Iterator

from .models import Node


def iter_nodes(root: Node) -> Iterator[Node]:
    """Yield root and all its descendants in pre-order (parent before children, children in order).

    Uses an explicit stack so arbitrarily deep trees do not hit the recursion limit.
    Each call starts a fresh walk; stopping iteration early is allowed.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        if node.children:
            stack.extend(reversed(node.children))


def traverse(root: Node, visit: Callable[[Node], None]):
    """Call visit once per node of the subtree, in pre-order"""
    for node in iter_nodes(root):
        visit(node)
