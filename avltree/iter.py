from __future__ import annotations

from typing import Optional

from . import node as nodes


def min_node(node: Optional[nodes.AVLNode]) -> Optional[nodes.AVLNode]:
    """Leftmost real node of the subtree rooted at `node`, or None."""
    if not nodes.is_real(node):
        return None
    while node._left.is_real:
        node = node._left
    return node


def max_node(node: Optional[nodes.AVLNode]) -> Optional[nodes.AVLNode]:
    """Rightmost real node of the subtree rooted at `node`, or None."""
    if not nodes.is_real(node):
        return None
    while node._right.is_real:
        node = node._right
    return node


def successor(node: nodes.AVLNode) -> Optional[nodes.AVLNode]:
    if node._right.is_real:
        return min_node(node._right)

    cur = node
    while cur._parent is not None:
        if cur._is_left_child():
            return cur._parent
        cur = cur._parent
    return None


def predecessor(node: nodes.AVLNode) -> Optional[nodes.AVLNode]:
    if node._left.is_real:
        return max_node(node._left)

    cur = node
    while cur._parent is not None:
        if cur._is_right_child():
            return cur._parent
        cur = cur._parent
    return None


class TreeIter(object):
    """Single-pass in-order walk driven by successor/predecessor links.

    The walk starts at one end of the tree and is not restartable; mutating
    the tree while iterating leaves the result undefined.
    """

    KEYS = 0
    VALS = 1
    ITEMS = 2
    NODES = 3

    def __init__(self, mode: int, root: nodes.AVLNode, rev: bool = False):
        self._rev: bool = rev
        self._mode: int = mode

        if not rev:
            self._cur: Optional[nodes.AVLNode] = min_node(root)
        else:
            self._cur = max_node(root)

    def __iter__(self) -> TreeIter:
        return self

    def __next__(self):
        if self._cur is None:
            raise StopIteration()

        cur_node = self._cur
        if not self._rev:
            self._cur = successor(cur_node)
        else:
            self._cur = predecessor(cur_node)

        if self._mode == TreeIter.KEYS:
            return cur_node.key
        elif self._mode == TreeIter.VALS:
            return cur_node.value
        elif self._mode == TreeIter.ITEMS:
            return (cur_node.key, cur_node.value)
        elif self._mode == TreeIter.NODES:
            return cur_node
