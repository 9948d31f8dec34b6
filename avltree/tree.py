from __future__ import annotations

import logging
import numbers
from collections.abc import MutableMapping
from typing import Iterator, List, NamedTuple, Optional, Tuple

from . import config
from .errors import InvariantViolation, PreconditionViolated
from .iter import TreeIter, max_node, min_node, predecessor, successor
from .node import SENTINEL, AVLNode

logger = logging.getLogger(__name__)

# Returned by insert()/delete() instead of a step count; the tree is untouched.
DUPLICATE_KEY = -1
KEY_NOT_FOUND = -1

_BALANCED = ((1, 1), (1, 2), (2, 1))


class SplitStats(NamedTuple):
    """Join costs accumulated while splitting a tree."""

    total_cost: int
    joins: int
    max_cost: int


def _check_key(key) -> int:
    if isinstance(key, bool) or not isinstance(key, numbers.Integral):
        raise TypeError("AVLTree keys must be integers, got {!r}".format(key))
    return int(key)


def _check_value(value) -> str:
    if not isinstance(value, str):
        raise TypeError("AVLTree values must be strings, got {!r}".format(value))
    return value


class AVLTree(MutableMapping):
    """AVL tree mapping unique integer keys to string values.

    Besides the usual search/insert/delete it supports `split` (partition
    around an existing key) and `join` (concatenate two trees around a pivot
    key) in time proportional to tree height.
    """

    def __init__(self, check_invariants: Optional[bool] = None):
        self._root: AVLNode = SENTINEL
        if check_invariants is None:
            check_invariants = config.CHECK_INVARIANTS
        self._check_invariants: bool = check_invariants

    def _subtree(self, root: AVLNode) -> AVLTree:
        """Wrap a detached subtree of this tree as a tree of its own."""
        tree = self.__class__(self._check_invariants)
        tree._root = root._detach()
        return tree

    def _checkpoint(self):
        if self._check_invariants:
            self.validate()

    def empty(self) -> bool:
        return not self._root.is_real

    def get_root(self) -> AVLNode:
        """The root node, or the sentinel if the tree is empty."""
        return self._root

    def size(self) -> int:
        return self._root.size

    def height(self) -> int:
        return self._root.height

    # search & navigation

    def node_search(self, key: int) -> AVLNode:
        """Return the node holding `key`, or the sentinel if there is none."""
        key = _check_key(key)
        node = self._root
        while node.is_real:
            if key == node._key:
                return node
            elif key < node._key:
                node = node._left
            else:
                node = node._right
        return SENTINEL

    def search(self, key: int) -> Optional[str]:
        return self.node_search(key).value

    def min_node(self, node: Optional[AVLNode] = None) -> Optional[AVLNode]:
        return min_node(self._root if node is None else node)

    def max_node(self, node: Optional[AVLNode] = None) -> Optional[AVLNode]:
        return max_node(self._root if node is None else node)

    def successor(self, node: AVLNode) -> Optional[AVLNode]:
        return successor(node)

    def predecessor(self, node: AVLNode) -> Optional[AVLNode]:
        return predecessor(node)

    def min(self) -> Optional[str]:
        """Value stored under the smallest key, or None if the tree is empty."""
        node = min_node(self._root)
        return node.value if node is not None else None

    def max(self) -> Optional[str]:
        """Value stored under the largest key, or None if the tree is empty."""
        node = max_node(self._root)
        return node.value if node is not None else None

    def min_item(self) -> Tuple[int, str]:
        node = min_node(self._root)
        if node is None:
            raise IndexError("Tree is empty")
        return (node.key, node.value)

    def max_item(self) -> Tuple[int, str]:
        node = max_node(self._root)
        if node is None:
            raise IndexError("Tree is empty")
        return (node.key, node.value)

    # insertion

    def _find_parent(self, key: int) -> Optional[AVLNode]:
        """Find the node whose empty child slot `key` belongs in.

        Returns None if `key` is already present.
        """
        node = self._root
        while True:
            if key == node._key:
                return None
            child = node._left if key < node._key else node._right
            if not child.is_real:
                return node
            node = child

    def insert(self, key: int, value: str) -> int:
        """Add `key` with `value`.

        Returns the number of rebalancing steps performed (promotions plus
        rotation work), or DUPLICATE_KEY if `key` already exists, in which
        case the tree is not modified.
        """
        key = _check_key(key)
        value = _check_value(value)

        if self.empty():
            self._root = AVLNode(key, value)
            self._checkpoint()
            return 0

        parent = self._find_parent(key)
        if parent is None:
            logger.debug("insert: duplicate key %d rejected", key)
            return DUPLICATE_KEY

        new_node = AVLNode(key, value)
        if key < parent._key:
            parent._set_left_child(new_node)
        else:
            parent._set_right_child(new_node)

        cur = parent
        while cur is not None:
            cur._size += 1
            cur = cur._parent

        steps = self._retrace_insert(new_node)
        self._checkpoint()
        return steps

    def _retrace_insert(self, node: AVLNode) -> int:
        """Restore balance above `node`, whose subtree has just grown.

        A parent at rank 0 is promoted while its other child sits at rank 1;
        at rank 2 a single or double rotation fixes it. A rank-0 child that
        is itself 1-1 cannot come out of a plain insert, only out of a join
        splice, and its single rotation leaves the subtree one taller, so
        the walk always resumes from the new subtree root.
        """
        steps = 0
        while node._parent is not None:
            parent = node._parent
            rank = parent._height - node._height
            if rank > 0:
                break
            if rank < 0:
                raise InvariantViolation(parent._key, "child is taller than its parent")

            sibling_rank = parent._height - node._sibling()._height
            if sibling_rank == 1:
                parent._height += 1
                steps += 1
                logger.debug("promote %d to height %d", parent._key, parent._height)
                node = parent
                continue
            if sibling_rank != 2:
                raise InvariantViolation(
                    parent._key, "rank pattern 0-{} during insert".format(sibling_rank)
                )

            left_rank, right_rank = node._ranks()
            if (left_rank, right_rank) not in _BALANCED:
                raise InvariantViolation(
                    node._key,
                    "unbalanced rank pattern {}-{} below a 0-2 node".format(
                        left_rank, right_rank
                    ),
                )

            if node._is_left_child():
                if left_rank == 1:
                    steps += self._rotate_right(parent)
                else:
                    steps += self._rotate_left(node)
                    steps += self._rotate_right(parent)
            else:
                if right_rank == 1:
                    steps += self._rotate_left(parent)
                else:
                    steps += self._rotate_right(node)
                    steps += self._rotate_left(parent)

            node = parent._parent
        return steps

    # rotations

    def _replace_child(self, old: AVLNode, new: AVLNode):
        """Put `new` into the slot `old` occupies under its parent (or the root)."""
        parent = old._parent
        if parent is None:
            self._root = new._detach()
        elif parent._left is old:
            parent._set_left_child(new)
        else:
            parent._set_right_child(new)

    def _rotate_right(self, node: AVLNode) -> int:
        axis = node._left
        if not axis.is_real:
            raise InvariantViolation(node._key, "right rotation without a left child")

        self._replace_child(node, axis)
        node._set_left_child(axis._right)
        axis._set_right_child(node)

        logger.debug("rotate right at %d (axis %d)", node._key, axis._key)
        return self._finish_rotation(node, axis)

    def _rotate_left(self, node: AVLNode) -> int:
        axis = node._right
        if not axis.is_real:
            raise InvariantViolation(node._key, "left rotation without a right child")

        self._replace_child(node, axis)
        node._set_right_child(axis._left)
        axis._set_left_child(node)

        logger.debug("rotate left at %d (axis %d)", node._key, axis._key)
        return self._finish_rotation(node, axis)

    @staticmethod
    def _finish_rotation(node: AVLNode, axis: AVLNode) -> int:
        # node is now axis's child, so it has to be fixed up first
        steps = 1 + node._update_height()
        node._update_size()
        steps += axis._update_height()
        axis._update_size()
        return steps

    # deletion

    def delete(self, key: int) -> int:
        """Remove `key` from the tree.

        Returns the number of rebalancing steps performed, or KEY_NOT_FOUND
        if `key` is absent, in which case the tree is not modified.
        """
        node = self.node_search(key)
        if not node.is_real:
            logger.debug("delete: key %d not found", key)
            return KEY_NOT_FOUND

        if node._left.is_real and node._right.is_real:
            start = self._splice_successor(node)
        else:
            child = node._left if node._left.is_real else node._right
            start = node._parent
            self._replace_child(node, child)

        self._unlink(node)
        steps = self._retrace_delete(start)
        self._checkpoint()
        return steps

    def _splice_successor(self, node: AVLNode) -> AVLNode:
        """Move `node`'s in-order successor into its place.

        Returns the deepest node whose subtree lost an element: the
        successor's former parent, or the successor itself when it was
        `node`'s right child.
        """
        succ = min_node(node._right)
        if succ._parent is node:
            start = succ
        else:
            start = succ._parent
            start._set_left_child(succ._right)
            succ._set_right_child(node._right)
        succ._set_left_child(node._left)
        self._replace_child(node, succ)

        # sizes are refreshed by the retrace, which passes through succ
        succ._height = node._height
        return start

    @staticmethod
    def _unlink(node: AVLNode):
        node._parent = None
        node._left = SENTINEL
        node._right = SENTINEL

    def _retrace_delete(self, node: Optional[AVLNode]) -> int:
        """Restore balance from `node` upward after a subtree shrank.

        2-2 nodes are demoted and the walk moves up; 3-1 nodes are rotated
        and the walk continues above the rotated subtree, since either fix
        may lower the subtree's height. Sizes along the whole path to the
        root are recomputed on the way.
        """
        steps = 0
        while node is not None:
            node._update_size()
            ranks = node._ranks()
            if ranks in _BALANCED:
                break

            if ranks == (2, 2):
                node._height -= 1
                steps += 1
                logger.debug("demote %d to height %d", node._key, node._height)
                node = node._parent
                continue

            if ranks == (3, 1):
                sibling = node._right
                if sibling._height - sibling._right._height == 1:
                    steps += self._rotate_left(node)
                else:
                    steps += self._rotate_right(sibling)
                    steps += self._rotate_left(node)
            elif ranks == (1, 3):
                sibling = node._left
                if sibling._height - sibling._left._height == 1:
                    steps += self._rotate_right(node)
                else:
                    steps += self._rotate_left(sibling)
                    steps += self._rotate_right(node)
            else:
                raise InvariantViolation(
                    node._key, "rank pattern {}-{} during delete".format(*ranks)
                )

            node = node._parent._parent

        self._refresh_sizes(node)
        return steps

    @staticmethod
    def _refresh_sizes(node: Optional[AVLNode]):
        while node is not None:
            node._update_size()
            node = node._parent

    # join & split

    def _key_range(self) -> Optional[Tuple[int, int]]:
        if self.empty():
            return None
        return (min_node(self._root).key, max_node(self._root).key)

    def _order_around(self, key: int, other: AVLTree) -> Tuple[AVLTree, AVLTree]:
        """Return (low, high): the tree entirely below `key` and the one above."""
        mine = self._key_range()
        theirs = other._key_range()

        def below(rng):
            return rng is None or rng[1] < key

        def above(rng):
            return rng is None or rng[0] > key

        if below(mine) and above(theirs):
            return self, other
        if above(mine) and below(theirs):
            return other, self

        logger.warning(
            "join: pivot %d does not separate key ranges %s and %s", key, mine, theirs
        )
        raise PreconditionViolated(
            "pivot ", key, " does not separate key ranges ", mine, " and ", theirs
        )

    def join(self, key: int, value: str, other: AVLTree) -> Tuple[AVLTree, int]:
        """Merge `other` and a new (`key`, `value`) pivot into this tree.

        Every key of one tree must be below `key` and every key of the other
        above it; `other` is emptied. Returns this tree together with the
        join cost, |height(self) - height(other)| + 1, where an empty tree
        has height -1.
        """
        key = _check_key(key)
        value = _check_value(value)
        if other is self:
            raise PreconditionViolated("cannot join a tree with itself")

        low, high = self._order_around(key, other)
        low_root = low._root
        high_root = high._root
        low_height = low_root._height
        high_height = high_root._height
        cost = abs(low_height - high_height) + 1

        pivot = AVLNode(key, value)
        other._root = SENTINEL

        if low_height == high_height:
            pivot._set_left_child(low_root)
            pivot._set_right_child(high_root)
            pivot._update_height()
            pivot._update_size()
            self._root = pivot
        else:
            self._splice_pivot(pivot, low_root, high_root)

        logger.debug(
            "join at %d: heights %d/%d, cost %d",
            key,
            low_height,
            high_height,
            cost,
        )
        self._checkpoint()
        return self, cost

    def _splice_pivot(self, pivot: AVLNode, low_root: AVLNode, high_root: AVLNode):
        if low_root._height > high_root._height:
            big, small = low_root, high_root
            along_right = True
        else:
            big, small = high_root, low_root
            along_right = False

        # walk down big's spine facing small to the first subtree no taller
        # than small
        self._root = big
        parent = big
        cur = big._right if along_right else big._left
        while cur._height > small._height:
            parent = cur
            cur = cur._right if along_right else cur._left

        if along_right:
            pivot._set_left_child(cur)
            pivot._set_right_child(small)
            parent._set_right_child(pivot)
        else:
            pivot._set_left_child(small)
            pivot._set_right_child(cur)
            parent._set_left_child(pivot)
        pivot._update_height()
        pivot._update_size()

        self._retrace_insert(pivot)
        self._refresh_sizes(pivot)

    def split(self, x: int) -> Tuple[AVLTree, AVLTree]:
        """Partition the tree around existing key `x`.

        Returns (less, more) with every key of `less` below `x` and every key
        of `more` above it. The node for `x` is dropped and this tree is left
        empty.
        """
        less, more, _ = self.split_with_stats(x)
        return less, more

    def split_with_stats(self, x: int) -> Tuple[AVLTree, AVLTree, SplitStats]:
        node = self.node_search(x)
        if not node.is_real:
            logger.warning("split: key %d is not in the tree", x)
            raise PreconditionViolated("split key ", x, " is not in the tree")

        less = self._subtree(node._left)
        more = self._subtree(node._right)

        total_cost = 0
        joins = 0
        max_cost = 0

        came_from = node
        cur = node._parent
        while cur is not None:
            up = cur._parent
            if came_from is cur._left:
                _, cost = more.join(cur._key, cur.value, self._subtree(cur._right))
            else:
                _, cost = less.join(cur._key, cur.value, self._subtree(cur._left))

            total_cost += cost
            joins += 1
            max_cost = max(max_cost, cost)

            came_from = cur
            cur = up

        self._root = SENTINEL
        stats = SplitStats(total_cost, joins, max_cost)
        logger.debug("split at %d: %s", x, stats)
        return less, more, stats

    # traversal & export

    def keys(self, reverse: bool = False) -> Iterator[int]:
        return TreeIter(TreeIter.KEYS, self._root, reverse)

    def values(self, reverse: bool = False) -> Iterator[str]:
        return TreeIter(TreeIter.VALS, self._root, reverse)

    def items(self, reverse: bool = False) -> Iterator[Tuple[int, str]]:
        return TreeIter(TreeIter.ITEMS, self._root, reverse)

    def nodes(self, reverse: bool = False) -> Iterator[AVLNode]:
        return TreeIter(TreeIter.NODES, self._root, reverse)

    def keys_to_array(self) -> List[int]:
        """All keys in ascending order."""
        return list(self.keys())

    def info_to_array(self) -> List[str]:
        """All values, ordered by ascending key."""
        return list(self.values())

    # validation

    def validate(self):
        """Check every structural invariant, raising InvariantViolation."""
        if SENTINEL._height != -1 or SENTINEL._size != 0 or SENTINEL._parent is not None:
            raise InvariantViolation(None, "sentinel constants were modified")

        root = self._root
        if not root.is_real:
            return
        if root._parent is not None:
            raise InvariantViolation(root._key, "root has a parent link")
        self._validate_subtree(root, None, None)

    def _validate_subtree(self, node: AVLNode, lo: Optional[int], hi: Optional[int]):
        if (lo is not None and node._key <= lo) or (hi is not None and node._key >= hi):
            raise InvariantViolation(
                node._key, "key out of order (bounds {}, {})".format(lo, hi)
            )

        for child in (node._left, node._right):
            if child.is_real:
                if child._parent is not node:
                    raise InvariantViolation(
                        child._key, "parent link does not point at {}".format(node._key)
                    )
        if node._left.is_real:
            self._validate_subtree(node._left, lo, node._key)
        if node._right.is_real:
            self._validate_subtree(node._right, node._key, hi)

        if node._height != max(node._left._height, node._right._height) + 1:
            raise InvariantViolation(node._key, "stale height {}".format(node._height))
        if node._size != 1 + node._left._size + node._right._size:
            raise InvariantViolation(node._key, "stale size {}".format(node._size))
        if abs(node._left._height - node._right._height) > 1:
            raise InvariantViolation(node._key, "balance constraint violated")

    # mapping protocol

    def __getitem__(self, key: int) -> str:
        node = self.node_search(key)
        if not node.is_real:
            raise KeyError(key)
        return node.value

    def __setitem__(self, key: int, value: str):
        node = self.node_search(key)
        if node.is_real:
            node.value = _check_value(value)
            self._checkpoint()
        else:
            self.insert(key, value)

    def __delitem__(self, key: int):
        if self.delete(key) == KEY_NOT_FOUND:
            raise KeyError(key)

    def __contains__(self, key) -> bool:
        if isinstance(key, bool) or not isinstance(key, numbers.Integral):
            return False
        return self.node_search(key).is_real

    def __iter__(self) -> Iterator[int]:
        return self.keys()

    def __reversed__(self) -> Iterator[int]:
        return self.keys(reverse=True)

    def __len__(self) -> int:
        return self._root.size

    def clear(self):
        self._root = SENTINEL

    def __repr__(self) -> str:
        return "{}(size={}, height={})".format(
            self.__class__.__name__, self.size(), self.height()
        )
