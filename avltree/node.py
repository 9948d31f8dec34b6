from __future__ import annotations

from typing import Optional


class AVLNode(object):
    """A key/value pair plus the bookkeeping the balancing code relies on.

    Every real node owns two children; an absent subtree is represented by
    the shared `SENTINEL`, whose height (-1) and size (0) make the usual
    recurrences hold without special cases.
    """

    def __init__(self, key: int, value: str):
        self._key: Optional[int] = key
        self.value: Optional[str] = value

        self._parent: Optional[AVLNode] = None
        self._left: AVLNode = SENTINEL
        self._right: AVLNode = SENTINEL
        self._height: int = 0
        self._size: int = 1

    @classmethod
    def _make_sentinel(cls) -> AVLNode:
        node = cls.__new__(cls)
        node._key = None
        node.value = None
        node._parent = None
        node._left = None
        node._right = None
        node._height = -1
        node._size = 0
        return node

    @property
    def key(self) -> Optional[int]:
        """The key associated with this node (None for the sentinel).

        This property is immutable.
        """
        return self._key

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> int:
        """Number of real nodes in the subtree rooted here."""
        return self._size

    @property
    def left(self) -> Optional[AVLNode]:
        return self._left

    @property
    def right(self) -> Optional[AVLNode]:
        return self._right

    @property
    def parent(self) -> Optional[AVLNode]:
        return self._parent

    @property
    def is_real(self) -> bool:
        return self._key is not None

    def _set_left_child(self, child: AVLNode):
        self._left = child
        if child.is_real:
            child._parent = self

    def _set_right_child(self, child: AVLNode):
        self._right = child
        if child.is_real:
            child._parent = self

    def _is_left_child(self) -> bool:
        return (self._parent is not None) and (self._parent._left is self)

    def _is_right_child(self) -> bool:
        return (self._parent is not None) and (self._parent._right is self)

    def _sibling(self) -> Optional[AVLNode]:
        parent = self._parent
        if parent is None:
            return None
        elif parent._left is self:
            return parent._right
        else:
            return parent._left

    def _is_leaf(self) -> bool:
        return not (self._left.is_real or self._right.is_real)

    def _ranks(self):
        """Rank differences to the (left, right) children."""
        return (self._height - self._left._height, self._height - self._right._height)

    def _update_height(self) -> int:
        """Recompute height from the children and return how much it moved."""
        old = self._height
        self._height = max(self._left._height, self._right._height) + 1
        return abs(old - self._height)

    def _update_size(self):
        self._size = 1 + self._left._size + self._right._size

    def _detach(self) -> AVLNode:
        """Cut this node loose from its parent, making it a standalone root."""
        if self.is_real:
            self._parent = None
        return self

    def __repr__(self) -> str:
        if not self.is_real:
            return "AVLNode(<sentinel>)"
        return "AVLNode({!r}, {!r}, h={}, n={})".format(
            self._key, self.value, self._height, self._size
        )


SENTINEL: AVLNode = AVLNode._make_sentinel()


def is_real(node: Optional[AVLNode]) -> bool:
    return node is not None and node.is_real
