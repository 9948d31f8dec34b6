from . import config
from . import errors
from . import node
from . import iter
from . import tree
from . import analysis

from .errors import AVLTreeError, PreconditionViolated, InvariantViolation
from .node import AVLNode, SENTINEL
from .tree import AVLTree, SplitStats, DUPLICATE_KEY, KEY_NOT_FOUND

__all__ = [
    "AVLTree",
    "AVLNode",
    "SENTINEL",
    "SplitStats",
    "DUPLICATE_KEY",
    "KEY_NOT_FOUND",
    "AVLTreeError",
    "PreconditionViolated",
    "InvariantViolation",
]
