"""Process-wide defaults, read from the environment once at import time."""

from __future__ import annotations

import os
from typing import Optional

_TRUTHY = ("1", "true", "yes", "on")


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError("{} must be an integer, got {!r}".format(name, raw))


# Run AVLTree.validate() after every mutating operation.
CHECK_INVARIANTS: bool = _env_flag("AVLTREE_CHECK_INVARIANTS")

# Default seed for avltree.analysis experiments; None draws fresh entropy.
ANALYSIS_SEED: Optional[int] = _env_int("AVLTREE_ANALYSIS_SEED")
