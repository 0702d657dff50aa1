"""Lock-weighted index: suffix-sum Fenwick trees over lock-expiry buckets."""

from vaultindex.locks.fenwick import (
    INFINITE_LOCK_INDEX,
    MAX_INDEX,
    MAX_UINT40,
    UNLOCKED_INDEX,
    LockWeightedIndex,
    lock_end_to_index,
    node_id,
)
from vaultindex.locks.models import LockBucket, LockTree

__all__ = [
    "INFINITE_LOCK_INDEX",
    "MAX_INDEX",
    "MAX_UINT40",
    "UNLOCKED_INDEX",
    "LockBucket",
    "LockTree",
    "LockWeightedIndex",
    "lock_end_to_index",
    "node_id",
]
