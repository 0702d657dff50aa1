"""Lock-weighted index entities."""

from dataclasses import dataclass


@dataclass
class LockBucket:
    """One Fenwick node of an owner's tree.

    ``value`` is a partial suffix sum over the node's range, not the balance
    of bucket ``index`` alone.
    """

    owner: str
    index: int
    value: int = 0


@dataclass
class LockTree:
    """Per-owner tree header.

    max_index bounds read-side traversals. Infinite (permanent) locks are
    kept in infinite_lock_supply rather than in any node, since they belong
    to every suffix.
    """

    owner: str
    max_index: int = 0
    infinite_lock_supply: int = 0
