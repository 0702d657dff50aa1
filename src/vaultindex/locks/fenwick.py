"""Suffix-sum Fenwick tree of locked balances bucketed by lock expiry.

Answers "how much is locked past time T" in O(log n) with O(log n) point
updates. A balance locked until ``lock_end`` lives in bucket
``lock_end - reference_timestamp``.

Updates walk *down* (i -= i & -i) and queries walk *up* (i += i & -i), the
mirror image of a prefix-sum Fenwick tree: a query from bucket t then counts
every delta applied at a bucket >= t exactly once.

Index 0 means unlocked (never stored); INFINITE_LOCK_INDEX (-1) marks a
permanent lock, tracked as a running total on the LockTree.

All arithmetic is on Python ints.
"""

from vaultindex.config import LockTreeSettings
from vaultindex.exceptions import InvalidLockIndexError
from vaultindex.locks.models import LockBucket, LockTree
from vaultindex.logging import get_logger
from vaultindex.store import Repository

logger = get_logger(__name__)

#: Sentinel index for permanent (protocol-owned) locks.
INFINITE_LOCK_INDEX = -1

#: Unlocked positions are not indexed.
UNLOCKED_INDEX = 0

#: Lock ends at or above this (2^40 - 1) are permanent.
MAX_UINT40 = 2**40 - 1

#: Largest bucket index (i32 max, ~68 years past the reference).
MAX_INDEX = 2**31 - 1


def lock_end_to_index(lock_end: int, reference_timestamp: int) -> int:
    """Map a lock expiry timestamp to its bucket index.

    Returns 0 for lock_end == 0 (unlocked), INFINITE_LOCK_INDEX for
    lock_end >= MAX_UINT40, and otherwise lock_end - reference_timestamp
    clamped to [1, MAX_INDEX].
    """
    if lock_end == 0:
        return UNLOCKED_INDEX
    if lock_end >= MAX_UINT40:
        return INFINITE_LOCK_INDEX
    return min(max(1, lock_end - reference_timestamp), MAX_INDEX)


def node_id(owner: str, index: int) -> str:
    """Repository key of a Fenwick node: "{owner}-fw-{index}"."""
    return f"{owner}-fw-{index}"


class LockWeightedIndex:
    """Fenwick trees of locked balances, one per owner (vault).

    Args:
        settings: Reference timestamp for bucket derivation.
        trees: Store for LockTree headers keyed by owner.
        nodes: Store for LockBucket nodes keyed by node_id().
    """

    def __init__(
        self,
        settings: LockTreeSettings,
        trees: Repository[LockTree],
        nodes: Repository[LockBucket],
    ) -> None:
        self._reference = settings.reference_timestamp
        self._trees = trees
        self._nodes = nodes

    def index_for(self, lock_end: int) -> int:
        """Bucket index of ``lock_end`` under this index's reference timestamp."""
        return lock_end_to_index(lock_end, self._reference)

    def load_or_create_tree(self, owner: str) -> LockTree:
        tree = self._trees.get(owner)
        if tree is None:
            tree = LockTree(owner=owner)
            self._trees.put(owner, tree)
        return tree

    def node_value(self, owner: str, index: int) -> int:
        """Raw value of one node (0 if never touched)."""
        node = self._nodes.get(node_id(owner, index))
        return node.value if node is not None else 0

    def apply_lock_delta(self, owner: str, index: int, delta: int) -> None:
        """Add ``delta`` to bucket ``index`` of the owner's tree.

        index 0 is a no-op; INFINITE_LOCK_INDEX adjusts the infinite-lock
        supply; a positive index propagates the delta down the tree.

        Raises:
            InvalidLockIndexError: If index < INFINITE_LOCK_INDEX.
        """
        if index < INFINITE_LOCK_INDEX:
            raise InvalidLockIndexError(f"invalid lock bucket index {index}")
        if index == UNLOCKED_INDEX or delta == 0:
            return
        if index == INFINITE_LOCK_INDEX:
            self._update_infinite_supply(owner, delta)
        else:
            self._update_nodes(owner, index, delta)

    def move_lock(self, owner: str, old_lock_end: int, new_lock_end: int, amount: int) -> None:
        """Re-bucket ``amount`` from one lock expiry to another.

        Applied as a removal at the old bucket followed by an addition at the
        new one, never as an in-place move.
        """
        self.apply_lock_delta(owner, self.index_for(old_lock_end), -amount)
        self.apply_lock_delta(owner, self.index_for(new_lock_end), amount)

    def locked_after(self, owner: str, timestamp: int) -> int:
        """Total balance still locked at ``timestamp``, infinite locks included.

        Sums the suffix of buckets >= the bucket of ``timestamp`` by walking
        up the tree while the index stays within max_index.
        """
        tree = self._trees.get(owner)
        if tree is None:
            return 0

        if timestamp >= MAX_UINT40:
            return tree.infinite_lock_supply

        total = tree.infinite_lock_supply
        i = max(1, min(timestamp - self._reference, MAX_INDEX))
        while i <= tree.max_index:
            total += self.node_value(owner, i)
            i += i & -i
        return total

    def total_locked(self, owner: str) -> int:
        """Every indexed balance plus infinite locks (suffix from bucket 1)."""
        return self.locked_after(owner, self._reference + 1)

    def _update_infinite_supply(self, owner: str, delta: int) -> None:
        tree = self.load_or_create_tree(owner)
        tree.infinite_lock_supply += delta
        if tree.infinite_lock_supply < 0:
            logger.warning(
                "lock_balance_negative",
                owner=owner,
                index=INFINITE_LOCK_INDEX,
                value=tree.infinite_lock_supply,
            )
        self._trees.put(owner, tree)

    def _update_nodes(self, owner: str, index: int, delta: int) -> None:
        tree = self.load_or_create_tree(owner)
        if index > tree.max_index:
            tree.max_index = index
            self._trees.put(owner, tree)

        i = index
        while i > 0:
            key = node_id(owner, i)
            node = self._nodes.get(key)
            if node is None:
                node = LockBucket(owner=owner, index=i)
            node.value += delta
            if node.value < 0:
                logger.warning("lock_balance_negative", owner=owner, index=i, value=node.value)
            self._nodes.put(key, node)
            i -= i & -i
