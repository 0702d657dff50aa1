"""Vault indexer: routes each observation to its tracker or lock tree.

The event-dispatch shell decodes chain events and calls exactly one method
here per observation, in block order. Every call is a synchronous state
transition; nothing is reordered or looked ahead.

Graceful degradation: a missing price or an invalid NAV skips that single
estimator update, and all other trackers proceed unaffected.
"""

from decimal import Decimal

from vaultindex.config import AppSettings
from vaultindex.estimators import (
    PairVolatilityState,
    VolatilityTracker,
    VolumeState,
    VolumeTracker,
    YieldState,
    YieldTracker,
    annual_percentage,
)
from vaultindex.exceptions import VaultNotFoundError
from vaultindex.locks import LockBucket, LockTree, LockWeightedIndex
from vaultindex.logging import event_context, get_logger
from vaultindex.math import truncate
from vaultindex.models import VaultMetrics, VaultSnapshot
from vaultindex.oracle import PriceCache, PriceOracle
from vaultindex.store import InMemoryRepository, Repository

logger = get_logger(__name__)

#: Repository key of the protocol-wide staking yield state.
STAKING_YIELD_ID = "staking-stats"


class VaultIndexer:
    """Owns every tracker and the lock index for one deployment.

    Args:
        settings: Root settings; each tracker takes its own sub-settings.
        oracle: Price oracle used for volatility observations.
        vaults: Store of VaultMetrics keyed by vault id.
        pairs: Store of PairVolatilityState keyed by pair id.
        volumes: Store of the global VolumeState.
        yields: Store of the global staking YieldState.
        lock_trees: Store of LockTree headers.
        lock_nodes: Store of LockBucket nodes.
        Stores default to in-memory repositories.
    """

    def __init__(
        self,
        settings: AppSettings,
        oracle: PriceOracle,
        vaults: Repository[VaultMetrics] | None = None,
        pairs: Repository[PairVolatilityState] | None = None,
        volumes: Repository[VolumeState] | None = None,
        yields: Repository[YieldState] | None = None,
        lock_trees: Repository[LockTree] | None = None,
        lock_nodes: Repository[LockBucket] | None = None,
    ) -> None:
        self._oracle = oracle
        self._vaults = vaults if vaults is not None else InMemoryRepository()
        self._yields = yields if yields is not None else InMemoryRepository()

        self.volatility = VolatilityTracker(
            settings.volatility,
            pairs if pairs is not None else InMemoryRepository(),
        )
        self.volume = VolumeTracker(
            settings.volume,
            volumes if volumes is not None else InMemoryRepository(),
        )
        self.lp_yield = YieldTracker(settings.yields.lp_half_life_seconds, name="lp")
        self.staking_yield = YieldTracker(settings.yields.staking_half_life_seconds, name="staking")
        self.locks = LockWeightedIndex(
            settings.locks,
            lock_trees if lock_trees is not None else InMemoryRepository(),
            lock_nodes if lock_nodes is not None else InMemoryRepository(),
        )

    def register_vault(self, vault_id: str, collateral_token: str, debt_token: str) -> VaultMetrics:
        """Create metrics for a new vault and link it to its pair volatility."""
        vault = self._vaults.get(vault_id)
        if vault is not None:
            return vault

        vault = VaultMetrics(
            vault_id=vault_id,
            collateral_token=collateral_token,
            debt_token=debt_token,
        )
        pair = self.volatility.link_vault(vault)
        self._vaults.put(vault_id, vault)

        logger.info(
            "vault_registered",
            vault_id=vault_id,
            pair=pair.id,
            pair_vault_count=pair.vault_count,
        )
        return vault

    def get_vault(self, vault_id: str) -> VaultMetrics:
        """Return a registered vault.

        Raises:
            VaultNotFoundError: If the vault was never registered.
        """
        vault = self._vaults.get(vault_id)
        if vault is None:
            raise VaultNotFoundError(f"vault {vault_id} is not registered")
        return vault

    def on_price_refresh(self, vault_id: str, timestamp: int, cache: PriceCache) -> None:
        """Observe the oracle price for the vault's pair after a state change."""
        vault = self.get_vault(vault_id)
        with event_context(block_number=cache.block_number, vault_id=vault_id):
            self.volatility.refresh_vault(vault, timestamp, self._oracle, cache)
        self._vaults.put(vault_id, vault)

    def on_fees_deposited(self, vault_id: str, fee: int, nav: int, timestamp: int) -> None:
        """Fold LP fees earned on a pre-fee collateral base ``nav``."""
        vault = self.get_vault(vault_id)
        if self.lp_yield.update(vault.lp_yield, fee, nav, timestamp):
            self._vaults.put(vault_id, vault)

    def on_dividends_paid(self, amount: int, staked_value: int, timestamp: int) -> None:
        """Fold a dividend distribution into the protocol-wide staking yield."""
        state = self._yields.get(STAKING_YIELD_ID)
        if state is None:
            state = YieldState()
        if self.staking_yield.update(state, amount, staked_value, timestamp):
            self._yields.put(STAKING_YIELD_ID, state)

    def staking_apy_rate(self) -> Decimal:
        """Continuous staking yield rate (0 before any dividend)."""
        state = self._yields.get(STAKING_YIELD_ID)
        return state.rate_estimate if state is not None else Decimal("0")

    def on_trade(self, vault_id: str, volume_usd: int, timestamp: int) -> None:
        """Record a trade's USD volume (scaled by 10^6) for the vault and globally."""
        vault = self.get_vault(vault_id)
        self.volume.record_trade(vault.volume, volume_usd, timestamp)
        self._vaults.put(vault_id, vault)

    def on_locked_balance_delta(self, vault_id: str, lock_end: int, delta: int) -> None:
        """Apply a signed balance change for positions locked until ``lock_end``."""
        with event_context(vault_id=vault_id, lock_end=lock_end):
            self.locks.apply_lock_delta(vault_id, self.locks.index_for(lock_end), delta)

    def on_lock_changed(self, vault_id: str, old_lock_end: int, new_lock_end: int, amount: int) -> None:
        """Move ``amount`` between lock expiries (e.g. a lock extension)."""
        self.locks.move_lock(vault_id, old_lock_end, new_lock_end, amount)

    def snapshot(self, vault_id: str, now: int) -> VaultSnapshot:
        """Export the vault's read-only fields as of ``now``."""
        vault = self.get_vault(vault_id)
        return VaultSnapshot(
            vault_id=vault_id,
            volatility_annual=vault.volatility_annual,
            lp_apy_rate=vault.lp_yield.rate_estimate,
            lp_apy=annual_percentage(vault.lp_yield),
            volume_usd_ewma_1d=truncate(vault.volume.ewma_1d),
            volume_usd_ewma_7d=truncate(vault.volume.ewma_7d),
            volume_usd_ewma_30d=truncate(vault.volume.ewma_30d),
            locked_supply=self.locks.total_locked(vault_id),
            locked_after_now=self.locks.locked_after(vault_id, now),
        )
