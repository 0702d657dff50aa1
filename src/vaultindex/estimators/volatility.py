"""Realized volatility per token pair from oracle tick observations.

The oracle reports prices as Q21.42 ticks, tick = log_1.0001(price) * 2^42,
so a log return is a scaled tick difference and needs no division of prices:

    r = (tick - last_tick) * ln(1.0001) / 2^42
    v_i = r^2 / dt_years                        # instantaneous variance rate
    variance_rate = (1 - alpha) * variance_rate + alpha * v_i
    volatility_annual = sqrt(variance_rate)

This is the alpha-blended form. It is not interchangeable with the
numerator/denominator decaying-ratio form: the two give different
trajectories for the same observations.

CRITICAL: All computations use Decimal. Never use float.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from vaultindex.config import VolatilitySettings
from vaultindex.estimators.decay import DecayEstimator, seconds_to_years
from vaultindex.estimators.models import PairVolatilityState
from vaultindex.exceptions import PriceUnavailableError
from vaultindex.logging import get_logger
from vaultindex.math import ln, sqrt
from vaultindex.oracle import PriceCache, PriceOracle
from vaultindex.store import Repository

if TYPE_CHECKING:
    from vaultindex.models import VaultMetrics

logger = get_logger(__name__)


def pair_id(token_a: str, token_b: str) -> str:
    """Deterministic id for an unordered token pair.

    Addresses are lower-cased and sorted, so (a, b) and (b, a) map to the
    same id: "0x" + smaller + larger (prefixes stripped).
    """
    a = token_a.lower()
    b = token_b.lower()
    if b < a:
        a, b = b, a
    return "0x" + a.removeprefix("0x") + b.removeprefix("0x")


class VolatilityTracker:
    """Maintains decay-weighted realized volatility for token pairs.

    Args:
        settings: Half-life and oracle tick format.
        repository: Store for PairVolatilityState keyed by pair id.
    """

    def __init__(
        self,
        settings: VolatilitySettings,
        repository: Repository[PairVolatilityState],
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._estimator = DecayEstimator(settings.half_life_seconds)
        self._tick_to_log = ln(settings.tick_base) / (Decimal(2) ** settings.tick_scale_bits)

    def load_or_create(self, token_a: str, token_b: str) -> PairVolatilityState:
        """Return the state for the pair, creating it with sorted tokens if absent."""
        key = pair_id(token_a, token_b)
        state = self._repository.get(key)
        if state is None:
            token0, token1 = sorted((token_a.lower(), token_b.lower()))
            state = PairVolatilityState(id=key, token0=token0, token1=token1)
            self._repository.put(key, state)
        return state

    def link_vault(self, vault: VaultMetrics) -> PairVolatilityState:
        """Attach a vault to its pair state and bump the pair's vault count."""
        state = self.load_or_create(vault.collateral_token, vault.debt_token)
        state.vault_count += 1
        self._repository.put(state.id, state)
        vault.volatility_id = state.id
        return state

    def log_return(self, tick: int, last_tick: int) -> Decimal:
        """Log return implied by a tick difference."""
        return Decimal(tick - last_tick) * self._tick_to_log

    def update(self, state: PairVolatilityState, tick: int, timestamp: int) -> bool:
        """Fold a tick observation into the pair's volatility estimate.

        The first observation only records tick and timestamp. An observation
        at or before last_timestamp is discarded.

        Returns:
            True if the variance estimate was updated.
        """
        if state.last_timestamp == 0:
            state.last_tick = tick
            state.last_timestamp = timestamp
            self._repository.put(state.id, state)
            return False

        dt = timestamp - state.last_timestamp
        if dt <= 0:
            logger.debug(
                "volatility_stale_observation",
                pair=state.id,
                timestamp=timestamp,
                last_timestamp=state.last_timestamp,
            )
            return False

        r = self.log_return(tick, state.last_tick)
        instantaneous = r * r / seconds_to_years(dt)

        state.variance_rate = self._estimator.update_rate(state.variance_rate, instantaneous, dt)
        state.volatility_annual = sqrt(state.variance_rate)
        state.last_tick = tick
        state.last_timestamp = timestamp
        self._repository.put(state.id, state)

        logger.debug(
            "volatility_updated",
            pair=state.id,
            dt=dt,
            log_return=str(r),
            volatility_annual=str(state.volatility_annual),
        )
        return True

    def refresh_vault(
        self,
        vault: VaultMetrics,
        timestamp: int,
        oracle: PriceOracle,
        cache: PriceCache,
    ) -> None:
        """Observe the current oracle tick for a vault's pair.

        The tick is always fetched in canonical (token0, token1) direction so
        every vault sharing the pair feeds the same price series. An oracle
        revert skips the update for this occasion. The pair's volatility is
        copied onto the vault for sorting.
        """
        if vault.volatility_id is None:
            return
        state = self._repository.get(vault.volatility_id)
        if state is None:
            return

        try:
            tick = cache.get_tick(oracle, state.token0, state.token1)
        except PriceUnavailableError:
            logger.debug("volatility_skipped_no_price", pair=state.id, vault_id=vault.vault_id)
            return

        self.update(state, tick, timestamp)
        vault.volatility_annual = state.volatility_annual
