"""Estimator state models.

Each state is owned by exactly one logical key (token pair, vault, or the
global singleton) and is mutated in place by its tracker.

CRITICAL: All estimate values use Decimal. Never use float.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass
class PairVolatilityState:
    """Realized volatility for one unordered token pair.

    token0 < token1 (lower-cased hex); prices are always token1 per token0.
    last_timestamp == 0 means no observation yet.
    """

    id: str
    token0: str
    token1: str
    last_tick: int = 0
    last_timestamp: int = 0
    variance_rate: Decimal = Decimal("0")  # decay-weighted annualized variance
    volatility_annual: Decimal = Decimal("0")
    vault_count: int = 0


@dataclass
class YieldState:
    """Continuously-compounded annualized yield rate (log-rate)."""

    rate_estimate: Decimal = Decimal("0")
    last_timestamp: int = 0


@dataclass
class VolumeState:
    """Annualized trade volume rates over three half-lives.

    All three accumulators always share last_timestamp.
    """

    ewma_1d: Decimal = Decimal("0")
    ewma_7d: Decimal = Decimal("0")
    ewma_30d: Decimal = Decimal("0")
    last_timestamp: int = 0

    def rates(self) -> tuple[Decimal, Decimal, Decimal]:
        return (self.ewma_1d, self.ewma_7d, self.ewma_30d)
