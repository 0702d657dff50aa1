"""Per-vault read model.

VaultMetrics holds the denormalized fields an external query API sorts and
ranks vaults by; VaultSnapshot is its export form with integer volumes.

CRITICAL: All rate values use Decimal. Never use float.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from vaultindex.estimators.models import VolumeState, YieldState


@dataclass
class VaultMetrics:
    """Metrics for a single vault, updated in place by the indexer."""

    vault_id: str
    collateral_token: str
    debt_token: str
    volatility_id: str | None = None
    volatility_annual: Decimal = Decimal("0")  # copied from the pair state
    lp_yield: YieldState = field(default_factory=YieldState)
    volume: VolumeState = field(default_factory=VolumeState)


@dataclass(frozen=True)
class VaultSnapshot:
    """Read-only export of a vault's metrics.

    Volume rates are annualized USD amounts (scaled by 10^6), truncated
    toward zero.
    """

    vault_id: str
    volatility_annual: Decimal
    lp_apy_rate: Decimal  # continuous log-rate
    lp_apy: Decimal  # exp(rate) - 1
    volume_usd_ewma_1d: int
    volume_usd_ewma_7d: int
    volume_usd_ewma_30d: int
    locked_supply: int
    locked_after_now: int
