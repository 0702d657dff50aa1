"""Trade volume rate estimators over three half-lives (1d, 7d, 30d).

Each trade of volume V after dt years contributes an annualized rate V / dt,
blended in with alpha = 1 - exp(-lambda * dt) independently per horizon. The
first trade in a scope seeds every horizon with lambda * V; trades in the same
block are added as impulses lambda * V.

The three horizons of a scope are always updated together from the same trade
and share one last_timestamp, so they stay comparable.

CRITICAL: All computations use Decimal. Never use float.
"""

from decimal import Decimal

from vaultindex.config import VolumeSettings
from vaultindex.estimators.decay import DecayEstimator
from vaultindex.estimators.models import VolumeState
from vaultindex.logging import get_logger
from vaultindex.store import Repository

logger = get_logger(__name__)

#: Repository key of the protocol-wide volume state.
GLOBAL_VOLUME_ID = "volume-stats"


class VolumeTracker:
    """Maintains per-vault and protocol-wide volume rate estimates.

    Args:
        settings: Half-lives of the short, medium and long horizons.
        repository: Store holding the global VolumeState singleton.
    """

    def __init__(self, settings: VolumeSettings, repository: Repository[VolumeState]) -> None:
        short, medium, long = settings.half_lives_seconds()
        self._estimators = (
            DecayEstimator(short),
            DecayEstimator(medium),
            DecayEstimator(long),
        )
        self._repository = repository

    def load_or_create_global(self) -> VolumeState:
        """Return the global singleton, creating it on first use."""
        state = self._repository.get(GLOBAL_VOLUME_ID)
        if state is None:
            state = VolumeState()
            self._repository.put(GLOBAL_VOLUME_ID, state)
        return state

    def update(self, state: VolumeState, volume_usd: Decimal | int, timestamp: int) -> bool:
        """Fold one trade into all three horizons of ``state``.

        Skipped (returns False) for non-positive volume or a timestamp before
        the scope's last trade.
        """
        volume = Decimal(volume_usd)
        if volume <= 0:
            logger.debug("volume_skipped_non_positive", volume_usd=str(volume), timestamp=timestamp)
            return False

        dt = timestamp - state.last_timestamp
        if dt < 0:
            logger.debug(
                "volume_stale_observation",
                timestamp=timestamp,
                last_timestamp=state.last_timestamp,
            )
            return False

        short, medium, long = self._estimators
        if state.last_timestamp == 0:
            state.ewma_1d = short.seed(volume)
            state.ewma_7d = medium.seed(volume)
            state.ewma_30d = long.seed(volume)
        else:
            state.ewma_1d = short.update(state.ewma_1d, volume, dt)
            state.ewma_7d = medium.update(state.ewma_7d, volume, dt)
            state.ewma_30d = long.update(state.ewma_30d, volume, dt)
        state.last_timestamp = timestamp
        return True

    def record_trade(self, vault_state: VolumeState, volume_usd: Decimal | int, timestamp: int) -> None:
        """Update a vault's volume state and the global aggregate."""
        vault_updated = self.update(vault_state, volume_usd, timestamp)

        global_state = self.load_or_create_global()
        global_updated = self.update(global_state, volume_usd, timestamp)
        if global_updated:
            self._repository.put(GLOBAL_VOLUME_ID, global_state)

        logger.debug(
            "volume_recorded",
            volume_usd=str(volume_usd),
            vault_updated=vault_updated,
            global_updated=global_updated,
            ewma_1d=str(vault_state.ewma_1d),
        )
