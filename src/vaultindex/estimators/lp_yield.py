"""Continuously-compounded yield rate from fee impulses.

Each fee deposited against a pre-fee base amount (NAV) is a period log-return
x = ln(1 + fee / NAV). The annualized rate x / dt_years is folded into a
decay-weighted estimate; fees landing at the same timestamp (or the first
fee ever) are accumulated as impulses lambda * x.

The stored value is a continuous log-rate. Converting it to a conventional
annual percentage, exp(rate) - 1, is left to consumers (see annual_percentage).

CRITICAL: All computations use Decimal. Never use float.
"""

from decimal import Decimal

from vaultindex.estimators.decay import DecayEstimator
from vaultindex.estimators.models import YieldState
from vaultindex.logging import get_logger
from vaultindex.math import exp, ln

logger = get_logger(__name__)

_ZERO = Decimal("0")
_ONE = Decimal("1")


def annual_percentage(state: YieldState) -> Decimal:
    """Simple annual yield equivalent of the continuous rate: exp(rate) - 1."""
    return exp(state.rate_estimate) - _ONE


class YieldTracker:
    """Folds fee impulses into a YieldState.

    One tracker serves any number of states sharing a smoothing window
    (e.g. every vault's LP yield).

    Args:
        half_life_seconds: Smoothing window of the estimate.
        name: Label used in log events.
    """

    def __init__(self, half_life_seconds: Decimal, name: str = "yield") -> None:
        self._estimator = DecayEstimator(half_life_seconds)
        self._name = name

    def update(self, state: YieldState, fee: Decimal | int, nav: Decimal | int, timestamp: int) -> bool:
        """Apply a fee of ``fee`` earned on a base of ``nav`` at ``timestamp``.

        Skipped (returns False, state untouched) when nav <= 0, fee <= 0, or
        the timestamp precedes the last update.
        """
        fee = Decimal(fee)
        nav = Decimal(nav)
        if nav <= _ZERO or fee <= _ZERO:
            logger.debug(
                "yield_skipped_invalid_amounts",
                tracker=self._name,
                fee=str(fee),
                nav=str(nav),
            )
            return False

        dt = timestamp - state.last_timestamp
        if dt < 0:
            logger.debug(
                "yield_stale_observation",
                tracker=self._name,
                timestamp=timestamp,
                last_timestamp=state.last_timestamp,
            )
            return False

        log_return = ln(_ONE + fee / nav)
        if state.last_timestamp == 0:
            state.rate_estimate = state.rate_estimate + self._estimator.seed(log_return)
        else:
            state.rate_estimate = self._estimator.update(state.rate_estimate, log_return, dt)
        state.last_timestamp = timestamp

        logger.debug(
            "yield_updated",
            tracker=self._name,
            dt=dt,
            log_return=str(log_return),
            rate=str(state.rate_estimate),
        )
        return True
