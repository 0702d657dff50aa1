"""Time-corrected EWMA shared by every tracker.

Given a previous estimate, an observation and an elapsed time dt, the decay
constant lambda = ln(2) / half_life gives

    alpha = 1 - exp(-lambda * dt)
    estimate = (1 - alpha) * previous + alpha * observation

With dt == 0 alpha collapses to zero, so simultaneous impulses (two fees in
one block) are instead accumulated additively: estimate = previous + lambda * amount.

Time is measured in years inside the exponent so lambda * dt stays well
scaled whether dt is a few seconds or several months.

CRITICAL: All computations use Decimal. Never use float.
"""

from dataclasses import dataclass
from decimal import Decimal

from vaultindex.math import LN_2, SECONDS_PER_YEAR, exp

_ZERO = Decimal("0")
_ONE = Decimal("1")


def seconds_to_years(dt_seconds: Decimal | int) -> Decimal:
    """Convert an elapsed time in seconds to (Julian) years."""
    return Decimal(dt_seconds) / SECONDS_PER_YEAR


def decay_lambda(half_life_seconds: Decimal | int) -> Decimal:
    """Return the per-year decay constant for a half-life given in seconds.

    Raises:
        ValueError: If the half-life is not positive (configuration error).
    """
    if Decimal(half_life_seconds) <= _ZERO:
        raise ValueError("half_life_seconds must be > 0")
    return LN_2 / seconds_to_years(half_life_seconds)


def decay_alpha(lam: Decimal, dt_years: Decimal) -> Decimal:
    """Weight of a new observation after dt_years: 1 - exp(-lambda * dt)."""
    return _ONE - exp(-(lam * dt_years))


def blend(previous: Decimal, observation: Decimal, alpha: Decimal) -> Decimal:
    """Alpha-blend a new observation into the running estimate."""
    return (_ONE - alpha) * previous + alpha * observation


def impulse(previous: Decimal, amount: Decimal, lam: Decimal) -> Decimal:
    """Accumulate a same-instant impulse: previous + lambda * amount."""
    return previous + lam * amount


@dataclass(frozen=True)
class DecayEstimator:
    """Decay-weighted rate estimator for one half-life.

    Holds only lambda; the running estimate itself lives in the caller's
    state object so several horizons can share one timestamp.

    Args:
        half_life_seconds: Time for the weight of an observation to halve.
    """

    half_life_seconds: Decimal

    @property
    def lam(self) -> Decimal:
        return decay_lambda(self.half_life_seconds)

    def seed(self, amount: Decimal) -> Decimal:
        """Initial estimate from a first impulse at time zero."""
        return impulse(_ZERO, amount, self.lam)

    def update(self, previous: Decimal, amount: Decimal, dt_seconds: int) -> Decimal:
        """Fold an amount observed over dt_seconds into the estimate.

        The instantaneous rate is amount / dt_years. dt == 0 accumulates the
        amount as an impulse; dt < 0 leaves the estimate unchanged.
        """
        if dt_seconds < 0:
            return previous
        lam = self.lam
        if dt_seconds == 0:
            return impulse(previous, amount, lam)
        dt_years = seconds_to_years(dt_seconds)
        return blend(previous, amount / dt_years, decay_alpha(lam, dt_years))

    def update_rate(self, previous: Decimal, rate: Decimal, dt_seconds: int) -> Decimal:
        """Blend an already-annualized rate observed after dt_seconds.

        Non-positive dt leaves the estimate unchanged.
        """
        if dt_seconds <= 0:
            return previous
        dt_years = seconds_to_years(dt_seconds)
        return blend(previous, rate, decay_alpha(self.lam, dt_years))
