"""Transcendental functions over Decimal (ln, exp, sqrt).

Implemented from scratch with range reduction and iterative series so that
every estimator runs on exact decimal arithmetic end to end.

Every function degrades silently on an invalid domain (returns zero) rather
than raising: these run inside the per-event update path, where an exception
would abort an entire batch of otherwise-valid state updates. Callers must
guard arguments when zero is not an acceptable fallback.

CRITICAL: All computations use Decimal. Never use float.
"""

from decimal import (
    ROUND_DOWN,
    ROUND_HALF_EVEN,
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    localcontext,
)

from vaultindex.math.constants import LN_2

#: Working context: 50 significant digits. Overflow is not trapped so an
#: exp() of an extreme argument saturates to Infinity instead of raising.
_CONTEXT = Context(
    prec=50,
    rounding=ROUND_HALF_EVEN,
    traps=[InvalidOperation, DivisionByZero],
)

#: A series term below this magnitude is treated as having rounded to zero.
_NEGLIGIBLE = Decimal("1e-40")

#: Newton-Raphson stops once successive guesses differ by less than this.
SQRT_TOLERANCE = Decimal("1e-15")

_MAX_SERIES_TERMS = 50
_MAX_SQRT_ITERATIONS = 100

#: ln(10) * (Emax + 1) of the working context; exp() above this overflows.
_EXP_OVERFLOW = Decimal("2302587")

_ZERO = Decimal("0")
_ONE = Decimal("1")
_TWO = Decimal("2")
_INFINITY = Decimal("Infinity")


def ln(x: Decimal) -> Decimal:
    """Natural logarithm.

    Range-reduces x = m * 2^k with 1 <= m < 2, then evaluates
    ln(m) = 2 * artanh((m - 1) / (m + 1)) as the odd-power series
    2 * (y + y^3/3 + y^5/5 + ...), which converges quickly since |y| < 1/3.

    Returns Decimal("0") for x <= 0 (domain fallback).
    """
    if x <= _ZERO:
        return _ZERO

    with localcontext(_CONTEXT):
        k = 0
        m = +x
        while m >= _TWO:
            m /= _TWO
            k += 1
        while m < _ONE:
            m *= _TWO
            k -= 1

        y = (m - _ONE) / (m + _ONE)
        y2 = y * y

        total = y
        term = y
        n = 1
        for _ in range(_MAX_SERIES_TERMS):
            term *= y2
            n += 2
            contribution = term / n
            if abs(contribution) < _NEGLIGIBLE:
                break
            total += contribution

        return k * LN_2 + total * _TWO


def exp(x: Decimal) -> Decimal:
    """Exponential function.

    Negative arguments use exp(x) = 1 / exp(-x). A positive argument is
    halved k times until it is at most one, the Taylor series (term *= x / n)
    is summed on the reduced value, and the sum is squared k times.
    Arguments beyond _EXP_OVERFLOW saturate to Infinity.

    Returns Decimal("0") when exp(-x) is infinite for an extreme negative x.
    """
    with localcontext(_CONTEXT):
        if x < _ZERO:
            positive = exp(-x)
            if positive.is_infinite():
                return _ZERO
            return _ONE / positive

        if x > _EXP_OVERFLOW:
            return _INFINITY

        reduced = +x
        halvings = 0
        while reduced > _ONE:
            reduced /= _TWO
            halvings += 1

        total = _ONE
        term = _ONE
        for n in range(1, _MAX_SERIES_TERMS + 1):
            term = term * reduced / n
            if abs(term) < _NEGLIGIBLE:
                break
            total += term

        for _ in range(halvings):
            total *= total
        return total


def sqrt(x: Decimal) -> Decimal:
    """Square root by Newton-Raphson: g' = (g + x/g) / 2.

    The initial guess is max(x/2, 1). Iteration stops when successive guesses
    differ by less than SQRT_TOLERANCE; after 100 iterations without
    converging the last guess is returned as is.

    Returns Decimal("0") for x <= 0 (domain fallback).
    """
    if x <= _ZERO:
        return _ZERO

    with localcontext(_CONTEXT):
        guess = x / _TWO
        if guess < _ONE:
            guess = _ONE

        for _ in range(_MAX_SQRT_ITERATIONS):
            next_guess = (guess + x / guess) / _TWO
            if absolute(next_guess - guess) < SQRT_TOLERANCE:
                return next_guess
            guess = next_guess

        return guess


def absolute(x: Decimal) -> Decimal:
    """Absolute value."""
    return -x if x < _ZERO else x


def truncate(x: Decimal) -> int:
    """Convert to an integer amount, rounding toward zero."""
    return int(x.to_integral_value(rounding=ROUND_DOWN))
