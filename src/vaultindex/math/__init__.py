"""Decimal math kernel: ln, exp, sqrt and helpers over exact decimals."""

from vaultindex.math.constants import LN_2, SECONDS_PER_YEAR
from vaultindex.math.decimal_math import SQRT_TOLERANCE, absolute, exp, ln, sqrt, truncate

__all__ = [
    "LN_2",
    "SECONDS_PER_YEAR",
    "SQRT_TOLERANCE",
    "absolute",
    "exp",
    "ln",
    "sqrt",
    "truncate",
]
