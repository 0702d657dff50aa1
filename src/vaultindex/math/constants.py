"""Numeric constants shared by the math kernel and the estimators.

CRITICAL: All constants are Decimal built from strings. Never use float.
"""

from decimal import Decimal

#: ln(2) to 50 decimal places, used for range reduction in ln().
LN_2 = Decimal("0.69314718055994530941723212145817656807550013436026")

#: Julian year (365.25 days) in seconds; all rates are annualized against it.
SECONDS_PER_YEAR = Decimal("31557600")
