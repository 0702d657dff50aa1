"""Price oracle collaborator interface and per-event price cache."""

from vaultindex.oracle.client import PriceOracle
from vaultindex.oracle.price_cache import PriceCache

__all__ = [
    "PriceCache",
    "PriceOracle",
]
