"""Wiring for the vault indexer.

The event-dispatch shell calls build_indexer() once at startup, then feeds
decoded events to the returned VaultIndexer in block order.

Component wiring order:
1. AppSettings (configuration, from env / .env)
2. Logging setup
3. VaultIndexer (trackers, lock index, repositories)
"""

from vaultindex.config import AppSettings
from vaultindex.indexer import VaultIndexer
from vaultindex.logging import get_logger, setup_logging
from vaultindex.oracle import PriceOracle


def build_indexer(oracle: PriceOracle, settings: AppSettings | None = None) -> VaultIndexer:
    """Load settings, configure logging, and build a VaultIndexer.

    Args:
        oracle: Price oracle client for volatility observations.
        settings: Settings to use instead of loading them from the environment.

    Returns:
        A VaultIndexer backed by in-memory repositories.
    """
    if settings is None:
        settings = AppSettings()
    setup_logging(settings.log_level, settings.log_format)

    logger = get_logger("vaultindex.main")
    logger.info(
        "indexer_configured",
        volatility_half_life_days=str(settings.volatility.half_life_days),
        lp_half_life_days=str(settings.yields.lp_half_life_days),
        reference_timestamp=settings.locks.reference_timestamp,
    )
    return VaultIndexer(settings, oracle)
