"""Shared test fixtures for the vault indexer."""

from unittest.mock import MagicMock

import pytest

from vaultindex.config import AppSettings, LockTreeSettings, VolatilitySettings, VolumeSettings, YieldSettings
from vaultindex.exceptions import PriceUnavailableError
from vaultindex.indexer import VaultIndexer
from vaultindex.oracle import PriceOracle


@pytest.fixture
def app_settings() -> AppSettings:
    """AppSettings with protocol defaults."""
    return AppSettings(
        log_level="DEBUG",
        volatility=VolatilitySettings(),
        yields=YieldSettings(),
        volume=VolumeSettings(),
        locks=LockTreeSettings(),
    )


@pytest.fixture
def oracle_ticks() -> dict[tuple[str, str], int]:
    """Ticks served by the ``oracle`` fixture, keyed by (token0, token1)."""
    return {}


@pytest.fixture
def oracle(oracle_ticks: dict[tuple[str, str], int]) -> MagicMock:
    """Oracle mock serving ``oracle_ticks``; reverts for any other pair."""

    def get_tick(token0: str, token1: str) -> int:
        if (token0, token1) not in oracle_ticks:
            raise PriceUnavailableError(f"reverted: {token0}/{token1}")
        return oracle_ticks[(token0, token1)]

    mock = MagicMock(spec=PriceOracle)
    mock.get_tick.side_effect = get_tick
    return mock


@pytest.fixture
def indexer(app_settings: AppSettings, oracle: MagicMock) -> VaultIndexer:
    """VaultIndexer over in-memory repositories."""
    return VaultIndexer(app_settings, oracle)
