"""End-to-end tests for the VaultIndexer facade.

Each test drives the indexer the way the event-dispatch shell does: one
observation per call, in block order.
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from vaultindex.config import AppSettings
from vaultindex.estimators.decay import decay_lambda
from vaultindex.exceptions import VaultNotFoundError
from vaultindex.indexer import VaultIndexer
from vaultindex.locks import MAX_UINT40
from vaultindex.main import build_indexer
from vaultindex.math import ln
from vaultindex.oracle import PriceCache

TOKEN_A = "0x" + "a" * 40
TOKEN_B = "0x" + "b" * 40
TOKEN_C = "0x" + "c" * 40
T0 = 1_750_000_000
ONE_PERCENT_TICKS = 437_640_000_000_000
REFERENCE = 1_740_000_000


class TestRegistration:
    """Tests for register_vault() / get_vault()."""

    def test_register_links_volatility(self, indexer: VaultIndexer) -> None:
        vault = indexer.register_vault("1", TOKEN_B, TOKEN_A)
        assert vault.volatility_id == "0x" + "a" * 40 + "b" * 40

    def test_register_is_idempotent(self, indexer: VaultIndexer) -> None:
        first = indexer.register_vault("1", TOKEN_A, TOKEN_B)
        second = indexer.register_vault("1", TOKEN_A, TOKEN_B)
        assert first is second
        pair = indexer.volatility.load_or_create(TOKEN_A, TOKEN_B)
        assert pair.vault_count == 1

    def test_unknown_vault_raises(self, indexer: VaultIndexer) -> None:
        with pytest.raises(VaultNotFoundError):
            indexer.on_trade("missing", 1_000_000, T0)


class TestObservations:
    """Each observation updates exactly one tracker."""

    def test_price_refresh_sets_volatility(
        self, indexer: VaultIndexer, oracle_ticks: dict[tuple[str, str], int]
    ) -> None:
        indexer.register_vault("1", TOKEN_A, TOKEN_B)
        oracle_ticks[(TOKEN_A, TOKEN_B)] = 0
        indexer.on_price_refresh("1", T0, PriceCache(block_number=1))
        oracle_ticks[(TOKEN_A, TOKEN_B)] = ONE_PERCENT_TICKS
        indexer.on_price_refresh("1", T0 + 3600, PriceCache(block_number=2))

        assert indexer.snapshot("1", T0).volatility_annual > Decimal("0")

    def test_missing_price_does_not_block_other_trackers(self, indexer: VaultIndexer) -> None:
        """An oracle revert skips volatility only; volume still updates."""
        indexer.register_vault("1", TOKEN_A, TOKEN_C)
        cache = PriceCache(block_number=1)

        indexer.on_price_refresh("1", T0, cache)
        indexer.on_trade("1", 1_000_000, T0)

        snapshot = indexer.snapshot("1", T0)
        assert snapshot.volatility_annual == Decimal("0")
        assert snapshot.volume_usd_ewma_1d > 0

    def test_fees_update_lp_yield(self, indexer: VaultIndexer) -> None:
        indexer.register_vault("1", TOKEN_A, TOKEN_B)
        indexer.on_fees_deposited("1", fee=10, nav=1000, timestamp=T0)

        snapshot = indexer.snapshot("1", T0)
        expected = decay_lambda(Decimal("2592000")) * ln(Decimal("1.01"))
        assert snapshot.lp_apy_rate == expected
        assert snapshot.lp_apy > Decimal("0")

    def test_zero_nav_fee_is_skipped(self, indexer: VaultIndexer) -> None:
        indexer.register_vault("1", TOKEN_A, TOKEN_B)
        indexer.on_fees_deposited("1", fee=10, nav=0, timestamp=T0)
        assert indexer.snapshot("1", T0).lp_apy_rate == Decimal("0")

    def test_dividends_update_staking_yield(self, indexer: VaultIndexer) -> None:
        assert indexer.staking_apy_rate() == Decimal("0")
        indexer.on_dividends_paid(amount=50, staked_value=10_000, timestamp=T0)
        assert indexer.staking_apy_rate() > Decimal("0")

    def test_snapshot_truncates_volumes(self, indexer: VaultIndexer) -> None:
        indexer.register_vault("1", TOKEN_A, TOKEN_B)
        indexer.on_trade("1", 1_000_000, T0)

        vault = indexer.get_vault("1")
        snapshot = indexer.snapshot("1", T0)
        assert snapshot.volume_usd_ewma_1d == int(vault.volume.ewma_1d)
        assert isinstance(snapshot.volume_usd_ewma_30d, int)
        assert snapshot.volume_usd_ewma_1d > snapshot.volume_usd_ewma_7d > snapshot.volume_usd_ewma_30d


class TestLocks:
    """Lock observations routed to the vault's Fenwick tree."""

    def test_locked_balances_in_snapshot(self, indexer: VaultIndexer) -> None:
        indexer.register_vault("1", TOKEN_A, TOKEN_B)
        short_lock = REFERENCE + 10 * 86400
        long_lock = REFERENCE + 400 * 86400

        indexer.on_locked_balance_delta("1", short_lock, 100)
        indexer.on_locked_balance_delta("1", long_lock, 200)
        indexer.on_locked_balance_delta("1", MAX_UINT40, 50)
        indexer.on_locked_balance_delta("1", 0, 999)  # unlocked, not indexed

        snapshot = indexer.snapshot("1", short_lock + 1)
        assert snapshot.locked_supply == 350
        assert snapshot.locked_after_now == 250

    def test_lock_extension_keeps_total(self, indexer: VaultIndexer) -> None:
        indexer.register_vault("1", TOKEN_A, TOKEN_B)
        old_end = REFERENCE + 86400
        new_end = REFERENCE + 30 * 86400
        indexer.on_locked_balance_delta("1", old_end, 100)

        indexer.on_lock_changed("1", old_end, new_end, 100)

        snapshot = indexer.snapshot("1", old_end + 1)
        assert snapshot.locked_supply == 100
        assert snapshot.locked_after_now == 100


class TestBuildIndexer:
    """Tests for the wiring entry point."""

    def test_builds_with_explicit_settings(self, app_settings: AppSettings, oracle: MagicMock) -> None:
        indexer = build_indexer(oracle, app_settings)
        assert isinstance(indexer, VaultIndexer)
        indexer.register_vault("1", TOKEN_A, TOKEN_B)
        assert indexer.get_vault("1").vault_id == "1"
