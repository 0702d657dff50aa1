"""Tests for the multi-horizon volume tracker.

Volumes are USD amounts scaled by 10^6, as delivered by the event source.
"""

from decimal import Decimal
from unittest.mock import patch

import pytest

from vaultindex.config import VolumeSettings
from vaultindex.estimators import volume as volume_module
from vaultindex.estimators.decay import decay_lambda
from vaultindex.estimators.models import VolumeState
from vaultindex.estimators.volume import GLOBAL_VOLUME_ID, VolumeTracker
from vaultindex.math import absolute
from vaultindex.store import InMemoryRepository

T0 = 1_750_000_000
ONE_MILLION = 1_000_000
DAY = 86400

LAMBDA_1D = decay_lambda(DAY)
LAMBDA_7D = decay_lambda(7 * DAY)
LAMBDA_30D = decay_lambda(30 * DAY)


@pytest.fixture
def volumes() -> InMemoryRepository[VolumeState]:
    return InMemoryRepository()


@pytest.fixture
def tracker(volumes: InMemoryRepository[VolumeState]) -> VolumeTracker:
    return VolumeTracker(VolumeSettings(), volumes)


class TestUpdate:
    """Tests for VolumeTracker.update()."""

    def test_first_trade_seeds_all_horizons(self, tracker: VolumeTracker) -> None:
        state = VolumeState()
        assert tracker.update(state, ONE_MILLION, T0) is True

        assert state.ewma_1d == LAMBDA_1D * ONE_MILLION
        assert state.ewma_7d == LAMBDA_7D * ONE_MILLION
        assert state.ewma_30d == LAMBDA_30D * ONE_MILLION
        assert state.last_timestamp == T0

    @pytest.mark.parametrize("volume", [0, -5])
    def test_non_positive_volume_skips(self, tracker: VolumeTracker, volume: int) -> None:
        state = VolumeState()
        assert tracker.update(state, volume, T0) is False
        assert state == VolumeState()

    def test_non_positive_volume_is_logged(self, tracker: VolumeTracker) -> None:
        with patch.object(volume_module, "logger") as logger:
            tracker.update(VolumeState(), 0, T0)

        logger.debug.assert_called_once_with("volume_skipped_non_positive", volume_usd="0", timestamp=T0)

    def test_same_block_trades_sum_as_impulses(self, tracker: VolumeTracker) -> None:
        state = VolumeState()
        tracker.update(state, ONE_MILLION, T0)
        tracker.update(state, ONE_MILLION, T0)

        assert state.ewma_1d == 2 * LAMBDA_1D * ONE_MILLION
        assert state.ewma_30d == 2 * LAMBDA_30D * ONE_MILLION

    def test_out_of_order_trade_skips(self, tracker: VolumeTracker) -> None:
        state = VolumeState()
        tracker.update(state, ONE_MILLION, T0)
        before = VolumeState(*state.rates(), last_timestamp=state.last_timestamp)

        assert tracker.update(state, ONE_MILLION, T0 - 10) is False
        assert state == before

    def test_horizons_share_timestamp(self, tracker: VolumeTracker) -> None:
        state = VolumeState()
        tracker.update(state, ONE_MILLION, T0)
        tracker.update(state, 3 * ONE_MILLION, T0 + 600)

        assert state.last_timestamp == T0 + 600
        assert all(rate > 0 for rate in state.rates())


class TestScenario:
    """Three trades of 1,000,000: two in one block, one a day later."""

    def test_day_later_trade_with_realistic_timestamps(self, tracker: VolumeTracker) -> None:
        """After one 1-day half-life the estimate sits halfway to the new rate."""
        state = VolumeState()
        tracker.update(state, ONE_MILLION, T0)
        tracker.update(state, ONE_MILLION, T0)
        after_two = state.ewma_1d
        long_after_two = state.ewma_30d

        tracker.update(state, ONE_MILLION, T0 + DAY)

        rate = Decimal(ONE_MILLION) * Decimal("365.25")
        expected = (after_two + rate) / 2
        assert absolute(state.ewma_1d - expected) / expected < Decimal("1e-20")
        # The long horizon barely decays, so the new day's trade adds to it.
        assert state.ewma_30d > long_after_two

    def test_trades_at_timestamp_zero_reseed(self, tracker: VolumeTracker) -> None:
        """Timestamp 0 is the "no trade yet" marker, so a second t=0 trade re-seeds.

        The first t=0 trade is discarded rather than summed as an impulse. This
        pins down that marker behaviour only; it says nothing about how the 1d
        and 30d horizons move relative to each other.
        """
        state = VolumeState()
        tracker.update(state, ONE_MILLION, 0)
        tracker.update(state, ONE_MILLION, 0)
        short_before = state.ewma_1d

        tracker.update(state, ONE_MILLION, DAY)

        assert short_before == LAMBDA_1D * ONE_MILLION
        assert state.ewma_1d > short_before
        assert state.last_timestamp == DAY


class TestRecordTrade:
    """Tests for the per-vault + global aggregate path."""

    def test_updates_vault_and_global(
        self,
        tracker: VolumeTracker,
        volumes: InMemoryRepository[VolumeState],
    ) -> None:
        first_vault = VolumeState()
        second_vault = VolumeState()

        tracker.record_trade(first_vault, ONE_MILLION, T0)
        tracker.record_trade(second_vault, ONE_MILLION, T0)

        global_state = volumes.get(GLOBAL_VOLUME_ID)
        assert global_state is not None
        assert first_vault.ewma_1d == LAMBDA_1D * ONE_MILLION
        assert global_state.ewma_1d == 2 * LAMBDA_1D * ONE_MILLION

    def test_global_tracks_its_own_timestamp(self, tracker: VolumeTracker) -> None:
        vault = VolumeState()
        tracker.record_trade(VolumeState(), ONE_MILLION, T0)
        tracker.record_trade(vault, ONE_MILLION, T0 + DAY)

        assert vault.last_timestamp == T0 + DAY
        assert vault.ewma_1d == LAMBDA_1D * ONE_MILLION
        assert tracker.load_or_create_global().last_timestamp == T0 + DAY
