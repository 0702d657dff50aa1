"""Streaming decay-weighted estimators.

Provides the shared time-corrected EWMA (DecayEstimator) and the trackers
built on it: pair volatility, yield rate, and multi-horizon trade volume.
"""

from vaultindex.estimators.decay import (
    DecayEstimator,
    blend,
    decay_alpha,
    decay_lambda,
    impulse,
    seconds_to_years,
)
from vaultindex.estimators.lp_yield import YieldTracker, annual_percentage
from vaultindex.estimators.models import PairVolatilityState, VolumeState, YieldState
from vaultindex.estimators.volatility import VolatilityTracker, pair_id
from vaultindex.estimators.volume import GLOBAL_VOLUME_ID, VolumeTracker

__all__ = [
    "GLOBAL_VOLUME_ID",
    "DecayEstimator",
    "PairVolatilityState",
    "VolatilityTracker",
    "VolumeState",
    "VolumeTracker",
    "YieldState",
    "YieldTracker",
    "annual_percentage",
    "blend",
    "decay_alpha",
    "decay_lambda",
    "impulse",
    "pair_id",
    "seconds_to_years",
]
