"""
Unit tests for temporal visit statistics.
"""
import math

import pytest

from quicklaunch.core.schemas import Visit, VisitEntry, VisitsStore
from quicklaunch.search.temporal import (
    DAY,
    TemporalModel,
    alpha_t,
    dwell_boost,
    estimate_interval_variance,
    global_mean_frequency,
    local_frequency,
    regularity,
    session_recency_weight,
    shannon_entropy,
    time_decay_weight,
)


class TestVarianceEstimate:
    """Tests for the inverse-gamma interval variance estimate."""

    @pytest.mark.parametrize("times", [[], [42.0], [1000, 1086400]])
    def test_zero_or_one_interval_defaults_to_one(self, times):
        assert estimate_interval_variance(times) == 1.0

    def test_regular_intervals(self):
        # sum of squares 0 -> rate = 1/scale
        assert estimate_interval_variance([0, 10, 20]) == pytest.approx(0.25)

    def test_irregular_intervals(self):
        # diffs [10, 20], mean 15, sumSq 50 -> rate 25.5, shape 3
        assert estimate_interval_variance([0, 10, 30]) == pytest.approx(12.75)

    def test_low_shape_falls_back_to_sample_variance(self):
        # prior shape 0 + n/2 = 1 -> not > 1
        assert estimate_interval_variance([0, 10, 30], prior_shape=0.0) == pytest.approx(25.0)

    def test_low_shape_zero_variance_falls_back_to_one(self):
        assert estimate_interval_variance([0, 10, 20], prior_shape=0.0) == 1.0


class TestRegularity:
    """Tests for entropy and regularity."""

    def test_entropy(self):
        assert shannon_entropy([1, 1]) == pytest.approx(math.log(2))
        assert shannon_entropy([0, 1]) == 0.0
        assert shannon_entropy([]) == 0.0

    @pytest.mark.parametrize("times", [[], [5], [7, 7, 7]])
    def test_defaults_to_half(self, times):
        assert regularity(times) == 0.5

    def test_perfectly_regular(self):
        expected = 1.0 + math.log(2) / math.log(3)
        assert regularity([0, 10, 20]) == pytest.approx(expected)

    def test_order_does_not_matter(self):
        assert regularity([20, 0, 10]) == pytest.approx(regularity([0, 10, 20]))

    def test_irregular_scores_lower(self):
        assert regularity([0, 100, 1000]) < regularity([0, 500, 1000])


class TestFrequency:
    """Tests for local and global frequency."""

    def test_local_frequency_window(self):
        times = [0, 10 * DAY, 40 * DAY]
        assert local_frequency(times, 40 * DAY) == 2
        assert local_frequency(times, 10 * DAY) == 2
        assert local_frequency(times, 0) == 1

    def test_local_frequency_ignores_future(self):
        assert local_frequency([100, 200], 150) == 1

    def test_global_mean(self):
        store = VisitsStore({
            "a": VisitEntry.from_arrays([1, 2]),
            "b": VisitEntry.from_arrays([3]),
        })
        assert global_mean_frequency(store) == pytest.approx(1.5)

    def test_global_mean_empty(self):
        assert global_mean_frequency(VisitsStore()) == 1.0


class TestDecay:
    """Tests for recency and per-visit decay weights."""

    def test_alpha_midpoint(self):
        assert alpha_t(30.0, k=0.5, mu=30.0) == pytest.approx(0.5)

    def test_alpha_is_decreasing(self):
        assert alpha_t(10.0) > alpha_t(30.0) > alpha_t(50.0)

    def test_alpha_does_not_overflow(self):
        assert alpha_t(1e9) == pytest.approx(0.0)
        assert alpha_t(-1e9) == pytest.approx(1.0)

    def test_session_weight(self):
        assert session_recency_weight(1000, 500, 1800) == 2.0
        assert session_recency_weight(1000, 2000, 1800) == 1.0
        assert session_recency_weight(7 * DAY, 0, 1800) == pytest.approx(0.5)

    def test_dwell_boost(self):
        assert dwell_boost(0) == 1.0
        assert dwell_boost(None) == 1.0
        assert dwell_boost(30) == pytest.approx(1.15)
        assert dwell_boost(1e9) == pytest.approx(1.3, abs=1e-6)

    def test_decay_weight_within_session(self):
        assert time_decay_weight(100, 100, variance=1.0) == pytest.approx(2.0)

    def test_decay_weight_with_dwell(self):
        assert time_decay_weight(100, 100, variance=1.0, dwell=30) == pytest.approx(2.0 * 1.15)

    def test_future_visit_saturates_instead_of_raising(self):
        assert math.isinf(time_decay_weight(0, 10000, variance=1.0))


class TestTemporalModel:
    """Tests for the cached TemporalModel."""

    def test_refresh_page_after_new_visit(self):
        store = VisitsStore({"a": VisitEntry.from_arrays([0])})
        model = TemporalModel(store)
        assert model.variance("a") == 1.0
        assert model.global_mean_freq == 1.0

        store.append("a", Visit(10))
        store.append("a", Visit(20))
        model.refresh_page("a")

        assert model.variance("a") == pytest.approx(0.25)
        assert model.global_mean_freq == 3.0

    def test_unknown_page_defaults(self):
        model = TemporalModel(VisitsStore())
        assert model.variance("missing") == 1.0
        assert model.regularity("missing") == 0.5

    def test_frequency_term_floor(self):
        store = VisitsStore({
            "a": VisitEntry.from_arrays([0]),
            "b": VisitEntry.from_arrays(list(range(0, 100))),
        })
        model = TemporalModel(store)
        # 1 / 50.5 is below the 0.1 floor
        assert model.frequency_term([0], 0) == pytest.approx(1.0 + math.log(0.1))
