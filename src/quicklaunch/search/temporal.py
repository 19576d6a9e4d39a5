"""
Temporal statistics over a page's visit history.

Provides:
- Bayesian (inverse-gamma) estimate of inter-visit interval variance
- Regularity from coefficient of variation and interval entropy
- Windowed local frequency and global mean frequency
- Sigmoid recency weight and per-visit decay weight
"""
import logging
import math
from typing import Sequence

import numpy as np

from ..core.schemas import VisitsStore

logger = logging.getLogger(__name__)

DAY = 24 * 3600
LOCAL_FREQUENCY_WINDOW = 30 * DAY
DECAY_HALF_LIFE = 7 * DAY
SESSION_BOOST = 2.0
DEFAULT_VARIANCE = 1.0
DEFAULT_REGULARITY = 0.5


def _exp(x: float) -> float:
    """exp() that saturates to inf instead of raising OverflowError."""
    try:
        return math.exp(x)
    except OverflowError:
        return math.inf


def intervals(sorted_times: Sequence[float]) -> np.ndarray:
    return np.diff(np.asarray(sorted_times, dtype=float))


# ============================================================
# Variance & Regularity
# ============================================================

def estimate_interval_variance(
    sorted_times: Sequence[float],
    prior_shape: float = 2.0,
    prior_scale: float = 2.0
) -> float:
    """
    Posterior mean of the interval variance under an inverse-gamma prior.

    Args:
        sorted_times: Ascending visit timestamps
        prior_shape: Inverse-gamma prior shape
        prior_scale: Inverse-gamma prior scale

    Returns:
        rate / (shape - 1) for the posterior, the sample variance when
        the posterior shape is <= 1, and 1.0 with fewer than two intervals
    """
    if len(sorted_times) < 3:
        return DEFAULT_VARIANCE
    diffs = intervals(sorted_times)

    n = len(diffs)
    sum_sq = float(np.sum((diffs - diffs.mean()) ** 2))

    posterior_shape = prior_shape + n / 2.0
    posterior_rate = 1.0 / prior_scale + 0.5 * sum_sq

    if posterior_shape <= 1:
        naive = float(np.var(diffs))
        return naive if naive > 0 and math.isfinite(naive) else DEFAULT_VARIANCE

    return posterior_rate / (posterior_shape - 1.0)


def shannon_entropy(p: Sequence[float]) -> float:
    """Shannon entropy (nats) of p after normalization; zero bins ignored."""
    total = sum(p)
    if total == 0:
        return 0.0
    entropy = 0.0
    for value in p:
        p_i = value / total
        if p_i > 0:
            entropy -= p_i * math.log(p_i)
    return entropy


def regularity(timestamps: Sequence[float]) -> float:
    """
    How rhythmically a page is revisited.

    (1 / (1 + cv)) scaled by 1 + H / ln(n), where cv is the coefficient
    of variation of the intervals, H the entropy of each interval's share
    of the total and n the number of visits. Falls back to 0.5 when
    there is too little data or the result is not finite.
    """
    if len(timestamps) < 2:
        return DEFAULT_REGULARITY
    diffs = intervals(sorted(timestamps))

    mean_interval = float(diffs.mean())
    std_interval = float(diffs.std())
    cv = std_interval / mean_interval if mean_interval > 0 else 0.0

    total = float(diffs.sum())
    if total <= 0:
        return DEFAULT_REGULARITY

    entropy = shannon_entropy([float(d) / total for d in diffs])
    n = len(timestamps)
    entropy_factor = 1.0 + entropy / math.log(n) if n > 1 else 1.0

    result = (1.0 / (1.0 + cv)) * entropy_factor
    if not math.isfinite(result):
        return DEFAULT_REGULARITY
    return result


# ============================================================
# Frequency
# ============================================================

def local_frequency(
    timestamps: Sequence[float],
    reference: float,
    window: float = LOCAL_FREQUENCY_WINDOW
) -> int:
    """Number of visits in the trailing window [reference - window, reference]."""
    start = reference - window
    return sum(1 for t in timestamps if start <= t <= reference)


def global_mean_frequency(visits: VisitsStore) -> float:
    """Mean visit count across every page with an entry (1.0 if none)."""
    counts = visits.visit_counts()
    if not counts:
        return 1.0
    mean = float(np.mean(counts))
    return mean if mean > 0 else 1.0


# ============================================================
# Recency & Decay
# ============================================================

def alpha_t(t: float, k: float = 0.5, mu: float = 30.0) -> float:
    """1 - sigmoid(k * (t - mu)): decreasing in t, 0.5 at t == mu."""
    return 1.0 - 1.0 / (1.0 + _exp(-k * (t - mu)))


def session_recency_weight(now: float, visit_time: float, session_timeout: float) -> float:
    """2x inside the session window, 7-day half-life decay outside it."""
    delta = now - visit_time
    if delta < 0:
        return 1.0
    if delta <= session_timeout:
        return SESSION_BOOST
    return math.exp(-math.log(2) * (delta / DECAY_HALF_LIFE))


def dwell_boost(dwell: float | None) -> float:
    """Up to +30% for long dwell times, saturating via atan."""
    if not dwell or dwell <= 0:
        return 1.0
    return 1.0 + (math.atan(dwell / 30.0) / (math.pi / 2)) * 0.3


def time_decay_weight(
    now: float,
    visit_time: float,
    variance: float,
    dwell: float | None = None,
    session_timeout: float = 30 * 60
) -> float:
    """Per-visit weight: exp(-delta / (2 * variance)) x dwell boost x session factor."""
    delta = now - visit_time
    weight = _exp(-(1.0 / (2.0 * variance)) * delta)
    weight *= dwell_boost(dwell)
    weight *= session_recency_weight(now, visit_time, session_timeout)
    return weight


class TemporalModel:
    """
    Cached temporal statistics for a visits store.

    Holds per-page variance estimates and the global mean frequency;
    both are derived state and recomputed from the store on demand.
    """

    def __init__(
        self,
        visits: VisitsStore,
        k: float = 0.5,
        mu: float = 30.0,
        session_timeout: float = 30 * 60,
        prior_shape: float = 2.0,
        prior_scale: float = 2.0
    ):
        self.visits = visits
        self.k = k
        self.mu = mu
        self.session_timeout = session_timeout
        self.prior_shape = prior_shape
        self.prior_scale = prior_scale

        self.global_mean_freq = 1.0
        self._variances: dict[str, float] = {}
        self.refresh()

    def refresh(self):
        """Recompute every page's variance and the global mean."""
        self.global_mean_freq = global_mean_frequency(self.visits)
        self._variances = {
            page_id: self._estimate(entry.timestamps)
            for page_id, entry in self.visits.items()
        }

    def refresh_page(self, page_id: str):
        """Recompute one page's variance and the global mean after a new visit."""
        self.global_mean_freq = global_mean_frequency(self.visits)
        entry = self.visits.get(page_id)
        if entry is not None:
            self._variances[page_id] = self._estimate(entry.timestamps)

    def _estimate(self, timestamps: list[float]) -> float:
        return estimate_interval_variance(
            sorted(timestamps), self.prior_shape, self.prior_scale
        )

    def variance(self, page_id: str) -> float:
        value = self._variances.get(page_id)
        return value if value else DEFAULT_VARIANCE

    def regularity(self, page_id: str) -> float:
        entry = self.visits.get(page_id)
        if entry is None:
            return DEFAULT_REGULARITY
        return regularity(entry.timestamps)

    def alpha(self, t: float) -> float:
        return alpha_t(t, self.k, self.mu)

    def decay_weight(self, page_id: str, now: float, visit_time: float, dwell: float | None) -> float:
        return time_decay_weight(
            now, visit_time, self.variance(page_id), dwell, self.session_timeout
        )

    def frequency_term(self, timestamps: Sequence[float], reference: float) -> float:
        """1 + ln(max(local / global, 0.1)) for the visit at reference."""
        local = local_frequency(timestamps, reference)
        ratio = local / self.global_mean_freq
        return 1.0 + math.log(max(ratio, 0.1))
