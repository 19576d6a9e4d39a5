"""
Composite relevance score for a candidate page.

score = match_quality * weighted_decay_sum * regularity * (0.5 + personal_score)

Text match is a hard gate: a page that does not match the query, or
has never been visited, scores 0 and is dropped.
"""
import logging
import math
from dataclasses import dataclass
from typing import Callable

from ..core.schemas import PageRegistry, VisitsStore
from .personalization import PersonalizationStore
from .similarity import compute_text_match
from .temporal import TemporalModel

logger = logging.getLogger(__name__)

MIN_SCORE = 0.001
STRONG_MATCH = 0.5
STRONG_MATCH_FLOOR = 0.1


@dataclass
class ScoreBreakdown:
    """Every intermediate term behind one page's score."""
    page_id: str
    match_quality: float = 0.0
    decay_sum: float = 0.0
    adaptive_weight: float = 0.0
    regularity: float = 0.0
    personal_score: float = 0.0
    score: float = 0.0
    fallback: str | None = None  # non_finite, floor

    def to_dict(self) -> dict:
        return {
            "page_id": self.page_id,
            "match_quality": self.match_quality,
            "decay_sum": self.decay_sum,
            "adaptive_weight": self.adaptive_weight,
            "regularity": self.regularity,
            "personal_score": self.personal_score,
            "score": self.score,
            "fallback": self.fallback
        }


ScoreObserver = Callable[[ScoreBreakdown], None]


class Scorer:
    """
    Scores candidates from text match, visit history and personalization.

    Steps:
    1. No visits or no text match -> 0
    2. Sum per-visit decay weight x frequency term
    3. Scale by the sigmoid recency weight over beta
    4. Multiply by regularity and (0.5 + personal score)
    5. Non-finite -> match quality; tiny score with strong match -> floor
    """

    def __init__(
        self,
        page_registry: PageRegistry,
        visits: VisitsStore,
        temporal: TemporalModel,
        personalization: PersonalizationStore,
        beta: float = 1.0,
        observer: ScoreObserver | None = None
    ):
        self.page_registry = page_registry
        self.visits = visits
        self.temporal = temporal
        self.personalization = personalization
        self.beta = beta
        self.observer = observer

    def score(self, page_id: str, query: str, now: float) -> float:
        return self.breakdown(page_id, query, now).score

    def breakdown(self, page_id: str, query: str, now: float) -> ScoreBreakdown:
        result = self._compute(page_id, query, now)
        if self.observer is not None:
            try:
                self.observer(result)
            except Exception as e:
                logger.warning(f"Score observer failed: {e}")
        return result

    def _compute(self, page_id: str, query: str, now: float) -> ScoreBreakdown:
        result = ScoreBreakdown(page_id=page_id)

        entry = self.visits.get(page_id)
        if entry is None or not entry.visits:
            return result

        mq = compute_text_match(query, self.page_registry.get(page_id))
        result.match_quality = mq
        if mq <= 0:
            return result

        timestamps = entry.timestamps
        decay_sum = 0.0
        for visit in entry.visits:
            decay = self.temporal.decay_weight(page_id, now, visit.timestamp, visit.dwell_time)
            decay_sum += decay * self.temporal.frequency_term(timestamps, visit.timestamp)
        result.decay_sum = decay_sum

        result.adaptive_weight = self.temporal.alpha(now) / self.beta
        weighted_sum = result.adaptive_weight * decay_sum
        result.regularity = self.temporal.regularity(page_id)
        result.personal_score = self.personalization.score(page_id)

        score = mq * weighted_sum * result.regularity * (0.5 + result.personal_score)
        if not math.isfinite(score):
            score = mq
            result.fallback = "non_finite"
        if score < MIN_SCORE and mq > STRONG_MATCH:
            score = mq * STRONG_MATCH_FLOOR
            result.fallback = "floor"

        result.score = score
        return result
