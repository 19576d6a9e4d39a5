"""
Per-page personal score learned from click and impression feedback.

A click pulls the score toward 1, an impression without a click pulls
it toward 0. Scores live on the VisitEntry so they persist with the
caller's visits store.
"""
import logging
import time

from ..core.schemas import DEFAULT_PERSONAL_SCORE, Visit, VisitsStore

logger = logging.getLogger(__name__)


class PersonalizationStore:
    """Online reinforcement of per-page personal scores."""

    def __init__(self, visits: VisitsStore, learning_rate: float = 0.1):
        if not 0.0 < learning_rate <= 1.0:
            raise ValueError(f"learning_rate must be in (0, 1], got {learning_rate}")
        self.visits = visits
        self.learning_rate = learning_rate

    def score(self, page_id: str) -> float:
        entry = self.visits.get(page_id)
        if entry is None:
            return DEFAULT_PERSONAL_SCORE
        return entry.personal_score

    def record_click(self, page_id: str, now: float | None = None) -> float | None:
        """
        Reinforce a clicked result and log the click as a visit.

        Returns:
            The new score, or None if the page has no visit entry
        """
        now = time.time() if now is None else now
        new_score = self._reinforce(page_id, 1.0, now)
        if new_score is not None:
            self.visits.append(page_id, Visit(timestamp=float(int(now))))
        return new_score

    def record_impression(self, page_id: str, now: float | None = None) -> float | None:
        """Penalize a result that was shown but not clicked."""
        now = time.time() if now is None else now
        return self._reinforce(page_id, 0.0, now)

    def _reinforce(self, page_id: str, target: float, now: float) -> float | None:
        entry = self.visits.get(page_id)
        if entry is None:
            logger.debug(f"No visit entry for {page_id}, feedback ignored")
            return None
        old = entry.personal_score
        return self.visits.set_personal_score(
            page_id, old + self.learning_rate * (target - old), at=now
        )
