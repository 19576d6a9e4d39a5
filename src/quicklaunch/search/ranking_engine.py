"""
Quick-launch ranking engine.

Provides:
- Candidate generation: title prefix trie, then fuzzy scan when short
- Composite scoring of candidates (text, temporal, personalization)
- Feedback and visit recording with derived-state refresh
- Atomic index rebuilds on page catalog changes
"""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Mapping, MutableMapping

from ..core.config import RankingSettings
from ..core.schemas import PageMetadata, PageRegistry, Visit, VisitEntry, VisitsStore
from .bloom_filter import BloomFilter
from .personalization import PersonalizationStore
from .prefix_index import PrefixIndex
from .query_logger import QueryLogger
from .scorer import ScoreBreakdown, ScoreObserver, Scorer
from .similarity import compute_text_match
from .temporal import TemporalModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexSnapshot:
    """Page order plus the structures built over it. Swapped, never mutated."""
    page_ids: tuple[str, ...]
    trie: PrefixIndex
    bloom: BloomFilter | None = None


class RankingEngine:
    """
    Personalized ranking of a user's visited pages for a partial query.

    The page registry and visits store are caller-owned and mutated in
    place by record_visit / record_click / record_impression /
    update_page. Nothing is ever deleted.

    Readers only hold the lock long enough to grab the current index
    snapshot, so rankings run concurrently with each other and with a
    rebuild in progress.
    """

    def __init__(
        self,
        page_registry: PageRegistry,
        visits: VisitsStore | MutableMapping[str, VisitEntry],
        user_id: str,
        config: RankingSettings | None = None,
        score_observer: ScoreObserver | None = None,
        query_logger: QueryLogger | None = None
    ):
        """
        Initialize ranking engine.

        Args:
            page_registry: page_id -> PageMetadata
            visits: Visits store, or a plain page_id -> VisitEntry mapping
            user_id: Opaque owner id, not used for scoring
            config: Ranking settings (defaults if None)
            score_observer: Called with every ScoreBreakdown computed
            query_logger: Optional query / feedback log
        """
        self.page_registry = page_registry
        self.visits = visits if isinstance(visits, VisitsStore) else VisitsStore(visits)
        self.user_id = user_id
        self.config = config or RankingSettings()
        self.query_logger = query_logger

        # _lock guards only the snapshot reference; _write_lock serializes
        # rebuilds and visit / feedback mutations
        self._lock = threading.Lock()
        self._write_lock = threading.RLock()

        self.temporal = TemporalModel(
            self.visits,
            k=self.config.k,
            mu=self.config.mu,
            session_timeout=self.config.session_timeout
        )
        self.personalization = PersonalizationStore(
            self.visits, learning_rate=self.config.rl_learning_rate
        )
        self.scorer = Scorer(
            page_registry,
            self.visits,
            self.temporal,
            self.personalization,
            beta=self.config.beta,
            observer=score_observer
        )

        self._index = self._build_index()

        logger.info(
            f"RankingEngine initialized for {user_id} "
            f"({len(self._index.page_ids)} pages, {len(self.visits)} visited, "
            f"bloom={'on' if self._index.bloom else 'off'})"
        )

    # --------------------------------------------------------
    # Index
    # --------------------------------------------------------

    def _build_index(self) -> IndexSnapshot:
        page_ids = tuple(self.page_registry.keys())
        titles = [(self.page_registry[pid].title or "").lower() for pid in page_ids]

        bloom = None
        if self.config.use_bloom:
            bloom = BloomFilter.from_titles(
                titles, self.config.bloom_capacity, self.config.bloom_error_rate
            )
        return IndexSnapshot(page_ids=page_ids, trie=PrefixIndex.from_titles(titles), bloom=bloom)

    @property
    def index(self) -> IndexSnapshot:
        with self._lock:
            return self._index

    def update_page(self, page_id: str, metadata: PageMetadata | Mapping):
        """Replace a page's metadata and rebuild the trie and Bloom filter."""
        if not isinstance(metadata, PageMetadata):
            metadata = PageMetadata.model_validate(metadata)

        with self._write_lock:
            self.page_registry[page_id] = metadata
            snapshot = self._build_index()
            with self._lock:
                self._index = snapshot

        logger.info(f"Rebuilt index after update of {page_id} ({len(snapshot.page_ids)} pages)")
        self._log_feedback("update", page_id, {"title": metadata.title, "url": metadata.url})

    # --------------------------------------------------------
    # Ranking
    # --------------------------------------------------------

    def rank_pages(
        self,
        query: str,
        max_results: int = 5,
        now: float | None = None
    ) -> list[str]:
        """
        Rank visited pages for a partial query.

        Args:
            query: Raw user input
            max_results: Number of page ids to return
            now: Reference epoch seconds (current time if None)

        Returns:
            Page ids, best first

        With a query_logger attached every call also writes one SQLite
        row; without one, ranking does no I/O.
        """
        return [r.page_id for r in self.rank_pages_scored(query, max_results, now)]

    def rank_pages_scored(
        self,
        query: str,
        max_results: int = 5,
        now: float | None = None
    ) -> list[ScoreBreakdown]:
        """Same as rank_pages but returns the score breakdown of each result."""
        if not query or not query.strip() or max_results <= 0:
            return []

        start_time = time.time()
        now = start_time if now is None else now

        index = self.index
        candidates = self._candidates(query, max_results, index)

        scored: list[ScoreBreakdown] = []
        for idx in candidates:
            result = self.scorer.breakdown(index.page_ids[idx], query, now)
            if result.score > 0:
                scored.append(result)

        # Stable: equal scores keep candidate discovery order
        scored.sort(key=lambda r: r.score, reverse=True)
        results = scored[:max_results]

        self._log_query(query, results, start_time)
        return results

    def _candidates(self, query: str, max_results: int, index: IndexSnapshot) -> list[int]:
        """Prefix matches first, then a fuzzy scan if there are too few."""
        if index.bloom is not None and not index.bloom.might_contain(query.lower()):
            logger.debug(f"Bloom filter reports no title prefix for {query!r}, scanning anyway")

        candidates = dict.fromkeys(index.trie.get_prefix_matches(query))

        if len(candidates) < max_results:
            limit = self.config.max_fuzzy_scan
            for i, page_id in enumerate(index.page_ids):
                if limit is not None and i >= limit:
                    break
                if i in candidates:
                    continue
                if compute_text_match(query, self.page_registry.get(page_id)) > 0:
                    candidates[i] = None

        return list(candidates)

    # --------------------------------------------------------
    # Feedback
    # --------------------------------------------------------

    def record_visit(self, page_id: str, visit_time: float, dwell_time: float | None = None):
        """Append a visit and refresh the page's variance and the global mean."""
        with self._write_lock:
            self.visits.append(page_id, Visit(timestamp=visit_time, dwell_time=dwell_time or 0.0))
            self.temporal.refresh_page(page_id)
        self._log_feedback("visit", page_id, {"visit_time": visit_time, "dwell_time": dwell_time})

    def record_click(self, page_id: str, now: float | None = None) -> float | None:
        """Reinforce a clicked result (toward 1); the click also counts as a visit."""
        with self._write_lock:
            new_score = self.personalization.record_click(page_id, now)
            if new_score is not None:
                self.temporal.refresh_page(page_id)
        if new_score is not None:
            self._log_feedback("click", page_id, {"personal_score": new_score})
        return new_score

    def record_impression(self, page_id: str, now: float | None = None) -> float | None:
        """Penalize a shown-but-not-clicked result (toward 0)."""
        with self._write_lock:
            new_score = self.personalization.record_impression(page_id, now)
        if new_score is not None:
            self._log_feedback("impression", page_id, {"personal_score": new_score})
        return new_score

    # --------------------------------------------------------
    # Logging
    # --------------------------------------------------------

    def _log_query(self, query: str, results: list[ScoreBreakdown], start_time: float):
        """Log query to query logger."""
        if not self.query_logger:
            return

        execution_time = (time.time() - start_time) * 1000  # ms
        try:
            self.query_logger.log_query(
                query=query,
                result_count=len(results),
                top_page_id=results[0].page_id if results else None,
                execution_time_ms=execution_time
            )
        except Exception as e:
            logger.warning(f"Query logging failed: {e}")

    def _log_feedback(self, action: str, page_id: str, details: dict):
        if not self.query_logger:
            return
        try:
            self.query_logger.log_feedback(action, page_id, details)
        except Exception as e:
            logger.warning(f"Feedback logging failed: {e}")
