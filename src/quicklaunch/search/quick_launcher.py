"""
Quick launcher facade over the ranking engine.

Loads the page registry and visits from a caller-supplied loader,
keeps a ranking engine cached for a short TTL, and returns display-ready
results. Storage is entirely the loader's concern.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping

from ..core.config import LauncherSettings, RankingSettings
from ..core.schemas import PageRegistry, Visit, VisitsStore, to_seconds
from .query_logger import QueryLogger
from .ranking_engine import RankingEngine

logger = logging.getLogger(__name__)

Loader = Callable[[], tuple[PageRegistry, VisitsStore]]


@dataclass
class LaunchResult:
    """A quick-launch result ready for display."""
    page_id: str
    title: str
    url: str
    score: float  # relative rank, 1.0 for the top result

    def to_dict(self) -> dict:
        return {
            "page_id": self.page_id,
            "title": self.title,
            "url": self.url,
            "score": self.score
        }


def build_visits_from_records(records: Iterable[Mapping]) -> VisitsStore:
    """
    Group raw visit rows into a visits store.

    Each row needs page_id and start_time (seconds or milliseconds).
    Dwell comes from end_time - start_time when end_time is set
    (milliseconds), else from total_active_time (seconds).
    """
    store = VisitsStore()
    for row in records:
        page_id = row.get("page_id")
        if not page_id:
            continue
        start = row.get("start_time", 0)
        end = row.get("end_time")
        if end:
            dwell = round((end - start) / 1000)
        else:
            dwell = round(row.get("total_active_time") or 0)
        store.append(str(page_id), Visit(timestamp=to_seconds(start), dwell_time=dwell))
    return store


class QuickLauncher:
    """
    Cached quick-launch search.

    The engine is rebuilt from the loader once the cache is older than
    cache_ttl seconds or after invalidate().
    """

    def __init__(
        self,
        loader: Loader,
        user_id: str = "current-user",
        settings: LauncherSettings | None = None,
        ranking: RankingSettings | None = None,
        query_logger: QueryLogger | None = None,
        clock: Callable[[], float] = time.time
    ):
        self.loader = loader
        self.user_id = user_id
        self.settings = settings or LauncherSettings()
        self.ranking = ranking or RankingSettings(use_bloom=True)
        self.query_logger = query_logger
        self._clock = clock

        self._engine: RankingEngine | None = None
        self._registry: PageRegistry | None = None
        self._loaded_at = 0.0

    @property
    def engine(self) -> RankingEngine | None:
        return self._engine

    def invalidate(self):
        """Force a reload on the next search."""
        self._engine = None

    def _ensure_engine(self) -> RankingEngine:
        now = self._clock()
        if self._engine is not None and now - self._loaded_at < self.settings.cache_ttl:
            return self._engine

        registry, visits = self.loader()
        self._registry = registry
        self._engine = RankingEngine(
            registry,
            visits,
            self.user_id,
            config=self.ranking,
            query_logger=self.query_logger
        )
        self._loaded_at = now
        logger.info(f"Loaded {len(registry)} pages and {len(visits)} visited pages")
        return self._engine

    def search(self, query: str, limit: int | None = None) -> list[LaunchResult]:
        """
        Search the user's pages.

        Args:
            query: Partial user input
            limit: Max results (settings.max_results if None)

        Returns:
            Ranked LaunchResults; empty on any loader or ranking failure
        """
        if limit is None:
            limit = self.settings.max_results
        try:
            engine = self._ensure_engine()
            ranked = engine.rank_pages(query, limit, self._clock())
        except Exception as e:
            logger.error(f"Quick launch search failed: {e}")
            return []

        n = len(ranked)
        results = []
        for i, page_id in enumerate(ranked):
            meta = self._registry.get(page_id)
            results.append(LaunchResult(
                page_id=page_id,
                title=meta.title if meta else "",
                url=meta.url if meta else "",
                score=(n - i) / n
            ))
        return results

    def record_click(self, page_id: str) -> float | None:
        if self._engine is None:
            return None
        return self._engine.record_click(page_id, self._clock())

    def record_impressions(self, page_ids: Iterable[str], clicked: str | None = None):
        """Record an impression for every shown result except the clicked one."""
        if self._engine is None:
            return
        now = self._clock()
        for page_id in page_ids:
            if page_id != clicked:
                self._engine.record_impression(page_id, now)
