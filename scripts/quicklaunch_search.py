"""
Quick-launch search over a JSON snapshot.

Snapshot format:
    {
      "pages":  {"p1": {"title": "...", "url": "..."}, ...},
      "visits": {"p1": {"timestamps": [...], "dwell_times": [...], "personal_score": 0.5}, ...}
    }

Usage:
    python scripts/quicklaunch_search.py snapshot.json git
    python scripts/quicklaunch_search.py snapshot.json git --limit 10 --now 1100000
    python scripts/quicklaunch_search.py snapshot.json git --bloom --explain
    python scripts/quicklaunch_search.py snapshot.json git --log-queries
"""
import argparse
import json
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from quicklaunch.core.config import get_settings, load_dotenv_if_exists
from quicklaunch.core.schemas import PageMetadata, VisitsStore
from quicklaunch.search.query_logger import QueryLogger
from quicklaunch.search.ranking_engine import RankingEngine

logger = logging.getLogger("quicklaunch_search")


def load_snapshot(path: Path) -> tuple[dict[str, PageMetadata], VisitsStore]:
    """Read pages and visits from a JSON snapshot."""
    data = json.loads(path.read_text(encoding="utf-8"))
    pages = {
        page_id: PageMetadata.model_validate(meta)
        for page_id, meta in data.get("pages", {}).items()
    }
    visits = VisitsStore.from_raw(data.get("visits", {}))
    return pages, visits


def main():
    parser = argparse.ArgumentParser(description="Rank visited pages for a quick-launch query")
    parser.add_argument("snapshot", type=Path, help="JSON snapshot with pages and visits")
    parser.add_argument("query", help="Partial query text")
    parser.add_argument("--limit", type=int, default=5, help="Max results (default: 5)")
    parser.add_argument("--now", type=float, default=None, help="Reference epoch seconds (default: now)")
    parser.add_argument("--bloom", action="store_true", help="Enable the Bloom filter hint")
    parser.add_argument("--explain", action="store_true", help="Print score breakdowns")
    parser.add_argument("--log-queries", action="store_true", help="Record the query in the query log")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    load_dotenv_if_exists()
    settings = get_settings()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.logging.level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )

    if not args.snapshot.exists():
        logger.error(f"Snapshot not found: {args.snapshot}")
        sys.exit(1)

    pages, visits = load_snapshot(args.snapshot)
    config = settings.ranking
    if args.bloom:
        config = config.model_copy(update={"use_bloom": True})

    query_logger = QueryLogger(settings.logging.query_log_path) if args.log_queries else None
    engine = RankingEngine(pages, visits, "cli", config=config, query_logger=query_logger)
    results = engine.rank_pages_scored(args.query, args.limit, args.now)

    if not results:
        print(f"No results for '{args.query}'")
        return

    print(f"Results for '{args.query}':\n")
    for i, result in enumerate(results, 1):
        meta = pages[result.page_id]
        print(f"{i}. [{result.score:.4f}] {meta.title}")
        print(f"   {meta.url}")
        if args.explain:
            print(f"   {json.dumps(result.to_dict())}")


if __name__ == "__main__":
    main()
