"""
Search module - Quick-launch candidate generation, scoring and ranking.

Provides:
- BloomFilter: Optional title-prefix membership hint
- PrefixIndex: Title prefix trie
- TemporalModel: Visit interval statistics and decay weights
- PersonalizationStore: Click / impression reinforcement
- Scorer: Composite relevance score
- RankingEngine: Candidate generation, scoring and top-N selection
- QueryLogger: Query and feedback history
- QuickLauncher: Cached, loader-backed search facade
"""
from .bloom_filter import BloomFilter
from .prefix_index import PrefixIndex
from .similarity import hybrid_similarity, compute_text_match
from .temporal import TemporalModel
from .personalization import PersonalizationStore
from .scorer import Scorer, ScoreBreakdown
from .query_logger import QueryLogger, QueryLogEntry, FeedbackLogEntry
from .ranking_engine import RankingEngine, IndexSnapshot
from .quick_launcher import QuickLauncher, LaunchResult, build_visits_from_records

__all__ = [
    "BloomFilter",
    "PrefixIndex",
    "hybrid_similarity",
    "compute_text_match",
    "TemporalModel",
    "PersonalizationStore",
    "Scorer",
    "ScoreBreakdown",
    "QueryLogger",
    "QueryLogEntry",
    "FeedbackLogEntry",
    "RankingEngine",
    "IndexSnapshot",
    "QuickLauncher",
    "LaunchResult",
    "build_visits_from_records",
]
