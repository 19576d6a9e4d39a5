"""
Hybrid prefix / fuzzy string similarity.

Prefix matches always score at least 0.8; everything else falls back
to Jaro-Winkler with a hard 0.7 cutoff.
"""
from Levenshtein import jaro_winkler

from ..core.schemas import PageMetadata

PREFIX_BASE = 0.8
PREFIX_LENGTH_BONUS = 0.2
FUZZY_THRESHOLD = 0.7


def hybrid_similarity(query: str, text: str) -> float:
    """
    Score how well query matches text, in [0, 1].

    Args:
        query: Partial user input
        text: Title or URL to match against

    Returns:
        0.8-1.0 for a prefix match (tighter lengths score higher),
        the Jaro-Winkler similarity if it reaches 0.7, else 0.0
    """
    ql = query.lower()
    tl = text.lower()
    if not ql or not tl:
        return 0.0

    if tl.startswith(ql):
        ratio = min(1.0, len(ql) / len(tl))
        return PREFIX_BASE + PREFIX_LENGTH_BONUS * ratio

    fuzzy = jaro_winkler(ql, tl)
    if fuzzy < FUZZY_THRESHOLD:
        return 0.0
    return fuzzy


def compute_text_match(query: str, page: PageMetadata | None) -> float:
    """Best of title and URL similarity for a page."""
    if page is None:
        return 0.0
    return max(
        hybrid_similarity(query, page.title or ""),
        hybrid_similarity(query, page.url or "")
    )
