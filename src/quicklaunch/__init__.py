"""
QuickLaunch - Personalized ranking for quick-launch page search

Ranks a user's own visited pages for a partial query with:
- Title prefix trie + optional Bloom filter hint
- Prefix-boosted Jaro-Winkler text matching
- Bayesian visit-interval variance and entropy-based regularity
- Session, recency and dwell-time weighting
- Click / impression reinforcement of a per-page personal score

Modules:
    core        - Configuration, page and visit data model
    search      - Index structures, scoring, ranking engine, query log, launcher
"""

__version__ = "0.3.0"
