"""
Data model for quick-launch ranking.

Pages are immutable metadata snapshots keyed by page id. Visits are
stored per page as one ordered sequence of (timestamp, dwell) records.
Both registries are owned by the caller; the engine reads and appends
through the contracts defined here and never deletes.
"""
import math
from dataclasses import dataclass, field
from typing import Iterator, MutableMapping, Sequence

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PERSONAL_SCORE = 0.5

# Anything above this is a millisecond timestamp
_MILLISECOND_THRESHOLD = 10_000_000_000


def to_seconds(ts: float) -> float:
    """Normalize a millisecond epoch timestamp to seconds."""
    if ts > _MILLISECOND_THRESHOLD:
        return float(math.floor(ts / 1000))
    return ts


def clamp_score(value: float) -> float:
    """Clamp a personal score into [0, 1]; NaN becomes the default."""
    if math.isnan(value):
        return DEFAULT_PERSONAL_SCORE
    return max(0.0, min(1.0, value))


# ============================================================
# Pages
# ============================================================

class PageMetadata(BaseModel):
    """Immutable snapshot of a page's searchable metadata."""
    model_config = ConfigDict(frozen=True)

    title: str = Field(default="", description="Page title as shown in the browser")
    url: str = Field(default="", description="Page URL")
    category: str | None = Field(None, description="Optional user or auto category")
    tags: tuple[str, ...] = Field(default=(), description="Optional free-form tags")


PageRegistry = MutableMapping[str, PageMetadata]


# ============================================================
# Visits
# ============================================================

@dataclass(frozen=True)
class Visit:
    """A single recorded visit."""
    timestamp: float
    dwell_time: float = 0.0


@dataclass
class VisitEntry:
    """All recorded visits to one page plus its personalization state."""
    visits: list[Visit] = field(default_factory=list)
    personal_score: float = DEFAULT_PERSONAL_SCORE
    last_reinforcement: float | None = None

    def __post_init__(self):
        self.personal_score = clamp_score(self.personal_score)

    @property
    def timestamps(self) -> list[float]:
        return [v.timestamp for v in self.visits]

    @property
    def dwell_times(self) -> list[float]:
        return [v.dwell_time for v in self.visits]

    def __len__(self) -> int:
        return len(self.visits)

    @classmethod
    def from_arrays(
        cls,
        timestamps: Sequence[float],
        dwell_times: Sequence[float] | None = None,
        personal_score: float | None = None,
        last_reinforcement: float | None = None
    ) -> "VisitEntry":
        """
        Build an entry from parallel timestamp / dwell arrays.

        Missing dwell values are treated as unknown (0); surplus dwell
        values without a timestamp are dropped.
        """
        dwell_times = list(dwell_times or [])
        visits = [
            Visit(
                timestamp=t,
                dwell_time=dwell_times[i] if i < len(dwell_times) else 0.0
            )
            for i, t in enumerate(timestamps)
        ]
        return cls(
            visits=visits,
            personal_score=DEFAULT_PERSONAL_SCORE if personal_score is None else personal_score,
            last_reinforcement=last_reinforcement
        )

    def to_dict(self) -> dict:
        return {
            "timestamps": self.timestamps,
            "dwell_times": self.dwell_times,
            "personal_score": self.personal_score,
            "last_reinforcement": self.last_reinforcement
        }


class VisitsStore:
    """
    Read/write contract over a caller-owned mapping of page id -> VisitEntry.

    The wrapped mapping is mutated in place so the caller can persist
    it afterwards. Entries are created lazily and never removed.
    """

    def __init__(self, entries: MutableMapping[str, VisitEntry] | None = None):
        self._entries = entries if entries is not None else {}

    @classmethod
    def from_raw(cls, raw: dict[str, dict]) -> "VisitsStore":
        """Build a store from plain dicts with parallel arrays."""
        entries = {
            page_id: VisitEntry.from_arrays(
                timestamps=data.get("timestamps", []),
                dwell_times=data.get("dwell_times", data.get("dwellTimes")),
                personal_score=data.get("personal_score", data.get("personalScore")),
                last_reinforcement=data.get("last_reinforcement", data.get("lastReinforcement"))
            )
            for page_id, data in raw.items()
        }
        return cls(entries)

    @property
    def entries(self) -> MutableMapping[str, VisitEntry]:
        return self._entries

    def get(self, page_id: str) -> VisitEntry | None:
        return self._entries.get(page_id)

    def ensure(self, page_id: str) -> VisitEntry:
        """Return the entry for page_id, creating an empty one if needed."""
        entry = self._entries.get(page_id)
        if entry is None:
            entry = VisitEntry()
            self._entries[page_id] = entry
        return entry

    def append(self, page_id: str, visit: Visit) -> VisitEntry:
        entry = self.ensure(page_id)
        entry.visits.append(visit)
        return entry

    def set_personal_score(self, page_id: str, score: float, at: float | None = None) -> float:
        entry = self.ensure(page_id)
        entry.personal_score = clamp_score(score)
        if at is not None:
            entry.last_reinforcement = at
        return entry.personal_score

    def visit_counts(self) -> list[int]:
        return [len(entry) for entry in self._entries.values()]

    def items(self):
        return self._entries.items()

    def __contains__(self, page_id: object) -> bool:
        return page_id in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
