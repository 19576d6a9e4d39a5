"""
Query Logger for tracking quick-launch searches and result feedback.

Provides:
- Query history with timing and top result
- Feedback logging (click / impression / visit / update)
- Analytics on search patterns and click-through
"""
import logging
import sqlite3
from pathlib import Path
from dataclasses import dataclass
from datetime import datetime
import json

logger = logging.getLogger(__name__)

FEEDBACK_ACTIONS = ("click", "impression", "visit", "update")


@dataclass
class QueryLogEntry:
    """A logged query."""
    query_id: int
    query: str
    result_count: int
    top_page_id: str | None
    execution_time_ms: float
    timestamp: datetime

    def to_dict(self) -> dict:
        return {
            "query_id": self.query_id,
            "query": self.query,
            "result_count": self.result_count,
            "top_page_id": self.top_page_id,
            "execution_time_ms": self.execution_time_ms,
            "timestamp": self.timestamp.isoformat()
        }


@dataclass
class FeedbackLogEntry:
    """A logged feedback event."""
    feedback_id: int
    action: str  # click, impression, visit, update
    page_id: str
    details: dict
    timestamp: datetime

    def to_dict(self) -> dict:
        return {
            "feedback_id": self.feedback_id,
            "action": self.action,
            "page_id": self.page_id,
            "details": self.details,
            "timestamp": self.timestamp.isoformat()
        }


class QueryLogger:
    """
    SQLite-based logging for ranking queries and result feedback.

    Features:
    - Query history tracking
    - Click / impression / visit / catalog update logging
    - Click-through analytics
    """

    def __init__(self, db_path: str | Path = "data/query_log.db"):
        """
        Initialize query logger.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_db()
        logger.info(f"QueryLogger initialized at {self.db_path}")

    def _init_db(self):
        """Create tables if they don't exist."""
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS query_log (
                    query_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    query TEXT,
                    result_count INTEGER,
                    top_page_id TEXT,
                    execution_time_ms REAL,
                    timestamp TEXT
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS feedback_log (
                    feedback_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    action TEXT,
                    page_id TEXT,
                    details TEXT,  -- JSON
                    timestamp TEXT
                )
            """)

            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_query_time ON query_log(timestamp)"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_feedback_time ON feedback_log(timestamp)"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_feedback_page ON feedback_log(page_id)"
            )

            conn.commit()

    # --------------------------------------------------------
    # Query Logging
    # --------------------------------------------------------

    def log_query(
        self,
        query: str,
        result_count: int = 0,
        top_page_id: str | None = None,
        execution_time_ms: float = 0.0
    ) -> int:
        """
        Log a ranking query.

        Returns:
            query_id of the logged entry
        """
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("""
                INSERT INTO query_log (query, result_count, top_page_id, execution_time_ms, timestamp)
                VALUES (?, ?, ?, ?, ?)
            """, (
                query,
                result_count,
                top_page_id,
                execution_time_ms,
                datetime.now().isoformat()
            ))
            conn.commit()
            return cursor.lastrowid

    def get_recent_queries(self, limit: int = 20) -> list[QueryLogEntry]:
        """Get recent queries, newest first."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute("""
                SELECT * FROM query_log
                ORDER BY query_id DESC
                LIMIT ?
            """, (limit,))

            return [
                QueryLogEntry(
                    query_id=row["query_id"],
                    query=row["query"],
                    result_count=row["result_count"],
                    top_page_id=row["top_page_id"],
                    execution_time_ms=row["execution_time_ms"],
                    timestamp=datetime.fromisoformat(row["timestamp"])
                )
                for row in cursor
            ]

    def get_popular_queries(self, limit: int = 10) -> list[tuple[str, int]]:
        """Get the most frequent non-empty queries."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("""
                SELECT query, COUNT(*) as cnt
                FROM query_log
                WHERE query != ''
                GROUP BY query
                ORDER BY cnt DESC, query
                LIMIT ?
            """, (limit,))

            return [(row[0], row[1]) for row in cursor]

    # --------------------------------------------------------
    # Feedback Logging
    # --------------------------------------------------------

    def log_feedback(
        self,
        action: str,
        page_id: str,
        details: dict | None = None
    ) -> int:
        """
        Log a feedback event.

        Args:
            action: One of click, impression, visit, update
            page_id: Page affected
            details: Additional details

        Returns:
            feedback_id of the logged entry
        """
        if action not in FEEDBACK_ACTIONS:
            raise ValueError(f"Unknown action: {action}. Must be one of {FEEDBACK_ACTIONS}")

        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute("""
                INSERT INTO feedback_log (action, page_id, details, timestamp)
                VALUES (?, ?, ?, ?)
            """, (
                action,
                page_id,
                json.dumps(details or {}),
                datetime.now().isoformat()
            ))
            conn.commit()
            return cursor.lastrowid

    def get_recent_feedback(self, limit: int = 50) -> list[FeedbackLogEntry]:
        """Get recent feedback events, newest first."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute("""
                SELECT * FROM feedback_log
                ORDER BY feedback_id DESC
                LIMIT ?
            """, (limit,))
            return [self._feedback_from_row(row) for row in cursor]

    def get_page_history(self, page_id: str) -> list[FeedbackLogEntry]:
        """Get all feedback for a specific page."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.execute("""
                SELECT * FROM feedback_log
                WHERE page_id = ?
                ORDER BY feedback_id DESC
            """, (page_id,))
            return [self._feedback_from_row(row) for row in cursor]

    @staticmethod
    def _feedback_from_row(row: sqlite3.Row) -> FeedbackLogEntry:
        return FeedbackLogEntry(
            feedback_id=row["feedback_id"],
            action=row["action"],
            page_id=row["page_id"],
            details=json.loads(row["details"] or "{}"),
            timestamp=datetime.fromisoformat(row["timestamp"])
        )

    # --------------------------------------------------------
    # Analytics
    # --------------------------------------------------------

    def get_stats(self) -> dict:
        """Get logging statistics."""
        with sqlite3.connect(self.db_path) as conn:
            q_count = conn.execute("SELECT COUNT(*) FROM query_log").fetchone()[0]
            empty_count = conn.execute(
                "SELECT COUNT(*) FROM query_log WHERE result_count = 0"
            ).fetchone()[0]

            counts = dict(conn.execute("""
                SELECT action, COUNT(*) FROM feedback_log GROUP BY action
            """).fetchall())

            avg_time = conn.execute(
                "SELECT AVG(execution_time_ms) FROM query_log"
            ).fetchone()[0]

        clicks = counts.get("click", 0)
        impressions = counts.get("impression", 0)
        shown = clicks + impressions

        return {
            "total_queries": q_count,
            "empty_result_queries": empty_count,
            "clicks": clicks,
            "impressions": impressions,
            "visits": counts.get("visit", 0),
            "updates": counts.get("update", 0),
            "click_through_rate": clicks / shown if shown else 0.0,
            "avg_query_time_ms": avg_time or 0.0
        }

    def clear_logs(self, before_date: datetime | None = None):
        """Clear logs, optionally before a specific date."""
        with sqlite3.connect(self.db_path) as conn:
            if before_date:
                date_str = before_date.isoformat()
                conn.execute(
                    "DELETE FROM query_log WHERE timestamp < ?",
                    (date_str,)
                )
                conn.execute(
                    "DELETE FROM feedback_log WHERE timestamp < ?",
                    (date_str,)
                )
            else:
                conn.execute("DELETE FROM query_log")
                conn.execute("DELETE FROM feedback_log")
            conn.commit()
        logger.warning("Logs cleared")
