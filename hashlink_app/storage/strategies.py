"""
Hit storage strategies using Strategy Pattern.

Stores usage events consumed by the hit worker. This is the analytics
side of the system: the shortener core never reads it back.
"""

import logging
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Dict, List

from hashlink_app.queue.models import UsageEvent

logger = logging.getLogger(__name__)


class HitStorageStrategy(ABC):
    """
    Abstract base class for hit storage strategies.

    This interface defines how usage data is stored and queried.
    """

    @abstractmethod
    async def store_hits(self, events: List[UsageEvent]) -> bool:
        """
        Store multiple usage events in batch.

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    async def get_total_hits(self, token: str) -> int:
        """Get total use count for a token"""
        pass

    @abstractmethod
    async def get_hits_over_time(self, token: str, days: int = 7) -> List[Dict]:
        """Get daily use counts for a token"""
        pass

    @abstractmethod
    async def get_top_tokens(self, limit: int = 10) -> List[Dict]:
        """Get the most used tokens"""
        pass


class SQLiteHitStorage(HitStorageStrategy):
    """
    SQLite implementation for hit storage.

    Pros:
    - Zero configuration (no external services)
    - Works out of the box

    Cons:
    - Not optimized for analytics queries on large datasets
    - Not distributed
    """

    def __init__(self, db_path: str = "analytics.db"):
        """
        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._init_database()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _init_database(self):
        """Create usage table if it doesn't exist"""
        conn = self._connect()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS usage_events (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    token TEXT NOT NULL,
                    url TEXT NOT NULL,
                    count INTEGER NOT NULL DEFAULT 1,
                    timestamp TEXT NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_usage_token ON usage_events (token)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_usage_timestamp ON usage_events (timestamp)")
            conn.commit()
        finally:
            conn.close()
        logger.info("✅ SQLite analytics database initialized")

    async def store_hits(self, events: List[UsageEvent]) -> bool:
        data = [
            (event.token, event.url, event.count, event.timestamp.isoformat())
            for event in events
        ]
        try:
            conn = self._connect()
            try:
                conn.executemany(
                    "INSERT INTO usage_events (token, url, count, timestamp) VALUES (?, ?, ?, ?)",
                    data,
                )
                conn.commit()
            finally:
                conn.close()
            return True
        except sqlite3.Error as e:
            logger.error(f"❌ SQLite storage error: {e}")
            return False

    async def get_total_hits(self, token: str) -> int:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT COALESCE(SUM(count), 0) FROM usage_events WHERE token = ?",
                (token,),
            ).fetchone()
        finally:
            conn.close()
        return row[0]

    async def get_hits_over_time(self, token: str, days: int = 7) -> List[Dict]:
        start_date = (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()
        conn = self._connect()
        try:
            rows = conn.execute("""
                SELECT DATE(timestamp) AS date, SUM(count) AS count
                FROM usage_events
                WHERE token = ? AND timestamp >= ?
                GROUP BY DATE(timestamp)
                ORDER BY date
            """, (token, start_date)).fetchall()
        finally:
            conn.close()
        return [{"date": row[0], "count": row[1]} for row in rows]

    async def get_top_tokens(self, limit: int = 10) -> List[Dict]:
        conn = self._connect()
        try:
            rows = conn.execute("""
                SELECT token, url, SUM(count) AS count
                FROM usage_events
                GROUP BY token, url
                ORDER BY count DESC
                LIMIT ?
            """, (limit,)).fetchall()
        finally:
            conn.close()
        return [{"token": row[0], "url": row[1], "count": row[2]} for row in rows]
