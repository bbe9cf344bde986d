"""SQLite-backed store for raw matches, processed stats and region health."""
import json
import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, List, Optional, Union

from domain.enums import PartitionStatus
from domain.interfaces import IMatchStore

logger = logging.getLogger(__name__)


def _utcnow() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S.%f")


class SQLiteStore(IMatchStore):
    """Lightweight persistence layer; payloads are stored as JSON text."""

    def __init__(self, db_path: Union[Path, str]):
        self.db_path = db_path
        if isinstance(db_path, Path):
            db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._create_tables()

    def _create_tables(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            "CREATE TABLE IF NOT EXISTS cached_matches (match_id TEXT PRIMARY KEY, region TEXT NOT NULL, data TEXT NOT NULL, created_at TEXT NOT NULL)"
        )
        cur.execute(
            "CREATE TABLE IF NOT EXISTS processed_stats (id INTEGER PRIMARY KEY AUTOINCREMENT, type TEXT NOT NULL, region TEXT NOT NULL, data TEXT NOT NULL, last_updated TEXT NOT NULL)"
        )
        cur.execute(
            "CREATE TABLE IF NOT EXISTS region_status (region TEXT PRIMARY KEY, status TEXT NOT NULL DEFAULT 'active', last_updated TEXT NOT NULL, error_count INTEGER NOT NULL DEFAULT 0, last_error TEXT)"
        )
        cur.execute("CREATE INDEX IF NOT EXISTS idx_cached_matches_region ON cached_matches(region)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_processed_stats_type_region ON processed_stats(type, region, last_updated)")
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    # ── Matches ────────────────────────────────────────────────────────

    async def save_match(self, match_id: str, region: str, payload: dict) -> bool:
        try:
            self._conn.execute(
                "INSERT OR IGNORE INTO cached_matches(match_id, region, data, created_at) VALUES(?, ?, ?, ?)",
                (match_id, region, json.dumps(payload, separators=(",", ":")), _utcnow()),
            )
            self._conn.commit()
            return True
        except sqlite3.Error as e:
            logger.error(f"Failed to save match {match_id}: {e}")
            return False

    async def get_cached_matches(self, region: Optional[str] = None) -> List[dict]:
        if region and region.lower() != "all":
            rows = self._conn.execute(
                "SELECT data FROM cached_matches WHERE region = ? ORDER BY created_at, match_id", (region,)
            ).fetchall()
        else:
            rows = self._conn.execute("SELECT data FROM cached_matches ORDER BY created_at, match_id").fetchall()
        return [json.loads(r[0]) for r in rows]

    def count_matches(self, region: Optional[str] = None) -> int:
        if region and region.lower() != "all":
            row = self._conn.execute("SELECT COUNT(*) FROM cached_matches WHERE region = ?", (region,)).fetchone()
        else:
            row = self._conn.execute("SELECT COUNT(*) FROM cached_matches").fetchone()
        return int(row[0])

    # ── Processed stats ────────────────────────────────────────────────

    async def save_processed_stats(self, stats_type: str, region: str, payload: Any) -> bool:
        try:
            self._conn.execute(
                "INSERT INTO processed_stats(type, region, data, last_updated) VALUES(?, ?, ?, ?)",
                (stats_type, region, json.dumps(payload, separators=(",", ":")), _utcnow()),
            )
            self._conn.commit()
            return True
        except sqlite3.Error as e:
            logger.error(f"Failed to save processed stats {stats_type}/{region}: {e}")
            return False

    async def get_processed_stats(self, stats_type: str, region: str = "all") -> Optional[Any]:
        row = self._conn.execute(
            "SELECT data FROM processed_stats WHERE type = ? AND region = ? ORDER BY last_updated DESC, id DESC LIMIT 1",
            (stats_type, region),
        ).fetchone()
        if row is None:
            logger.info(f"No data found for type={stats_type}, region={region}")
            return None
        return json.loads(row[0])

    # ── Region status ──────────────────────────────────────────────────

    async def update_partition_status(
        self,
        region: str,
        status: PartitionStatus,
        error_message: Optional[str] = None,
    ) -> bool:
        now = _utcnow()
        try:
            if status is PartitionStatus.ERROR:
                self._conn.execute(
                    "INSERT INTO region_status(region, status, last_updated, error_count, last_error) VALUES(?, ?, ?, 1, ?) "
                    "ON CONFLICT(region) DO UPDATE SET status = excluded.status, last_updated = excluded.last_updated, "
                    "error_count = region_status.error_count + 1, last_error = excluded.last_error",
                    (region, status.value, now, error_message),
                )
            else:
                self._conn.execute(
                    "INSERT INTO region_status(region, status, last_updated, last_error) VALUES(?, ?, ?, ?) "
                    "ON CONFLICT(region) DO UPDATE SET status = excluded.status, last_updated = excluded.last_updated, "
                    "last_error = COALESCE(excluded.last_error, region_status.last_error)",
                    (region, status.value, now, error_message),
                )
            self._conn.commit()
            return True
        except sqlite3.Error as e:
            logger.error(f"Failed to update region status {region}: {e}")
            return False

    def get_region_statuses(self) -> List[dict]:
        rows = self._conn.execute(
            "SELECT region, status, last_updated, error_count, last_error FROM region_status ORDER BY region"
        ).fetchall()
        return [
            {"region": r[0], "status": r[1], "last_updated": r[2], "error_count": r[3], "last_error": r[4]}
            for r in rows
        ]

    # ── Housekeeping ───────────────────────────────────────────────────

    async def cleanup_old_data(self, days_to_keep: int = 7) -> bool:
        cutoff = (datetime.now(timezone.utc) - timedelta(days=days_to_keep)).strftime("%Y-%m-%d %H:%M:%S.%f")
        try:
            self._conn.execute("DELETE FROM cached_matches WHERE created_at < ?", (cutoff,))
            # keep the two newest stats rows per (type, region)
            self._conn.execute(
                "DELETE FROM processed_stats WHERE id NOT IN ("
                " SELECT id FROM ("
                "  SELECT id, ROW_NUMBER() OVER (PARTITION BY type, region ORDER BY last_updated DESC, id DESC) AS row_num"
                "  FROM processed_stats"
                " ) WHERE row_num <= 2"
                ")"
            )
            self._conn.commit()
            return True
        except sqlite3.Error as e:
            logger.error(f"Failed to clean up old data: {e}")
            return False
