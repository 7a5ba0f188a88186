# leaderboard.py
from __future__ import annotations

import math
import sqlite3
from contextlib import closing
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import psycopg
    from psycopg.rows import dict_row
except Exception:
    psycopg = None  # allows local SQLite without psycopg installed


DEFAULT_LIMIT = 10

# SQLite INTEGER is a signed 64-bit value.
SQLITE_INT_MIN = -(2 ** 63)
SQLITE_INT_MAX = 2 ** 63 - 1

# Sortable fields -> column names. Anything else is rejected before SQL is built.
SORT_COLUMNS = {
    "score": "score",
    "name": "name",
    "played_at": "played_at",
}


# =========================
# Models
# =========================

@dataclass(frozen=True)
class ScoreEntry:
    name: str
    score: Optional[int]  # None when the submitted score did not parse
    played_at: str  # ISO string

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "score": self.score}


# =========================
# Query
# =========================

class Query:
    """
    Chainable read over the leaderboard collection:

        store.find().sort("score", -1).limit(10).to_list()

    Nothing touches the database until ``to_list``.
    """

    def __init__(self, store: "LeaderboardStore"):
        self._store = store
        self._sort_key = None
        self._direction = -1
        self._limit = None

    def sort(self, key: str, direction: int = 1) -> "Query":
        if key not in SORT_COLUMNS:
            raise ValueError(f"Cannot sort by {key!r}")
        if direction not in (1, -1):
            raise ValueError("Sort direction must be 1 or -1")
        self._sort_key = key
        self._direction = direction
        return self

    def limit(self, n: int) -> "Query":
        n = int(n)
        if n < 0:
            raise ValueError("Limit must not be negative")
        self._limit = n
        return self

    def to_list(self) -> List[ScoreEntry]:
        return self._store._run_query(self._sort_key, self._direction, self._limit)


# =========================
# Store
# =========================

class LeaderboardStore:
    """
    The leaderboard collection. Uses Postgres when a database URL is given and
    psycopg is importable, otherwise a SQLite file under ``data_dir``.

    Connections are opened per operation; the store only keeps configuration.
    """

    def __init__(self, database_url: Optional[str] = None, data_dir: str | Path = "data"):
        self.database_url = database_url
        self.data_dir = Path(data_dir)
        self.db_path = self.data_dir / "leaderboard.db"

    @property
    def backend(self) -> str:
        return "postgres" if self._use_postgres() else "sqlite"

    # -------- Connection helpers --------

    def _use_postgres(self) -> bool:
        return bool(self.database_url and psycopg is not None)

    def _connect_sqlite(self) -> sqlite3.Connection:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _connect_postgres(self):
        if not self.database_url:
            raise RuntimeError("DATABASE_URL not set")
        return psycopg.connect(self.database_url, row_factory=dict_row)

    # -------- Init DB --------

    def init_db(self) -> None:
        if self._use_postgres():
            with self._connect_postgres() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                    CREATE TABLE IF NOT EXISTS leaderboard (
                        id BIGSERIAL PRIMARY KEY,
                        name TEXT NOT NULL,
                        score NUMERIC,
                        played_at TEXT NOT NULL
                    )
                        """
                    )
                conn.commit()
        else:
            with closing(self._connect_sqlite()) as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS leaderboard (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL,
                        score INTEGER,
                        played_at TEXT NOT NULL
                    )
                    """
                )
                conn.commit()

    # -------- Write --------

    def insert_one(self, doc: Dict[str, Any]) -> ScoreEntry:
        """
        Append one entry. ``doc`` needs ``name`` and ``score`` (int or None).

        Entries are never updated or de-duplicated: the same name may appear
        any number of times.
        """
        self.init_db()

        name = doc["name"]
        score = doc.get("score")
        if not isinstance(name, str):
            raise TypeError("name must be a string")
        if score is not None and (isinstance(score, bool) or not isinstance(score, int)):
            raise TypeError("score must be an int or None")

        now_iso = datetime.now(timezone.utc).isoformat(timespec="seconds")

        # -------- Postgres path --------
        if self._use_postgres():
            with self._connect_postgres() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        "INSERT INTO leaderboard (name, score, played_at) VALUES (%s, %s, %s)",
                        (name, score, now_iso),
                    )
                conn.commit()
            return ScoreEntry(name=name, score=score, played_at=now_iso)

        # -------- SQLite fallback --------
        with closing(self._connect_sqlite()) as conn:
            conn.execute(
                "INSERT INTO leaderboard (name, score, played_at) VALUES (?, ?, ?)",
                (name, _sqlite_score(score), now_iso),
            )
            conn.commit()
        return ScoreEntry(name=name, score=score, played_at=now_iso)

    # -------- Read --------

    def find(self) -> Query:
        return Query(self)

    def get_top_entries(self, limit: int = DEFAULT_LIMIT) -> List[ScoreEntry]:
        return self.find().sort("score", -1).limit(limit).to_list()

    def count(self) -> int:
        self.init_db()
        if self._use_postgres():
            with self._connect_postgres() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT COUNT(*) AS n FROM leaderboard")
                    return int(cur.fetchone()["n"])

        with closing(self._connect_sqlite()) as conn:
            return int(conn.execute("SELECT COUNT(*) AS n FROM leaderboard").fetchone()["n"])

    def _run_query(self, sort_key: Optional[str], direction: int, limit: Optional[int]) -> List[ScoreEntry]:
        self.init_db()

        order = "id ASC"
        if sort_key is not None:
            column = SORT_COLUMNS[sort_key]
            # Unparsed scores (NULL) go last in both directions; ties keep insertion order.
            order = f"{column} IS NULL, {column} {'DESC' if direction == -1 else 'ASC'}, id ASC"

        sql = f"SELECT name, score, played_at FROM leaderboard ORDER BY {order}"

        # -------- Postgres --------
        if self._use_postgres():
            params: tuple = ()
            if limit is not None:
                sql += " LIMIT %s"
                params = (limit,)
            with self._connect_postgres() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, params)
                    rows = cur.fetchall()
            return [_row_to_entry(r) for r in rows]

        # -------- SQLite fallback --------
        params = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (limit,)
        with closing(self._connect_sqlite()) as conn:
            rows = conn.execute(sql, params).fetchall()
        return [_row_to_entry(r) for r in rows]


def _sqlite_score(score: Optional[int]):
    """Scores past the 64-bit INTEGER range are stored as REAL."""
    if score is None or SQLITE_INT_MIN <= score <= SQLITE_INT_MAX:
        return score
    try:
        return float(score)
    except OverflowError:
        return math.inf if score > 0 else -math.inf


def _stored_score(score) -> Optional[int]:
    if score is None:
        return None
    if isinstance(score, float) and not math.isfinite(score):
        # JSON has no infinity.
        return None
    return int(score)


def _row_to_entry(r) -> ScoreEntry:
    return ScoreEntry(
        name=r["name"],
        score=_stored_score(r["score"]),
        played_at=r["played_at"],
    )


# =========================
# Formatting helper
# =========================

def format_played_at(iso_str: str) -> str:
    """
    Convert ISO UTC time string -> friendly display.
    Example: 2026-02-23T00:40:12+00:00 -> 23 Feb 2026
    """
    try:
        dt = datetime.fromisoformat(iso_str)
        dt_utc = dt.astimezone(timezone.utc)
        return dt_utc.strftime("%d %b %Y")
    except Exception:
        return iso_str
