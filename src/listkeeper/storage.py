"""Local SQLite store: grocery list mirror, message log and key/value state.

The grocery table mirrors items added to the remote list and is only used
as a fallback view when the store site is unreachable.
"""

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

SCHEMA = """
CREATE TABLE IF NOT EXISTS grocery_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    added_at TEXT DEFAULT CURRENT_TIMESTAMP,
    synced INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS message_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    sender TEXT NOT NULL,
    body TEXT NOT NULL,
    timestamp TEXT DEFAULT CURRENT_TIMESTAMP,
    response TEXT
);

CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_grocery_name ON grocery_items(name);
CREATE INDEX IF NOT EXISTS idx_messages_sender ON message_logs(sender);
"""


@dataclass
class GroceryRecord:
    """A locally mirrored list entry."""

    id: int
    name: str
    added_at: str
    synced: bool


@dataclass
class MessageLog:
    id: int
    sender: str
    body: str
    timestamp: str
    response: Optional[str]


class GroceryStore:
    """SQLite-backed mirror of the shopping list.

    Usage:
        store = GroceryStore("./data/listkeeper.db")
        store.add_item("2% Milk")
        records = store.list_items()
        store.close()

    Pass ``":memory:"`` for a throwaway database.
    """

    def __init__(self, db_path: str | Path = ":memory:"):
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        print(f"[Store] Opening database at {self.db_path}")
        self._conn = sqlite3.connect(self.db_path)
        self._conn.row_factory = sqlite3.Row
        if self.db_path != ":memory:":
            self._conn.execute("PRAGMA journal_mode = WAL")
        self._conn.executescript(SCHEMA)
        self._conn.commit()

    # -------------------------------------------------
    # Grocery items
    # -------------------------------------------------

    def add_item(self, name: str, synced: bool = False) -> GroceryRecord:
        cur = self._conn.execute(
            "INSERT INTO grocery_items (name, synced) VALUES (?, ?)",
            (name, int(synced)),
        )
        self._conn.commit()
        row = self._conn.execute(
            "SELECT id, name, added_at, synced FROM grocery_items WHERE id = ?",
            (cur.lastrowid,),
        ).fetchone()
        return self._to_record(row)

    def remove_item(self, name: str) -> bool:
        """Delete the newest entry whose name equals ``name``, ignoring case.

        Mirrors the site, which removes one list entry per request.
        """
        cur = self._conn.execute(
            """
            DELETE FROM grocery_items WHERE id = (
                SELECT id FROM grocery_items WHERE LOWER(name) = LOWER(?)
                ORDER BY added_at DESC, id DESC LIMIT 1
            )
            """,
            (name,),
        )
        self._conn.commit()
        return cur.rowcount > 0

    def list_items(self) -> list[GroceryRecord]:
        """All mirrored entries, newest first."""
        rows = self._conn.execute(
            "SELECT id, name, added_at, synced FROM grocery_items ORDER BY added_at DESC, id DESC"
        ).fetchall()
        return [self._to_record(row) for row in rows]

    def clear_items(self) -> int:
        """Delete every mirrored entry.

        Returns:
            Number of entries deleted
        """
        cur = self._conn.execute("DELETE FROM grocery_items")
        self._conn.commit()
        return cur.rowcount

    @staticmethod
    def _to_record(row: sqlite3.Row) -> GroceryRecord:
        return GroceryRecord(
            id=row["id"],
            name=row["name"],
            added_at=row["added_at"],
            synced=bool(row["synced"]),
        )

    # -------------------------------------------------
    # Message log
    # -------------------------------------------------

    def log_interaction(self, sender: str, body: str, response: Optional[str] = None) -> None:
        self._conn.execute(
            "INSERT INTO message_logs (sender, body, response) VALUES (?, ?, ?)",
            (sender, body, response),
        )
        self._conn.commit()

    def recent_interactions(self, limit: int = 20) -> list[MessageLog]:
        rows = self._conn.execute(
            "SELECT id, sender, body, timestamp, response FROM message_logs ORDER BY id DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [MessageLog(**dict(row)) for row in rows]

    # -------------------------------------------------
    # Key/value state
    # -------------------------------------------------

    def set_value(self, key: str, value: str) -> None:
        self._conn.execute(
            "INSERT OR REPLACE INTO kv_store (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)",
            (key, value),
        )
        self._conn.commit()

    def get_value(self, key: str) -> Optional[str]:
        row = self._conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def close(self) -> None:
        self._conn.close()
        print("[Store] Database connection closed")
