"""Slot store — SQLite storage of named slots, each holding an ordered list of strings."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from keycoach.errors import StorageError

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS slots (
    name TEXT PRIMARY KEY,
    value TEXT NOT NULL DEFAULT '[]',
    updated_at TEXT NOT NULL
);
"""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SlotStore:
    def __init__(self, db_path: str | Path = "~/.keycoach/keycoach.db") -> None:
        self._db_path = Path(db_path).expanduser()
        self._conn: aiosqlite.Connection | None = None

    async def init(self) -> None:
        """Open the database, creating its directory and table. Raises StorageError."""
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = await aiosqlite.connect(str(self._db_path))
            await self._conn.execute("PRAGMA journal_mode=WAL;")
            await self._conn.execute(_CREATE_TABLE)
            await self._conn.commit()
        except (OSError, aiosqlite.Error) as exc:
            await self.close()
            raise StorageError(f"Cannot open slot store {self._db_path}: {exc}") from exc

    async def close(self) -> None:
        if self._conn:
            await self._conn.close()
            self._conn = None

    def _db(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("SlotStore not initialized. Call init() first.")
        return self._conn

    async def get_slot(self, name: str) -> list[str]:
        try:
            cursor = await self._db().execute("SELECT value FROM slots WHERE name = ?", (name,))
            row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise StorageError(f"Cannot read slot {name!r}: {exc}") from exc
        if row is None:
            return []
        try:
            values = json.loads(row[0])
        except ValueError as exc:
            raise StorageError(f"Slot {name!r} holds invalid JSON: {exc}") from exc
        if not isinstance(values, list):
            raise StorageError(f"Slot {name!r} does not hold a list")
        return [str(v) for v in values]

    async def put_slot(self, name: str, values: list[str]) -> None:
        """Replace the whole slot content in one transaction."""
        await self._db().execute(
            """
            INSERT INTO slots (name, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(name) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            (name, json.dumps(list(values)), _now_iso()),
        )
        await self._db().commit()

    async def __aenter__(self) -> "SlotStore":
        await self.init()
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.close()
