"""SQLite key/value store backend.

Provides persistent storage using a SQLite database file, one row per key
with the value serialized as JSON. Uses aiosqlite for async access.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from .base import KeyValueStore


class SQLiteStore(KeyValueStore):
    """SQLite-backed key/value store."""

    def __init__(self, path: str | Path = "./chatagent.db"):
        super().__init__()
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        await self._connection.commit()

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _conn(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("SQLiteStore is not connected; call connect() first")
        return self._connection

    async def get(self, key: str) -> Any | None:
        async with self._conn().execute(
            "SELECT value FROM kv_store WHERE key = ?", (key,)
        ) as cursor:
            row = await cursor.fetchone()
        return None if row is None else json.loads(row[0])

    async def set(self, key: str, value: Any) -> None:
        conn = self._conn()
        await conn.execute("""
            INSERT INTO kv_store (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """, (key, json.dumps(value, ensure_ascii=False), datetime.now().isoformat()))
        await conn.commit()

    async def delete(self, key: str) -> None:
        conn = self._conn()
        await conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        await conn.commit()

    @property
    def backend_type(self) -> str:
        return "sqlite"
