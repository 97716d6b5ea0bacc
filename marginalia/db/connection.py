"""SQLite storage for the sidebar's persisted user defaults."""

from datetime import UTC, datetime

import aiosqlite

from marginalia.db.schema import SCHEMA_SQL


class Database:
    """Async connection to the defaults database. Creates the schema on connect."""

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self._conn = connection

    @classmethod
    async def connect(cls, path: str = "marginalia.db") -> "Database":
        conn = await aiosqlite.connect(path)
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA journal_mode=WAL")
        db = cls(conn)
        await conn.executescript(SCHEMA_SQL)
        await conn.commit()
        return db

    async def execute(self, sql: str, params: tuple | None = None) -> aiosqlite.Cursor:
        cursor = await self._conn.execute(sql, params or ())
        await self._conn.commit()
        return cursor

    async def fetchall(self, sql: str, params: tuple | None = None) -> list[aiosqlite.Row]:
        cursor = await self._conn.execute(sql, params or ())
        return list(await cursor.fetchall())

    # -- Defaults --

    async def load_defaults(self) -> dict[str, str]:
        """Return every stored default as ``{key: encoded value}``."""
        rows = await self.fetchall("SELECT key, value FROM defaults ORDER BY key")
        return {row["key"]: row["value"] for row in rows}

    async def upsert_defaults(
        self, values: dict[str, str], updated_at: datetime | None = None
    ) -> None:
        """Insert or replace encoded default values in a single transaction."""
        if not values:
            return
        stamp = (updated_at or datetime.now(UTC)).isoformat()
        await self._conn.executemany(
            "INSERT OR REPLACE INTO defaults (key, value, updated_at) VALUES (?, ?, ?)",
            [(key, value, stamp) for key, value in values.items()],
        )
        await self._conn.commit()

    async def close(self) -> None:
        await self._conn.close()
