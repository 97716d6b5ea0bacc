"""Persists user defaults between sessions.

Stored values are loaded into the store at startup. Afterwards the service
watches the store and records which defaults changed; `flush` writes them.
"""

import json
import logging
from typing import Any

from marginalia.db.connection import Database
from marginalia.store import SidebarStore
from marginalia.store.modules.defaults import DEFAULT_KEYS

logger = logging.getLogger(__name__)


class PersistedDefaultsService:
    def __init__(self, db: Database, store: SidebarStore) -> None:
        self._db = db
        self._store = store
        self._last_seen: dict[str, Any] = {}
        self._dirty: set[str] = set()
        self._unsubscribe = None

    async def init(self) -> None:
        """Load persisted defaults into the store and start tracking changes."""
        stored = await self._db.load_defaults()
        for key, encoded in stored.items():
            if key not in DEFAULT_KEYS:
                logger.warning("Ignoring unknown persisted default %r", key)
                continue
            value = json.loads(encoded)
            self._store.set_default(key, value)
            if key == "focusedGroup" and value:
                self._store.focus_group(value)

        self._last_seen = self._current()
        self._dirty.clear()
        self._unsubscribe = self._store.subscribe(self._on_store_change)

    async def flush(self) -> list[str]:
        """Write changed defaults to the database. Returns the keys written."""
        written = sorted(self._dirty)
        await self._db.upsert_defaults(
            {key: json.dumps(self._last_seen.get(key)) for key in written}
        )
        self._dirty.clear()
        return written

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _current(self) -> dict[str, Any]:
        return {key: self._store.get_default(key) for key in DEFAULT_KEYS}

    def _on_store_change(self) -> None:
        current = self._current()
        for key, value in current.items():
            if value != self._last_seen.get(key):
                self._dirty.add(key)
        self._last_seen = current
