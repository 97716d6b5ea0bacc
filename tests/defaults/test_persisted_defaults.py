"""Tests for PersistedDefaultsService: loading, change tracking and flushing."""

import json

from marginalia.defaults.service import PersistedDefaultsService
from tests.fixtures import make_logged_in_store


async def stored_defaults(db) -> dict:
    rows = await db.fetchall("SELECT key, value FROM defaults")
    return {row["key"]: json.loads(row["value"]) for row in rows}


class TestFlush:
    async def test_nothing_to_flush_initially(self, defaults_service, db):
        assert await defaults_service.flush() == []
        assert await stored_defaults(db) == {}

    async def test_changed_defaults_are_written(self, defaults_service, store, db):
        store.set_default("annotationPrivacy", "private")

        assert await defaults_service.flush() == ["annotationPrivacy"]
        assert await stored_defaults(db) == {"annotationPrivacy": "private"}

    async def test_flush_clears_dirty_keys(self, defaults_service, store):
        store.set_default("annotationPrivacy", "private")
        await defaults_service.flush()
        assert await defaults_service.flush() == []

    async def test_unrelated_changes_are_ignored(self, defaults_service, store):
        store.select_tab("note")
        store.set_expanded("some-id", True)
        assert await defaults_service.flush() == []

    async def test_later_value_overwrites(self, defaults_service, store, db):
        store.set_default("focusedGroup", "study-group")
        await defaults_service.flush()
        store.set_default("focusedGroup", "__world__")
        await defaults_service.flush()
        assert await stored_defaults(db) == {"focusedGroup": "__world__"}

    async def test_close_stops_tracking(self, defaults_service, store):
        defaults_service.close()
        store.set_default("annotationPrivacy", "private")
        assert await defaults_service.flush() == []


class TestInit:
    async def test_loads_persisted_values_into_new_store(self, db):
        first_store = make_logged_in_store()
        first = PersistedDefaultsService(db, first_store)
        await first.init()
        first_store.set_default("annotationPrivacy", "private")
        first_store.set_default("focusedGroup", "study-group")
        await first.flush()
        first.close()

        second_store = make_logged_in_store()
        second = PersistedDefaultsService(db, second_store)
        await second.init()

        assert second_store.get_default("annotationPrivacy") == "private"
        assert second_store.focused_group_id() == "study-group"
        # Values loaded at startup are not dirty.
        assert await second.flush() == []
        second.close()

    async def test_unknown_keys_are_ignored(self, db, store):
        await db.execute(
            "INSERT INTO defaults (key, value, updated_at) VALUES (?, ?, ?)",
            ("colorScheme", json.dumps("dark"), "2026-01-01T00:00:00+00:00"),
        )
        service = PersistedDefaultsService(db, store)
        await service.init()

        assert "colorScheme" not in store.get_defaults()
        service.close()

    async def test_unavailable_focused_group_is_not_focused(self, db, store):
        await db.execute(
            "INSERT INTO defaults (key, value, updated_at) VALUES (?, ?, ?)",
            ("focusedGroup", json.dumps("gone-group"), "2026-01-01T00:00:00+00:00"),
        )
        service = PersistedDefaultsService(db, store)
        await service.init()

        assert store.focused_group_id() == "__world__"
        service.close()
