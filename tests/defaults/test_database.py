"""Tests for the defaults storage helpers on Database."""

from datetime import UTC, datetime


class TestDefaultsStorage:
    async def test_empty(self, db):
        assert await db.load_defaults() == {}

    async def test_upsert_and_load(self, db):
        await db.upsert_defaults({"annotationPrivacy": '"private"', "focusedGroup": "null"})
        assert await db.load_defaults() == {
            "annotationPrivacy": '"private"',
            "focusedGroup": "null",
        }

    async def test_upsert_replaces_existing_value(self, db):
        await db.upsert_defaults({"focusedGroup": '"a"'})
        await db.upsert_defaults({"focusedGroup": '"b"'})
        assert await db.load_defaults() == {"focusedGroup": '"b"'}

    async def test_records_update_time(self, db):
        stamp = datetime(2026, 3, 4, 5, 6, 7, tzinfo=UTC)
        await db.upsert_defaults({"annotationPrivacy": '"shared"'}, updated_at=stamp)
        rows = await db.fetchall("SELECT updated_at FROM defaults")
        assert [row["updated_at"] for row in rows] == [stamp.isoformat()]

    async def test_empty_upsert_writes_nothing(self, db):
        await db.upsert_defaults({})
        assert await db.load_defaults() == {}
