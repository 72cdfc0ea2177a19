"""
RondaGuard Backend - Upsert Engine Tests
========================================

What:  The transactional write path, against a real SQLite file.

What we test:
    ✅ Insert vs. update outcome, children fully replaced on update
    ✅ Ordered children numbered 0..n-1 in submission order
    ✅ Repeating an upsert converges to the same state
    ✅ A failing child insert leaves the previous aggregate untouched
    ✅ Insert-only aggregates: no update path, duplicate id is a conflict
    ✅ Concurrent upserts of a new id: one insert, the rest update
    ✅ Columns required on insert, unknown child collections
    ✅ Delete removes children and root, and is idempotent
"""

import asyncio

import pytest
from sqlalchemy import select

from rondaguard.exceptions import ConflictError, ValidationError
from rondaguard.models import TemplateItem
from rondaguard.models.aggregates import (
    ROUND_AGGREGATE,
    TEMPLATE_AGGREGATE,
    USER_AGGREGATE,
)
from rondaguard.services.aggregate_reader import aggregate_reader
from rondaguard.services.upsert_engine import UpsertEngine, UpsertOutcome


def _items(*labels):
    return {"items": [{"item_label": label} for label in labels]}


async def _template_items(db, template_id):
    rows = await aggregate_reader.get(db, TEMPLATE_AGGREGATE, template_id)
    return [(item.item_label, item.display_order) for item in rows.rows("items")]


class TestUpsert:

    def setup_method(self):
        self.engine = UpsertEngine()

    @pytest.mark.asyncio
    async def test_insert_then_update(self, database):
        first = await self.engine.upsert(
            database, TEMPLATE_AGGREGATE, {"id": "tpl-1", "name": "Night"}, _items("A")
        )
        second = await self.engine.upsert(
            database, TEMPLATE_AGGREGATE, {"id": "tpl-1", "name": "Night v2"}, _items("A")
        )
        assert first == UpsertOutcome.INSERTED
        assert second == UpsertOutcome.UPDATED

        rows = await aggregate_reader.get(database, TEMPLATE_AGGREGATE, "tpl-1")
        assert rows.root.name == "Night v2"

    @pytest.mark.asyncio
    async def test_children_numbered_in_submission_order(self, database):
        await self.engine.upsert(
            database, TEMPLATE_AGGREGATE, {"id": "tpl-1", "name": "N"}, _items("C", "A", "B")
        )
        assert await _template_items(database, "tpl-1") == [("C", 0), ("A", 1), ("B", 2)]

    @pytest.mark.asyncio
    async def test_update_replaces_all_children(self, database):
        await self.engine.upsert(
            database, TEMPLATE_AGGREGATE, {"id": "tpl-1", "name": "N"}, _items("A", "B", "C")
        )
        await self.engine.upsert(
            database, TEMPLATE_AGGREGATE, {"id": "tpl-1", "name": "N"}, _items("Z")
        )
        assert await _template_items(database, "tpl-1") == [("Z", 0)]

        async with database.read() as session:
            count = len((await session.execute(select(TemplateItem))).scalars().all())
        assert count == 1

    @pytest.mark.asyncio
    async def test_missing_collection_clears_children(self, database):
        await self.engine.upsert(
            database, TEMPLATE_AGGREGATE, {"id": "tpl-1", "name": "N"}, _items("A", "B")
        )
        await self.engine.upsert(database, TEMPLATE_AGGREGATE, {"id": "tpl-1", "name": "N"})
        assert await _template_items(database, "tpl-1") == []

    @pytest.mark.asyncio
    async def test_repeated_upsert_is_idempotent(self, database):
        for _ in range(3):
            await self.engine.upsert(
                database, TEMPLATE_AGGREGATE, {"id": "tpl-1", "name": "N"}, _items("A", "B")
            )
        assert await _template_items(database, "tpl-1") == [("A", 0), ("B", 1)]

    @pytest.mark.asyncio
    async def test_failed_child_insert_keeps_previous_state(self, database):
        await self.engine.upsert(
            database, TEMPLATE_AGGREGATE, {"id": "tpl-1", "name": "Before"}, _items("A", "B")
        )

        # item_label is NOT NULL: the second row fails after root update and child delete
        with pytest.raises(ConflictError):
            await self.engine.upsert(
                database,
                TEMPLATE_AGGREGATE,
                {"id": "tpl-1", "name": "After"},
                {"items": [{"item_label": "X"}, {"item_label": None}]},
            )

        rows = await aggregate_reader.get(database, TEMPLATE_AGGREGATE, "tpl-1")
        assert rows.root.name == "Before"
        assert [item.item_label for item in rows.rows("items")] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_missing_key_rejected_before_any_statement(self, mock_database):
        with pytest.raises(ValidationError) as exc_info:
            await self.engine.upsert(mock_database, TEMPLATE_AGGREGATE, {"name": "N"})
        assert exc_info.value.field == "id"
        mock_database.transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_child_collection_rejected(self, mock_database):
        with pytest.raises(ValidationError):
            await self.engine.upsert(
                mock_database,
                TEMPLATE_AGGREGATE,
                {"id": "tpl-1", "name": "N"},
                {"photos": [{"photo_base64": "x"}]},
            )
        mock_database.transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_required_on_insert_only(self, database):
        user = {"id": "u-1", "name": "Ana", "email": "a@x.io", "role": "guard", "active": True}

        with pytest.raises(ValidationError) as exc_info:
            await self.engine.upsert(database, USER_AGGREGATE, dict(user))
        assert exc_info.value.field == "password_hash"

        await self.engine.upsert(database, USER_AGGREGATE, dict(user, password_hash="h1"))
        # Updating without a hash keeps the stored one
        await self.engine.upsert(database, USER_AGGREGATE, dict(user, name="Ana S."))

        root = await aggregate_reader.get_root(database, USER_AGGREGATE, "u-1")
        assert root.name == "Ana S."
        assert root.password_hash == "h1"

    @pytest.mark.asyncio
    async def test_root_insert_ignores_existing_primary_key(self, database):
        await self.engine.upsert(
            database, TEMPLATE_AGGREGATE, {"id": "tpl-1", "name": "First"}, _items("A")
        )

        async with database.transaction() as session:
            inserted = await self.engine._insert_root_if_absent(
                session, TEMPLATE_AGGREGATE, {"id": "tpl-1", "name": "Second"}
            )
        assert inserted is False

        rows = await aggregate_reader.get(database, TEMPLATE_AGGREGATE, "tpl-1")
        assert rows.root.name == "First"

    @pytest.mark.asyncio
    async def test_concurrent_upserts_of_new_id_converge(self, database):
        outcomes = await asyncio.gather(
            *(
                self.engine.upsert(
                    database, TEMPLATE_AGGREGATE, {"id": "tpl-x", "name": "N"}, _items("A", "B")
                )
                for _ in range(3)
            )
        )
        assert outcomes.count(UpsertOutcome.INSERTED) == 1
        assert await _template_items(database, "tpl-x") == [("A", 0), ("B", 1)]

    @pytest.mark.asyncio
    async def test_other_unique_constraints_still_conflict(self, database):
        user = {"id": "u-1", "name": "Ana", "email": "a@x.io", "role": "guard", "password_hash": "h"}
        await self.engine.upsert(database, USER_AGGREGATE, dict(user))
        with pytest.raises(ConflictError):
            await self.engine.upsert(database, USER_AGGREGATE, dict(user, id="u-2"))


class TestInsertOnly:

    def setup_method(self):
        self.engine = UpsertEngine()

    def _round(self, round_id="r1"):
        return {
            "id": round_id,
            "task_title": "Perimeter",
            "start_time": 1700000000000,
            "issues_detected": False,
            "checklist_snapshot": "null",
        }

    @pytest.mark.asyncio
    async def test_upsert_refused_for_insert_only(self, mock_database):
        with pytest.raises(ValidationError):
            await self.engine.upsert(mock_database, ROUND_AGGREGATE, self._round())
        mock_database.transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_id_is_conflict_and_original_kept(self, database):
        photos = {"photos": [{"photo_base64": "p1"}, {"photo_base64": "p2"}]}
        await self.engine.insert(database, ROUND_AGGREGATE, self._round(), photos)

        with pytest.raises(ConflictError):
            await self.engine.insert(
                database, ROUND_AGGREGATE, self._round(), {"photos": [{"photo_base64": "p3"}]}
            )

        rows = await aggregate_reader.get(database, ROUND_AGGREGATE, "r1")
        assert [photo.photo_base64 for photo in rows.rows("photos")] == ["p1", "p2"]


class TestDelete:

    def setup_method(self):
        self.engine = UpsertEngine()

    @pytest.mark.asyncio
    async def test_delete_removes_children_and_root(self, database):
        await self.engine.upsert(
            database, TEMPLATE_AGGREGATE, {"id": "tpl-1", "name": "N"}, _items("A", "B")
        )
        assert await self.engine.delete(database, TEMPLATE_AGGREGATE, "tpl-1") is True

        assert await aggregate_reader.get(database, TEMPLATE_AGGREGATE, "tpl-1") is None
        async with database.read() as session:
            assert (await session.execute(select(TemplateItem))).scalars().all() == []

    @pytest.mark.asyncio
    async def test_delete_absent_id(self, database):
        assert await self.engine.delete(database, TEMPLATE_AGGREGATE, "missing") is False
