"""
RondaGuard Backend - Database Façade Tests
==========================================

What:  Store error translation and transaction boundaries.

What we test:
    ✅ Each SQLAlchemy error family maps to exactly one application error
    ✅ Driver details stay in context, never in the message
    ✅ transaction() commits on success and rolls back on error
    ✅ ping() against a live SQLite file
"""

import pytest
from sqlalchemy import exc as sa_exc
from sqlalchemy import insert, select

from rondaguard.database import translate_store_error
from rondaguard.exceptions import (
    ConflictError,
    DatabaseError,
    TransientStoreError,
    ValidationError,
)
from rondaguard.models import ChecklistTemplate


class TestTranslateStoreError:

    def test_integrity_error_is_conflict(self):
        error = sa_exc.IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed"))
        translated = translate_store_error(error)
        assert isinstance(translated, ConflictError)
        assert translated.status_code == 409
        assert translated.context["driver_error"] == "UNIQUE constraint failed"
        assert "UNIQUE" not in translated.message

    def test_operational_error_is_transient(self):
        error = sa_exc.OperationalError("SELECT 1", {}, Exception("connection refused"))
        assert isinstance(translate_store_error(error), TransientStoreError)

    def test_interface_error_is_transient(self):
        error = sa_exc.InterfaceError("SELECT 1", {}, Exception("connection closed"))
        assert isinstance(translate_store_error(error), TransientStoreError)

    def test_pool_timeout_is_transient_with_retry_hint(self):
        translated = translate_store_error(sa_exc.TimeoutError("QueuePool limit reached"))
        assert isinstance(translated, TransientStoreError)
        assert translated.retry_after == 1

    def test_invalidated_connection_is_transient(self):
        error = sa_exc.DBAPIError("SELECT 1", {}, Exception("gone"), connection_invalidated=True)
        assert isinstance(translate_store_error(error), TransientStoreError)

    def test_other_errors_are_database_errors(self):
        error = sa_exc.ProgrammingError("SELEC 1", {}, Exception("syntax error"))
        translated = translate_store_error(error)
        assert isinstance(translated, DatabaseError)
        assert translated.context["original_error"] == "ProgrammingError"

    def test_non_dbapi_error_has_no_driver_context(self):
        translated = translate_store_error(sa_exc.InvalidRequestError("bad request"))
        assert isinstance(translated, DatabaseError)
        assert "driver_error" not in translated.context


class TestTransactions:

    @pytest.mark.asyncio
    async def test_commit_on_success(self, database):
        async with database.transaction() as session:
            await session.execute(insert(ChecklistTemplate).values(id="tpl-1", name="Night"))

        async with database.read() as session:
            names = (await session.execute(select(ChecklistTemplate.name))).scalars().all()
        assert names == ["Night"]

    @pytest.mark.asyncio
    async def test_rollback_on_application_error(self, database):
        with pytest.raises(ValidationError):
            async with database.transaction() as session:
                await session.execute(insert(ChecklistTemplate).values(id="tpl-1", name="Night"))
                raise ValidationError("stop")

        async with database.read() as session:
            rows = (await session.execute(select(ChecklistTemplate))).scalars().all()
        assert rows == []

    @pytest.mark.asyncio
    async def test_store_error_translated_and_rolled_back(self, database):
        with pytest.raises(ConflictError):
            async with database.transaction() as session:
                await session.execute(insert(ChecklistTemplate).values(id="tpl-1", name="A"))
                await session.execute(insert(ChecklistTemplate).values(id="tpl-1", name="B"))

        async with database.read() as session:
            rows = (await session.execute(select(ChecklistTemplate))).scalars().all()
        assert rows == []

    @pytest.mark.asyncio
    async def test_ping(self, database):
        await database.ping()
