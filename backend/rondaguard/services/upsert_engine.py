"""
RondaGuard Backend - Transactional Upsert Engine
================================================

What:  Writes one aggregate (root row + child collections) atomically.
How:   Generic over `AggregateSpec`; every step runs on the same
       transactional session handed out by the Database façade.
Who:   Called by the template, task, round, user and settings services.

Upsert Flow (upsert):
    ┌──────────┐   ┌────────────┐   ┌──────────────────────────────┐   ┌──────────┐
    │  BEGIN   │──▶│ SELECT id  │──▶│ exists: UPDATE root,         │──▶│ INSERT   │──▶ COMMIT
    │          │   │ (exists?)  │   │   DELETE all children        │   │ children │
    └──────────┘   └────────────┘   │ absent: INSERT root          │   │ (1 batch)│
                                    │   ON CONFLICT (id) DO NOTHING│   └──────────┘
                                    │   0 rows → update branch     │
                                    └──────────────────────────────┘

    Two writers racing on a new id both see it absent; the loser's INSERT
    does nothing and it continues as an update, so neither gets a conflict.

    On failure at any step: ROLLBACK, the connection is released, and one
    translated error reaches the caller. No partial write is ever visible.

Insert Flow (insert): BEGIN → INSERT root → INSERT children → COMMIT.
    Used by insert-only aggregates (round logs); a duplicate id surfaces as
    ConflictError from the primary key constraint.

Ordering:
    Every statement is awaited before the next one is issued, so child
    deletion always completes before the replacement rows are inserted.
    Ordered children get sequence numbers 0..n-1 from their submission index.
"""

import enum
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import delete, insert, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from rondaguard.database import Database
from rondaguard.exceptions import ValidationError
from rondaguard.models.aggregates import AggregateSpec

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO NOTHING
_CONFLICT_TOLERANT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class UpsertOutcome(str, enum.Enum):
    INSERTED = "inserted"
    UPDATED = "updated"


class UpsertEngine:
    """
    Multi-table writer for aggregates.

    Responsibilities:
        - upsert(): existence check → update-or-insert root → replace children
        - insert(): insert-only path (no existence check)
        - delete(): remove children then root

    The engine is stateless; the Database is passed into every call and each
    call owns one transaction from start to finish.
    """

    async def upsert(
        self,
        db: Database,
        spec: AggregateSpec,
        root_row: Dict[str, Any],
        children: Optional[Mapping[str, Sequence[Dict[str, Any]]]] = None,
    ) -> UpsertOutcome:
        """
        Insert the aggregate if its root id is absent, else update it in place.

        On update, only the mutable columns present in `root_row` are written
        and every child collection of the aggregate is fully replaced (an empty or
        missing collection leaves no child rows).

        Args:
            db:       Database façade
            spec:     descriptor of the aggregate
            root_row: column → value for the root, including the primary key
            children: child collection name → list of child rows (without FK)

        Returns:
            UpsertOutcome.INSERTED or UpsertOutcome.UPDATED

        Raises:
            ValidationError:     missing primary key, or a column required on insert
            ConflictError:       constraint violation reported by the store
            TransientStoreError: connectivity failure or pool timeout
            DatabaseError:       any other store failure
        """
        if spec.insert_only:
            raise ValidationError(
                message=f"{spec.name} records cannot be updated after creation",
                context={"resource": spec.name},
            )
        key = self._require_key(spec, root_row)
        children = self._check_children(spec, children)

        async with db.transaction() as session:
            existing = await session.execute(
                select(spec.key_column).where(spec.key_column == key)
            )
            if existing.first() is not None:
                outcome = UpsertOutcome.UPDATED
            else:
                self._require_insert_columns(spec, root_row)
                inserted = await self._insert_root_if_absent(session, spec, root_row)
                # A concurrent writer created the same root after our SELECT
                outcome = UpsertOutcome.INSERTED if inserted else UpsertOutcome.UPDATED

            if outcome is UpsertOutcome.UPDATED:
                await self._update_root(session, spec, key, root_row)
                for child in spec.children:
                    await session.execute(
                        delete(child.model).where(child.foreign_key_column == key)
                    )

            await self._insert_children(session, spec, key, children)

        logger.info("%s %s %s", spec.name, key, outcome.value)
        return outcome

    async def insert(
        self,
        db: Database,
        spec: AggregateSpec,
        root_row: Dict[str, Any],
        children: Optional[Mapping[str, Sequence[Dict[str, Any]]]] = None,
    ) -> UpsertOutcome:
        """
        Insert a new aggregate; never touches an existing one.

        Raises:
            ConflictError: the root id already exists
            (plus the same store errors as upsert)
        """
        key = self._require_key(spec, root_row)
        children = self._check_children(spec, children)
        self._require_insert_columns(spec, root_row)

        async with db.transaction() as session:
            await session.execute(insert(spec.root).values(**root_row))
            await self._insert_children(session, spec, key, children)

        logger.info("%s %s inserted", spec.name, key)
        return UpsertOutcome.INSERTED

    async def delete(self, db: Database, spec: AggregateSpec, key: Any) -> bool:
        """
        Delete the aggregate's child rows, then its root, in one transaction.

        Children are removed explicitly so the result does not depend on the
        store enforcing ON DELETE CASCADE.

        Returns:
            True when a root row was deleted, False when the id was absent.
        """
        async with db.transaction() as session:
            for child in spec.children:
                await session.execute(
                    delete(child.model).where(child.foreign_key_column == key)
                )
            result = await session.execute(
                delete(spec.root).where(spec.key_column == key)
            )
            deleted = (result.rowcount or 0) > 0

        logger.info("%s %s %s", spec.name, key, "deleted" if deleted else "already absent")
        return deleted

    # ── Steps ─────────────────────────────────────────────────────────────

    async def _insert_root_if_absent(
        self,
        session: AsyncSession,
        spec: AggregateSpec,
        root_row: Dict[str, Any],
    ) -> bool:
        """
        INSERT the root, ignoring a primary key collision.

        Returns False when another transaction inserted the same id first;
        the caller then takes the update path. Only the primary key is the
        conflict target, so other unique constraints (user email) still
        surface as ConflictError.
        """
        dialect_insert = _CONFLICT_TOLERANT_INSERTS.get(session.bind.dialect.name)
        if dialect_insert is None:
            await session.execute(insert(spec.root).values(**root_row))
            return True

        stmt = (
            dialect_insert(spec.root.__table__)
            .values(**root_row)
            .on_conflict_do_nothing(index_elements=[spec.primary_key])
        )
        result = await session.execute(stmt)
        return (result.rowcount or 0) > 0

    async def _update_root(
        self,
        session: AsyncSession,
        spec: AggregateSpec,
        key: Any,
        root_row: Dict[str, Any],
    ) -> None:
        values = {
            column: root_row[column]
            for column in spec.mutable_columns
            if column in root_row
        }
        if values:
            await session.execute(
                update(spec.root).where(spec.key_column == key).values(**values)
            )

    async def _insert_children(
        self,
        session: AsyncSession,
        spec: AggregateSpec,
        key: Any,
        children: Mapping[str, Sequence[Dict[str, Any]]],
    ) -> None:
        for child in spec.children:
            rows: List[Dict[str, Any]] = [
                child.bind(key, index, row)
                for index, row in enumerate(children.get(child.name) or ())
            ]
            if rows:
                # One executemany batch per child table
                await session.execute(insert(child.model), rows)

    # ── Validation (before any statement is issued) ───────────────────────

    @staticmethod
    def _require_key(spec: AggregateSpec, root_row: Dict[str, Any]) -> Any:
        key = root_row.get(spec.primary_key)
        if key is None or key == "":
            raise ValidationError(
                message=f"{spec.name} is missing its '{spec.primary_key}'",
                field=spec.primary_key,
            )
        return key

    @staticmethod
    def _require_insert_columns(spec: AggregateSpec, root_row: Dict[str, Any]) -> None:
        for column in spec.required_on_insert:
            if root_row.get(column) is None:
                raise ValidationError(
                    message=f"A new {spec.name} requires '{column}'",
                    field=column,
                )

    @staticmethod
    def _check_children(
        spec: AggregateSpec,
        children: Optional[Mapping[str, Sequence[Dict[str, Any]]]],
    ) -> Mapping[str, Sequence[Dict[str, Any]]]:
        children = children or {}
        known = {child.name for child in spec.children}
        unknown = set(children) - known
        if unknown:
            raise ValidationError(
                message=f"{spec.name} has no child collection(s): {', '.join(sorted(unknown))}",
                context={"resource": spec.name},
            )
        return children


# Stateless; shared by all services
upsert_engine = UpsertEngine()
