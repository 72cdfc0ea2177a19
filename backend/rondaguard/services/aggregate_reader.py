"""
RondaGuard Backend - Aggregate Reader
=====================================

What:  Reads aggregates back: root rows plus their child collections,
       grouped per parent, ready for the codec to assemble.
How:   One SELECT for the roots, then one `WHERE fk IN (...)` SELECT per
       child table (ids chunked), instead of one query per root.
Who:   Called by the services' list_* and get_* operations.

Query plan (list tasks, no filter):
    SELECT * FROM tasks ORDER BY created_at DESC
    SELECT * FROM task_checklist_items WHERE task_id IN (...) ORDER BY task_id, id

Children come back ordered by their sequence column when the collection is
ordered (template items), otherwise by child id (insertion order).
"""

import logging
from collections import defaultdict
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rondaguard.database import Database
from rondaguard.models.aggregates import AggregateRows, AggregateSpec

logger = logging.getLogger(__name__)

# Upper bound on bound parameters per IN (...) clause
ID_CHUNK_SIZE = 500


def _chunks(values: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    for start in range(0, len(values), size):
        yield values[start:start + size]


class AggregateReader:
    """
    Read side of the aggregate model.

    Methods:
        list(): every root matching `where`, in `order_by` order, with children
        get():  one aggregate by primary key, or None
        get_root(): one root row without children, or None
    """

    async def list(
        self,
        db: Database,
        spec: AggregateSpec,
        where: Iterable[Any] = (),
        order_by: Iterable[Any] = (),
    ) -> List[AggregateRows]:
        """
        Fetch roots and attach their children.

        Args:
            db:       Database façade
            spec:     descriptor of the aggregate
            where:    SQLAlchemy filter expressions on the root table
            order_by: SQLAlchemy ordering expressions (default: primary key)
        """
        order_by = tuple(order_by) or (spec.key_column,)
        async with db.read() as session:
            result = await session.execute(
                select(spec.root).where(*where).order_by(*order_by)
            )
            roots = list(result.scalars().all())
            aggregates = await self._attach_children(session, spec, roots)

        logger.debug("Read %d %s aggregate(s)", len(aggregates), spec.name)
        return aggregates

    async def get(self, db: Database, spec: AggregateSpec, key: Any) -> Optional[AggregateRows]:
        """Fetch one aggregate by its primary key."""
        async with db.read() as session:
            root = await session.get(spec.root, key)
            if root is None:
                return None
            aggregates = await self._attach_children(session, spec, [root])
        return aggregates[0]

    async def get_root(self, db: Database, spec: AggregateSpec, key: Any) -> Optional[Any]:
        """Fetch a root row alone (single-table aggregates, settings lookup)."""
        async with db.read() as session:
            return await session.get(spec.root, key)

    async def _attach_children(
        self,
        session: AsyncSession,
        spec: AggregateSpec,
        roots: List[Any],
    ) -> List[AggregateRows]:
        keys = [getattr(root, spec.primary_key) for root in roots]
        grouped: Dict[str, Dict[Any, List[Any]]] = {}

        for child in spec.children:
            by_parent: Dict[Any, List[Any]] = defaultdict(list)
            for chunk in _chunks(keys, ID_CHUNK_SIZE):
                result = await session.execute(
                    select(child.model)
                    .where(child.foreign_key_column.in_(chunk))
                    .order_by(child.foreign_key_column, child.sort_column)
                )
                for row in result.scalars().all():
                    by_parent[getattr(row, child.foreign_key)].append(row)
            grouped[child.name] = by_parent

        return [
            AggregateRows(
                root=root,
                children={
                    child.name: grouped[child.name].get(key, [])
                    for child in spec.children
                },
            )
            for root, key in zip(roots, keys)
        ]


# Stateless; shared by all services
aggregate_reader = AggregateReader()
