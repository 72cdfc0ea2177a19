"""
RondaGuard Backend - Task Service
=================================

What:  List, fetch, upsert and delete tasks with their checklists.
How:   An update rewrites title, sector, ticket, description and
       responsible, keeps created_at, and replaces the whole checklist
       (checklist item ids are reissued by the store).
"""

from typing import Any, List, Optional

from rondaguard.codec import decode_task, encode_task, parse_aggregate
from rondaguard.database import Database
from rondaguard.exceptions import NotFoundError
from rondaguard.models import Task
from rondaguard.models.aggregates import TASK_AGGREGATE
from rondaguard.schemas import TaskAggregate
from rondaguard.services.aggregate_reader import aggregate_reader
from rondaguard.services.upsert_engine import UpsertOutcome, upsert_engine


class TaskService:

    async def list_tasks(self, db: Database, sector: Optional[str] = None) -> List[TaskAggregate]:
        """Tasks newest first, optionally only one sector."""
        where = [Task.sector == sector] if sector else []
        rows = await aggregate_reader.list(
            db,
            TASK_AGGREGATE,
            where=where,
            order_by=(Task.created_at.desc(), Task.id),
        )
        return [decode_task(row) for row in rows]

    async def get_task(self, db: Database, task_id: str) -> TaskAggregate:
        rows = await aggregate_reader.get(db, TASK_AGGREGATE, task_id)
        if rows is None:
            raise NotFoundError(resource="task", resource_id=task_id)
        return decode_task(rows)

    async def upsert_task(self, db: Database, task: Any) -> UpsertOutcome:
        task = parse_aggregate(TaskAggregate, task)
        root, children = encode_task(task)
        return await upsert_engine.upsert(db, TASK_AGGREGATE, root, children)

    async def delete_task(self, db: Database, task_id: str) -> bool:
        return await upsert_engine.delete(db, TASK_AGGREGATE, task_id)


task_service = TaskService()
