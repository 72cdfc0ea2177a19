"""
RondaGuard Backend - Task Routes
================================

What:  CRUD for tasks and their checklists, newest first.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from rondaguard.database import Database, get_database
from rondaguard.schemas import ErrorResponse, SuccessResponse, TaskAggregate
from rondaguard.services.task_service import task_service

router = APIRouter(prefix="/api", tags=["Tasks"])


@router.get(
    "/tasks",
    response_model=List[TaskAggregate],
    summary="List tasks with their checklists (newest first)",
)
async def list_tasks(
    sector: Optional[str] = Query(default=None, description="Only tasks of this sector"),
    db: Database = Depends(get_database),
) -> List[TaskAggregate]:
    return await task_service.list_tasks(db, sector=sector)


@router.get(
    "/tasks/{task_id}",
    response_model=TaskAggregate,
    responses={404: {"description": "Task not found", "model": ErrorResponse}},
    summary="Get one task",
)
async def get_task(task_id: str, db: Database = Depends(get_database)) -> TaskAggregate:
    return await task_service.get_task(db, task_id)


@router.post(
    "/tasks",
    response_model=SuccessResponse,
    summary="Create or update a task; the checklist is replaced",
)
async def upsert_task(task: TaskAggregate, db: Database = Depends(get_database)) -> SuccessResponse:
    await task_service.upsert_task(db, task)
    return SuccessResponse()


@router.delete(
    "/tasks/{task_id}",
    response_model=SuccessResponse,
    summary="Delete a task and its checklist",
)
async def delete_task(task_id: str, db: Database = Depends(get_database)) -> SuccessResponse:
    await task_service.delete_task(db, task_id)
    return SuccessResponse()
