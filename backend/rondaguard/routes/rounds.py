"""
RondaGuard Backend - Round Log Routes
=====================================

What:  Round history (filterable, newest first) and round submission.
How:   Rounds are append-only: there is no update or delete endpoint, and
       POSTing an existing id answers 409.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from rondaguard.database import Database, get_database
from rondaguard.schemas import ErrorResponse, RoundLogAggregate, SuccessResponse
from rondaguard.services.round_service import round_service

router = APIRouter(prefix="/api", tags=["Rounds"])


@router.get(
    "/rounds",
    response_model=List[RoundLogAggregate],
    summary="List round logs with photos (newest first)",
)
async def list_rounds(
    task_id: Optional[str] = Query(default=None, alias="taskId"),
    sector: Optional[str] = Query(default=None),
    since: Optional[int] = Query(default=None, ge=0, description="Earliest startTime (epoch ms)"),
    until: Optional[int] = Query(default=None, ge=0, description="Latest startTime (epoch ms)"),
    db: Database = Depends(get_database),
) -> List[RoundLogAggregate]:
    return await round_service.list_rounds(
        db, task_id=task_id, sector=sector, since=since, until=until
    )


@router.get(
    "/rounds/{round_id}",
    response_model=RoundLogAggregate,
    responses={404: {"description": "Round not found", "model": ErrorResponse}},
    summary="Get one round log",
)
async def get_round(round_id: str, db: Database = Depends(get_database)) -> RoundLogAggregate:
    return await round_service.get_round(db, round_id)


@router.post(
    "/rounds",
    response_model=SuccessResponse,
    responses={409: {"description": "Round id already recorded", "model": ErrorResponse}},
    summary="Record a finished round",
)
async def insert_round(
    log: RoundLogAggregate,
    db: Database = Depends(get_database),
) -> SuccessResponse:
    await round_service.insert_round(db, log)
    return SuccessResponse()
