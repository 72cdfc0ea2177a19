"""
RondaGuard Backend - Round Log Service
======================================

What:  Append-only storage of inspection rounds and their evidence photos.
How:   insert_round() is the only write path: the engine's insert-only
       flow, so a repeated id is a ConflictError and an existing round is
       never modified. Listing is newest first (start_time DESC).

Filters (all optional, combined with AND):
    task_id, sector, since / until (start_time range, epoch ms, inclusive)
"""

import logging
from typing import Any, List, Optional

from rondaguard.codec import decode_round, encode_round, parse_aggregate
from rondaguard.database import Database
from rondaguard.exceptions import NotFoundError, ValidationError
from rondaguard.models import RoundLog
from rondaguard.models.aggregates import ROUND_AGGREGATE
from rondaguard.schemas import RoundLogAggregate
from rondaguard.services.aggregate_reader import aggregate_reader
from rondaguard.services.upsert_engine import UpsertOutcome, upsert_engine

logger = logging.getLogger(__name__)


class RoundService:

    async def list_rounds(
        self,
        db: Database,
        task_id: Optional[str] = None,
        sector: Optional[str] = None,
        since: Optional[int] = None,
        until: Optional[int] = None,
    ) -> List[RoundLogAggregate]:
        if since is not None and until is not None and since > until:
            raise ValidationError(
                message="'since' must not be after 'until'",
                field="since",
            )
        where = []
        if task_id:
            where.append(RoundLog.task_id == task_id)
        if sector:
            where.append(RoundLog.sector == sector)
        if since is not None:
            where.append(RoundLog.start_time >= since)
        if until is not None:
            where.append(RoundLog.start_time <= until)

        rows = await aggregate_reader.list(
            db,
            ROUND_AGGREGATE,
            where=where,
            order_by=(RoundLog.start_time.desc(), RoundLog.id),
        )
        return [decode_round(row) for row in rows]

    async def get_round(self, db: Database, round_id: str) -> RoundLogAggregate:
        rows = await aggregate_reader.get(db, ROUND_AGGREGATE, round_id)
        if rows is None:
            raise NotFoundError(resource="round", resource_id=round_id)
        return decode_round(rows)

    async def insert_round(self, db: Database, log: Any) -> UpsertOutcome:
        log = parse_aggregate(RoundLogAggregate, log)
        root, children = encode_round(log)
        outcome = await upsert_engine.insert(db, ROUND_AGGREGATE, root, children)
        logger.info(
            "round %s stored with %d photo(s), issues_detected=%s",
            log.id,
            len(log.photos),
            log.issues_detected,
        )
        return outcome


round_service = RoundService()
