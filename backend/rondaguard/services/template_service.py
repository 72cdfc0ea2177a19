"""
RondaGuard Backend - Checklist Template Service
===============================================

What:  List, fetch, upsert and delete checklist templates.
How:   Encodes with the codec, writes through the upsert engine (items fully
       replaced, renumbered 0..n-1), reads through the aggregate reader.
"""

from typing import Any, List

from rondaguard.codec import decode_template, encode_template, parse_aggregate
from rondaguard.database import Database
from rondaguard.exceptions import NotFoundError
from rondaguard.models.aggregates import TEMPLATE_AGGREGATE
from rondaguard.schemas import ChecklistTemplateAggregate
from rondaguard.services.aggregate_reader import aggregate_reader
from rondaguard.services.upsert_engine import UpsertOutcome, upsert_engine


class TemplateService:

    async def list_templates(self, db: Database) -> List[ChecklistTemplateAggregate]:
        rows = await aggregate_reader.list(db, TEMPLATE_AGGREGATE)
        return [decode_template(row) for row in rows]

    async def get_template(self, db: Database, template_id: str) -> ChecklistTemplateAggregate:
        rows = await aggregate_reader.get(db, TEMPLATE_AGGREGATE, template_id)
        if rows is None:
            raise NotFoundError(resource="template", resource_id=template_id)
        return decode_template(rows)

    async def upsert_template(self, db: Database, template: Any) -> UpsertOutcome:
        template = parse_aggregate(ChecklistTemplateAggregate, template)
        root, children = encode_template(template)
        return await upsert_engine.upsert(db, TEMPLATE_AGGREGATE, root, children)

    async def delete_template(self, db: Database, template_id: str) -> bool:
        return await upsert_engine.delete(db, TEMPLATE_AGGREGATE, template_id)


template_service = TemplateService()
