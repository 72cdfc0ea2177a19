"""
RondaGuard Backend - System Settings Service
============================================

What:  Read and write the singleton settings row.
How:   Reading falls back to the fixed defaults (RondaGuard, #203060, no
       logo) when the row has never been saved; writing upserts row id 1.
"""

from typing import Any

from rondaguard.codec import decode_settings, encode_settings, parse_aggregate
from rondaguard.database import Database
from rondaguard.models import SETTINGS_ROW_ID
from rondaguard.models.aggregates import SETTINGS_AGGREGATE
from rondaguard.schemas import SystemSettingsPayload
from rondaguard.services.aggregate_reader import aggregate_reader
from rondaguard.services.upsert_engine import UpsertOutcome, upsert_engine


class SettingsService:

    async def get_settings(self, db: Database) -> SystemSettingsPayload:
        row = await aggregate_reader.get_root(db, SETTINGS_AGGREGATE, SETTINGS_ROW_ID)
        return decode_settings(row)

    async def upsert_settings(self, db: Database, payload: Any) -> UpsertOutcome:
        payload = parse_aggregate(SystemSettingsPayload, payload)
        return await upsert_engine.upsert(db, SETTINGS_AGGREGATE, encode_settings(payload))


settings_service = SettingsService()
