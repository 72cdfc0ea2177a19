"""
RondaGuard Backend - System Settings Routes
===========================================

What:  Branding settings; GET answers the defaults until settings are saved.
"""

from fastapi import APIRouter, Depends

from rondaguard.database import Database, get_database
from rondaguard.schemas import SuccessResponse, SystemSettingsPayload
from rondaguard.services.settings_service import settings_service

router = APIRouter(prefix="/api", tags=["Settings"])


@router.get("/settings", response_model=SystemSettingsPayload, summary="Get system settings")
async def get_settings(db: Database = Depends(get_database)) -> SystemSettingsPayload:
    return await settings_service.get_settings(db)


@router.post("/settings", response_model=SuccessResponse, summary="Save system settings")
async def upsert_settings(
    payload: SystemSettingsPayload,
    db: Database = Depends(get_database),
) -> SuccessResponse:
    await settings_service.upsert_settings(db, payload)
    return SuccessResponse()
