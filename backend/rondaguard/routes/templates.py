"""
RondaGuard Backend - Checklist Template Routes
==============================================

What:  CRUD for checklist templates. POST is an upsert that replaces the
       template's whole item list.
"""

from typing import List

from fastapi import APIRouter, Depends

from rondaguard.database import Database, get_database
from rondaguard.schemas import ChecklistTemplateAggregate, ErrorResponse, SuccessResponse
from rondaguard.services.template_service import template_service

router = APIRouter(prefix="/api", tags=["Templates"])


@router.get(
    "/templates",
    response_model=List[ChecklistTemplateAggregate],
    summary="List checklist templates with their items",
)
async def list_templates(db: Database = Depends(get_database)) -> List[ChecklistTemplateAggregate]:
    return await template_service.list_templates(db)


@router.get(
    "/templates/{template_id}",
    response_model=ChecklistTemplateAggregate,
    responses={404: {"description": "Template not found", "model": ErrorResponse}},
    summary="Get one checklist template",
)
async def get_template(
    template_id: str,
    db: Database = Depends(get_database),
) -> ChecklistTemplateAggregate:
    return await template_service.get_template(db, template_id)


@router.post(
    "/templates",
    response_model=SuccessResponse,
    summary="Create or replace a checklist template",
)
async def upsert_template(
    template: ChecklistTemplateAggregate,
    db: Database = Depends(get_database),
) -> SuccessResponse:
    await template_service.upsert_template(db, template)
    return SuccessResponse()


@router.delete(
    "/templates/{template_id}",
    response_model=SuccessResponse,
    summary="Delete a checklist template and its items",
)
async def delete_template(
    template_id: str,
    db: Database = Depends(get_database),
) -> SuccessResponse:
    await template_service.delete_template(db, template_id)
    return SuccessResponse()
