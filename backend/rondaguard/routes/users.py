"""
RondaGuard Backend - User Routes
================================

What:  User administration: list, upsert, activate/deactivate.
"""

from typing import List

from fastapi import APIRouter, Depends

from rondaguard.database import Database, get_database
from rondaguard.schemas import ErrorResponse, SuccessResponse, UserIn, UserOut, UserStatusUpdate
from rondaguard.services.user_service import user_service


router = APIRouter(prefix="/api", tags=["Users"])


@router.get("/users", response_model=List[UserOut], summary="List users")
async def list_users(db: Database = Depends(get_database)) -> List[UserOut]:
    return await user_service.list_users(db)


@router.post(
    "/users",
    response_model=SuccessResponse,
    responses={
        400: {"description": "Missing password for a new user", "model": ErrorResponse},
        409: {"description": "Email already used", "model": ErrorResponse},
    },
    summary="Create or update a user",
)
async def upsert_user(user: UserIn, db: Database = Depends(get_database)) -> SuccessResponse:
    await user_service.upsert_user(db, user)
    return SuccessResponse()


@router.put(
    "/users/{user_id}/status",
    response_model=SuccessResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Activate or deactivate a user",
)
async def set_user_status(
    user_id: str,
    body: UserStatusUpdate,
    db: Database = Depends(get_database),
) -> SuccessResponse:
    await user_service.set_user_active(db, user_id, body.active)
    return SuccessResponse()
