"""
RondaGuard Backend - Login Route
================================

What:  POST /api/login: email + secret in, user profile out.
"""

from fastapi import APIRouter, Depends

from rondaguard.database import Database, get_database
from rondaguard.schemas import ErrorResponse, LoginRequest, UserOut
from rondaguard.services.user_service import user_service

router = APIRouter(prefix="/api", tags=["Auth"])


@router.post(
    "/login",
    response_model=UserOut,
    responses={
        401: {"description": "Invalid credentials", "model": ErrorResponse},
        403: {"description": "User is inactive", "model": ErrorResponse},
    },
    summary="Log in with email and password",
)
async def login(
    credentials: LoginRequest,
    db: Database = Depends(get_database),
) -> UserOut:
    return await user_service.authenticate(db, credentials.email, credentials.password)
