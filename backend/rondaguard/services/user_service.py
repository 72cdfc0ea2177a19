"""
RondaGuard Backend - User Service
=================================

What:  User listing, upsert, activation toggle, and login.
How:   Users are a single-table aggregate written through the upsert
       engine. Secrets are bcrypt-hashed before they reach the codec.

Login shape:
    1. Look the user up by email
    2. Verify the secret against the stored hash
    3. Reject inactive users
"""

import logging
from typing import Any, List

from sqlalchemy import select, update

from rondaguard.codec import decode_user, encode_user, parse_aggregate
from rondaguard.database import Database
from rondaguard.exceptions import AuthenticationError, InactiveUserError, NotFoundError
from rondaguard.models import User
from rondaguard.models.aggregates import USER_AGGREGATE
from rondaguard.schemas import UserIn, UserOut
from rondaguard.security import hash_password, verify_password
from rondaguard.services.aggregate_reader import aggregate_reader
from rondaguard.services.upsert_engine import UpsertOutcome, upsert_engine

logger = logging.getLogger(__name__)


class UserService:
    """Operations on the User aggregate."""

    async def list_users(self, db: Database) -> List[UserOut]:
        rows = await aggregate_reader.list(db, USER_AGGREGATE)
        return [decode_user(row.root) for row in rows]

    async def upsert_user(self, db: Database, user: Any) -> UpsertOutcome:
        """
        Create the user, or overwrite name, email, role and active flag.

        A submitted password replaces the stored hash; an omitted one keeps
        it. Creating a user without a password is a ValidationError.
        """
        user = parse_aggregate(UserIn, user)
        password_hash = hash_password(user.password) if user.password else None
        return await upsert_engine.upsert(db, USER_AGGREGATE, encode_user(user, password_hash))

    async def set_user_active(self, db: Database, user_id: str, active: bool) -> None:
        """
        Flip the active flag of one user.

        Raises:
            NotFoundError: no user with this id
        """
        async with db.transaction() as session:
            result = await session.execute(
                update(User).where(User.id == user_id).values(active=bool(active))
            )
            if (result.rowcount or 0) == 0:
                raise NotFoundError(resource="user", resource_id=user_id)
        logger.info("user %s active=%s", user_id, bool(active))

    async def authenticate(self, db: Database, email: str, password: str) -> UserOut:
        """
        Return the user matching email and secret.

        Raises:
            AuthenticationError: unknown email or wrong secret
            InactiveUserError:   credentials match a deactivated user
        """
        async with db.read() as session:
            result = await session.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Failed login for %s", email)
            raise AuthenticationError()

        decoded = decode_user(user)
        if not decoded.active:
            logger.warning("Login refused for inactive user %s", user.id)
            raise InactiveUserError()
        return decoded


user_service = UserService()
