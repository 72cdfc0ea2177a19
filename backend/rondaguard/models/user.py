"""
RondaGuard Backend - User Model
===============================

What:  ORM model for the `users` table.
How:   Single-table aggregate; written through the upsert engine with no
       child collections, or by a single-column status update.

Table Design:
    - id: client-generated string key
    - email: unique, used as the login identifier
    - password_hash: bcrypt hash, never returned by the API
    - active: deactivated users cannot log in
"""

from sqlalchemy import Boolean, String, text
from sqlalchemy.orm import Mapped, mapped_column

from rondaguard.database import Base


class User(Base):
    """An operator or administrator who can log in and run rounds."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login identifier",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the user's secret",
    )

    # Values seen in the field: admin, supervisor, operator
    role: Mapped[str] = mapped_column(String(50), nullable=False)

    active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    def __repr__(self) -> str:
        return f"<User(id='{self.id}', email='{self.email}', active={self.active})>"
