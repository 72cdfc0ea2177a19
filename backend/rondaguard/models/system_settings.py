"""
RondaGuard Backend - System Settings Model
==========================================

What:  The `system_settings` singleton row (id is always 1) holding the
       tenant's display and branding configuration.
"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rondaguard.database import Base

SETTINGS_ROW_ID = 1


class SystemSettings(Base):
    """Company name, header color and logo shown by the clients."""

    __tablename__ = "system_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    header_color: Mapped[str] = mapped_column(String(32), nullable=False)
    logo_base64: Mapped[str | None] = mapped_column(Text, nullable=True)
