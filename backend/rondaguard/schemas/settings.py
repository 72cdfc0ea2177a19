"""
RondaGuard Backend - System Settings Schema
===========================================

What:  Branding configuration shown by the clients, plus the fallback used
       when no settings row has been saved yet.
"""

from typing import Optional

from pydantic import Field

from rondaguard.schemas.common import CamelModel


class SystemSettingsPayload(CamelModel):
    company_name: str = Field(min_length=1, max_length=255)
    header_color: str = Field(min_length=1, max_length=32)
    logo: Optional[str] = Field(default=None, description="Base64 logo image")


DEFAULT_SETTINGS = SystemSettingsPayload(
    company_name="RondaGuard",
    header_color="#203060",
    logo=None,
)
