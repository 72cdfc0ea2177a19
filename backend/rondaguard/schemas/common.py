"""
RondaGuard Backend - Shared Schema Pieces
=========================================

What:  The camelCase base model plus the response envelopes shared by every
       route (success acknowledgement, error body, health report).
"""

from typing import Annotated, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

# Root ids are generated by the clients
RootId = Annotated[str, Field(min_length=1, max_length=64, description="Client-generated identifier")]


class CamelModel(BaseModel):
    """Base for wire models: snake_case attributes, camelCase JSON."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class SuccessResponse(BaseModel):
    """Acknowledgement returned by every write endpoint."""
    success: bool = True


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all API errors.

    Example:
        {
            "error": "conflict",
            "message": "The write violates a data constraint ...",
            "details": null,
            "request_id": "3f2a9c1e"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response: service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
