"""
RondaGuard Backend - Round Log Schema
=====================================

What:  The round log aggregate: a self-contained record of one inspection
       round, its checklist snapshot, signature and evidence photos.
How:   Times are epoch milliseconds. `checklist_state` is opaque JSON
       captured when the round ended; it is stored as text and parsed back
       on read. Photos are base64 strings.
"""

from typing import Any, List, Optional

from pydantic import Field

from rondaguard.schemas.common import CamelModel, RootId

# Any JSON value, usually an object such as {"item1": true, "item2": false}
ChecklistSnapshot = Any


class RoundLogAggregate(CamelModel):
    """A finished inspection round. Created once, never updated."""
    id: RootId
    task_id: Optional[str] = Field(default=None, max_length=64)
    task_title: str = Field(min_length=1, max_length=255)
    sector: Optional[str] = Field(default=None, max_length=255)
    ticket_id: Optional[str] = Field(default=None, max_length=100)
    responsible: Optional[str] = Field(default=None, max_length=255)
    start_time: int = Field(ge=0, description="Epoch milliseconds")
    end_time: Optional[int] = Field(default=None, ge=0, description="Epoch milliseconds")
    duration_seconds: Optional[int] = Field(default=None, ge=0)
    observations: Optional[str] = None
    issues_detected: bool = False
    ai_analysis: Optional[str] = None
    signature: Optional[str] = Field(default=None, description="Base64 signature image")
    validation_token: Optional[str] = Field(default=None, max_length=255)
    checklist_state: ChecklistSnapshot = None
    photos: List[str] = Field(default_factory=list, description="Base64 evidence photos")
