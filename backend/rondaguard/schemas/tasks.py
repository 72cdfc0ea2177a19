"""
RondaGuard Backend - Task Schemas
=================================

What:  The task aggregate and its checklist entries.
How:   Checklist entry ids are assigned by the store and surfaced as text.
       Ids sent by clients are ignored: every upsert replaces the whole
       checklist and the store issues new ids.
"""

from typing import List, Optional

from pydantic import Field

from rondaguard.schemas.common import CamelModel, RootId


class TaskChecklistEntry(CamelModel):
    """One check of a task."""
    id: Optional[str] = Field(default=None, description="Store-assigned id (read only)")
    label: str = Field(min_length=1)
    checked: bool = False


class TaskAggregate(CamelModel):
    """
    A task with its checklist.

    `responsible` maps to the `responsible_name` column; `created_at` is
    epoch milliseconds and is kept from the first write.
    """
    id: RootId
    title: str = Field(min_length=1, max_length=255)
    sector: Optional[str] = Field(default=None, max_length=255)
    ticket_id: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = None
    responsible: Optional[str] = Field(default=None, max_length=255)
    created_at: int = Field(ge=0, description="Epoch milliseconds")
    checklist: List[TaskChecklistEntry] = Field(default_factory=list)
