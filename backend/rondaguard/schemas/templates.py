"""
RondaGuard Backend - Checklist Template Schema
==============================================

What:  The checklist template aggregate as it travels over the wire.
How:   `items` is a plain list of labels; its order is the display order.
"""

from typing import Annotated, List

from pydantic import Field

from rondaguard.schemas.common import CamelModel, RootId

ItemLabel = Annotated[str, Field(min_length=1)]


class ChecklistTemplateAggregate(CamelModel):
    """
    Example:
        {"id": "tpl-1", "name": "Night round", "items": ["Gate A", "Gate B"]}
    """
    id: RootId
    name: str = Field(min_length=1, max_length=255)
    items: List[ItemLabel] = Field(default_factory=list)
