"""
RondaGuard Backend - Wire Schemas
=================================

What:  Pydantic models defining the JSON contract with the clients.
How:   Field names are snake_case in Python and camelCase on the wire
       (`ticket_id` ↔ `ticketId`); both spellings are accepted on input,
       responses use camelCase.
Who:   Routes (request/response models), the codec, and the services.
"""

from rondaguard.schemas.common import ErrorResponse, HealthResponse, SuccessResponse
from rondaguard.schemas.rounds import RoundLogAggregate
from rondaguard.schemas.settings import DEFAULT_SETTINGS, SystemSettingsPayload
from rondaguard.schemas.tasks import TaskAggregate, TaskChecklistEntry
from rondaguard.schemas.templates import ChecklistTemplateAggregate
from rondaguard.schemas.users import LoginRequest, UserIn, UserOut, UserStatusUpdate

__all__ = [
    "ChecklistTemplateAggregate",
    "DEFAULT_SETTINGS",
    "ErrorResponse",
    "HealthResponse",
    "LoginRequest",
    "RoundLogAggregate",
    "SuccessResponse",
    "SystemSettingsPayload",
    "TaskAggregate",
    "TaskChecklistEntry",
    "UserIn",
    "UserOut",
    "UserStatusUpdate",
]
