# Models package init: importing it registers every table on Base.metadata
from rondaguard.models.checklist_template import ChecklistTemplate, TemplateItem
from rondaguard.models.round_log import EvidencePhoto, RoundLog
from rondaguard.models.system_settings import SETTINGS_ROW_ID, SystemSettings
from rondaguard.models.task import Task, TaskChecklistItem
from rondaguard.models.user import User

__all__ = [
    "ChecklistTemplate",
    "EvidencePhoto",
    "RoundLog",
    "SETTINGS_ROW_ID",
    "SystemSettings",
    "Task",
    "TaskChecklistItem",
    "TemplateItem",
    "User",
]
