"""
RondaGuard Backend - Aggregate Descriptors
==========================================

What:  Declarative description of every aggregate: its root table, primary
       key, mutable columns, and child collections.
How:   Frozen dataclasses referencing the ORM models. The upsert engine and
       the aggregate reader are generic over `AggregateSpec`; they hold no
       per-entity knowledge of their own.
Who:   Read by services.upsert_engine and services.aggregate_reader.

Aggregates:
    USER_AGGREGATE      users
    TEMPLATE_AGGREGATE  checklist_templates → checklist_template_items (ordered)
    TASK_AGGREGATE      tasks → task_checklist_items (unordered, own ids)
    ROUND_AGGREGATE     round_logs → round_evidence_photos (unordered, insert-only)
    SETTINGS_AGGREGATE  system_settings (singleton)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Type

from rondaguard.database import Base
from rondaguard.models.checklist_template import ChecklistTemplate, TemplateItem
from rondaguard.models.round_log import EvidencePhoto, RoundLog
from rondaguard.models.system_settings import SystemSettings
from rondaguard.models.task import Task, TaskChecklistItem
from rondaguard.models.user import User


@dataclass(frozen=True)
class ChildSpec:
    """
    One child collection of an aggregate.

    Attributes:
        name:         key used in the `children` mapping passed to the engine
        model:        ORM class of the child table
        foreign_key:  column name pointing at the root's primary key
        order_column: sequence column for ordered collections, else None
    """

    name: str
    model: Type[Base]
    foreign_key: str
    order_column: Optional[str] = None

    @property
    def ordered(self) -> bool:
        return self.order_column is not None

    @property
    def foreign_key_column(self):
        return getattr(self.model, self.foreign_key)

    @property
    def sort_column(self):
        """Column children are read back in: the sequence, or the child id."""
        return getattr(self.model, self.order_column or "id")

    def bind(self, root_key: Any, index: int, row: Dict[str, Any]) -> Dict[str, Any]:
        """Attach the parent key (and the sequence number when ordered) to a child row."""
        bound = dict(row)
        bound[self.foreign_key] = root_key
        if self.order_column is not None:
            bound[self.order_column] = index
        return bound


@dataclass(frozen=True)
class AggregateSpec:
    """
    A root table plus its owned child collections.

    Attributes:
        name:               resource name used in errors and logs
        root:               ORM class of the root table
        primary_key:        root column holding the (client-generated) id
        mutable_columns:    columns an update may overwrite
        required_on_insert: columns that must be present to insert a new root
        children:           owned child collections
        insert_only:        roots that are never updated after creation
    """

    name: str
    root: Type[Base]
    primary_key: str = "id"
    mutable_columns: Tuple[str, ...] = ()
    required_on_insert: Tuple[str, ...] = ()
    children: Tuple[ChildSpec, ...] = field(default_factory=tuple)
    insert_only: bool = False

    @property
    def key_column(self):
        return getattr(self.root, self.primary_key)

    def child(self, name: str) -> ChildSpec:
        for child in self.children:
            if child.name == name:
                return child
        raise KeyError(f"{self.name} has no child collection '{name}'")


USER_AGGREGATE = AggregateSpec(
    name="user",
    root=User,
    mutable_columns=("name", "email", "role", "active", "password_hash"),
    required_on_insert=("password_hash",),
)

TEMPLATE_AGGREGATE = AggregateSpec(
    name="template",
    root=ChecklistTemplate,
    mutable_columns=("name",),
    children=(
        ChildSpec(
            name="items",
            model=TemplateItem,
            foreign_key="template_id",
            order_column="display_order",
        ),
    ),
)

# created_at is fixed at creation and never rewritten by an update
TASK_AGGREGATE = AggregateSpec(
    name="task",
    root=Task,
    mutable_columns=("title", "sector", "ticket_id", "description", "responsible_name"),
    children=(
        ChildSpec(name="checklist", model=TaskChecklistItem, foreign_key="task_id"),
    ),
)

ROUND_AGGREGATE = AggregateSpec(
    name="round",
    root=RoundLog,
    children=(
        ChildSpec(name="photos", model=EvidencePhoto, foreign_key="round_id"),
    ),
    insert_only=True,
)

SETTINGS_AGGREGATE = AggregateSpec(
    name="settings",
    root=SystemSettings,
    mutable_columns=("company_name", "header_color", "logo_base64"),
)


@dataclass
class AggregateRows:
    """
    A root row with its child rows, grouped by child collection name.

    Produced by the aggregate reader and consumed by the codec's decoders.
    """

    root: Any
    children: Dict[str, List[Any]] = field(default_factory=dict)

    def rows(self, name: str) -> List[Any]:
        return self.children.get(name, [])
