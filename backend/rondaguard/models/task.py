"""
RondaGuard Backend - Task Models
================================

What:  `tasks` (root) and `task_checklist_items` (unordered children with
       their own store-generated ids).
How:   `created_at` is epoch milliseconds in a BIGINT and is only written on
       insert. Checklist items are replaced wholesale on every update, so
       their ids change across updates.

Query Patterns:
    - List tasks: ORDER BY created_at DESC → idx_tasks_created_at
    - Children:   WHERE task_id IN (...)   → idx_task_items_task_id
"""

from sqlalchemy import BigInteger, Boolean, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from rondaguard.database import Base


class Task(Base):
    """A unit of work (usually tied to a ticket) that a round is run against."""

    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    sector: Mapped[str | None] = mapped_column(String(255), nullable=True)
    ticket_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    responsible_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        comment="Creation time, epoch milliseconds",
    )

    __table_args__ = (
        Index("idx_tasks_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Task(id='{self.id}', title='{self.title}', created_at={self.created_at})>"


class TaskChecklistItem(Base):
    """One check of a task, with its checked state."""

    __tablename__ = "task_checklist_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    task_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
    )

    label: Mapped[str] = mapped_column(Text, nullable=False)

    is_checked: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    __table_args__ = (
        Index("idx_task_items_task_id", "task_id"),
    )
