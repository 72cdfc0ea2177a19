"""
RondaGuard Backend - Checklist Template Models
==============================================

What:  `checklist_templates` (root) and `checklist_template_items` (ordered
       children).
How:   Items carry a `display_order` assigned 0..n-1 from the submission
       index. An update deletes every item of the template and inserts the
       new list, so the order is always contiguous.
"""

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from rondaguard.database import Base


class ChecklistTemplate(Base):
    """A reusable list of checks that tasks are built from."""

    __tablename__ = "checklist_templates"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<ChecklistTemplate(id='{self.id}', name='{self.name}')>"


class TemplateItem(Base):
    """One label of a template, at a fixed position."""

    __tablename__ = "checklist_template_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    template_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("checklist_templates.id", ondelete="CASCADE"),
        nullable=False,
    )

    item_label: Mapped[str] = mapped_column(Text, nullable=False)

    display_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Zero-based position inside the template",
    )

    __table_args__ = (
        Index("idx_template_items_template_order", "template_id", "display_order"),
    )
