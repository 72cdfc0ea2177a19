"""
RondaGuard Backend - Round Log Models
=====================================

What:  `round_logs` (append-only root) and `round_evidence_photos`
       (unordered multiset of base64 blobs).
How:   A round log copies everything it needs from its task at creation
       time: `task_id` is a plain column (no foreign key, the task may be
       deleted later) and `checklist_snapshot` holds the checklist state as
       JSON text. Rows are never updated after insert.

Query Patterns:
    - History: ORDER BY start_time DESC → idx_round_logs_start_time
    - Photos:  WHERE round_id IN (...)  → idx_round_photos_round_id
"""

from sqlalchemy import BigInteger, Boolean, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from rondaguard.database import Base


class RoundLog(Base):
    """The immutable record of one inspection round."""

    __tablename__ = "round_logs"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    task_id: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        comment="Task the round was run against; informational, not a foreign key",
    )
    task_title: Mapped[str] = mapped_column(String(255), nullable=False)
    sector: Mapped[str | None] = mapped_column(String(255), nullable=True)
    ticket_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    responsible_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Epoch milliseconds
    start_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    end_time: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    duration_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)

    observations: Mapped[str | None] = mapped_column(Text, nullable=True)

    issues_detected: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    ai_analysis: Mapped[str | None] = mapped_column(Text, nullable=True)
    signature_base64: Mapped[str | None] = mapped_column(Text, nullable=True)
    validation_token: Mapped[str | None] = mapped_column(String(255), nullable=True)

    checklist_snapshot: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="JSON snapshot of the checklist state; the text 'null' when absent",
    )

    __table_args__ = (
        Index("idx_round_logs_start_time", start_time.desc()),
    )

    def __repr__(self) -> str:
        return f"<RoundLog(id='{self.id}', task_title='{self.task_title}', start_time={self.start_time})>"


class EvidencePhoto(Base):
    """A base64-encoded photo attached to a round log."""

    __tablename__ = "round_evidence_photos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    round_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("round_logs.id", ondelete="CASCADE"),
        nullable=False,
    )

    photo_base64: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        Index("idx_round_photos_round_id", "round_id"),
    )
