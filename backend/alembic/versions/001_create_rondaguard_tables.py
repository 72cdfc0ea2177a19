"""Create RondaGuard tables

Revision ID: 001
Revises: None
Create Date: 2025-01-15 00:00:00.000000+00:00

What:  Creates every table of the five aggregates:
       users, checklist_templates (+ items), tasks (+ checklist items),
       round_logs (+ evidence photos), system_settings.
How:   Child tables reference their root with ON DELETE CASCADE; the
       services also delete children explicitly.

Rollback: downgrade() drops all tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, comment="Login identifier"),
        sa.Column(
            "password_hash",
            sa.String(255),
            nullable=False,
            comment="bcrypt hash of the user's secret",
        ),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    # ── checklist templates ───────────────────────────────────────────────
    op.create_table(
        "checklist_templates",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "checklist_template_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("template_id", sa.String(64), nullable=False),
        sa.Column("item_label", sa.Text(), nullable=False),
        sa.Column(
            "display_order",
            sa.Integer(),
            nullable=False,
            comment="Zero-based position inside the template",
        ),
        sa.ForeignKeyConstraint(["template_id"], ["checklist_templates.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_template_items_template_order",
        "checklist_template_items",
        ["template_id", "display_order"],
    )

    # ── tasks ─────────────────────────────────────────────────────────────
    op.create_table(
        "tasks",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("sector", sa.String(255), nullable=True),
        sa.Column("ticket_id", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("responsible_name", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.BigInteger(),
            nullable=False,
            comment="Creation time, epoch milliseconds",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_tasks_created_at", "tasks", [sa.text("created_at DESC")])
    op.create_table(
        "task_checklist_items",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("task_id", sa.String(64), nullable=False),
        sa.Column("label", sa.Text(), nullable=False),
        sa.Column("is_checked", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.ForeignKeyConstraint(["task_id"], ["tasks.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_task_items_task_id", "task_checklist_items", ["task_id"])

    # ── round logs ────────────────────────────────────────────────────────
    op.create_table(
        "round_logs",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column(
            "task_id",
            sa.String(64),
            nullable=True,
            comment="Task the round was run against; informational, not a foreign key",
        ),
        sa.Column("task_title", sa.String(255), nullable=False),
        sa.Column("sector", sa.String(255), nullable=True),
        sa.Column("ticket_id", sa.String(100), nullable=True),
        sa.Column("responsible_name", sa.String(255), nullable=True),
        sa.Column("start_time", sa.BigInteger(), nullable=False),
        sa.Column("end_time", sa.BigInteger(), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("observations", sa.Text(), nullable=True),
        sa.Column("issues_detected", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("ai_analysis", sa.Text(), nullable=True),
        sa.Column("signature_base64", sa.Text(), nullable=True),
        sa.Column("validation_token", sa.String(255), nullable=True),
        sa.Column(
            "checklist_snapshot",
            sa.Text(),
            nullable=False,
            comment="JSON snapshot of the checklist state; the text 'null' when absent",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_round_logs_start_time", "round_logs", [sa.text("start_time DESC")])
    op.create_table(
        "round_evidence_photos",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("round_id", sa.String(64), nullable=False),
        sa.Column("photo_base64", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["round_id"], ["round_logs.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_round_photos_round_id", "round_evidence_photos", ["round_id"])

    # ── system settings (singleton, id = 1) ───────────────────────────────
    op.create_table(
        "system_settings",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("company_name", sa.String(255), nullable=False),
        sa.Column("header_color", sa.String(32), nullable=False),
        sa.Column("logo_base64", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Drop every table, children first. All data is lost."""
    op.drop_table("system_settings")
    op.drop_index("idx_round_photos_round_id", table_name="round_evidence_photos")
    op.drop_table("round_evidence_photos")
    op.drop_index("idx_round_logs_start_time", table_name="round_logs")
    op.drop_table("round_logs")
    op.drop_index("idx_task_items_task_id", table_name="task_checklist_items")
    op.drop_table("task_checklist_items")
    op.drop_index("idx_tasks_created_at", table_name="tasks")
    op.drop_table("tasks")
    op.drop_index("idx_template_items_template_order", table_name="checklist_template_items")
    op.drop_table("checklist_template_items")
    op.drop_table("checklist_templates")
    op.drop_table("users")
