"""Create tasks and time_logs tables

Revision ID: 4a1f0c2b9d10
Revises:
Create Date: 2026-09-02

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4a1f0c2b9d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "tasks",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("urgency", sa.String(), nullable=False),
        sa.Column("importance", sa.String(), nullable=False),
        sa.Column("estimate", sa.Float(), nullable=True),
        sa.Column("due_on", sa.Date(), nullable=True),
        sa.Column("project_id", sa.String(), nullable=True),
        sa.Column("phase_key", sa.String(), nullable=True),
        sa.Column("category_lists", sa.JSON(), nullable=False),
        sa.Column("estimation_data", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_tasks_status", "tasks", ["status"])
    op.create_index("ix_tasks_urgency", "tasks", ["urgency"])
    op.create_index("ix_tasks_due_on", "tasks", ["due_on"])
    op.create_index("ix_tasks_project_id", "tasks", ["project_id"])

    op.create_table(
        "time_logs",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("task_id", sa.String(), sa.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("hours", sa.Float(), nullable=False),
        sa.Column("date_logged", sa.Date(), nullable=False),
        sa.Column("category_key", sa.String(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_time_logs_task_id", "time_logs", ["task_id"])
    op.create_index("ix_time_logs_date_logged", "time_logs", ["date_logged"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_time_logs_date_logged", table_name="time_logs")
    op.drop_index("ix_time_logs_task_id", table_name="time_logs")
    op.drop_table("time_logs")
    op.drop_index("ix_tasks_project_id", table_name="tasks")
    op.drop_index("ix_tasks_due_on", table_name="tasks")
    op.drop_index("ix_tasks_urgency", table_name="tasks")
    op.drop_index("ix_tasks_status", table_name="tasks")
    op.drop_table("tasks")
