"""Add task status history and remaining-hours ledger

Revision ID: 8e3b7a5d2c44
Revises: 4a1f0c2b9d10
Create Date: 2026-09-14

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "8e3b7a5d2c44"
down_revision: Union[str, Sequence[str], None] = "4a1f0c2b9d10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Existing rows keep NULLs; they are normalized when loaded.
    op.add_column("tasks", sa.Column("status_history", sa.JSON(), nullable=True))
    op.add_column("tasks", sa.Column("remaining_hours", sa.Float(), nullable=True))

    op.create_table(
        "remaining_hours_history",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("task_id", sa.String(), sa.ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False),
        sa.Column("remaining_hours", sa.Float(), nullable=False),
        sa.Column("previous_remaining_hours", sa.Float(), nullable=True),
        sa.Column("timestamp", sa.DateTime(), nullable=False),
        sa.Column("note", sa.String(), nullable=False, server_default=""),
    )
    op.create_index("ix_remaining_hours_history_task_id", "remaining_hours_history", ["task_id"])
    op.create_index("ix_remaining_hours_history_timestamp", "remaining_hours_history", ["timestamp"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_remaining_hours_history_timestamp", table_name="remaining_hours_history")
    op.drop_index("ix_remaining_hours_history_task_id", table_name="remaining_hours_history")
    op.drop_table("remaining_hours_history")
    op.drop_column("tasks", "remaining_hours")
    op.drop_column("tasks", "status_history")
