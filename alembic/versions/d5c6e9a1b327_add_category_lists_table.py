"""Add category_lists table

Revision ID: d5c6e9a1b327
Revises: 8e3b7a5d2c44
Create Date: 2026-09-29

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "d5c6e9a1b327"
down_revision: Union[str, Sequence[str], None] = "8e3b7a5d2c44"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "category_lists",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("categories", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_category_lists_title", "category_lists", ["title"])
    op.create_index("ix_category_lists_slug", "category_lists", ["slug"], unique=True)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_category_lists_slug", table_name="category_lists")
    op.drop_index("ix_category_lists_title", table_name="category_lists")
    op.drop_table("category_lists")
