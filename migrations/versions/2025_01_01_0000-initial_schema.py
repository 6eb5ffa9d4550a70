"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2025-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the links table:
    - unique index on code (authoritative uniqueness for allocation)
    - index on created_at (newest-first listing)
    """
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    if 'links' in existing_tables:
        return

    op.create_table(
        'links',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('code', sa.String(length=8), nullable=False),
        sa.Column('target_url', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('total_clicks', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_clicked_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_index(
        'ix_links_code',
        'links',
        ['code'],
        unique=True
    )

    op.create_index(
        'ix_links_created_at',
        'links',
        ['created_at']
    )


def downgrade() -> None:
    op.drop_index('ix_links_created_at', table_name='links')
    op.drop_index('ix_links_code', table_name='links')
    op.drop_table('links')
