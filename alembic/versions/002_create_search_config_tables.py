"""Create search configuration tables.

Revision ID: 002
Revises: 001
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create taxonomy, classification rule and filter definition tables."""
    # Taxonomy nodes
    op.create_table(
        'search_taxonomy',
        sa.Column('code', sa.String(100), primary_key=True),
        sa.Column('parent_code', sa.String(100), nullable=True, index=True),
        sa.Column('level', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
    )

    # Classification rules
    op.create_table(
        'search_classification_rules',
        sa.Column('name', sa.String(100), primary_key=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('taxonomy_code', sa.String(100), nullable=True, index=True),
        sa.Column('flag_name', sa.String(100), nullable=True),
        sa.Column('group_ids', postgresql.JSONB, nullable=True),
        sa.Column('class_ids', postgresql.JSONB, nullable=True),
        sa.Column('attribute_conditions', postgresql.JSONB, nullable=True),
        sa.Column('text_pattern', sa.Text(), nullable=True),
        sa.Column('priority', sa.Integer(), nullable=False, server_default='100', index=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
    )

    # Filter definitions
    op.create_table(
        'search_filter_definitions',
        sa.Column('key', sa.String(100), primary_key=True),
        sa.Column('label', sa.String(200), nullable=False),
        sa.Column('kind', sa.String(20), nullable=False),
        sa.Column('source_attribute', sa.String(100), nullable=False, index=True),
        sa.Column('applicable_taxonomy_codes', postgresql.JSONB, nullable=True),
        sa.Column('category', sa.String(50), nullable=False, server_default='other'),
        sa.Column('unit', sa.String(20), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
    )


def downgrade() -> None:
    """Drop search configuration tables."""
    op.drop_table('search_filter_definitions')
    op.drop_table('search_classification_rules')
    op.drop_table('search_taxonomy')
