"""Create products table.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create products table."""
    op.create_table(
        'products',
        sa.Column('id', sa.String(100), primary_key=True),
        sa.Column('group_code', sa.String(20), nullable=True, index=True),
        sa.Column('class_code', sa.String(20), nullable=True, index=True),
        sa.Column('class_name', sa.String(200), nullable=True),
        sa.Column('attributes', postgresql.JSONB, nullable=False, server_default='{}'),
        sa.Column('description_short', sa.String(500), nullable=False, server_default=''),
        sa.Column('description_long', sa.Text(), nullable=True),
        sa.Column('supplier', sa.String(100), nullable=True, index=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=True),
        sa.Column('image_url', sa.String(1000), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true', index=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )


def downgrade() -> None:
    """Drop products table."""
    op.drop_table('products')
