"""add_experimental_validation

Revision ID: 9d4f2b7e1c35
Revises: 7c1e2a9d4b10
Create Date: 2026-10-19 14:00:00.000000
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '9d4f2b7e1c35'
down_revision: Union[str, None] = '7c1e2a9d4b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_PAYLOAD = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def upgrade() -> None:
    op.add_column('interactions', sa.Column('experimental_validation', _PAYLOAD, nullable=True))
    op.add_column('complex_interactions', sa.Column('experimental_validation', _PAYLOAD, nullable=True))


def downgrade() -> None:
    op.drop_column('complex_interactions', 'experimental_validation')
    op.drop_column('interactions', 'experimental_validation')
