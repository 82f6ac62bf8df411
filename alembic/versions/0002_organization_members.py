"""organization members

Revision ID: 0002_organization_members
Revises: 0001_initial_koperasi_schema
Create Date: 2026-10-18 14:37:05.502913

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0002_organization_members'
down_revision: Union[str, None] = '0001_initial_koperasi_schema'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'organization_member',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('position', sa.String(length=100), nullable=False),
        sa.Column('photo_url', sa.String(length=500), nullable=True),
        sa.Column('member_type', sa.Enum('pengurus', 'pengawas', name='organizationmembertype', native_enum=False), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_organization_member_member_type', 'organization_member', ['member_type'])


def downgrade() -> None:
    op.drop_index('ix_organization_member_member_type', table_name='organization_member')
    op.drop_table('organization_member')
