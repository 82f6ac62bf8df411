"""initial koperasi schema

Revision ID: 0001_initial_koperasi_schema
Revises:
Create Date: 2026-10-18 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_koperasi_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _enum(*values, name):
    return sa.Enum(*values, name=name, native_enum=False)


def upgrade() -> None:
    op.create_table(
        'user',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=150), nullable=True),
        sa.Column('role', _enum('admin', 'operator', name='userroleenum'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_user_email', 'user', ['email'], unique=True)

    op.create_table(
        'member',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('nik', sa.String(length=32), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('join_date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_member_name', 'member', ['name'])
    op.create_index('ix_member_nik', 'member', ['nik'], unique=True)

    op.create_table(
        'loan',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=True),
        sa.Column('borrower_name', sa.String(length=150), nullable=True),
        sa.Column('borrower_nik', sa.String(length=32), nullable=True),
        sa.Column('borrower_phone', sa.String(length=30), nullable=True),
        sa.Column('borrower_address', sa.Text(), nullable=True),
        sa.Column('category', _enum('uang', 'sembako', 'alat_pertanian', 'obat', 'barang', 'elektronik', 'kendaraan', name='loancategory'), nullable=False),
        sa.Column('total_amount', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('interest_rate', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('status', _enum('active', 'paid', 'overdue', name='loanstatus'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['member_id'], ['member.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_loan_member_id', 'loan', ['member_id'])
    op.create_index('ix_loan_borrower_name', 'loan', ['borrower_name'])
    op.create_index('ix_loan_borrower_nik', 'loan', ['borrower_nik'])
    op.create_index('ix_loan_category', 'loan', ['category'])
    op.create_index('ix_loan_status', 'loan', ['status'])

    op.create_table(
        'loan_item',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('loan_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit', sa.String(length=30), nullable=False),
        sa.Column('price', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.ForeignKeyConstraint(['loan_id'], ['loan.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_loan_item_loan_id', 'loan_item', ['loan_id'])

    op.create_table(
        'payment',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('loan_id', sa.Uuid(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=15, scale=2), nullable=False),
        sa.Column('method', _enum('manual', 'hosted_gateway', name='paymentmethod'), nullable=False),
        sa.Column('status', _enum('pending', 'paid', 'expired', 'failed', name='paymentstatus'), nullable=False),
        sa.Column('external_reference', sa.String(length=100), nullable=True),
        sa.Column('gateway_invoice_id', sa.String(length=100), nullable=True),
        sa.Column('invoice_url', sa.String(length=500), nullable=True),
        sa.Column('gateway_transaction_id', sa.String(length=100), nullable=True),
        sa.Column('gateway_payment_method', sa.String(length=50), nullable=True),
        sa.Column('idempotency_key', sa.String(length=100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['loan_id'], ['loan.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_payment_loan_id', 'payment', ['loan_id'])
    op.create_index('ix_payment_status', 'payment', ['status'])
    op.create_index('ix_payment_external_reference', 'payment', ['external_reference'], unique=True)
    op.create_index('ix_payment_idempotency_key', 'payment', ['idempotency_key'], unique=True)

    op.create_table(
        'koperasi_settings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('default_interest_rate', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('notifications_enabled', sa.Boolean(), nullable=False),
        sa.Column('due_date_reminder', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    op.drop_table('koperasi_settings')
    op.drop_index('ix_payment_idempotency_key', table_name='payment')
    op.drop_index('ix_payment_external_reference', table_name='payment')
    op.drop_index('ix_payment_status', table_name='payment')
    op.drop_index('ix_payment_loan_id', table_name='payment')
    op.drop_table('payment')
    op.drop_index('ix_loan_item_loan_id', table_name='loan_item')
    op.drop_table('loan_item')
    op.drop_index('ix_loan_status', table_name='loan')
    op.drop_index('ix_loan_category', table_name='loan')
    op.drop_index('ix_loan_borrower_nik', table_name='loan')
    op.drop_index('ix_loan_borrower_name', table_name='loan')
    op.drop_index('ix_loan_member_id', table_name='loan')
    op.drop_table('loan')
    op.drop_index('ix_member_nik', table_name='member')
    op.drop_index('ix_member_name', table_name='member')
    op.drop_table('member')
    op.drop_index('ix_user_email', table_name='user')
    op.drop_table('user')
