"""
Create user, wallet, financial_source and transaction tables

Revision ID: 3e7a91c0b2d4
Revises:
Create Date: 2026-10-19 09:00:00
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3e7a91c0b2d4'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def _soft_delete() -> list[sa.Column]:
    return [
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    # Enums are stored by member name (on SQLite a CHECK-constrained TEXT)
    source_kind = sa.Enum('INCOME', 'EXPENSE', name='source_kind')
    cycle_period = sa.Enum('MONTHLY', 'QUARTERLY', 'YEARLY', name='cycle_period')
    txn_kind = sa.Enum('CREDIT', 'DEBIT', name='txn_kind')

    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=320), nullable=False, unique=True),
        sa.Column('display_name', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'wallet',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('initial_amount', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('balance', sa.Numeric(18, 2), nullable=False, server_default='0'),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_soft_delete(),
        *_timestamps(),
        sa.CheckConstraint('initial_amount >= 0', name='ck_wallet_initial_non_negative'),
    )
    op.create_index('ix_wallet_user_deleted', 'wallet', ['user_id', 'is_deleted'])

    op.create_table(
        'financial_source',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('wallet_id', sa.Integer(), sa.ForeignKey('wallet.id'), nullable=False),
        sa.Column('kind', source_kind, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('is_fixed', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('cycle_day_of_month', sa.Integer(), nullable=True),
        sa.Column('cycle_period', cycle_period, nullable=True),
        sa.Column('next_due_date', sa.Date(), nullable=True),
        sa.Column('last_processed_on', sa.Date(), nullable=True),
        sa.Column('entry_date', sa.DateTime(), nullable=True),
        *_soft_delete(),
        *_timestamps(),
        sa.CheckConstraint('amount > 0', name='ck_source_amount_positive'),
        sa.CheckConstraint(
            "(is_fixed = 1 AND cycle_day_of_month IS NOT NULL AND cycle_period IS NOT NULL AND entry_date IS NULL)"
            " OR (is_fixed = 0 AND entry_date IS NOT NULL AND cycle_day_of_month IS NULL AND cycle_period IS NULL)",
            name='ck_source_schedule_shape',
        ),
        sa.CheckConstraint(
            'cycle_day_of_month IS NULL OR (cycle_day_of_month BETWEEN 1 AND 31)',
            name='ck_source_cycle_day_range',
        ),
    )
    op.create_index('ix_source_user_deleted', 'financial_source', ['user_id', 'is_deleted'])
    op.create_index('ix_source_kind_fixed', 'financial_source', ['kind', 'is_fixed', 'is_deleted'])
    op.create_index('ix_source_wallet', 'financial_source', ['wallet_id'])

    op.create_table(
        'transaction',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('wallet_id', sa.Integer(), sa.ForeignKey('wallet.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column(
            'source_id',
            sa.Integer(),
            sa.ForeignKey('financial_source.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('file', sa.Text(), nullable=True),
        sa.Column('amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('kind', txn_kind, nullable=False),
        sa.Column('occurred_at', sa.DateTime(), nullable=False),
        *_soft_delete(),
        *_timestamps(),
        sa.CheckConstraint('amount > 0', name='ck_txn_amount_positive'),
    )
    op.create_index('ix_txn_user_deleted', 'transaction', ['user_id', 'is_deleted'])
    op.create_index('ix_txn_wallet', 'transaction', ['wallet_id'])
    op.create_index('ix_txn_occurred_at', 'transaction', ['occurred_at'])


def downgrade() -> None:
    op.drop_index('ix_txn_occurred_at', table_name='transaction')
    op.drop_index('ix_txn_wallet', table_name='transaction')
    op.drop_index('ix_txn_user_deleted', table_name='transaction')
    op.drop_table('transaction')

    op.drop_index('ix_source_wallet', table_name='financial_source')
    op.drop_index('ix_source_kind_fixed', table_name='financial_source')
    op.drop_index('ix_source_user_deleted', table_name='financial_source')
    op.drop_table('financial_source')

    op.drop_index('ix_wallet_user_deleted', table_name='wallet')
    op.drop_table('wallet')
    op.drop_table('user')
