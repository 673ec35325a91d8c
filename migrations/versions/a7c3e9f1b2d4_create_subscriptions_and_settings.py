"""create subscriptions and user_settings tables

Revision ID: a7c3e9f1b2d4
Revises:
Create Date: 2026-01-20
"""
from alembic import op
import sqlalchemy as sa


revision = 'a7c3e9f1b2d4'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'subscriptions',
        sa.Column('id', sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('cost', sa.Numeric(12, 2), nullable=False),
        sa.Column('billing_cycle', sa.String(16), nullable=False, server_default='monthly'),
        sa.Column('first_payment_date', sa.Date(), nullable=True),
        sa.Column('category', sa.String(32), nullable=False, server_default='other'),
        sa.Column('status', sa.String(16), nullable=False, server_default='active'),
        sa.Column('is_shared', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('shared_with', sa.SmallInteger(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.CheckConstraint('cost >= 0', name='ck_subscriptions_cost_non_negative'),
        sa.CheckConstraint('shared_with >= 1', name='ck_subscriptions_shared_with_positive'),
    )
    op.create_index('ix_subscriptions_created_at', 'subscriptions', ['created_at'])

    op.create_table(
        'user_settings',
        sa.Column('id', sa.Integer(), autoincrement=True, primary_key=True),
        sa.Column('monthly_budget', sa.Numeric(12, 2), nullable=True),
        sa.Column('alert_threshold', sa.Integer(), nullable=False, server_default='80'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), nullable=True),
    )


def downgrade():
    op.drop_table('user_settings')
    op.drop_index('ix_subscriptions_created_at', table_name='subscriptions')
    op.drop_table('subscriptions')
