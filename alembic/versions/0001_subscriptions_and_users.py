"""Create users and subscriptions tables

Revision ID: 0001_subscriptions_and_users
Revises:
Create Date: 2024-01-15

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_subscriptions_and_users'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users and subscriptions tables."""

    op.create_table(
        'users',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('email', sa.String(320), nullable=False, index=True),
        sa.Column('name', sa.String(255)),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(64), nullable=False, index=True),

        # Pricing
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), server_default='BRL', nullable=False),
        sa.Column('billing_cycle', sa.String(16), nullable=False),
        sa.Column('status', sa.String(16), server_default='ACTIVE', nullable=False, index=True),

        # Billing dates
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('next_billing_date', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('last_billing_date', sa.DateTime(timezone=True)),
        sa.Column('renewal_notified_at', sa.DateTime(timezone=True)),
        sa.Column('trial_ends_at', sa.DateTime(timezone=True)),

        # Timestamps
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Trial activation lookups
    op.create_index(
        'ix_subscriptions_status_trial_ends_at',
        'subscriptions',
        ['status', 'trial_ends_at'],
    )


def downgrade() -> None:
    """Drop subscriptions and users tables."""
    op.drop_index('ix_subscriptions_status_trial_ends_at', table_name='subscriptions')
    op.drop_table('subscriptions')
    op.drop_table('users')
