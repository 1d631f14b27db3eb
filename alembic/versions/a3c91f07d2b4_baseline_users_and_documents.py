"""baseline users and documents

Revision ID: a3c91f07d2b4
Revises: 
Create Date: 2026-10-19 10:12:41.518302

Production-safe migration: Only creates tables that do not exist yet.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = 'a3c91f07d2b4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    """Check if a table exists in the database."""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def _document_table(name: str) -> None:
    op.create_table(name,
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=128), nullable=False),
        sa.Column('content', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f(f'ix_{name}_user_id'), name, ['user_id'], unique=False)
    op.create_index(op.f(f'ix_{name}_created_at'), name, ['created_at'], unique=False)


def upgrade() -> None:
    if not table_exists('users'):
        op.create_table('users',
            sa.Column('id', sa.String(length=128), nullable=False),
            sa.Column('email', sa.String(), nullable=False),
            sa.Column('password_hash', sa.String(), nullable=True),
            sa.Column('display_name', sa.String(), nullable=True),
            sa.Column('role', sa.String(), nullable=False, server_default='user'),
            sa.Column('billing_customer_ref', sa.String(), nullable=True),
            sa.Column('subscription_reference_id', sa.String(), nullable=True),
            sa.Column('subscription_status', sa.String(), nullable=False, server_default='active'),
            sa.Column('subscription_plan', sa.String(), nullable=False, server_default='free'),
            sa.Column('subscription_cancel_at_period_end', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('subscription_ends_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
        op.create_index(op.f('ix_users_billing_customer_ref'), 'users', ['billing_customer_ref'], unique=False)

    if not table_exists('resumes'):
        _document_table('resumes')

    if not table_exists('cover_letters'):
        _document_table('cover_letters')


def downgrade() -> None:
    op.drop_table('cover_letters')
    op.drop_table('resumes')
    op.drop_table('users')
