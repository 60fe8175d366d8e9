"""create_access_control_tables

Revision ID: 3f9c2d7e5b1a
Revises:
Create Date: 2026-03-01 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c2d7e5b1a'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create the access-control schema.

    Creates:
    - invite_codes table (version column for compare-and-swap updates)
    - invite_claims table
    - temp_passwords table, one row per user
    - audit_logs table (bounded ring, id is the append sequence)
    """
    # 1. Create invite_codes table
    op.create_table(
        'invite_codes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=8), nullable=False),
        sa.Column('tenant_id', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=11), nullable=False),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('max_uses', sa.Integer(), nullable=True),
        sa.Column('used_count', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=7), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code')
    )
    op.create_index('ix_invite_codes_tenant_id', 'invite_codes', ['tenant_id'])
    op.create_index('ix_invite_codes_tenant_created', 'invite_codes', ['tenant_id', 'created_at'])

    # 2. Create invite_claims table
    op.create_table(
        'invite_claims',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('invite_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('claimed_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['invite_id'], ['invite_codes.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_invite_claims_invite_id', 'invite_claims', ['invite_id'])
    op.create_index('ix_invite_claims_user_id', 'invite_claims', ['user_id'])

    # 3. Create temp_passwords table
    op.create_table(
        'temp_passwords',
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('tenant_id', sa.String(length=255), nullable=True),
        sa.Column('secret_hash', sa.String(length=255), nullable=False),
        sa.Column('issued_by', sa.String(length=255), nullable=True),
        sa.Column('issued_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('used', sa.Boolean(), nullable=False),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('user_id')
    )
    op.create_index('ix_temp_passwords_tenant_id', 'temp_passwords', ['tenant_id'])

    # 4. Create audit_logs table
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=True),
        sa.Column('tenant_id', sa.String(length=255), nullable=True),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'])
    op.create_index('ix_audit_logs_tenant_id', 'audit_logs', ['tenant_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])


def downgrade() -> None:
    """Drop the access-control schema."""
    op.drop_index('ix_audit_logs_action', table_name='audit_logs')
    op.drop_index('ix_audit_logs_tenant_id', table_name='audit_logs')
    op.drop_index('ix_audit_logs_user_id', table_name='audit_logs')
    op.drop_table('audit_logs')

    op.drop_index('ix_temp_passwords_tenant_id', table_name='temp_passwords')
    op.drop_table('temp_passwords')

    op.drop_index('ix_invite_claims_user_id', table_name='invite_claims')
    op.drop_index('ix_invite_claims_invite_id', table_name='invite_claims')
    op.drop_table('invite_claims')

    op.drop_index('ix_invite_codes_tenant_created', table_name='invite_codes')
    op.drop_index('ix_invite_codes_tenant_id', table_name='invite_codes')
    op.drop_table('invite_codes')
