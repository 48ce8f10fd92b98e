"""Initial schema: retailers, locations, users, session tokens, orders

Orders keep items, addresses and metadata as JSON text and timestamps as
ISO-8601 Z strings; version_id backs optimistic locking on updates.

Revision ID: n001_initial_nexus
Revises:
Create Date: 2026-10-16
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'n001_initial_nexus'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('retailers',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('website', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )

    op.create_table('locations',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('retailer_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('timezone', sa.String(length=64), nullable=False, server_default='UTC'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['retailer_id'], ['retailers.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('retailer_id', 'name', name='uq_locations_retailer_name'),
    )
    op.create_index('ix_locations_retailer_id', 'locations', ['retailer_id'])

    op.create_table('users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('role', sa.String(length=32), nullable=False),
        sa.Column('retailer_id', sa.String(length=36), nullable=True),
        sa.Column('location_id', sa.String(length=36), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['retailer_id'], ['retailers.id']),
        sa.ForeignKeyConstraint(['location_id'], ['locations.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_retailer_id', 'users', ['retailer_id'])
    op.create_index('ix_users_location_id', 'users', ['location_id'])

    op.create_table('session_tokens',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('token_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_used_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_session_tokens_user_id', 'session_tokens', ['user_id'])
    op.create_index('ix_session_tokens_token_hash', 'session_tokens', ['token_hash'], unique=True)
    op.create_index('ix_session_tokens_expires_at', 'session_tokens', ['expires_at'])
    op.create_index('ix_session_tokens_is_revoked', 'session_tokens', ['is_revoked'])
    op.create_index('ix_session_tokens_user_active', 'session_tokens', ['user_id', 'is_revoked'])

    op.create_table('orders',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('retailer_id', sa.String(length=36), nullable=False),
        sa.Column('location_id', sa.String(length=36), nullable=True),
        sa.Column('customer_id', sa.String(length=36), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=False, server_default='pending'),
        sa.Column('total_amount', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('items', sa.Text(), nullable=False, server_default='[]'),
        sa.Column('shipping_address', sa.Text(), nullable=True),
        sa.Column('billing_address', sa.Text(), nullable=True),
        sa.Column('metadata', sa.Text(), nullable=False, server_default='{}'),
        sa.Column('signature_url', sa.Text(), nullable=True),
        sa.Column('id_photo_url', sa.Text(), nullable=True),
        sa.Column('contract_url', sa.Text(), nullable=True),
        sa.Column('requires_ltl', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('created_by', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.String(length=40), nullable=False),
        sa.Column('updated_at', sa.String(length=40), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_orders_retailer_status', 'orders', ['retailer_id', 'status'])
    op.create_index('ix_orders_location_id', 'orders', ['location_id'])
    op.create_index('ix_orders_created_at', 'orders', ['created_at'])


def downgrade():
    op.drop_index('ix_orders_created_at', table_name='orders')
    op.drop_index('ix_orders_location_id', table_name='orders')
    op.drop_index('ix_orders_retailer_status', table_name='orders')
    op.drop_table('orders')

    op.drop_index('ix_session_tokens_user_active', table_name='session_tokens')
    op.drop_index('ix_session_tokens_is_revoked', table_name='session_tokens')
    op.drop_index('ix_session_tokens_expires_at', table_name='session_tokens')
    op.drop_index('ix_session_tokens_token_hash', table_name='session_tokens')
    op.drop_index('ix_session_tokens_user_id', table_name='session_tokens')
    op.drop_table('session_tokens')

    op.drop_index('ix_users_location_id', table_name='users')
    op.drop_index('ix_users_retailer_id', table_name='users')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    op.drop_index('ix_locations_retailer_id', table_name='locations')
    op.drop_table('locations')

    op.drop_table('retailers')
