"""Customers scoped to a retailer and optionally a primary location

Revision ID: n002_customers
Revises: n001_initial_nexus
Create Date: 2026-10-16
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'n002_customers'
down_revision = 'n001_initial_nexus'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('customers',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('retailer_id', sa.String(length=36), nullable=False),
        sa.Column('primary_location_id', sa.String(length=36), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('default_address', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(length=36), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.ForeignKeyConstraint(['retailer_id'], ['retailers.id']),
        sa.ForeignKeyConstraint(['primary_location_id'], ['locations.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_customers_retailer_id', 'customers', ['retailer_id'])
    op.create_index('ix_customers_primary_location_id', 'customers', ['primary_location_id'])
    op.create_index('ix_customers_retailer_name', 'customers', ['retailer_id', 'name'])
    op.create_index('ix_customers_email', 'customers', ['email'])


def downgrade():
    op.drop_index('ix_customers_email', table_name='customers')
    op.drop_index('ix_customers_retailer_name', table_name='customers')
    op.drop_index('ix_customers_primary_location_id', table_name='customers')
    op.drop_index('ix_customers_retailer_id', table_name='customers')
    op.drop_table('customers')
