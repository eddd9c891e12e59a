"""create_users_orders_tables

Revision ID: 3c1f9a7d2b10
Revises:
Create Date: 2026-10-12 09:41:08.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f9a7d2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, orders and order_products tables."""

    conn = op.get_bind()
    inspector = sa.inspect(conn)

    def table_exists(name):
        return inspector.has_table(name)

    if not table_exists('users'):
        op.create_table(
            'users',
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('username', sa.String(length=50), nullable=False),
            sa.Column('password_hash', sa.String(length=255), nullable=False),
            sa.Column('email', sa.String(length=100), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('username')
        )

    if not table_exists('orders'):
        op.create_table(
            'orders',
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('external_id', sa.String(length=100), nullable=True),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('company', sa.String(length=255), nullable=False),
            sa.Column('customer_name', sa.String(length=255), nullable=True),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('order_date', sa.DateTime(), nullable=True),
            sa.Column('delivery_date', sa.DateTime(), nullable=True),
            sa.Column('total_amount', sa.Float(), nullable=True),
            sa.Column('currency', sa.String(length=10), nullable=False),
            sa.Column('status', sa.String(length=30), nullable=False),
            sa.Column('created_by_id', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['created_by_id'], ['users.id']),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_orders_external_id', 'orders', ['external_id'])

    if not table_exists('order_products'):
        op.create_table(
            'order_products',
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('order_id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('model', sa.String(length=100), nullable=False),
            sa.Column('sku', sa.String(length=100), nullable=True),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('note1', sa.Text(), nullable=True),
            sa.Column('note2', sa.Text(), nullable=True),
            sa.Column('note3', sa.Text(), nullable=True),
            sa.Column('note4', sa.Text(), nullable=True),
            sa.Column('produced_name', sa.String(length=255), nullable=True),
            sa.Column('quantity', sa.Integer(), nullable=False),
            sa.Column('unit', sa.String(length=20), nullable=False),
            sa.Column('unit_price', sa.Float(), nullable=True),
            sa.Column('total_price', sa.Float(), nullable=True),
            sa.Column('status', sa.String(length=30), nullable=False),
            sa.Column('sort_order', sa.Integer(), nullable=False),
            sa.Column('external_id', sa.String(length=100), nullable=True),
            sa.Column('system_code', sa.String(length=100), nullable=True),
            sa.Column('created_by_id', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
            sa.ForeignKeyConstraint(['created_by_id'], ['users.id']),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_order_products_order_id', 'order_products', ['order_id'])
        op.create_index('ix_order_products_external_id', 'order_products', ['external_id'])


def downgrade() -> None:
    """Drop order and user tables."""
    op.drop_index('ix_order_products_external_id', table_name='order_products')
    op.drop_index('ix_order_products_order_id', table_name='order_products')
    op.drop_table('order_products')
    op.drop_index('ix_orders_external_id', table_name='orders')
    op.drop_table('orders')
    op.drop_table('users')
