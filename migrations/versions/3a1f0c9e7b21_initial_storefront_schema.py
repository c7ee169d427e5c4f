"""initial storefront schema

Revision ID: 3a1f0c9e7b21
Revises:
Create Date: 2026-10-19 10:12:41.204118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3a1f0c9e7b21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(updated: bool = True):
    cols = [sa.Column('created_at', sa.DateTime(timezone=True), nullable=False)]
    if updated:
        cols.append(sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False))
    return cols


def _address_columns(prefix: str):
    return [
        sa.Column(f'{prefix}_name', sa.String(128), nullable=False),
        sa.Column(f'{prefix}_phone', sa.String(32), nullable=False),
        sa.Column(f'{prefix}_email', sa.String(320), nullable=False),
        sa.Column(f'{prefix}_address_line1', sa.String(255), nullable=False),
        sa.Column(f'{prefix}_address_line2', sa.String(255), nullable=True),
        sa.Column(f'{prefix}_city', sa.String(128), nullable=False),
        sa.Column(f'{prefix}_state', sa.String(128), nullable=True),
        sa.Column(f'{prefix}_postal_code', sa.String(32), nullable=True),
        sa.Column(f'{prefix}_country', sa.String(64), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('public_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(320), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('first_name', sa.String(128), nullable=False),
        sa.Column('last_name', sa.String(128), nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('role', sa.String(32), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_users_public_id', 'users', ['public_id'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('sku', sa.String(128), nullable=True, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.BigInteger(), nullable=False),
        sa.Column('compare_price', sa.BigInteger(), nullable=True),
        sa.Column('stock_quantity', sa.Integer(), nullable=False),
        sa.Column('low_stock_threshold', sa.Integer(), nullable=False),
        sa.Column('total_sales', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('stock_quantity >= 0', name='ck_products_stock_non_negative'),
    )

    op.create_table(
        'product_variants',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('variant_name', sa.String(64), nullable=False),
        sa.Column('variant_value', sa.String(64), nullable=False),
        sa.Column('sku', sa.String(128), nullable=True),
        sa.Column('price_modifier', sa.BigInteger(), nullable=False),
        sa.Column('stock_quantity', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(updated=False),
        sa.CheckConstraint('stock_quantity >= 0', name='ck_product_variants_stock_non_negative'),
    )
    op.create_index('ix_product_variants_product_id', 'product_variants', ['product_id'])

    op.create_table(
        'cart',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=True),
        sa.Column('guest_session_id', sa.String(64), nullable=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('variant_id', sa.Integer(), sa.ForeignKey('product_variants.id', ondelete='CASCADE'), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('quantity >= 1', name='ck_cart_quantity_positive'),
        sa.CheckConstraint('(user_id IS NULL) <> (guest_session_id IS NULL)', name='ck_cart_single_owner'),
    )
    op.create_index('ix_cart_user_id', 'cart', ['user_id'])
    op.create_index('ix_cart_guest_session_id', 'cart', ['guest_session_id'])
    op.create_index('uq_cart_user_line', 'cart', ['user_id', 'product_id', sa.text('coalesce(variant_id, 0)')],
                    unique=True)
    op.create_index('uq_cart_guest_line', 'cart', ['guest_session_id', 'product_id', sa.text('coalesce(variant_id, 0)')],
                    unique=True)

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('public_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('order_number', sa.String(64), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('guest_email', sa.String(320), nullable=True),
        sa.Column('status', sa.String(32), nullable=False),
        sa.Column('payment_status', sa.String(32), nullable=False),
        sa.Column('payment_method', sa.String(32), nullable=False),
        *_address_columns('shipping'),
        *_address_columns('billing'),
        sa.Column('subtotal', sa.BigInteger(), nullable=False),
        sa.Column('shipping_cost', sa.BigInteger(), nullable=False),
        sa.Column('tax', sa.BigInteger(), nullable=False),
        sa.Column('discount', sa.BigInteger(), nullable=False),
        sa.Column('total', sa.BigInteger(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_orders_public_id', 'orders', ['public_id'], unique=True)
    op.create_index('ix_orders_order_number', 'orders', ['order_number'], unique=True)
    op.create_index('ix_orders_user_id', 'orders', ['user_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), sa.ForeignKey('orders.id', ondelete='CASCADE'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('variant_id', sa.Integer(), sa.ForeignKey('product_variants.id', ondelete='SET NULL'), nullable=True),
        sa.Column('product_name', sa.String(255), nullable=False),
        sa.Column('product_sku', sa.String(128), nullable=True),
        sa.Column('variant_details', sa.String(255), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.BigInteger(), nullable=False),
        sa.Column('total', sa.BigInteger(), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    op.create_table(
        'addresses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('full_name', sa.String(128), nullable=False),
        sa.Column('phone', sa.String(32), nullable=False),
        sa.Column('email', sa.String(320), nullable=True),
        sa.Column('address_line1', sa.String(255), nullable=False),
        sa.Column('address_line2', sa.String(255), nullable=True),
        sa.Column('city', sa.String(128), nullable=False),
        sa.Column('state', sa.String(128), nullable=True),
        sa.Column('postal_code', sa.String(32), nullable=True),
        sa.Column('country', sa.String(64), nullable=False),
        sa.Column('is_default', sa.Boolean(), nullable=False),
        sa.Column('address_type', sa.String(16), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_addresses_user_id', 'addresses', ['user_id'])
    op.create_index('uq_addresses_user_default', 'addresses', ['user_id'], unique=True,
                    postgresql_where=sa.text('is_default'), sqlite_where=sa.text('is_default'))


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('addresses')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('cart')
    op.drop_table('product_variants')
    op.drop_table('products')
    op.drop_table('users')
