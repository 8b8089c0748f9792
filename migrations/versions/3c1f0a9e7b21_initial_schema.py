"""initial schema

Revision ID: 3c1f0a9e7b21
Revises:
Create Date: 2026-10-18 10:12:41.502113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f0a9e7b21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('uid', sa.Uuid(), nullable=False),
        sa.Column('username', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('role', sa.String(), server_default='user', nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('uid'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'products',
        sa.Column('uid', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('average_rating', sa.Float(), nullable=False),
        sa.Column('review_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('uid'),
    )

    op.create_table(
        'reviews',
        sa.Column('uid', sa.Uuid(), nullable=False),
        sa.Column('product_uid', sa.Uuid(), sa.ForeignKey('products.uid'), nullable=False),
        sa.Column('user_uid', sa.Uuid(), sa.ForeignKey('users.uid'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(), nullable=True),
        sa.Column('comment', sa.String(), nullable=True),
        sa.Column('is_verified_purchase', sa.Boolean(), nullable=False),
        sa.Column('helpful_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('uid'),
        sa.UniqueConstraint('product_uid', 'user_uid', name='uq_reviews_product_user'),
    )
    op.create_index('ix_reviews_product_uid', 'reviews', ['product_uid'])
    op.create_index('ix_reviews_user_uid', 'reviews', ['user_uid'])

    op.create_table(
        'orders',
        sa.Column('uid', sa.String(), nullable=False),
        sa.Column('user_uid', sa.Uuid(), sa.ForeignKey('users.uid'), nullable=False),
        sa.Column('status', sa.Enum('pending', 'processing', 'shipped', 'delivered', 'canceled', name='orderstatus'), nullable=False),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('discount', sa.Numeric(10, 2), nullable=True),
        sa.Column('final_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('coupon_code', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('uid'),
    )
    op.create_index('ix_orders_uid', 'orders', ['uid'], unique=True)
    op.create_index('ix_orders_user_uid', 'orders', ['user_uid'])

    op.create_table(
        'order_items',
        sa.Column('uid', sa.Uuid(), nullable=False),
        sa.Column('order_uid', sa.String(), sa.ForeignKey('orders.uid'), nullable=False),
        sa.Column('product_uid', sa.Uuid(), sa.ForeignKey('products.uid'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price_at_purchase', sa.Float(), nullable=False),
        sa.Column('total_price', sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint('uid'),
    )
    op.create_index('ix_order_items_order_uid', 'order_items', ['order_uid'])
    op.create_index('ix_order_items_product_uid', 'order_items', ['product_uid'])

    op.create_table(
        'discounts',
        sa.Column('uid', sa.Uuid(), nullable=False),
        sa.Column('code', sa.String(), nullable=False),
        sa.Column('discount_type', sa.String(), nullable=False),
        sa.Column('value', sa.Numeric(10, 2), nullable=False),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('starts_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('minimum_order_amount', sa.Numeric(10, 2), nullable=True),
        sa.Column('maximum_discount_amount', sa.Numeric(10, 2), nullable=True),
        sa.Column('usage_limit', sa.Integer(), nullable=True),
        sa.Column('usage_limit_per_user', sa.Integer(), nullable=True),
        sa.Column('used_count', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('uid'),
    )
    op.create_index('ix_discounts_code', 'discounts', ['code'], unique=True)

    op.create_table(
        'discount_usages',
        sa.Column('uid', sa.Uuid(), nullable=False),
        sa.Column('discount_uid', sa.Uuid(), sa.ForeignKey('discounts.uid', ondelete='CASCADE'), nullable=False),
        sa.Column('user_uid', sa.Uuid(), nullable=False),
        sa.Column('order_subtotal', sa.Numeric(10, 2), nullable=False),
        sa.Column('discount_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('used_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('uid'),
    )
    op.create_index('ix_discount_usages_discount_uid', 'discount_usages', ['discount_uid'])
    op.create_index('ix_discount_usages_user_uid', 'discount_usages', ['user_uid'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('discount_usages')
    op.drop_table('discounts')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.execute('DROP TYPE IF EXISTS orderstatus')
    op.drop_table('reviews')
    op.drop_table('products')
    op.drop_table('users')
