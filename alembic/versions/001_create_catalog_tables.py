"""Create categories, products, product_categories and search_index_outbox tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the catalog tables."""
    # Categories table
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('key', sa.String(255), nullable=False, unique=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False, unique=True),
        sa.Column('order_hint', sa.String(100), nullable=True),
        sa.Column('parent_id', sa.Integer(),
                  sa.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    # Products table
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('store', sa.String(50), nullable=False, index=True),
        sa.Column('product_id', sa.String(255), nullable=False, unique=True),
        sa.Column('sku', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(500), nullable=False, index=True),
        sa.Column('name', sa.String(500), nullable=False),
        sa.Column('description_short', sa.Text(), nullable=True),
        sa.Column('description_long', sa.Text(), nullable=True),
        sa.Column('regulated_product_name', sa.Text(), nullable=True),
        sa.Column('category', sa.String(255), nullable=True),
        sa.Column('category_slug', sa.String(255), nullable=True, index=True),
        sa.Column('brand', sa.String(255), nullable=True, index=True),
        sa.Column('brand_slug', sa.String(255), nullable=True),
        sa.Column('price', sa.Integer(), nullable=True),
        sa.Column('price_per_unit', sa.Integer(), nullable=True),
        sa.Column('unit_price', sa.Float(), nullable=True),
        sa.Column('regular_price', sa.Integer(), nullable=True),
        sa.Column('discount_price', sa.Integer(), nullable=True),
        sa.Column('lowest_price', sa.Integer(), nullable=True),
        sa.Column('in_promotion', sa.Boolean(), nullable=False, server_default='false', index=True),
        sa.Column('amount', sa.String(100), nullable=True),
        sa.Column('weight', sa.Float(), nullable=True),
        sa.Column('package_label', sa.String(255), nullable=True),
        sa.Column('package_label_key', sa.String(100), nullable=True),
        sa.Column('volume_label_key', sa.String(100), nullable=True),
        sa.Column('volume_label_short', sa.String(100), nullable=True),
        sa.Column('base_unit_long', sa.String(50), nullable=True),
        sa.Column('base_unit_short', sa.String(50), nullable=True),
        sa.Column('images', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('product_marketing', sa.Text(), nullable=True),
        sa.Column('brand_marketing', sa.Text(), nullable=True),
        sa.Column('published', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('medical', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('weight_article', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('scraped_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    # Product/category junction table
    op.create_table(
        'product_categories',
        sa.Column('product_id', sa.Integer(),
                  sa.ForeignKey('products.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('category_id', sa.Integer(),
                  sa.ForeignKey('categories.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_index('ix_product_categories_category_id', 'product_categories', ['category_id'])

    # Search index outbox
    op.create_table(
        'search_index_outbox',
        sa.Column('product_id', sa.Integer(),
                  sa.ForeignKey('products.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('enqueued_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_error', sa.Text(), nullable=True),
    )
    op.create_index('ix_search_index_outbox_enqueued_at', 'search_index_outbox', ['enqueued_at'])


def downgrade() -> None:
    """Drop the catalog tables."""
    op.drop_index('ix_search_index_outbox_enqueued_at', table_name='search_index_outbox')
    op.drop_table('search_index_outbox')
    op.drop_index('ix_product_categories_category_id', table_name='product_categories')
    op.drop_table('product_categories')
    op.drop_table('products')
    op.drop_table('categories')
