"""Initial schema - users, products, product variants and store linkages

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

UTC_NOW = sa.text("timezone('utc', now())")


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('shop_domain', sa.String(), nullable=False),
        sa.Column('access_token', sa.String(), nullable=False),
        sa.Column('role', sa.String(length=20), server_default='end_user', nullable=False),
        sa.Column('created_at', postgresql.TIMESTAMP(), server_default=UTC_NOW, nullable=False),
        sa.Column('updated_at', postgresql.TIMESTAMP(), server_default=UTC_NOW, nullable=False),
        sa.CheckConstraint("role IN ('admin', 'end_user')", name='ck_users_role'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_shop_domain', 'users', ['shop_domain'], unique=True)

    op.create_table(
        'products',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('created_at', postgresql.TIMESTAMP(), server_default=UTC_NOW, nullable=False),
        sa.Column('updated_at', postgresql.TIMESTAMP(), server_default=UTC_NOW, nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('set', sa.String(), nullable=False),
        sa.Column('expansion', sa.String(), nullable=True),
        sa.Column('created_by', sa.String(length=36), nullable=True),
        sa.Column('is_single', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('pokemon_card_id', sa.String(), nullable=True),
        sa.Column('market_data', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('auto_price_sync', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_products_set', 'products', ['set'])
    op.create_index('ix_products_pokemon_card_id', 'products', ['pokemon_card_id'])

    op.create_table(
        'product_variants',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=False),
        sa.Column('option1', sa.String(), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('sku', sa.String(), nullable=False),
        sa.Column('created_at', postgresql.TIMESTAMP(), server_default=UTC_NOW, nullable=False),
        sa.Column('updated_at', postgresql.TIMESTAMP(), server_default=UTC_NOW, nullable=False),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_product_variants_product_id', 'product_variants', ['product_id'])

    op.create_table(
        'added_products',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=False),
        sa.Column('shopify_product_id', sa.String(), nullable=True),
        sa.Column('sync_status', sa.String(length=20), server_default='active', nullable=False),
        sa.Column('added_at', postgresql.TIMESTAMP(), server_default=UTC_NOW, nullable=False),
        sa.Column('last_synced_at', postgresql.TIMESTAMP(), nullable=True),
        sa.Column('deleted_at', postgresql.TIMESTAMP(), nullable=True),
        sa.CheckConstraint("sync_status IN ('active', 'deleted', 'error')", name='ck_added_products_sync_status'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'product_id', name='uq_added_products_user_product'),
    )
    op.create_index('ix_added_products_user_id', 'added_products', ['user_id'])
    op.create_index('ix_added_products_product_id', 'added_products', ['product_id'])


def downgrade() -> None:
    op.drop_index('ix_added_products_product_id', table_name='added_products')
    op.drop_index('ix_added_products_user_id', table_name='added_products')
    op.drop_table('added_products')
    op.drop_index('ix_product_variants_product_id', table_name='product_variants')
    op.drop_table('product_variants')
    op.drop_index('ix_products_pokemon_card_id', table_name='products')
    op.drop_index('ix_products_set', table_name='products')
    op.drop_table('products')
    op.drop_index('ix_users_shop_domain', table_name='users')
    op.drop_table('users')
