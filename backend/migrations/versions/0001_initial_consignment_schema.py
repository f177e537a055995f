"""Initial consignment schema: tenant-scoped stores, catalog, balances and ledger

1. users (login whitelist; uid doubles as tenant id)
2. stores, products, store_pricing
3. store_balances (one row per store, optimistic version_id)
4. inventory_logs / inventory_log_lines, sales_records / sales_record_lines,
   payments, activity_log

Revision ID: ct0001_initial
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'ct0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.String(length=128), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table('stores',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=128), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_stores_tenant_id', 'stores', ['tenant_id'])
    op.create_index('ix_stores_tenant_name', 'stores', ['tenant_id', 'name'])

    op.create_table('products',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=128), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('default_price_cents', sa.Integer(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_products_tenant_id', 'products', ['tenant_id'])
    op.create_index('ix_products_tenant_name', 'products', ['tenant_id', 'name'])

    op.create_table('store_pricing',
        sa.Column('id', sa.String(length=80), nullable=False),
        sa.Column('tenant_id', sa.String(length=128), nullable=False),
        sa.Column('store_id', sa.String(length=36), nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('store_id', 'product_id', name='uq_store_pricing_store_product')
    )
    op.create_index('ix_store_pricing_tenant_id', 'store_pricing', ['tenant_id'])
    op.create_index('ix_store_pricing_store_id', 'store_pricing', ['store_id'])

    op.create_table('store_balances',
        sa.Column('store_id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=128), nullable=False),
        sa.Column('current_balance_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('current_stock', sa.JSON(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.PrimaryKeyConstraint('store_id')
    )
    op.create_index('ix_store_balances_tenant_id', 'store_balances', ['tenant_id'])

    op.create_table('inventory_logs',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=128), nullable=False),
        sa.Column('store_id', sa.String(length=36), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=False),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_inventory_logs_tenant_id', 'inventory_logs', ['tenant_id'])
    op.create_index('ix_inventory_logs_store_id', 'inventory_logs', ['store_id'])
    op.create_index('ix_inventory_logs_type', 'inventory_logs', ['type'])
    op.create_index('ix_inventory_logs_store_occurred', 'inventory_logs', ['store_id', 'occurred_at'])

    op.create_table('inventory_log_lines',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.String(length=128), nullable=False),
        sa.Column('log_id', sa.String(length=36), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['log_id'], ['inventory_logs.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_inventory_log_lines_tenant_id', 'inventory_log_lines', ['tenant_id'])
    op.create_index('ix_inventory_log_lines_log_id', 'inventory_log_lines', ['log_id'])

    op.create_table('sales_records',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=128), nullable=False),
        sa.Column('store_id', sa.String(length=36), nullable=False),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('total_amount_cents', sa.Integer(), nullable=False),
        sa.Column('voided', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('voided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sales_records_tenant_id', 'sales_records', ['tenant_id'])
    op.create_index('ix_sales_records_store_id', 'sales_records', ['store_id'])
    op.create_index('ix_sales_records_voided', 'sales_records', ['voided'])
    op.create_index('ix_sales_records_store_occurred', 'sales_records', ['store_id', 'occurred_at'])
    op.create_index('ix_sales_records_tenant_occurred', 'sales_records', ['tenant_id', 'occurred_at'])

    op.create_table('sales_record_lines',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.String(length=128), nullable=False),
        sa.Column('sales_record_id', sa.String(length=36), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=False),
        sa.Column('quantity_sold', sa.Integer(), nullable=False),
        sa.Column('unit_price_cents', sa.Integer(), nullable=False),
        sa.Column('line_total_cents', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['sales_record_id'], ['sales_records.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_sales_record_lines_tenant_id', 'sales_record_lines', ['tenant_id'])
    op.create_index('ix_sales_record_lines_sales_record_id', 'sales_record_lines', ['sales_record_id'])

    op.create_table('payments',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('tenant_id', sa.String(length=128), nullable=False),
        sa.Column('store_id', sa.String(length=36), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('note', sa.String(length=255), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('voided', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('voided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_payments_tenant_id', 'payments', ['tenant_id'])
    op.create_index('ix_payments_store_id', 'payments', ['store_id'])
    op.create_index('ix_payments_voided', 'payments', ['voided'])
    op.create_index('ix_payments_store_occurred', 'payments', ['store_id', 'occurred_at'])
    op.create_index('ix_payments_tenant_occurred', 'payments', ['tenant_id', 'occurred_at'])

    op.create_table('activity_log',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.String(length=128), nullable=False),
        sa.Column('store_id', sa.String(length=36), nullable=False),
        sa.Column('action_id', sa.String(length=36), nullable=False),
        sa.Column('action_type', sa.String(length=16), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('voided', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('voided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['store_id'], ['stores.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_activity_log_store_id', 'activity_log', ['store_id'])
    op.create_index('ix_activity_log_action_id', 'activity_log', ['action_id'])
    op.create_index('ix_activity_log_tenant_voided_created', 'activity_log', ['tenant_id', 'voided', 'created_at'])


def downgrade():
    op.drop_table('activity_log')
    op.drop_table('payments')
    op.drop_table('sales_record_lines')
    op.drop_table('sales_records')
    op.drop_table('inventory_log_lines')
    op.drop_table('inventory_logs')
    op.drop_table('store_balances')
    op.drop_table('store_pricing')
    op.drop_table('products')
    op.drop_table('stores')
    op.drop_table('users')
