"""Initial stall schema: catalog, sales with per-day tokens, cost ledger

Revision ID: 20261018_initial
Revises:
Create Date: 2026-10-18

This migration creates:
1. employees, items, stock_logs (menu catalog and stock audit)
2. sales, order_items, token_sequences (sale ledger and token counter)
3. cost_entries, cost_entry_items (cost ledger)
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261018_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ==========================================================================
    # 1. CATALOG
    # ==========================================================================
    op.create_table('employees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('employee_code', sa.String(length=32), nullable=False, server_default=''),
        sa.Column('confirmation_mode', sa.String(length=16), nullable=False, server_default='manual'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username', name='uq_employees_username'),
        sqlite_autoincrement=True
    )

    op.create_table('items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('cost_per_unit_cents', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('stock_type', sa.String(length=16), nullable=False, server_default='fixed'),
        sa.Column('stock_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('assigned_employee_id', sa.Integer(), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['assigned_employee_id'], ['employees.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('items', schema=None) as batch_op:
        batch_op.create_index('ix_items_name', ['name'], unique=False)
        batch_op.create_index(batch_op.f('ix_items_assigned_employee_id'), ['assigned_employee_id'], unique=False)

    op.create_table('stock_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('change', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(length=16), nullable=False),
        sa.Column('occurred_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('stock_logs', schema=None) as batch_op:
        batch_op.create_index('ix_stock_logs_item_occurred', ['item_id', 'occurred_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_stock_logs_item_id'), ['item_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_stock_logs_reason'), ['reason'], unique=False)
        batch_op.create_index(batch_op.f('ix_stock_logs_occurred_at'), ['occurred_at'], unique=False)

    # ==========================================================================
    # 2. SALE LEDGER
    # ==========================================================================
    op.create_table('sales',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('business_date', sa.Date(), nullable=False),
        sa.Column('token_number', sa.Integer(), nullable=False),
        sa.Column('total_amount_cents', sa.Integer(), nullable=False),
        sa.Column('total_cost_cents', sa.Integer(), nullable=False),
        sa.Column('payment_method', sa.String(length=16), nullable=False, server_default='cash'),
        sa.Column('credit_customer_name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_date', 'token_number', name='uq_sales_day_token'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('sales', schema=None) as batch_op:
        batch_op.create_index('ix_sales_occurred_at', ['occurred_at'], unique=False)
        batch_op.create_index('ix_sales_payment_customer', ['payment_method', 'credit_customer_name'], unique=False)
        batch_op.create_index(batch_op.f('ix_sales_business_date'), ['business_date'], unique=False)

    op.create_table('order_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sale_id', sa.Integer(), nullable=False),
        sa.Column('line_number', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.Column('item_name', sa.String(length=255), nullable=False),
        sa.Column('qty', sa.Integer(), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('cost_cents', sa.Integer(), nullable=False),
        sa.Column('employee_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['sale_id'], ['sales.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('sale_id', 'item_id', name='uq_order_items_sale_item'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('order_items', schema=None) as batch_op:
        batch_op.create_index('ix_order_items_employee_status', ['employee_id', 'status'], unique=False)
        batch_op.create_index(batch_op.f('ix_order_items_sale_id'), ['sale_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_order_items_item_id'), ['item_id'], unique=False)

    op.create_table('token_sequences',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('business_date', sa.Date(), nullable=False),
        sa.Column('next_number', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('business_date', name='uq_token_sequences_day'),
        sqlite_autoincrement=True
    )

    # ==========================================================================
    # 3. COST LEDGER
    # ==========================================================================
    op.create_table('cost_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('cost_type', sa.String(length=16), nullable=False),
        sa.Column('total_cost_cents', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('common_name', sa.String(length=255), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('cost_entries', schema=None) as batch_op:
        batch_op.create_index('ix_cost_entries_type', ['cost_type'], unique=False)
        batch_op.create_index(batch_op.f('ix_cost_entries_occurred_at'), ['occurred_at'], unique=False)

    op.create_table('cost_entry_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('cost_entry_id', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['cost_entry_id'], ['cost_entries.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('cost_entry_id', 'item_id', name='uq_cost_entry_items_entry_item'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('cost_entry_items', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_cost_entry_items_cost_entry_id'), ['cost_entry_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_cost_entry_items_item_id'), ['item_id'], unique=False)


def downgrade():
    op.drop_table('cost_entry_items')
    op.drop_table('cost_entries')
    op.drop_table('token_sequences')
    op.drop_table('order_items')
    op.drop_table('sales')
    op.drop_table('stock_logs')
    op.drop_table('items')
    op.drop_table('employees')
