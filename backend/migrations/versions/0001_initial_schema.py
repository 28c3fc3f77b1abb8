"""Initial store ledger schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18

Creates:
1. inventory_items (stock >= 0 enforced by CHECK)
2. counters (named receipt sequences)
3. sale_transactions and sale_lines
4. customers, ledger_transactions, credit_lines, payment_allocations
5. wallet_entries (one row per business date)
6. expense_receipts
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ==========================================================================
    # 1. INVENTORY
    # ==========================================================================
    op.create_table('inventory_items',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('price_cents', sa.Integer(), nullable=False),
        sa.Column('cost_cents', sa.Integer(), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.CheckConstraint('stock >= 0', name='ck_inventory_items_stock_non_negative'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_inventory_items_name', 'inventory_items', ['name'], unique=False)

    # ==========================================================================
    # 2. COUNTERS
    # ==========================================================================
    op.create_table('counters',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('current_number', sa.Integer(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    # ==========================================================================
    # 3. SALES
    # ==========================================================================
    op.create_table('sale_transactions',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('receipt_number', sa.String(length=32), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=True),
        sa.Column('service_type', sa.String(length=32), nullable=True),
        sa.Column('total_cents', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('voided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('receipt_number', name='uq_sale_transactions_receipt_number')
    )
    op.create_index('ix_sale_transactions_status_created', 'sale_transactions', ['status', 'created_at'], unique=False)
    op.create_index(op.f('ix_sale_transactions_status'), 'sale_transactions', ['status'], unique=False)
    op.create_index(op.f('ix_sale_transactions_service_type'), 'sale_transactions', ['service_type'], unique=False)

    op.create_table('sale_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('sale_id', sa.String(length=64), nullable=False),
        sa.Column('line_number', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.String(length=64), nullable=True),
        sa.Column('item_name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price_cents', sa.Integer(), nullable=False),
        sa.Column('line_total_cents', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['sale_id'], ['sale_transactions.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index(op.f('ix_sale_lines_sale_id'), 'sale_lines', ['sale_id'], unique=False)
    op.create_index(op.f('ix_sale_lines_item_id'), 'sale_lines', ['item_id'], unique=False)

    # ==========================================================================
    # 4. CUSTOMER CREDIT LEDGER
    # ==========================================================================
    op.create_table('customers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_customers_status_name', 'customers', ['status', 'name'], unique=False)
    op.create_index(op.f('ix_customers_status'), 'customers', ['status'], unique=False)

    op.create_table('ledger_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=16), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.Column('description', sa.String(length=512), nullable=True),
        sa.Column('paid_amount_cents', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.CheckConstraint('amount_cents > 0', name='ck_ledger_transactions_amount_positive'),
        sa.CheckConstraint(
            'paid_amount_cents >= 0 AND paid_amount_cents <= amount_cents',
            name='ck_ledger_transactions_paid_within_amount',
        ),
        sa.ForeignKeyConstraint(['customer_id'], ['customers.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index(
        'ix_ledger_txns_customer_type_status_created', 'ledger_transactions',
        ['customer_id', 'type', 'status', 'created_at'], unique=False,
    )
    op.create_index(op.f('ix_ledger_transactions_customer_id'), 'ledger_transactions', ['customer_id'], unique=False)
    op.create_index(op.f('ix_ledger_transactions_type'), 'ledger_transactions', ['type'], unique=False)
    op.create_index(op.f('ix_ledger_transactions_status'), 'ledger_transactions', ['status'], unique=False)

    op.create_table('credit_lines',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('ledger_transaction_id', sa.Integer(), nullable=False),
        sa.Column('line_number', sa.Integer(), nullable=False),
        sa.Column('item_id', sa.String(length=64), nullable=True),
        sa.Column('item_name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price_cents', sa.Integer(), nullable=False),
        sa.Column('line_total_cents', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['ledger_transaction_id'], ['ledger_transactions.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index(op.f('ix_credit_lines_ledger_transaction_id'), 'credit_lines', ['ledger_transaction_id'], unique=False)
    op.create_index(op.f('ix_credit_lines_item_id'), 'credit_lines', ['item_id'], unique=False)

    op.create_table('payment_allocations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('payment_id', sa.Integer(), nullable=False),
        sa.Column('credit_id', sa.Integer(), nullable=False),
        sa.Column('amount_cents', sa.Integer(), nullable=False),
        sa.CheckConstraint('amount_cents > 0', name='ck_payment_allocations_amount_positive'),
        sa.ForeignKeyConstraint(['payment_id'], ['ledger_transactions.id'], ),
        sa.ForeignKeyConstraint(['credit_id'], ['ledger_transactions.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('payment_id', 'credit_id', name='uq_payment_allocations_payment_credit')
    )
    op.create_index(op.f('ix_payment_allocations_payment_id'), 'payment_allocations', ['payment_id'], unique=False)
    op.create_index(op.f('ix_payment_allocations_credit_id'), 'payment_allocations', ['credit_id'], unique=False)

    # ==========================================================================
    # 5. WALLET
    # ==========================================================================
    op.create_table('wallet_entries',
        sa.Column('id', sa.String(length=10), nullable=False),
        sa.Column('date', sa.String(length=10), nullable=False),
        sa.Column('starting_cash_cents', sa.Integer(), nullable=False),
        sa.Column('ending_cash_cents', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('date')
    )
    op.create_index('ix_wallet_entries_status_created', 'wallet_entries', ['status', 'created_at'], unique=False)
    op.create_index(op.f('ix_wallet_entries_status'), 'wallet_entries', ['status'], unique=False)

    # ==========================================================================
    # 6. EXPENSE RECEIPTS
    # ==========================================================================
    op.create_table('expense_receipts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('merchant_name', sa.String(length=255), nullable=False),
        sa.Column('transaction_date', sa.String(length=10), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=False),
        sa.Column('other_category_description', sa.String(length=255), nullable=True),
        sa.Column('total_cents', sa.Integer(), nullable=False),
        sa.Column('payment_source', sa.String(length=32), nullable=False),
        sa.Column('items_json', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_expense_receipts_date', 'expense_receipts', ['transaction_date'], unique=False)


def downgrade():
    op.drop_index('ix_expense_receipts_date', table_name='expense_receipts')
    op.drop_table('expense_receipts')

    op.drop_index(op.f('ix_wallet_entries_status'), table_name='wallet_entries')
    op.drop_index('ix_wallet_entries_status_created', table_name='wallet_entries')
    op.drop_table('wallet_entries')

    op.drop_index(op.f('ix_payment_allocations_credit_id'), table_name='payment_allocations')
    op.drop_index(op.f('ix_payment_allocations_payment_id'), table_name='payment_allocations')
    op.drop_table('payment_allocations')

    op.drop_index(op.f('ix_credit_lines_item_id'), table_name='credit_lines')
    op.drop_index(op.f('ix_credit_lines_ledger_transaction_id'), table_name='credit_lines')
    op.drop_table('credit_lines')

    op.drop_index(op.f('ix_ledger_transactions_status'), table_name='ledger_transactions')
    op.drop_index(op.f('ix_ledger_transactions_type'), table_name='ledger_transactions')
    op.drop_index(op.f('ix_ledger_transactions_customer_id'), table_name='ledger_transactions')
    op.drop_index('ix_ledger_txns_customer_type_status_created', table_name='ledger_transactions')
    op.drop_table('ledger_transactions')

    op.drop_index(op.f('ix_customers_status'), table_name='customers')
    op.drop_index('ix_customers_status_name', table_name='customers')
    op.drop_table('customers')

    op.drop_index(op.f('ix_sale_lines_item_id'), table_name='sale_lines')
    op.drop_index(op.f('ix_sale_lines_sale_id'), table_name='sale_lines')
    op.drop_table('sale_lines')

    op.drop_index(op.f('ix_sale_transactions_service_type'), table_name='sale_transactions')
    op.drop_index(op.f('ix_sale_transactions_status'), table_name='sale_transactions')
    op.drop_index('ix_sale_transactions_status_created', table_name='sale_transactions')
    op.drop_table('sale_transactions')

    op.drop_table('counters')

    op.drop_index('ix_inventory_items_name', table_name='inventory_items')
    op.drop_table('inventory_items')
