"""initial_bakery_schema

Revision ID: 3c9a1f07d2e4
Revises:
Create Date: 2026-10-19 09:12:44.507211

"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '3c9a1f07d2e4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _money(name: str, nullable: bool = False, **kwargs) -> sa.Column:
    return sa.Column(name, sa.Numeric(12, 2), nullable=nullable, **kwargs)


def upgrade() -> None:
    # People
    op.create_table(
        'staff',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('hashed_pin', sa.String(), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_staff_name'), 'staff', ['name'], unique=True)
    op.create_index(op.f('ix_staff_role'), 'staff', ['role'])
    op.create_index(op.f('ix_staff_is_active'), 'staff', ['is_active'])

    op.create_table(
        'charge_customers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('address', sa.String(300), nullable=True),
        sa.Column('tin', sa.String(30), nullable=True),
        sa.Column('contact_person', sa.String(100), nullable=True),
        sa.Column('mobile', sa.String(30), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_charge_customers_name'), 'charge_customers', ['name'])

    # Catalog and raw materials
    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('main_category', sa.String(100), nullable=True),
        _money('price', nullable=True),
        _money('cost', nullable=True),
        sa.Column('markup_percent', sa.Numeric(6, 2), nullable=True),
        sa.Column('variants', sa.JSON(), nullable=False),
        sa.Column('recipe', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_products_name'), 'products', ['name'])
    op.create_index(op.f('ix_products_category'), 'products', ['category'])
    op.create_index(op.f('ix_products_is_active'), 'products', ['is_active'])

    op.create_table(
        'materials',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('kind', sa.String(20), nullable=False),
        sa.Column('unit', sa.String(20), nullable=False),
        sa.Column('current_stock', sa.Numeric(14, 4), nullable=False),
        sa.Column('reorder_level', sa.Numeric(14, 4), nullable=False),
        sa.Column('cost_per_unit', sa.Numeric(12, 4), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_materials_name'), 'materials', ['name'])
    op.create_index(op.f('ix_materials_kind'), 'materials', ['kind'])

    op.create_table(
        'recipe_components',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('kind', sa.String(20), nullable=False),
        sa.Column('batch_weight', sa.Numeric(12, 2), nullable=True),
        sa.Column('ingredients', sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    # Register configuration
    op.create_table(
        'discount_presets',
        sa.Column('id', sa.String(40), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('percent', sa.Numeric(5, 2), nullable=False),
        sa.Column('icon', sa.String(10), nullable=True),
        sa.Column('requires_id', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'pos_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('require_gcash_photo', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('require_discount_id_photo', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('low_stock_threshold', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('updated_by', sa.String(100), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    # Shifts
    op.create_table(
        'shifts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('staff_id', sa.Uuid(), nullable=False),
        sa.Column('staff_name', sa.String(100), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('date_key', sa.String(10), nullable=False),
        sa.Column('shift_number', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=True),
        _money('starting_cash'),
        _money('actual_cash', nullable=True),
        _money('expected_cash', nullable=True),
        _money('cash_sales'),
        _money('gcash_sales'),
        _money('other_sales'),
        _money('total_sales'),
        sa.Column('transaction_count', sa.Integer(), nullable=False, server_default='0'),
        _money('total_expenses'),
        _money('variance', nullable=True),
        sa.Column('balance_status', sa.String(20), nullable=True),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('deleted_at', sa.DateTime(), nullable=True),
        sa.Column('deleted_by', sa.String(100), nullable=True),
        sa.Column('last_modified_at', sa.DateTime(), nullable=True),
        sa.Column('last_modified_by', sa.String(100), nullable=True),
        sa.ForeignKeyConstraint(['staff_id'], ['staff.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('date_key', 'shift_number', name='uq_shift_date_number'),
    )
    op.create_index(op.f('ix_shifts_staff_id'), 'shifts', ['staff_id'])
    op.create_index(op.f('ix_shifts_date_key'), 'shifts', ['date_key'])
    op.create_index(op.f('ix_shifts_status'), 'shifts', ['status'])
    op.create_index(op.f('ix_shifts_balance_status'), 'shifts', ['balance_status'])
    op.create_index(op.f('ix_shifts_is_deleted'), 'shifts', ['is_deleted'])

    op.create_table(
        'pending_purchases',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('shift_id', sa.Uuid(), nullable=False),
        sa.Column('date_key', sa.String(10), nullable=False),
        sa.Column('description', sa.String(200), nullable=False),
        _money('amount'),
        sa.Column('staff_id', sa.Uuid(), nullable=False),
        sa.Column('staff_name', sa.String(100), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.id']),
        sa.ForeignKeyConstraint(['staff_id'], ['staff.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_pending_purchases_shift_id'), 'pending_purchases', ['shift_id'])
    op.create_index(op.f('ix_pending_purchases_date_key'), 'pending_purchases', ['date_key'])
    op.create_index(op.f('ix_pending_purchases_status'), 'pending_purchases', ['status'])

    # Sales
    op.create_table(
        'sales',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('sale_number', sa.String(20), nullable=False),
        sa.Column('date_key', sa.String(10), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('shift_id', sa.Uuid(), nullable=True),
        sa.Column('shift_number', sa.Integer(), nullable=True),
        sa.Column('cashier_id', sa.Uuid(), nullable=False),
        sa.Column('cashier_name', sa.String(100), nullable=False),
        _money('subtotal'),
        _money('total_discount'),
        _money('total'),
        sa.Column('payment_method', sa.String(20), nullable=False),
        _money('cash_received', nullable=True),
        _money('change_due', nullable=True),
        sa.Column('gcash_ref_no', sa.String(50), nullable=True),
        sa.Column('gcash_photo', sa.Text(), nullable=True),
        sa.Column('charge_customer_id', sa.Uuid(), nullable=True),
        sa.Column('customer_name', sa.String(200), nullable=True),
        sa.Column('discount_id_photo', sa.Text(), nullable=True),
        sa.Column('discount_id_skipped', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('source', sa.String(20), nullable=False, server_default='pos'),
        sa.Column('audit_notes', sa.Text(), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('last_modified_at', sa.DateTime(), nullable=True),
        sa.Column('last_modified_by', sa.String(100), nullable=True),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.id']),
        sa.ForeignKeyConstraint(['cashier_id'], ['staff.id']),
        sa.ForeignKeyConstraint(['charge_customer_id'], ['charge_customers.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_sales_sale_number'), 'sales', ['sale_number'], unique=True)
    op.create_index(op.f('ix_sales_date_key'), 'sales', ['date_key'])
    op.create_index(op.f('ix_sales_shift_id'), 'sales', ['shift_id'])
    op.create_index(op.f('ix_sales_payment_method'), 'sales', ['payment_method'])
    op.create_index(op.f('ix_sales_is_deleted'), 'sales', ['is_deleted'])

    op.create_table(
        'sale_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('sale_id', sa.Uuid(), nullable=False),
        sa.Column('line_no', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('product_name', sa.String(150), nullable=False),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('main_category', sa.String(100), nullable=True),
        sa.Column('variant_index', sa.Integer(), nullable=True),
        sa.Column('variant_name', sa.String(100), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        _money('original_price'),
        sa.Column('discount_id', sa.String(40), nullable=True),
        sa.Column('discount_name', sa.String(100), nullable=True),
        sa.Column('discount_percent', sa.Numeric(5, 2), nullable=False),
        _money('discount_amount'),
        _money('unit_price'),
        _money('line_total'),
        sa.ForeignKeyConstraint(['sale_id'], ['sales.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_sale_items_sale_id'), 'sale_items', ['sale_id'])
    op.create_index(op.f('ix_sale_items_product_id'), 'sale_items', ['product_id'])

    op.create_table(
        'receivables',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('sale_id', sa.Uuid(), nullable=False),
        sa.Column('sale_number', sa.String(20), nullable=False),
        sa.Column('date_key', sa.String(10), nullable=False),
        sa.Column('customer_id', sa.Uuid(), nullable=True),
        sa.Column('customer_name', sa.String(200), nullable=False),
        _money('total'),
        _money('amount_paid'),
        _money('balance'),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['sale_id'], ['sales.id']),
        sa.ForeignKeyConstraint(['customer_id'], ['charge_customers.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('sale_id'),
    )
    op.create_index(op.f('ix_receivables_date_key'), 'receivables', ['date_key'])
    op.create_index(op.f('ix_receivables_customer_id'), 'receivables', ['customer_id'])
    op.create_index(op.f('ix_receivables_status'), 'receivables', ['status'])

    op.create_table(
        'receivable_payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('receivable_id', sa.Uuid(), nullable=False),
        _money('amount'),
        sa.Column('method', sa.String(20), nullable=False),
        sa.Column('reference', sa.String(100), nullable=True),
        sa.Column('received_by', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['receivable_id'], ['receivables.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_receivable_payments_receivable_id'), 'receivable_payments', ['receivable_id'])

    # Finished-goods stock
    op.create_table(
        'daily_inventory',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('date_key', sa.String(10), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('product_name', sa.String(150), nullable=False),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('carryover_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('new_production_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_available', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('reserved_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sold_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('cancelled_qty', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sold_out_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('date_key', 'product_id', name='uq_daily_inventory_day_product'),
    )
    op.create_index(op.f('ix_daily_inventory_date_key'), 'daily_inventory', ['date_key'])
    op.create_index(op.f('ix_daily_inventory_product_id'), 'daily_inventory', ['product_id'])

    op.create_table(
        'stock_movements',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('date_key', sa.String(10), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('movement_type', sa.String(20), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('sold_after', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sale_id', sa.Uuid(), nullable=True),
        sa.Column('sale_number', sa.String(20), nullable=True),
        sa.Column('performed_by', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_stock_movements_date_key'), 'stock_movements', ['date_key'])
    op.create_index(op.f('ix_stock_movements_sale_id'), 'stock_movements', ['sale_id'])

    # Ingredient deduction
    op.create_table(
        'inventory_deductions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('sale_id', sa.Uuid(), nullable=False),
        sa.Column('sale_number', sa.String(20), nullable=False),
        sa.Column('deductions', sa.JSON(), nullable=False),
        sa.Column('errors', sa.JSON(), nullable=False),
        sa.Column('performed_by', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_inventory_deductions_sale_id'), 'inventory_deductions', ['sale_id'], unique=True)

    op.create_table(
        'deduction_failures',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('sale_id', sa.Uuid(), nullable=False),
        sa.Column('sale_number', sa.String(20), nullable=False),
        sa.Column('job', sa.String(20), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('error', sa.Text(), nullable=False),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_deduction_failures_sale_id'), 'deduction_failures', ['sale_id'])
    op.create_index(op.f('ix_deduction_failures_resolved_at'), 'deduction_failures', ['resolved_at'])

    # Shift inventory endorsements
    op.create_table(
        'shift_inventory',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('shift_id', sa.Uuid(), nullable=False),
        sa.Column('phase', sa.String(10), nullable=False),
        sa.Column('date_key', sa.String(10), nullable=False),
        sa.Column('staff_id', sa.Uuid(), nullable=False),
        sa.Column('staff_name', sa.String(100), nullable=False),
        sa.Column('total_expected', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_counted', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_variance', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_shortage_qty', sa.Integer(), nullable=False, server_default='0'),
        _money('total_shortage_value'),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['shift_id'], ['shifts.id']),
        sa.ForeignKeyConstraint(['staff_id'], ['staff.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('shift_id', 'phase', name='uq_shift_inventory_phase'),
    )
    op.create_index(op.f('ix_shift_inventory_shift_id'), 'shift_inventory', ['shift_id'])
    op.create_index(op.f('ix_shift_inventory_date_key'), 'shift_inventory', ['date_key'])

    op.create_table(
        'shift_inventory_lines',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('endorsement_id', sa.Uuid(), nullable=False),
        sa.Column('line_no', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('product_name', sa.String(150), nullable=False),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('start_qty', sa.Integer(), nullable=True),
        sa.Column('sold_qty', sa.Integer(), nullable=True),
        sa.Column('expected_qty', sa.Integer(), nullable=False),
        sa.Column('counted_qty', sa.Integer(), nullable=False),
        sa.Column('variance', sa.Integer(), nullable=False),
        _money('unit_price'),
        _money('shortage_value'),
        sa.ForeignKeyConstraint(['endorsement_id'], ['shift_inventory.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        op.f('ix_shift_inventory_lines_endorsement_id'), 'shift_inventory_lines', ['endorsement_id']
    )

    # Sales import reconciler
    op.create_table(
        'product_mappings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('external_key', sa.String(200), nullable=False),
        sa.Column('external_name', sa.String(200), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('product_name', sa.String(150), nullable=False),
        sa.Column('variant_index', sa.Integer(), nullable=True),
        sa.Column('variant_name', sa.String(100), nullable=True),
        sa.Column('source', sa.String(10), nullable=False),
        sa.Column('score', sa.Numeric(4, 3), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_product_mappings_external_key'), 'product_mappings', ['external_key'], unique=True)

    op.create_table(
        'sales_imports',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('label', sa.String(200), nullable=True),
        sa.Column('imported_by', sa.String(100), nullable=False),
        sa.Column('items_file_name', sa.String(255), nullable=True),
        sa.Column('daily_file_name', sa.String(255), nullable=True),
        sa.Column('total_items', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('imported_items', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('skipped_items', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_quantity', sa.Integer(), nullable=False, server_default='0'),
        _money('total_gross_sales'),
        _money('total_discounts'),
        _money('total_net_sales'),
        _money('total_cost'),
        _money('total_profit'),
        sa.Column('days_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('skipped_days', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('date_from', sa.String(10), nullable=True),
        sa.Column('date_to', sa.String(10), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'sales_import_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('import_id', sa.Uuid(), nullable=False),
        sa.Column('external_name', sa.String(200), nullable=False),
        sa.Column('sku', sa.String(50), nullable=True),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('product_id', sa.Uuid(), nullable=True),
        sa.Column('product_name', sa.String(150), nullable=True),
        sa.Column('variant_index', sa.Integer(), nullable=True),
        sa.Column('variant_name', sa.String(100), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        _money('gross_sales'),
        _money('discounts'),
        _money('net_sales'),
        _money('unit_cost'),
        _money('total_cost'),
        _money('profit'),
        sa.Column('margin_percent', sa.Numeric(7, 2), nullable=False),
        sa.ForeignKeyConstraint(['import_id'], ['sales_imports.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_sales_import_items_import_id'), 'sales_import_items', ['import_id'])
    op.create_index(op.f('ix_sales_import_items_product_id'), 'sales_import_items', ['product_id'])

    op.create_table(
        'sales_import_days',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('import_id', sa.Uuid(), nullable=False),
        sa.Column('date_key', sa.String(10), nullable=False),
        _money('gross_sales'),
        _money('discounts'),
        _money('net_sales'),
        _money('reported_cost'),
        sa.ForeignKeyConstraint(['import_id'], ['sales_imports.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_sales_import_days_import_id'), 'sales_import_days', ['import_id'])
    # One row per day across every batch
    op.create_index(op.f('ix_sales_import_days_date_key'), 'sales_import_days', ['date_key'], unique=True)

    # Audit trail
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('entity_type', sa.String(30), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=False),
        sa.Column('changed_by', sa.String(100), nullable=False),
        sa.Column('changed_at', sa.DateTime(), nullable=True),
        sa.Column('action', sa.String(30), nullable=False),
        sa.Column('changed_fields', sa.JSON(), nullable=False),
        sa.Column('old_values', sa.JSON(), nullable=False),
        sa.Column('new_values', sa.JSON(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_audit_logs_entity_type'), 'audit_logs', ['entity_type'])
    op.create_index(op.f('ix_audit_logs_entity_id'), 'audit_logs', ['entity_id'])


def downgrade() -> None:
    for table in (
        'audit_logs',
        'sales_import_days',
        'sales_import_items',
        'sales_imports',
        'product_mappings',
        'shift_inventory_lines',
        'shift_inventory',
        'deduction_failures',
        'inventory_deductions',
        'stock_movements',
        'daily_inventory',
        'receivable_payments',
        'receivables',
        'sale_items',
        'sales',
        'pending_purchases',
        'shifts',
        'pos_settings',
        'discount_presets',
        'recipe_components',
        'materials',
        'products',
        'charge_customers',
        'staff',
    ):
        op.drop_table(table)
