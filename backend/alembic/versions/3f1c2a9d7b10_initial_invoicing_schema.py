"""initial invoicing schema

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19 10:12:41.503118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Shared by purchase_orders and sales_orders; created once up front
order_status = postgresql.ENUM('DRAFT', 'CONFIRMED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED', name='order_status', create_type=False)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def upgrade() -> None:
    """Create every table of the invoicing schema."""
    order_status.create(op.get_bind(), checkfirst=True)

    op.create_table(
        'contacts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
        sa.Column('type', sa.Enum('CUSTOMER', 'VENDOR', 'BOTH', name='contact_type'), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('mobile', sa.String(length=20), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f('ix_contacts_id'), 'contacts', ['id'])
    op.create_index(op.f('ix_contacts_tenant_id'), 'contacts', ['tenant_id'])

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.Enum('GOODS', 'SERVICE', name='product_type'), nullable=False),
        sa.Column('sales_price', sa.Numeric(10, 2), nullable=True),
        sa.Column('purchase_price', sa.Numeric(10, 2), nullable=True),
        sa.Column('tax_percentage', sa.Numeric(5, 2), nullable=True),
        sa.Column('hsn_code', sa.String(length=20), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f('ix_products_id'), 'products', ['id'])
    op.create_index(op.f('ix_products_tenant_id'), 'products', ['tenant_id'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('order_type', sa.Enum('PURCHASE', 'SALES', 'INVOICE', name='order_type'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('quantity', sa.Numeric(10, 2), nullable=False),
        sa.Column('unit_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('tax_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('discount_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('total_amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('tenant_id', sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index(op.f('ix_order_items_id'), 'order_items', ['id'])
    op.create_index(op.f('ix_order_items_tenant_id'), 'order_items', ['tenant_id'])
    op.create_index('ix_order_items_order', 'order_items', ['order_id', 'order_type'])

    for table, number_col, contact_col, uc_name in (
        ('purchase_orders', 'po_number', 'vendor_id', '_tenant_po_number_uc'),
        ('sales_orders', 'so_number', 'customer_id', '_tenant_so_number_uc'),
    ):
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column(number_col, sa.String(length=50), nullable=False),
            sa.Column(contact_col, sa.Integer(), sa.ForeignKey('contacts.id'), nullable=False),
            sa.Column('order_date', sa.Date(), nullable=False),
            sa.Column('status', order_status, nullable=False),
            sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('tenant_id', sa.String(), nullable=True),
            *_timestamps(),
            sa.UniqueConstraint('tenant_id', number_col, name=uc_name),
        )
        op.create_index(op.f(f'ix_{table}_id'), table, ['id'])
        op.create_index(op.f(f'ix_{table}_{number_col}'), table, [number_col])
        op.create_index(op.f(f'ix_{table}_tenant_id'), table, ['tenant_id'])

    op.create_table(
        'invoices',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('invoice_number', sa.String(length=50), nullable=False),
        sa.Column('type', sa.Enum('PURCHASE', 'SALES', name='invoice_type'), nullable=False),
        sa.Column('contact_id', sa.Integer(), sa.ForeignKey('contacts.id'), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('invoice_date', sa.Date(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('status', sa.Enum('UNPAID', 'PARTIAL', 'PAID', 'OVERDUE', 'CANCELLED', name='invoice_status'), nullable=False),
        sa.Column('sub_total', sa.Numeric(12, 2), nullable=False),
        sa.Column('tax_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('discount_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('paid_amount', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('balance_amount', sa.Numeric(12, 2), server_default='0', nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'invoice_number', name='_tenant_invoice_number_uc'),
    )
    op.create_index(op.f('ix_invoices_id'), 'invoices', ['id'])
    op.create_index(op.f('ix_invoices_invoice_number'), 'invoices', ['invoice_number'])
    op.create_index(op.f('ix_invoices_tenant_id'), 'invoices', ['tenant_id'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('payment_number', sa.String(length=50), nullable=True),
        sa.Column('invoice_id', sa.Integer(), sa.ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False),
        sa.Column('payment_date', sa.Date(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_method', sa.Enum('CASH', 'BANK', 'CHEQUE', 'CARD', 'DIGITAL', name='payment_method'), nullable=False),
        sa.Column('reference', sa.String(length=100), nullable=True),
        sa.Column('bank_account', sa.String(length=100), nullable=True),
        sa.Column('cheque_date', sa.Date(), nullable=True),
        sa.Column('clearance_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index(op.f('ix_payments_id'), 'payments', ['id'])
    op.create_index(op.f('ix_payments_payment_number'), 'payments', ['payment_number'])
    op.create_index(op.f('ix_payments_tenant_id'), 'payments', ['tenant_id'])

    op.create_table(
        'chart_of_accounts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('parent_id', sa.Integer(), sa.ForeignKey('chart_of_accounts.id'), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'code', name='_tenant_account_code_uc'),
    )
    op.create_index(op.f('ix_chart_of_accounts_id'), 'chart_of_accounts', ['id'])
    op.create_index(op.f('ix_chart_of_accounts_code'), 'chart_of_accounts', ['code'])
    op.create_index(op.f('ix_chart_of_accounts_tenant_id'), 'chart_of_accounts', ['tenant_id'])

    op.create_table(
        'audit_log',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('table_name', sa.String(), nullable=False),
        sa.Column('record_id', sa.Integer(), nullable=False),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('changed_by', sa.String(), nullable=False),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
    )
    op.create_index(op.f('ix_audit_log_id'), 'audit_log', ['id'])
    op.create_index(op.f('ix_audit_log_tenant_id'), 'audit_log', ['tenant_id'])


def downgrade() -> None:
    """Drop the invoicing schema."""
    for table in ('audit_log', 'chart_of_accounts', 'payments', 'invoices', 'sales_orders',
                  'purchase_orders', 'order_items', 'products', 'contacts'):
        op.drop_table(table)

    bind = op.get_bind()
    for enum_name in ('payment_method', 'invoice_status', 'invoice_type', 'order_status',
                      'order_type', 'product_type', 'contact_type'):
        sa.Enum(name=enum_name).drop(bind, checkfirst=True)
