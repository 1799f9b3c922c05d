"""tax rates, tax configuration and payment methods

Revision ID: 8b2d4e6f1a3c
Revises: 3f1c2a9d7b10
Create Date: 2026-10-19 15:40:08.219764

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '8b2d4e6f1a3c'
down_revision: Union[str, None] = '3f1c2a9d7b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('updated_by', sa.String(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'tax_rates',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('rate', sa.Numeric(5, 2), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('hsn_codes', sa.JSON(), nullable=True),
        sa.Column('is_default', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f('ix_tax_rates_id'), 'tax_rates', ['id'])
    op.create_index(op.f('ix_tax_rates_tenant_id'), 'tax_rates', ['tenant_id'])

    op.create_table(
        'tax_configuration',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
        sa.Column('enable_tax', sa.Boolean(), nullable=False),
        sa.Column('default_tax_rate', sa.Numeric(5, 2), nullable=False),
        sa.Column('tax_display_format', sa.String(length=20), nullable=False),
        sa.Column('rounding_method', sa.String(length=20), nullable=False),
        sa.Column('compound_tax', sa.Boolean(), nullable=False),
        sa.Column('tax_on_shipping', sa.Boolean(), nullable=False),
        sa.Column('prices_include_tax', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f('ix_tax_configuration_id'), 'tax_configuration', ['id'])
    op.create_index(op.f('ix_tax_configuration_tenant_id'), 'tax_configuration', ['tenant_id'], unique=True)

    op.create_table(
        'payment_methods',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('tenant_id', sa.String(), nullable=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('chart_of_accounts.id'), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index(op.f('ix_payment_methods_id'), 'payment_methods', ['id'])
    op.create_index(op.f('ix_payment_methods_tenant_id'), 'payment_methods', ['tenant_id'])

    op.create_unique_constraint('_tenant_payment_number_uc', 'payments', ['tenant_id', 'payment_number'])


def downgrade() -> None:
    op.drop_constraint('_tenant_payment_number_uc', 'payments', type_='unique')
    for table in ('payment_methods', 'tax_configuration', 'tax_rates'):
        op.drop_table(table)
