"""Contracts, ledger and commissions

Revision ID: 3f9c2a7d41b8
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from src.api.common.constants.commissions import commission_request_status_enum
from src.api.common.constants.contracts import (
    contract_kind_enum, contract_status_enum, installment_status_enum, ledger_direction_enum)
from src.api.common.constants.ledger import ledger_entry_status_enum


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d41b8'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SHARED_ENUMS = [
    contract_kind_enum,
    contract_status_enum,
    installment_status_enum,
    ledger_direction_enum,
    ledger_entry_status_enum,
    commission_request_status_enum,
]


def create_enum(name: str, values: list):
    """Create an enum type safely."""
    enum = postgresql.ENUM(*values, name=name, create_type=False)
    enum.create(op.get_bind(), checkfirst=True)
    return enum


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def money(name: str, nullable: bool = False):
    return sa.Column(name, sa.Numeric(14, 2), nullable=nullable)


def percent(name: str, nullable: bool = False):
    return sa.Column(name, sa.Numeric(7, 4), nullable=nullable)


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    for enum in SHARED_ENUMS:
        enum.create(bind, checkfirst=True)

    recurrence_period = create_enum(
        'recurrenceperiod', ['MONTHLY', 'BIMONTHLY', 'QUARTERLY', 'SEMIANNUAL', 'ANNUAL'])
    discount_mode = create_enum('discountmode', ['NONE', 'PERCENT', 'AMOUNT'])
    payment_method = create_enum('paymentmethod', ['PIX', 'TRANSFER', 'BOLETO', 'CREDIT_CARD'])
    split_policy = create_enum('splitpolicy', ['EQUAL', 'CUSTOM'])
    installment_kind = create_enum('installmentkind', ['NORMAL', 'GO_LIVE'])
    salesperson_status = create_enum('salespersonstatus', ['ACTIVE', 'INACTIVE'])
    notification_kind = create_enum('notificationkind', ['INFO', 'SUCCESS', 'WARNING', 'ERROR'])

    op.create_table(
        'salesperson',
        *timestamps(),
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        percent('commission_percent'),
        sa.Column('supplier_id', sa.Integer(), nullable=True),
        sa.Column('cost_center_id', sa.Integer(), nullable=True),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('status', salesperson_status, nullable=False),
    )
    op.create_index(op.f('ix_salesperson_status'), 'salesperson', ['status'])

    op.create_table(
        'contract',
        *timestamps(),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('number', sa.String(), nullable=False),
        sa.Column('kind', contract_kind_enum, nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=True),
        sa.Column('supplier_id', sa.Integer(), nullable=True),
        sa.Column('salesperson_id', sa.Integer(), sa.ForeignKey('salesperson.id'), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('recurring', sa.Boolean(), nullable=False),
        sa.Column('recurrence_period', recurrence_period, nullable=True),
        sa.Column('billing_day', sa.Integer(), nullable=False),
        sa.Column('account_category_id', sa.Integer(), nullable=False),
        sa.Column('cost_center_id', sa.Integer(), nullable=True),
        sa.Column('quantity', sa.Numeric(14, 4), nullable=False),
        money('unit_value'),
        sa.Column('discount_mode', discount_mode, nullable=False),
        percent('discount_percent'),
        money('discount_value'),
        percent('irrf_percent'),
        percent('pis_percent'),
        percent('cofins_percent'),
        percent('csll_percent'),
        sa.Column('payment_method', payment_method, nullable=False),
        sa.Column('bank_account_id', sa.Integer(), nullable=False),
        sa.Column('split_policy', split_policy, nullable=False),
        sa.Column('installment_count', sa.Integer(), nullable=False),
        money('gross_value'),
        money('discount_amount'),
        money('net_value'),
        sa.Column('status', contract_status_enum, nullable=False),
        sa.Column('inactivated_on', sa.Date(), nullable=True),
        sa.Column('reactivated_on', sa.Date(), nullable=True),
    )
    op.create_index(op.f('ix_contract_number'), 'contract', ['number'], unique=True)
    op.create_index(op.f('ix_contract_kind'), 'contract', ['kind'])
    op.create_index(op.f('ix_contract_client_id'), 'contract', ['client_id'])
    op.create_index(op.f('ix_contract_supplier_id'), 'contract', ['supplier_id'])
    op.create_index(op.f('ix_contract_salesperson_id'), 'contract', ['salesperson_id'])
    op.create_index(op.f('ix_contract_status'), 'contract', ['status'])

    op.create_table(
        'contractitem',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('contract_id', sa.Integer(), sa.ForeignKey('contract.id'), nullable=False),
        sa.Column('service_id', sa.Integer(), nullable=True),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('quantity', sa.Numeric(14, 4), nullable=False),
        money('unit_value'),
        money('total_value'),
    )
    op.create_index(op.f('ix_contractitem_contract_id'), 'contractitem', ['contract_id'])

    op.create_table(
        'installment',
        *timestamps(),
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('contract_id', sa.Integer(), sa.ForeignKey('contract.id'), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=True),
        money('amount'),
        percent('percent', nullable=True),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('kind', installment_kind, nullable=False),
        sa.Column('status', installment_status_enum, nullable=False),
        sa.Column('direction', ledger_direction_enum, nullable=False),
        sa.Column('completed_on', sa.Date(), nullable=True),
    )
    op.create_index(op.f('ix_installment_contract_id'), 'installment', ['contract_id'])
    op.create_index(op.f('ix_installment_status'), 'installment', ['status'])

    op.create_table(
        'commissionrequest',
        *timestamps(),
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('salesperson_id', sa.Integer(), sa.ForeignKey('salesperson.id'), nullable=False),
        sa.Column('requester_id', sa.Integer(), nullable=False),
        sa.Column('reference_month', sa.Integer(), nullable=False),
        sa.Column('reference_year', sa.Integer(), nullable=False),
        money('sales_total'),
        percent('commission_percent'),
        money('commission_amount'),
        sa.Column('status', commission_request_status_enum, nullable=False),
        sa.Column('approver_id', sa.Integer(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.String(), nullable=True),
        sa.UniqueConstraint('salesperson_id', 'reference_month', 'reference_year',
                            name='uq_commissionrequest_salesperson_period'),
    )
    op.create_index(op.f('ix_commissionrequest_salesperson_id'),
                    'commissionrequest', ['salesperson_id'])
    op.create_index(op.f('ix_commissionrequest_status'), 'commissionrequest', ['status'])

    op.create_table(
        'ledgerentry',
        *timestamps(),
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('direction', ledger_direction_enum, nullable=False),
        sa.Column('description', sa.String(), nullable=False),
        money('amount'),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('competency_date', sa.Date(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=True),
        sa.Column('supplier_id', sa.Integer(), nullable=True),
        sa.Column('account_category_id', sa.Integer(), nullable=True),
        sa.Column('cost_center_id', sa.Integer(), nullable=True),
        sa.Column('bank_account_id', sa.Integer(), nullable=True),
        sa.Column('status', ledger_entry_status_enum, nullable=False),
        sa.Column('settled_on', sa.Date(), nullable=True),
        sa.Column('contract_id', sa.Integer(), sa.ForeignKey('contract.id'), nullable=True),
        sa.Column('installment_id', sa.Integer(), sa.ForeignKey('installment.id'), nullable=True),
        sa.Column('commission_request_id', sa.Integer(),
                  sa.ForeignKey('commissionrequest.id'), nullable=True),
    )
    for column in ('direction', 'due_date', 'competency_date', 'client_id', 'supplier_id',
                   'cost_center_id', 'status', 'contract_id', 'installment_id',
                   'commission_request_id'):
        op.create_index(op.f(f'ix_ledgerentry_{column}'), 'ledgerentry', [column])

    op.create_table(
        'notification',
        *timestamps(),
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('target_user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('message', sa.String(), nullable=False),
        sa.Column('kind', notification_kind, nullable=False),
        sa.Column('reference_type', sa.String(), nullable=True),
        sa.Column('reference_id', sa.Integer(), nullable=True),
        sa.Column('read', sa.Boolean(), nullable=False),
    )
    op.create_index(op.f('ix_notification_target_user_id'), 'notification', ['target_user_id'])


def downgrade() -> None:
    """Downgrade schema."""
    # Drop in reverse dependency order
    op.drop_table('notification')
    op.drop_table('ledgerentry')
    op.drop_table('commissionrequest')
    op.drop_table('installment')
    op.drop_table('contractitem')
    op.drop_table('contract')
    op.drop_table('salesperson')

    bind = op.get_bind()
    for name in ('notificationkind', 'salespersonstatus', 'installmentkind', 'splitpolicy',
                 'paymentmethod', 'discountmode', 'recurrenceperiod'):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
    for enum in SHARED_ENUMS:
        enum.drop(bind, checkfirst=True)
