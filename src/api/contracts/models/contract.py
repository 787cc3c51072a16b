from typing import TYPE_CHECKING, List, Optional
from datetime import date
from decimal import Decimal
from sqlmodel import Field, Relationship
from src.api.common.constants.contracts import (
    ContractKind, ContractStatus, DiscountMode, PaymentMethod, RecurrencePeriod, SplitPolicy)
from src.api.common.models.base import BaseModel, TimestampMixin, VersionMixin

if TYPE_CHECKING:
    from src.api.contracts.models.contract_item import ContractItem
    from src.api.contracts.models.installment import Installment


class Contract(BaseModel, TimestampMixin, VersionMixin, table=True):
    """
    Commercial agreement with a client (sale) or a supplier (purchase).

    Monetary totals are derived from the items, discount and tax stack and are
    recomputed on every edit.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    number: str = Field(index=True, unique=True)
    kind: ContractKind = Field(index=True)

    # Counterparty, selected by kind
    client_id: Optional[int] = Field(default=None, index=True)
    supplier_id: Optional[int] = Field(default=None, index=True)
    salesperson_id: Optional[int] = Field(
        default=None, foreign_key="salesperson.id", index=True)

    # Term and recurrence
    start_date: date
    end_date: Optional[date] = None
    recurring: bool = False
    recurrence_period: Optional[RecurrencePeriod] = None
    billing_day: int = 1

    # Classification
    account_category_id: int
    cost_center_id: Optional[int] = None

    # Commercial terms
    quantity: Decimal = Field(default=Decimal("1"), max_digits=14, decimal_places=4)
    unit_value: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    discount_mode: DiscountMode = DiscountMode.NONE
    discount_percent: Decimal = Field(default=Decimal("0"), max_digits=7, decimal_places=4)
    discount_value: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    irrf_percent: Decimal = Field(default=Decimal("0"), max_digits=7, decimal_places=4)
    pis_percent: Decimal = Field(default=Decimal("0"), max_digits=7, decimal_places=4)
    cofins_percent: Decimal = Field(default=Decimal("0"), max_digits=7, decimal_places=4)
    csll_percent: Decimal = Field(default=Decimal("0"), max_digits=7, decimal_places=4)

    # Payment
    payment_method: PaymentMethod
    bank_account_id: int
    split_policy: SplitPolicy = SplitPolicy.EQUAL
    installment_count: int = 1

    # Computed values
    gross_value: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    discount_amount: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    net_value: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)

    status: ContractStatus = Field(default=ContractStatus.ACTIVE, index=True)
    inactivated_on: Optional[date] = None
    reactivated_on: Optional[date] = None

    # Relationships
    items: List["ContractItem"] = Relationship(back_populates="contract")
    installments: List["Installment"] = Relationship(back_populates="contract")

    class Config:
        from_attributes = True
        arbitrary_types_allowed = True
