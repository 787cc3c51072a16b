from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, model_validator
from src.api.common.constants.contracts import (
    ContractKind, ContractStatus, DiscountMode, InstallmentKind, InstallmentStatus,
    LedgerDirection, PaymentMethod, RecurrencePeriod, SplitPolicy)


class PercentDiscount(BaseModel):
    """Discount expressed as a percentage of the gross value"""
    mode: Literal["PERCENT"] = "PERCENT"
    percent: Decimal


class AmountDiscount(BaseModel):
    """Discount expressed as an absolute amount"""
    mode: Literal["AMOUNT"] = "AMOUNT"
    amount: Decimal


Discount = Annotated[Union[PercentDiscount, AmountDiscount], Field(discriminator="mode")]


class TaxRates(BaseModel):
    """Percentage taxes stacked over the post-discount base"""
    irrf: Decimal = Decimal("0")
    pis: Decimal = Decimal("0")
    cofins: Decimal = Decimal("0")
    csll: Decimal = Decimal("0")

    def as_list(self) -> List[Decimal]:
        return [self.irrf, self.pis, self.cofins, self.csll]


class ContractItemBase(BaseModel):
    """Base schema for contract item data"""
    service_id: Optional[int] = None
    description: str = ""
    quantity: Decimal
    unit_value: Decimal

    model_config = ConfigDict(from_attributes=True)


class ContractItemCreate(ContractItemBase):
    pass


class ContractItemRead(ContractItemBase):
    id: int
    contract_id: int
    total_value: Decimal


class CustomInstallmentPart(BaseModel):
    """One slice of a custom percentage split"""
    percent: Decimal
    kind: InstallmentKind = InstallmentKind.NORMAL
    description: Optional[str] = None


class SplitConfig(BaseModel):
    """How the net value is distributed across installments"""
    policy: SplitPolicy = SplitPolicy.EQUAL
    # Number of installments of a one-shot contract under the equal policy
    installment_count: int = 1
    # Equal policy only: installment 1 waits for the go-live completion
    defer_first: bool = False
    parts: List[CustomInstallmentPart] = []

    @model_validator(mode="after")
    def validate_defer_first(self):
        """Custom splits mark go-live parts themselves"""
        if self.defer_first and self.policy == SplitPolicy.CUSTOM:
            raise ValueError("defer_first applies to the equal policy only; mark a custom part as GO_LIVE instead")
        return self


class ContractBase(BaseModel):
    """Base schema for contract data"""
    kind: ContractKind
    client_id: Optional[int] = None
    supplier_id: Optional[int] = None
    salesperson_id: Optional[int] = None
    start_date: date
    end_date: Optional[date] = None
    recurring: bool = False
    recurrence_period: Optional[RecurrencePeriod] = None
    billing_day: int = 1
    account_category_id: Optional[int] = None
    cost_center_id: Optional[int] = None
    payment_method: Optional[PaymentMethod] = None
    bank_account_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True,
                              arbitrary_types_allowed=True)


class ContractCreate(ContractBase):
    """Schema for creating a new contract"""
    items: List[ContractItemCreate] = []
    discount: Optional[Discount] = None
    taxes: TaxRates = TaxRates()
    split: SplitConfig = SplitConfig()


class ContractUpdate(ContractCreate):
    """Schema for replacing a contract's terms; the version read must be sent back"""
    expected_version: int


class InstallmentRead(BaseModel):
    """Schema for reading installment data"""
    id: int
    contract_id: int
    number: int
    due_date: Optional[date] = None
    amount: Decimal
    percent: Optional[Decimal] = None
    description: Optional[str] = None
    kind: InstallmentKind
    status: InstallmentStatus
    direction: LedgerDirection
    completed_on: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)


class ContractRead(ContractBase):
    """Schema for reading contract data"""
    id: int
    number: str
    quantity: Decimal
    unit_value: Decimal
    discount_mode: DiscountMode
    discount_percent: Decimal
    discount_value: Decimal
    irrf_percent: Decimal
    pis_percent: Decimal
    cofins_percent: Decimal
    csll_percent: Decimal
    split_policy: SplitPolicy
    installment_count: int
    gross_value: Decimal
    discount_amount: Decimal
    net_value: Decimal
    status: ContractStatus
    inactivated_on: Optional[date] = None
    reactivated_on: Optional[date] = None
    version: int
    created_at: datetime
    updated_at: datetime


class ContractDetail(ContractRead):
    """Contract with its items and installments"""
    items: List[ContractItemRead] = []
    installments: List[InstallmentRead] = []


class PlannedInstallmentRead(BaseModel):
    number: int
    due_date: Optional[date] = None
    amount: Decimal
    percent: Optional[Decimal] = None
    description: Optional[str] = None
    kind: InstallmentKind
    status: InstallmentStatus

    model_config = ConfigDict(from_attributes=True)


class ContractPreview(BaseModel):
    """Computed values and schedule of a contract that has not been saved"""
    gross_value: Decimal
    discount_amount: Decimal
    discount_percent: Decimal
    taxes_amount: Decimal
    net_value: Decimal
    installments: List[PlannedInstallmentRead]


class ContractInactivate(BaseModel):
    inactivated_on: Optional[date] = None
    expected_version: int


class ContractReactivate(BaseModel):
    reactivated_on: Optional[date] = None
    expected_version: int
