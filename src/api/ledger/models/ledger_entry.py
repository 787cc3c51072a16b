from datetime import date
from decimal import Decimal
from typing import Optional
from sqlmodel import Field
from src.api.common.constants.contracts import LedgerDirection
from src.api.common.constants.ledger import LedgerEntryStatus
from src.api.common.models.base import BaseModel, TimestampMixin


class LedgerEntry(BaseModel, TimestampMixin, table=True):
    """
    Receivable or payable record consumed by reporting.

    Entries are located again through their source tags (contract,
    installment or commission request), never through the description.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    direction: LedgerDirection = Field(index=True)
    description: str
    amount: Decimal = Field(max_digits=14, decimal_places=2)
    due_date: date = Field(index=True)
    competency_date: date = Field(index=True)

    # Counterparty (opaque master-data references)
    client_id: Optional[int] = Field(default=None, index=True)
    supplier_id: Optional[int] = Field(default=None, index=True)

    # Classification (opaque master-data references)
    account_category_id: Optional[int] = None
    cost_center_id: Optional[int] = Field(default=None, index=True)
    bank_account_id: Optional[int] = None

    status: LedgerEntryStatus = Field(default=LedgerEntryStatus.PENDING, index=True)
    settled_on: Optional[date] = None

    # Source tags
    contract_id: Optional[int] = Field(
        default=None, foreign_key="contract.id", index=True)
    installment_id: Optional[int] = Field(
        default=None, foreign_key="installment.id", index=True)
    commission_request_id: Optional[int] = Field(
        default=None, foreign_key="commissionrequest.id", index=True)

    class Config:
        from_attributes = True
