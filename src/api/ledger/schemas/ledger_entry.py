from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict
from src.api.common.constants.contracts import LedgerDirection
from src.api.common.constants.ledger import LedgerEntryStatus


class LedgerEntryRead(BaseModel):
    """Schema for reading ledger entry data"""
    id: int
    direction: LedgerDirection
    description: str
    amount: Decimal
    due_date: date
    competency_date: date
    client_id: Optional[int] = None
    supplier_id: Optional[int] = None
    account_category_id: Optional[int] = None
    cost_center_id: Optional[int] = None
    bank_account_id: Optional[int] = None
    status: LedgerEntryStatus
    settled_on: Optional[date] = None
    contract_id: Optional[int] = None
    installment_id: Optional[int] = None
    commission_request_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LedgerEntryFilter(BaseModel):
    """Filters used by reporting consumers"""
    direction: Optional[LedgerDirection] = None
    status: Optional[LedgerEntryStatus] = None
    competency_from: Optional[date] = None
    competency_to: Optional[date] = None
    cost_center_id: Optional[int] = None
    contract_id: Optional[int] = None


class LedgerEntrySettle(BaseModel):
    settled_on: date
