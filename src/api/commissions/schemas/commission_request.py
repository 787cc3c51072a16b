from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from src.api.common.constants.commissions import CommissionRequestStatus


class CommissionPeriod(BaseModel):
    """Reference month of a commission"""
    salesperson_id: int
    reference_month: int = Field(ge=1, le=12)
    reference_year: int = Field(ge=2000)


class CommissionCalculation(CommissionPeriod):
    """Result of a commission calculation, nothing persisted"""
    sales_total: Decimal
    commission_percent: Decimal
    commission_amount: Decimal


class CommissionRequestCreate(CommissionPeriod):
    """Schema for requesting approval of a monthly commission"""
    requester_id: int


class CommissionApproval(BaseModel):
    approver_id: int


class CommissionRejection(BaseModel):
    approver_id: int
    reason: str

    @field_validator('reason')
    def strip_reason(cls, v):
        return v.strip()


class CommissionRequestRead(BaseModel):
    """Schema for reading commission request data"""
    id: int
    salesperson_id: int
    requester_id: int
    reference_month: int
    reference_year: int
    sales_total: Decimal
    commission_percent: Decimal
    commission_amount: Decimal
    status: CommissionRequestStatus
    approver_id: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
