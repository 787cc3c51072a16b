from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from src.api.common.constants.commissions import SalespersonStatus


class SalespersonBase(BaseModel):
    """Base schema for salesperson data"""
    name: Optional[str] = None
    commission_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)
    supplier_id: Optional[int] = None
    cost_center_id: Optional[int] = None
    user_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class SalespersonCreate(SalespersonBase):
    """Schema for creating a new salesperson"""
    name: str
    commission_percent: Decimal = Field(ge=0, le=100)


class SalespersonUpdate(SalespersonBase):
    """Schema for updating salesperson data"""
    status: Optional[SalespersonStatus] = None


class SalespersonRead(SalespersonBase):
    """Schema for reading salesperson data"""
    id: int
    name: str
    commission_percent: Decimal
    status: SalespersonStatus
    created_at: datetime
    updated_at: datetime
