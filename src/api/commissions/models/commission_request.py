from typing import Optional
from datetime import datetime
from decimal import Decimal
from sqlmodel import Field, DateTime
from sqlalchemy import UniqueConstraint
from src.api.common.constants.commissions import CommissionRequestStatus
from src.api.common.models.base import BaseModel, TimestampMixin


class CommissionRequest(BaseModel, TimestampMixin, table=True):
    """
    Monthly commission approval request of a salesperson.

    Only one request may exist per salesperson and reference period.
    """
    __table_args__ = (
        UniqueConstraint("salesperson_id", "reference_month", "reference_year",
                         name="uq_commissionrequest_salesperson_period"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    salesperson_id: int = Field(foreign_key="salesperson.id", index=True)
    requester_id: int
    reference_month: int = Field(ge=1, le=12)
    reference_year: int

    sales_total: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    commission_percent: Decimal = Field(default=Decimal("0"), max_digits=7, decimal_places=4)
    commission_amount: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)

    status: CommissionRequestStatus = Field(
        default=CommissionRequestStatus.PENDING, index=True)
    approver_id: Optional[int] = None
    approved_at: Optional[datetime] = Field(
        default=None, sa_type=DateTime(timezone=True), nullable=True)
    rejection_reason: Optional[str] = None

    @property
    def period_label(self) -> str:
        return f"{self.reference_month:02d}/{self.reference_year}"
