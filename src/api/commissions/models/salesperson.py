from typing import Optional
from decimal import Decimal
from sqlmodel import Field
from src.api.common.constants.commissions import SalespersonStatus
from src.api.common.models.base import BaseModel, TimestampMixin


class Salesperson(BaseModel, TimestampMixin, table=True):
    """Salesperson earning commission over the receivables of their sale contracts."""
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    commission_percent: Decimal = Field(default=Decimal("0"), max_digits=7, decimal_places=4)
    # Supplier record used as payee of the commission payable
    supplier_id: Optional[int] = None
    cost_center_id: Optional[int] = None
    # User who requests commission approvals on the salesperson's behalf
    user_id: Optional[int] = None
    status: SalespersonStatus = Field(default=SalespersonStatus.ACTIVE, index=True)
