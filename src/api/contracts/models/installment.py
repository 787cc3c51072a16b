from typing import TYPE_CHECKING, Optional
from datetime import date
from decimal import Decimal
from sqlmodel import Field, Relationship
from src.api.common.constants.contracts import InstallmentKind, InstallmentStatus, LedgerDirection
from src.api.common.models.base import BaseModel, TimestampMixin

if TYPE_CHECKING:
    from src.api.contracts.models.contract import Contract


class Installment(BaseModel, TimestampMixin, table=True):
    """
    Scheduled portion of a contract's net value.

    Go-live installments have no due date until their completion event fires.
    """
    id: Optional[int] = Field(default=None, primary_key=True)
    contract_id: int = Field(foreign_key="contract.id", index=True)
    contract: "Contract" = Relationship(back_populates="installments")

    number: int
    due_date: Optional[date] = None
    amount: Decimal = Field(max_digits=14, decimal_places=2)
    # Share of the net value, only set by custom splits
    percent: Optional[Decimal] = Field(default=None, max_digits=7, decimal_places=4)
    description: Optional[str] = None
    kind: InstallmentKind = InstallmentKind.NORMAL
    status: InstallmentStatus = Field(default=InstallmentStatus.PENDING, index=True)
    direction: LedgerDirection
    completed_on: Optional[date] = None

    @property
    def is_go_live(self) -> bool:
        return self.kind == InstallmentKind.GO_LIVE
