from typing import TYPE_CHECKING, Optional
from decimal import Decimal
from sqlmodel import Field, Relationship
from src.api.common.models.base import BaseModel

if TYPE_CHECKING:
    from src.api.contracts.models.contract import Contract


class ContractItem(BaseModel, table=True):
    """Line of a contract. Items are always replaced as a batch."""
    id: Optional[int] = Field(default=None, primary_key=True)
    contract_id: int = Field(foreign_key="contract.id", index=True)
    contract: "Contract" = Relationship(back_populates="items")

    service_id: Optional[int] = None
    description: str = ""
    quantity: Decimal = Field(max_digits=14, decimal_places=4)
    unit_value: Decimal = Field(max_digits=14, decimal_places=2)
    total_value: Decimal = Field(max_digits=14, decimal_places=2)
