"""Contracts models package."""
from src.api.contracts.models.contract import Contract
from src.api.contracts.models.contract_item import ContractItem
from src.api.contracts.models.installment import Installment

__all__ = ["Contract", "ContractItem", "Installment"]
