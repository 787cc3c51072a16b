"""Commissions models package."""
from src.api.commissions.models.salesperson import Salesperson
from src.api.commissions.models.commission_request import CommissionRequest

__all__ = ["Salesperson", "CommissionRequest"]
