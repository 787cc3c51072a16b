"""Ledger models package."""
from src.api.ledger.models.ledger_entry import LedgerEntry

__all__ = ["LedgerEntry"]
