from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
from src.api.common.constants.contracts import LedgerDirection
from src.api.common.constants.ledger import LedgerEntryStatus
from src.api.common.utils.database import get_db
from src.api.ledger.schemas.ledger_entry import LedgerEntryFilter, LedgerEntryRead, LedgerEntrySettle
from src.api.ledger.services.ledger_service import LedgerService

router = APIRouter(prefix="/ledger-entries", tags=["ledger"])


def get_ledger_service(db: Session = Depends(get_db)):
    return LedgerService(db)


@router.get("/", response_model=List[LedgerEntryRead])
def get_ledger_entries(
    direction: Optional[LedgerDirection] = None,
    status: Optional[LedgerEntryStatus] = None,
    competency_from: Optional[date] = None,
    competency_to: Optional[date] = None,
    cost_center_id: Optional[int] = None,
    contract_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    ledger_service: LedgerService = Depends(get_ledger_service)
):
    """Get receivables and payables for reporting"""
    filters = LedgerEntryFilter(
        direction=direction,
        status=status,
        competency_from=competency_from,
        competency_to=competency_to,
        cost_center_id=cost_center_id,
        contract_id=contract_id,
    )
    return ledger_service.get_entries(filters, skip, limit)


@router.get("/{entry_id}", response_model=LedgerEntryRead)
def get_ledger_entry(
    entry_id: int,
    ledger_service: LedgerService = Depends(get_ledger_service)
):
    """Get a ledger entry by ID"""
    entry = ledger_service.get_entry(entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Ledger entry not found")
    return entry


@router.post("/{entry_id}/settle", response_model=LedgerEntryRead)
def settle_ledger_entry(
    entry_id: int,
    data: LedgerEntrySettle,
    ledger_service: LedgerService = Depends(get_ledger_service)
):
    """Record the settlement of a ledger entry"""
    return ledger_service.settle(entry_id, data.settled_on)
