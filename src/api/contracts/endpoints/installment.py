from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
from src.api.common.utils.database import get_db
from src.api.contracts.schemas.contract import InstallmentRead
from src.api.contracts.schemas.installment import GoLiveCompletion
from src.api.contracts.services.go_live_service import GoLiveService

router = APIRouter(prefix="/installments", tags=["installments"])


def get_go_live_service(db: Session = Depends(get_db)):
    return GoLiveService(db)


@router.get("/{installment_id}", response_model=InstallmentRead)
def get_installment(
    installment_id: int,
    go_live_service: GoLiveService = Depends(get_go_live_service)
):
    """Get an installment by ID"""
    installment = go_live_service.get_installment(installment_id)
    if not installment:
        raise HTTPException(status_code=404, detail="Installment not found")
    return installment


@router.post("/{installment_id}/complete", response_model=InstallmentRead)
def complete_go_live(
    installment_id: int,
    data: GoLiveCompletion,
    go_live_service: GoLiveService = Depends(get_go_live_service)
):
    """Record the go-live of a deferred installment and schedule it"""
    return go_live_service.complete(installment_id, data.completion_date, data.offset_days)


@router.post("/{installment_id}/revert", response_model=InstallmentRead)
def revert_go_live(
    installment_id: int,
    go_live_service: GoLiveService = Depends(get_go_live_service)
):
    """Undo a go-live completion"""
    return go_live_service.revert(installment_id)
