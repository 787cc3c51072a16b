from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
from src.api.common.constants.contracts import ContractKind, ContractStatus
from src.api.common.utils.database import get_db
from src.api.contracts.schemas.contract import (
    ContractCreate, ContractDetail, ContractInactivate, ContractPreview, ContractReactivate,
    ContractRead, ContractUpdate, InstallmentRead, PlannedInstallmentRead)
from src.api.contracts.services.contract_service import ContractService
from src.api.ledger.schemas.ledger_entry import LedgerEntryRead

router = APIRouter(prefix="/contracts", tags=["contracts"])


def get_contract_service(db: Session = Depends(get_db)):
    return ContractService(db)


@router.post("/", response_model=ContractDetail)
def create_contract(
    contract_data: ContractCreate,
    contract_service: ContractService = Depends(get_contract_service)
):
    """Create a contract and generate its installments and ledger entries"""
    return contract_service.save(contract_data)


@router.post("/preview", response_model=ContractPreview)
def preview_contract(
    contract_data: ContractCreate,
    contract_service: ContractService = Depends(get_contract_service)
):
    """Compute values and installment schedule without saving"""
    resolved, planned = contract_service.preview(contract_data)
    return ContractPreview(
        gross_value=resolved.gross,
        discount_amount=resolved.discount_amount,
        discount_percent=resolved.discount_percent,
        taxes_amount=resolved.taxes_amount,
        net_value=resolved.net,
        installments=[PlannedInstallmentRead.model_validate(p, from_attributes=True) for p in planned],
    )


@router.get("/", response_model=List[ContractRead])
def get_contracts(
    kind: Optional[ContractKind] = None,
    status: Optional[ContractStatus] = None,
    skip: int = 0,
    limit: int = 100,
    contract_service: ContractService = Depends(get_contract_service)
):
    """Get a list of contracts"""
    return contract_service.get_contracts(kind, status, skip, limit)


@router.get("/{contract_id}", response_model=ContractDetail)
def get_contract(
    contract_id: int,
    contract_service: ContractService = Depends(get_contract_service)
):
    """Get a contract with its items and installments"""
    contract = contract_service.get_contract(contract_id)
    if not contract:
        raise HTTPException(status_code=404, detail="Contract not found")
    return contract


@router.put("/{contract_id}", response_model=ContractDetail)
def update_contract(
    contract_id: int,
    contract_data: ContractUpdate,
    contract_service: ContractService = Depends(get_contract_service)
):
    """Replace a contract's terms, regenerating installments and ledger entries"""
    return contract_service.update(contract_id, contract_data)


@router.post("/{contract_id}/inactivate", response_model=ContractRead)
def inactivate_contract(
    contract_id: int,
    data: ContractInactivate,
    contract_service: ContractService = Depends(get_contract_service)
):
    """Inactivate a contract, canceling its pending entries from the given date"""
    return contract_service.inactivate(contract_id, data.expected_version, data.inactivated_on)


@router.post("/{contract_id}/reactivate", response_model=ContractRead)
def reactivate_contract(
    contract_id: int,
    data: ContractReactivate,
    contract_service: ContractService = Depends(get_contract_service)
):
    """Reactivate an inactive contract"""
    return contract_service.reactivate(contract_id, data.expected_version, data.reactivated_on)


@router.get("/{contract_id}/installments", response_model=List[InstallmentRead])
def get_contract_installments(
    contract_id: int,
    contract_service: ContractService = Depends(get_contract_service)
):
    """Get the installments of a contract"""
    if not contract_service.get_contract(contract_id):
        raise HTTPException(status_code=404, detail="Contract not found")
    return contract_service.get_installments(contract_id)


@router.get("/{contract_id}/ledger-entries", response_model=List[LedgerEntryRead])
def get_contract_ledger_entries(
    contract_id: int,
    contract_service: ContractService = Depends(get_contract_service)
):
    """Get the ledger entries generated by a contract"""
    if not contract_service.get_contract(contract_id):
        raise HTTPException(status_code=404, detail="Contract not found")
    return contract_service.ledger.get_entries_by_contract(contract_id)
