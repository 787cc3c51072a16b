from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
from src.api.commissions.schemas.salesperson import SalespersonCreate, SalespersonRead, SalespersonUpdate
from src.api.commissions.services.salesperson_service import SalespersonService
from src.api.common.constants.commissions import SalespersonStatus
from src.api.common.utils.database import get_db

router = APIRouter(prefix="/salespeople", tags=["commissions"])


def get_salesperson_service(db: Session = Depends(get_db)):
    return SalespersonService(db)


@router.post("/", response_model=SalespersonRead)
def create_salesperson(
    salesperson_data: SalespersonCreate,
    salesperson_service: SalespersonService = Depends(get_salesperson_service)
):
    """Create a new salesperson"""
    return salesperson_service.create_salesperson(salesperson_data)


@router.get("/", response_model=List[SalespersonRead])
def get_salespeople(
    status: Optional[SalespersonStatus] = None,
    skip: int = 0,
    limit: int = 100,
    salesperson_service: SalespersonService = Depends(get_salesperson_service)
):
    """Get a list of salespeople"""
    return salesperson_service.get_salespeople(status, skip, limit)


@router.get("/{salesperson_id}", response_model=SalespersonRead)
def get_salesperson(
    salesperson_id: int,
    salesperson_service: SalespersonService = Depends(get_salesperson_service)
):
    """Get a salesperson by ID"""
    salesperson = salesperson_service.get_salesperson(salesperson_id)
    if not salesperson:
        raise HTTPException(status_code=404, detail="Salesperson not found")
    return salesperson


@router.put("/{salesperson_id}", response_model=SalespersonRead)
def update_salesperson(
    salesperson_id: int,
    salesperson_data: SalespersonUpdate,
    salesperson_service: SalespersonService = Depends(get_salesperson_service)
):
    """Update a salesperson"""
    return salesperson_service.update_salesperson(salesperson_id, salesperson_data)
