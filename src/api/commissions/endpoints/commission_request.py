from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
from src.api.commissions.schemas.commission_request import (
    CommissionApproval, CommissionCalculation, CommissionPeriod, CommissionRejection,
    CommissionRequestCreate, CommissionRequestRead)
from src.api.commissions.services.commission_service import CommissionService
from src.api.common.constants.commissions import CommissionRequestStatus
from src.api.common.utils.database import get_db

router = APIRouter(prefix="/commission-requests", tags=["commissions"])


def get_commission_service(db: Session = Depends(get_db)):
    return CommissionService(db)


@router.post("/calculate", response_model=CommissionCalculation)
def calculate_commission(
    period: CommissionPeriod,
    commission_service: CommissionService = Depends(get_commission_service)
):
    """Compute the commission of a salesperson for a month without saving"""
    return commission_service.calculate(
        period.salesperson_id, period.reference_month, period.reference_year)


@router.post("/", response_model=CommissionRequestRead)
def create_commission_request(
    request_data: CommissionRequestCreate,
    commission_service: CommissionService = Depends(get_commission_service)
):
    """Request approval of a monthly commission"""
    return commission_service.request(
        request_data.salesperson_id,
        request_data.requester_id,
        request_data.reference_month,
        request_data.reference_year,
    )


@router.get("/", response_model=List[CommissionRequestRead])
def get_commission_requests(
    salesperson_id: Optional[int] = None,
    status: Optional[CommissionRequestStatus] = None,
    skip: int = 0,
    limit: int = 100,
    commission_service: CommissionService = Depends(get_commission_service)
):
    """Get a list of commission requests"""
    return commission_service.get_requests(salesperson_id, status, skip, limit)


@router.get("/{request_id}", response_model=CommissionRequestRead)
def get_commission_request(
    request_id: int,
    commission_service: CommissionService = Depends(get_commission_service)
):
    """Get a commission request by ID"""
    commission_request = commission_service.get_request(request_id)
    if not commission_request:
        raise HTTPException(status_code=404, detail="Commission request not found")
    return commission_request


@router.post("/{request_id}/approve", response_model=CommissionRequestRead)
def approve_commission_request(
    request_id: int,
    data: CommissionApproval,
    commission_service: CommissionService = Depends(get_commission_service)
):
    """Approve a commission request, creating its payable"""
    return commission_service.approve(request_id, data.approver_id)


@router.post("/{request_id}/reject", response_model=CommissionRequestRead)
def reject_commission_request(
    request_id: int,
    data: CommissionRejection,
    commission_service: CommissionService = Depends(get_commission_service)
):
    """Reject a commission request with a reason"""
    return commission_service.reject(request_id, data.approver_id, data.reason)


@router.post("/{request_id}/revert", response_model=CommissionRequestRead)
def revert_commission_request(
    request_id: int,
    commission_service: CommissionService = Depends(get_commission_service)
):
    """Revert an approval, deleting its payable"""
    return commission_service.revert(request_id)
