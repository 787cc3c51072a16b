from datetime import date
from typing import List, Optional
from fastapi.logger import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select
from src.api.commissions.models.commission_request import CommissionRequest
from src.api.commissions.models.salesperson import Salesperson
from src.api.commissions.schemas.commission_request import CommissionCalculation
from src.api.common.config import EngineSettings, get_settings
from src.api.common.constants.commissions import COMMISSION_REFERENCE_TYPE, CommissionRequestStatus
from src.api.common.constants.contracts import ContractKind, LedgerDirection
from src.api.common.constants.notifications import NotificationKind
from src.api.common.exceptions import ConflictError, DomainError, NotFoundError, ValidationError
from src.api.common.utils.database import transaction
from src.api.common.utils.datetime import get_current_datetime, get_month_boundaries, get_month_end, shift_month
from src.api.common.utils.money import HUNDRED, to_decimal, to_money
from src.api.contracts.models.contract import Contract
from src.api.ledger.models.ledger_entry import LedgerEntry
from src.api.ledger.services.ledger_service import LedgerService
from src.api.notifications.services.notification_service import NotificationService


class CommissionService:
    """
    Monthly commission workflow of a salesperson.

        PENDING --approve--> APPROVED --revert--> PENDING
        PENDING --reject--> REJECTED

    Approval writes exactly one payable ledger entry tagged with the request;
    reversal deletes it. Each transition notifies the other party.
    """

    def __init__(self, db: Session, settings: Optional[EngineSettings] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.ledger = LedgerService(db)
        self.notifications = NotificationService(db)

    def get_request(self, request_id: int) -> Optional[CommissionRequest]:
        """Get a commission request by ID"""
        return self.db.get(CommissionRequest, request_id)

    def get_requests(self, salesperson_id: Optional[int] = None,
                     status: Optional[CommissionRequestStatus] = None,
                     skip: int = 0, limit: int = 100) -> List[CommissionRequest]:
        """Get commission requests, most recent period first"""
        statement = select(CommissionRequest)
        if salesperson_id is not None:
            statement = statement.where(CommissionRequest.salesperson_id == salesperson_id)
        if status:
            statement = statement.where(CommissionRequest.status == status)
        statement = statement.order_by(
            CommissionRequest.reference_year.desc(),
            CommissionRequest.reference_month.desc(),
            CommissionRequest.id)
        return self.db.exec(statement.offset(skip).limit(limit)).all()

    def calculate(self, salesperson_id: int, month: int, year: int) -> CommissionCalculation:
        """
        Commission owed to a salesperson for a month.

        The sales total is the sum of receivables of the salesperson's sale
        contracts settled within the month.
        """
        salesperson = self._get_salesperson(salesperson_id)
        if not 1 <= month <= 12:
            raise ValidationError(f"Reference month must be between 1 and 12, got: {month}")

        start, end = get_month_boundaries(date(year, month, 1))
        contract_ids = self.db.exec(
            select(Contract.id).where(
                Contract.salesperson_id == salesperson_id,
                Contract.kind == ContractKind.SALE,
            )
        ).all()
        sales_total = self.ledger.sum_settled_receivables(list(contract_ids), start, end)
        percent = to_decimal(salesperson.commission_percent)

        return CommissionCalculation(
            salesperson_id=salesperson_id,
            reference_month=month,
            reference_year=year,
            sales_total=sales_total,
            commission_percent=percent,
            commission_amount=to_money(sales_total * percent / HUNDRED),
        )

    def request(self, salesperson_id: int, requester_id: int, month: int, year: int) -> CommissionRequest:
        """
        Open a commission request for approval and notify the approvers.

        Raises:
            ConflictError: a request already exists for the salesperson and period.
        """
        calculation = self.calculate(salesperson_id, month, year)
        if self._find(salesperson_id, month, year):
            raise ConflictError(
                f"A commission request for salesperson {salesperson_id} "
                f"and period {month:02d}/{year} already exists")

        with transaction(self.db):
            commission_request = CommissionRequest(
                salesperson_id=salesperson_id,
                requester_id=requester_id,
                reference_month=month,
                reference_year=year,
                sales_total=calculation.sales_total,
                commission_percent=calculation.commission_percent,
                commission_amount=calculation.commission_amount,
            )
            self.db.add(commission_request)
            try:
                self.db.flush()
            except IntegrityError as e:
                raise ConflictError(
                    f"A commission request for salesperson {salesperson_id} "
                    f"and period {month:02d}/{year} already exists") from e

            self.notifications.send_many(
                self.settings.commission_approver_ids,
                title="Commission awaiting approval",
                message=(f"Commission of {commission_request.commission_amount} for period "
                         f"{commission_request.period_label} is awaiting approval"),
                kind=NotificationKind.INFO,
                reference_type=COMMISSION_REFERENCE_TYPE,
                reference_id=commission_request.id,
            )

        self.db.refresh(commission_request)
        logger.info(f"Commission request {commission_request.id} opened for salesperson "
                    f"{salesperson_id}, period {commission_request.period_label}")
        return commission_request

    def approve(self, request_id: int, approver_id: int) -> CommissionRequest:
        """
        Approve a pending request and create its payable.

        The payable accrues on the last day of the reference month and is due
        on the last day of the following month.

        Raises:
            ValidationError: the request is not pending.
            DomainError: the salesperson has no payee linked, or nothing is owed.
        """
        with transaction(self.db):
            commission_request = self._lock(request_id)
            self._require_status(commission_request, CommissionRequestStatus.PENDING, "approved")

            salesperson = self._get_salesperson(commission_request.salesperson_id)
            if salesperson.supplier_id is None:
                raise DomainError(
                    f"Salesperson {salesperson.name} has no payee linked; "
                    f"link a supplier before approving commissions")
            if to_decimal(commission_request.commission_amount) <= 0:
                raise DomainError(
                    f"Commission request {request_id} has no amount to pay")

            reference = date(commission_request.reference_year, commission_request.reference_month, 1)
            due_year, due_month = shift_month(reference.year, reference.month, 1)
            entry = self.ledger.add_entry(LedgerEntry(
                direction=LedgerDirection.PAYABLE,
                description=f"Commission {salesperson.name} - {commission_request.period_label}",
                amount=commission_request.commission_amount,
                due_date=get_month_end(date(due_year, due_month, 1)),
                competency_date=get_month_end(reference),
                supplier_id=salesperson.supplier_id,
                cost_center_id=salesperson.cost_center_id,
                commission_request_id=commission_request.id,
            ))

            commission_request.status = CommissionRequestStatus.APPROVED
            commission_request.approver_id = approver_id
            commission_request.approved_at = get_current_datetime()
            commission_request.rejection_reason = None
            commission_request.touch()
            self.db.add(commission_request)
            self.db.flush()

            self._notify_requester(
                commission_request, "Commission approved",
                f"Your commission for {commission_request.period_label} was approved",
                NotificationKind.SUCCESS)

        self.db.refresh(commission_request)
        logger.info(f"Commission request {request_id} approved by user {approver_id}, "
                    f"payable entry {entry.id}")
        return commission_request

    def reject(self, request_id: int, approver_id: int, reason: str) -> CommissionRequest:
        """Reject a pending request. A reason is mandatory; the ledger is untouched."""
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("A rejection reason is required")

        with transaction(self.db):
            commission_request = self._lock(request_id)
            self._require_status(commission_request, CommissionRequestStatus.PENDING, "rejected")

            commission_request.status = CommissionRequestStatus.REJECTED
            commission_request.approver_id = approver_id
            commission_request.rejection_reason = reason
            commission_request.touch()
            self.db.add(commission_request)
            self.db.flush()

            self._notify_requester(
                commission_request, "Commission rejected",
                f"Your commission for {commission_request.period_label} was rejected: {reason}",
                NotificationKind.WARNING)

        self.db.refresh(commission_request)
        logger.info(f"Commission request {request_id} rejected by user {approver_id}")
        return commission_request

    def revert(self, request_id: int) -> CommissionRequest:
        """Undo an approval: the tagged payable is deleted and the request is pending again"""
        with transaction(self.db):
            commission_request = self._lock(request_id)
            self._require_status(commission_request, CommissionRequestStatus.APPROVED, "reverted")

            removed = self.ledger.delete_by_commission_request(commission_request.id)
            commission_request.status = CommissionRequestStatus.PENDING
            commission_request.approver_id = None
            commission_request.approved_at = None
            commission_request.touch()
            self.db.add(commission_request)
            self.db.flush()

            self._notify_requester(
                commission_request, "Commission approval reverted",
                f"The approval of your commission for {commission_request.period_label} was reverted",
                NotificationKind.WARNING)

        self.db.refresh(commission_request)
        logger.info(f"Commission request {request_id} reverted, {removed} payable entry removed")
        return commission_request

    def _get_salesperson(self, salesperson_id: int) -> Salesperson:
        salesperson = self.db.get(Salesperson, salesperson_id)
        if not salesperson:
            raise NotFoundError("Salesperson", salesperson_id)
        return salesperson

    def _find(self, salesperson_id: int, month: int, year: int) -> Optional[CommissionRequest]:
        return self.db.exec(
            select(CommissionRequest).where(
                CommissionRequest.salesperson_id == salesperson_id,
                CommissionRequest.reference_month == month,
                CommissionRequest.reference_year == year,
            )
        ).first()

    def _lock(self, request_id: int) -> CommissionRequest:
        commission_request = self.db.exec(
            select(CommissionRequest).where(CommissionRequest.id == request_id).with_for_update()
        ).first()
        if not commission_request:
            raise NotFoundError("Commission request", request_id)
        return commission_request

    @staticmethod
    def _require_status(commission_request: CommissionRequest,
                        expected: CommissionRequestStatus, action: str) -> None:
        if commission_request.status != expected:
            raise ValidationError(
                f"Commission request {commission_request.id} is {commission_request.status.value} "
                f"and cannot be {action}")

    def _notify_requester(self, commission_request: CommissionRequest, title: str,
                          message: str, kind: NotificationKind) -> None:
        self.notifications.send_many(
            [commission_request.requester_id],
            title=title,
            message=message,
            kind=kind,
            reference_type=COMMISSION_REFERENCE_TYPE,
            reference_id=commission_request.id,
        )
