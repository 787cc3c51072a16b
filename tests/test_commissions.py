import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import patch
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from src.api.commissions.models.commission_request import CommissionRequest
from src.api.commissions.schemas.salesperson import SalespersonCreate, SalespersonUpdate
from src.api.commissions.services.commission_service import CommissionService
from src.api.commissions.services.salesperson_service import SalespersonService
from src.api.common.constants.commissions import (
    COMMISSION_REFERENCE_TYPE, CommissionRequestStatus, SalespersonStatus)
from src.api.common.constants.contracts import LedgerDirection
from src.api.common.constants.notifications import NotificationKind
from src.api.common.exceptions import ConflictError, DomainError, NotFoundError, ValidationError
from src.api.contracts.schemas.contract import ContractItemCreate
from src.api.contracts.services.contract_service import ContractService
from src.api.ledger.models.ledger_entry import LedgerEntry
from src.api.notifications.models.notification import Notification


def settle_sale(session, settings, factory, salesperson_id, amount, settled_on):
    """Create a one-installment sale for the salesperson and settle it"""
    contracts = ContractService(session, settings)
    contract = contracts.save(factory.contract_data(
        salesperson_id=salesperson_id,
        items=[ContractItemCreate(quantity=Decimal("1"), unit_value=Decimal(amount))],
    ))
    entry = contracts.ledger.get_entries_by_contract(contract.id)[0]
    contracts.ledger.settle(entry.id, settled_on)
    return contract


def payables(session):
    return session.exec(
        select(LedgerEntry).where(LedgerEntry.direction == LedgerDirection.PAYABLE)
    ).all()


@pytest.fixture
def salesperson(test_session, test_data_factory):
    return test_data_factory.create_salesperson(test_session)


@pytest.fixture
def commission_service(test_session, test_settings):
    return CommissionService(test_session, test_settings)


@pytest.fixture
def pending_request(test_session, test_settings, test_data_factory, salesperson, commission_service):
    """Request over 10000 settled in February 2024 at 5%"""
    settle_sale(test_session, test_settings, test_data_factory, salesperson.id, "10000", date(2024, 2, 10))
    return commission_service.request(salesperson.id, 77, 2, 2024)


class TestSalespersonService:
    """Test salesperson management"""

    def test_create_and_get(self, test_session):
        service = SalespersonService(test_session)

        salesperson = service.create_salesperson(SalespersonCreate(
            name="Bruno Lima", commission_percent=Decimal("3.5")))

        assert salesperson.id is not None
        assert salesperson.status == SalespersonStatus.ACTIVE
        assert service.get_salesperson(salesperson.id).name == "Bruno Lima"

    def test_update_links_payee(self, test_session, salesperson):
        service = SalespersonService(test_session)

        updated = service.update_salesperson(salesperson.id, SalespersonUpdate(supplier_id=900))

        assert updated.supplier_id == 900
        assert updated.commission_percent == Decimal("5")

    def test_update_missing(self, test_session):
        with pytest.raises(NotFoundError):
            SalespersonService(test_session).update_salesperson(999, SalespersonUpdate(name="X"))

    def test_filter_by_status(self, test_session, test_data_factory):
        test_data_factory.create_salesperson(test_session, name="Active")
        test_data_factory.create_salesperson(test_session, name="Gone", status=SalespersonStatus.INACTIVE)

        active = SalespersonService(test_session).get_salespeople(SalespersonStatus.ACTIVE)

        assert [s.name for s in active] == ["Active"]


class TestCommissionCalculation:
    """Test commission calculation"""

    def test_counts_receivables_settled_in_month(self, test_session, test_settings, test_data_factory,
                                                 salesperson, commission_service):
        settle_sale(test_session, test_settings, test_data_factory, salesperson.id, "2000", date(2024, 2, 1))
        settle_sale(test_session, test_settings, test_data_factory, salesperson.id, "1000", date(2024, 2, 29))
        settle_sale(test_session, test_settings, test_data_factory, salesperson.id, "5000", date(2024, 3, 1))

        calculation = commission_service.calculate(salesperson.id, 2, 2024)

        assert calculation.sales_total == Decimal("3000.00")
        assert calculation.commission_percent == Decimal("5")
        assert calculation.commission_amount == Decimal("150.00")

    def test_ignores_other_salespeople_and_pending_entries(self, test_session, test_settings, test_data_factory,
                                                           salesperson, commission_service):
        other = test_data_factory.create_salesperson(test_session, name="Other")
        settle_sale(test_session, test_settings, test_data_factory, other.id, "2000", date(2024, 2, 10))
        ContractService(test_session, test_settings).save(test_data_factory.contract_data(
            salesperson_id=salesperson.id))

        calculation = commission_service.calculate(salesperson.id, 2, 2024)

        assert calculation.sales_total == 0
        assert calculation.commission_amount == 0

    def test_invalid_month(self, salesperson, commission_service):
        with pytest.raises(ValidationError):
            commission_service.calculate(salesperson.id, 13, 2024)

    def test_missing_salesperson(self, commission_service):
        with pytest.raises(NotFoundError):
            commission_service.calculate(999, 2, 2024)


class TestCommissionRequest:
    """Test opening commission requests"""

    def test_request_stores_calculation_and_notifies_approvers(self, test_session, pending_request):
        assert pending_request.status == CommissionRequestStatus.PENDING
        assert pending_request.sales_total == Decimal("10000.00")
        assert pending_request.commission_amount == Decimal("500.00")

        notifications = test_session.exec(select(Notification)).all()
        assert [n.target_user_id for n in notifications] == [900]
        assert notifications[0].reference_type == COMMISSION_REFERENCE_TYPE
        assert notifications[0].reference_id == pending_request.id

    def test_duplicate_period_conflicts(self, salesperson, commission_service, pending_request):
        """Test only one request may exist per salesperson and period"""
        with pytest.raises(ConflictError):
            commission_service.request(salesperson.id, 78, 2, 2024)

    def test_unique_constraint_backs_the_check(self, salesperson, commission_service, pending_request):
        """Test a duplicate slipping past the lookup is still a conflict"""
        with patch.object(commission_service, "_find", return_value=None):
            with pytest.raises(ConflictError):
                commission_service.request(salesperson.id, 78, 2, 2024)

    def test_notification_failure_does_not_abort(self, test_session, salesperson, commission_service):
        """Test a failing notification is swallowed and the request is kept"""
        with patch("src.api.notifications.services.notification_service.Notification",
                   side_effect=OperationalError("INSERT", {}, Exception("notifications down"))):
            commission_request = commission_service.request(salesperson.id, 77, 3, 2024)

        assert commission_request.id is not None
        assert test_session.exec(select(CommissionRequest)).all() == [commission_request]
        assert test_session.exec(select(Notification)).all() == []


class TestCommissionApproval:
    """Test the approval state machine"""

    def test_approve_creates_one_payable(self, test_session, commission_service, pending_request):
        """Test approving a commission of 500 creates one payable of 500"""
        approved = commission_service.approve(pending_request.id, 900)

        assert approved.status == CommissionRequestStatus.APPROVED
        assert approved.approver_id == 900
        assert approved.approved_at is not None

        entries = payables(test_session)
        assert len(entries) == 1
        entry = entries[0]
        assert entry.amount == Decimal("500.00")
        assert entry.commission_request_id == pending_request.id
        assert entry.supplier_id == 501
        assert entry.competency_date == date(2024, 2, 29)
        assert entry.due_date == date(2024, 3, 31)
        assert entry.description == "Commission Ana Souza - 02/2024"
        assert commission_service.ledger.get_entry_by_commission_request(pending_request.id).id == entry.id

    def test_approve_notifies_requester(self, test_session, commission_service, pending_request):
        commission_service.approve(pending_request.id, 900)

        notification = test_session.exec(
            select(Notification).where(Notification.target_user_id == 77)).one()
        assert notification.kind == NotificationKind.SUCCESS

    def test_revert_deletes_payable(self, test_session, commission_service, pending_request):
        """Test reverting an approval leaves no payable and a pending request"""
        commission_service.approve(pending_request.id, 900)

        reverted = commission_service.revert(pending_request.id)

        assert reverted.status == CommissionRequestStatus.PENDING
        assert reverted.approver_id is None
        assert reverted.approved_at is None
        assert payables(test_session) == []

    def test_approve_again_after_revert(self, test_session, commission_service, pending_request):
        commission_service.approve(pending_request.id, 900)
        commission_service.revert(pending_request.id)

        commission_service.approve(pending_request.id, 901)

        assert len(payables(test_session)) == 1

    def test_approve_without_payee_is_domain_error(self, test_session, test_data_factory, commission_service,
                                                   pending_request, salesperson):
        salesperson.supplier_id = None
        test_session.add(salesperson)
        test_session.commit()

        with pytest.raises(DomainError):
            commission_service.approve(pending_request.id, 900)

        assert commission_service.get_request(pending_request.id).status == CommissionRequestStatus.PENDING
        assert payables(test_session) == []

    def test_approve_twice_rejected(self, commission_service, pending_request):
        commission_service.approve(pending_request.id, 900)

        with pytest.raises(ValidationError):
            commission_service.approve(pending_request.id, 900)

    def test_approve_nothing_owed_is_domain_error(self, salesperson, commission_service):
        commission_request = commission_service.request(salesperson.id, 77, 4, 2024)

        with pytest.raises(DomainError):
            commission_service.approve(commission_request.id, 900)

    def test_reject_requires_reason(self, commission_service, pending_request):
        with pytest.raises(ValidationError):
            commission_service.reject(pending_request.id, 900, "   ")

    def test_reject_records_reason_without_ledger_effect(self, test_session, commission_service, pending_request):
        rejected = commission_service.reject(pending_request.id, 900, "Sales not confirmed")

        assert rejected.status == CommissionRequestStatus.REJECTED
        assert rejected.rejection_reason == "Sales not confirmed"
        assert payables(test_session) == []

    def test_rejected_request_cannot_be_approved(self, commission_service, pending_request):
        commission_service.reject(pending_request.id, 900, "Sales not confirmed")

        with pytest.raises(ValidationError):
            commission_service.approve(pending_request.id, 900)

    def test_revert_pending_request_rejected(self, commission_service, pending_request):
        with pytest.raises(ValidationError):
            commission_service.revert(pending_request.id)

    def test_missing_request(self, commission_service):
        with pytest.raises(NotFoundError):
            commission_service.approve(999, 900)

    def test_list_requests(self, commission_service, salesperson, pending_request):
        later = commission_service.request(salesperson.id, 77, 5, 2024)

        requests = commission_service.get_requests(salesperson_id=salesperson.id)

        assert [r.id for r in requests] == [later.id, pending_request.id]
        assert commission_service.get_requests(status=CommissionRequestStatus.APPROVED) == []
