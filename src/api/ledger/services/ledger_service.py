from datetime import date
from decimal import Decimal
from typing import List, Optional
from fastapi.logger import logger
from sqlmodel import Session, col, select
from src.api.common.constants.contracts import InstallmentStatus, LedgerDirection
from src.api.common.constants.ledger import LedgerEntryStatus
from src.api.common.exceptions import NotFoundError, ValidationError
from src.api.common.utils.database import transaction
from src.api.common.utils.money import sum_money, to_money
from src.api.contracts.models.contract import Contract
from src.api.contracts.models.installment import Installment
from src.api.ledger.models.ledger_entry import LedgerEntry
from src.api.ledger.schemas.ledger_entry import LedgerEntryFilter


class LedgerService:
    """
    Receivable/payable store.

    Write helpers only add and flush: the calling service owns the
    transaction. `settle` is the only operation that commits on its own.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_entry(self, entry_id: int) -> Optional[LedgerEntry]:
        """Get a ledger entry by ID"""
        return self.db.get(LedgerEntry, entry_id)

    def get_entries(self, filters: Optional[LedgerEntryFilter] = None,
                    skip: int = 0, limit: int = 100) -> List[LedgerEntry]:
        """Get ledger entries filtered by direction, status, competency range or cost center"""
        filters = filters or LedgerEntryFilter()
        statement = select(LedgerEntry)
        if filters.direction:
            statement = statement.where(LedgerEntry.direction == filters.direction)
        if filters.status:
            statement = statement.where(LedgerEntry.status == filters.status)
        if filters.competency_from:
            statement = statement.where(LedgerEntry.competency_date >= filters.competency_from)
        if filters.competency_to:
            statement = statement.where(LedgerEntry.competency_date <= filters.competency_to)
        if filters.cost_center_id is not None:
            statement = statement.where(LedgerEntry.cost_center_id == filters.cost_center_id)
        if filters.contract_id is not None:
            statement = statement.where(LedgerEntry.contract_id == filters.contract_id)
        statement = statement.order_by(LedgerEntry.due_date, LedgerEntry.id)
        return self.db.exec(statement.offset(skip).limit(limit)).all()

    def get_entries_by_contract(self, contract_id: int) -> List[LedgerEntry]:
        return self.db.exec(
            select(LedgerEntry)
            .where(LedgerEntry.contract_id == contract_id)
            .order_by(LedgerEntry.due_date, LedgerEntry.id)
        ).all()

    def get_entry_by_installment(self, installment_id: int) -> Optional[LedgerEntry]:
        return self.db.exec(
            select(LedgerEntry).where(LedgerEntry.installment_id == installment_id)
        ).first()

    def get_entry_by_commission_request(self, request_id: int) -> Optional[LedgerEntry]:
        return self.db.exec(
            select(LedgerEntry).where(LedgerEntry.commission_request_id == request_id)
        ).first()

    def add_entry(self, entry: LedgerEntry) -> LedgerEntry:
        entry.amount = to_money(entry.amount)
        self.db.add(entry)
        self.db.flush()
        return entry

    def create_for_installment(self, contract: Contract, installment: Installment) -> LedgerEntry:
        """
        Create the receivable/payable of a dated installment.

        The competency date is the installment's due date.
        """
        if installment.due_date is None:
            raise ValidationError(
                f"Installment {installment.number} of contract {contract.number} has no due date")

        description = f"{contract.number} - Installment {installment.number}"
        if installment.description:
            description = f"{description} - {installment.description}"

        is_receivable = installment.direction == LedgerDirection.RECEIVABLE
        return self.add_entry(LedgerEntry(
            direction=installment.direction,
            description=description,
            amount=installment.amount,
            due_date=installment.due_date,
            competency_date=installment.due_date,
            client_id=contract.client_id if is_receivable else None,
            supplier_id=None if is_receivable else contract.supplier_id,
            account_category_id=contract.account_category_id,
            cost_center_id=contract.cost_center_id,
            bank_account_id=contract.bank_account_id,
            status=LedgerEntryStatus.PENDING,
            contract_id=contract.id,
            installment_id=installment.id,
        ))

    def delete_by_contract(self, contract_id: int) -> int:
        """Delete every entry generated by a contract. Returns the number deleted."""
        entries = self.get_entries_by_contract(contract_id)
        for entry in entries:
            self.db.delete(entry)
        self.db.flush()
        return len(entries)

    def delete_by_installment(self, installment_id: int) -> int:
        entries = self.db.exec(
            select(LedgerEntry).where(LedgerEntry.installment_id == installment_id)
        ).all()
        for entry in entries:
            self.db.delete(entry)
        self.db.flush()
        return len(entries)

    def delete_by_commission_request(self, request_id: int) -> int:
        entries = self.db.exec(
            select(LedgerEntry).where(LedgerEntry.commission_request_id == request_id)
        ).all()
        for entry in entries:
            self.db.delete(entry)
        self.db.flush()
        return len(entries)

    def cancel_pending_from(self, contract_id: int, from_date: date) -> int:
        """Cancel the pending entries of a contract due on or after a date."""
        entries = self.db.exec(
            select(LedgerEntry).where(
                LedgerEntry.contract_id == contract_id,
                LedgerEntry.status == LedgerEntryStatus.PENDING,
                LedgerEntry.due_date >= from_date,
            )
        ).all()
        for entry in entries:
            entry.status = LedgerEntryStatus.CANCELED
            entry.touch()
            self.db.add(entry)
        self.db.flush()
        return len(entries)

    def restore_canceled_from(self, contract_id: int, from_date: date) -> int:
        """Bring back canceled entries of a contract due on or after a date."""
        entries = self.db.exec(
            select(LedgerEntry).where(
                LedgerEntry.contract_id == contract_id,
                LedgerEntry.status == LedgerEntryStatus.CANCELED,
                LedgerEntry.due_date >= from_date,
            )
        ).all()
        for entry in entries:
            entry.status = LedgerEntryStatus.PENDING
            entry.touch()
            self.db.add(entry)
        self.db.flush()
        return len(entries)

    def settle(self, entry_id: int, settled_on: date) -> LedgerEntry:
        """
        Record the settlement of an entry. A linked installment moves to
        SETTLED as well.
        """
        with transaction(self.db):
            entry = self.db.exec(
                select(LedgerEntry).where(LedgerEntry.id == entry_id).with_for_update()
            ).first()
            if not entry:
                raise NotFoundError("Ledger entry", entry_id)
            if entry.status != LedgerEntryStatus.PENDING:
                raise ValidationError(
                    f"Only pending entries can be settled, entry {entry_id} is {entry.status.value}")

            entry.status = LedgerEntryStatus.SETTLED
            entry.settled_on = settled_on
            entry.touch()
            self.db.add(entry)

            if entry.installment_id is not None:
                installment = self.db.get(Installment, entry.installment_id)
                if installment:
                    installment.status = InstallmentStatus.SETTLED
                    installment.touch()
                    self.db.add(installment)

        self.db.refresh(entry)
        logger.info(f"Ledger entry {entry.id} settled on {settled_on}")
        return entry

    def sum_settled_receivables(self, contract_ids: List[int],
                                start: date, end: date) -> Decimal:
        """Total of receivables of the given contracts settled within [start, end]."""
        if not contract_ids:
            return to_money(0)
        entries = self.db.exec(
            select(LedgerEntry).where(
                col(LedgerEntry.contract_id).in_(contract_ids),
                LedgerEntry.direction == LedgerDirection.RECEIVABLE,
                LedgerEntry.status == LedgerEntryStatus.SETTLED,
                LedgerEntry.settled_on >= start,
                LedgerEntry.settled_on <= end,
            )
        ).all()
        return to_money(sum_money(entry.amount for entry in entries))
