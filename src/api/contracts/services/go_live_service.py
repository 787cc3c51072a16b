from datetime import date, timedelta
from typing import Optional
from fastapi.logger import logger
from sqlmodel import Session, select
from src.api.common.config import EngineSettings, get_settings
from src.api.common.constants.contracts import ContractStatus, InstallmentStatus
from src.api.common.exceptions import NotFoundError, ValidationError
from src.api.common.utils.database import transaction
from src.api.contracts.models.contract import Contract
from src.api.contracts.models.installment import Installment
from src.api.ledger.models.ledger_entry import LedgerEntry
from src.api.ledger.services.ledger_service import LedgerService


class GoLiveService:
    """
    Completion workflow of go-live installments.

        AWAITING_COMPLETION --complete--> PENDING --settle--> SETTLED
        PENDING --revert--> AWAITING_COMPLETION

    `complete` fixes the due date and writes the ledger entry; `revert` deletes
    that entry again. The due date set at completion is kept on revert.
    """

    def __init__(self, db: Session, settings: Optional[EngineSettings] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.ledger = LedgerService(db)

    def get_installment(self, installment_id: int) -> Optional[Installment]:
        """Get an installment by ID"""
        return self.db.get(Installment, installment_id)

    def get_ledger_entry(self, installment_id: int) -> Optional[LedgerEntry]:
        return self.ledger.get_entry_by_installment(installment_id)

    def complete(self, installment_id: int, completion_date: date,
                 offset_days: Optional[int] = None) -> Installment:
        """
        Mark the go-live of an installment as reached.

        Sets due date = completion date + offset days, moves the installment
        to PENDING and creates exactly one ledger entry for it.

        Raises:
            NotFoundError: the installment does not exist.
            ValidationError: not a go-live installment, or not awaiting completion
                (a second completion is rejected rather than duplicating the entry),
                or the contract is inactive.
        """
        if offset_days is None:
            offset_days = self.settings.go_live_offset_days
        if offset_days < 0:
            raise ValidationError(f"Offset days cannot be negative, got: {offset_days}")

        with transaction(self.db):
            installment = self._lock(installment_id)
            if not installment.is_go_live:
                raise ValidationError(f"Installment {installment_id} is not a go-live installment")
            if installment.status != InstallmentStatus.AWAITING_COMPLETION:
                raise ValidationError(
                    f"Installment {installment_id} is not awaiting completion "
                    f"(status {installment.status.value})")

            contract = self.db.get(Contract, installment.contract_id)
            if contract.status == ContractStatus.INACTIVE:
                raise ValidationError(
                    f"Contract {contract.number} is inactive; reactivate it before completing installment {installment_id}")
            installment.due_date = completion_date + timedelta(days=offset_days)
            installment.completed_on = completion_date
            installment.status = InstallmentStatus.PENDING
            installment.touch()
            self.db.add(installment)
            self.db.flush()

            entry = self.ledger.create_for_installment(contract, installment)

        self.db.refresh(installment)
        logger.info(f"Go-live installment {installment.id} completed on {completion_date}, "
                    f"due {installment.due_date}, ledger entry {entry.id}")
        return installment

    def revert(self, installment_id: int) -> Installment:
        """
        Undo a completion: the installment awaits completion again and its
        ledger entry is deleted. The due date is retained.

        Raises:
            NotFoundError: the installment does not exist.
            ValidationError: not a go-live installment, already settled, or
                not completed.
        """
        with transaction(self.db):
            installment = self._lock(installment_id)
            if not installment.is_go_live:
                raise ValidationError(f"Installment {installment_id} is not a go-live installment")
            if installment.status == InstallmentStatus.SETTLED:
                raise ValidationError(f"Installment {installment_id} is settled and cannot be reverted")
            if installment.status != InstallmentStatus.PENDING:
                raise ValidationError(f"Installment {installment_id} has not been completed")

            removed = self.ledger.delete_by_installment(installment.id)
            installment.status = InstallmentStatus.AWAITING_COMPLETION
            installment.touch()
            self.db.add(installment)

        self.db.refresh(installment)
        logger.info(f"Go-live installment {installment.id} reverted, {removed} ledger entry removed")
        return installment

    def _lock(self, installment_id: int) -> Installment:
        installment = self.db.exec(
            select(Installment).where(Installment.id == installment_id).with_for_update()
        ).first()
        if not installment:
            raise NotFoundError("Installment", installment_id)
        return installment
