from datetime import date
from typing import List, Optional, Tuple
from fastapi.logger import logger
from sqlalchemy import func
from sqlmodel import Session, select
from src.api.common.config import EngineSettings, get_settings
from src.api.common.constants.contracts import (
    CONTRACT_DIRECTIONS, CONTRACT_NUMBER_PREFIXES, ContractKind, ContractStatus,
    RecurrencePeriod, SplitPolicy)
from src.api.common.exceptions import ConflictError, NotFoundError, ValidationError
from src.api.common.utils.database import transaction
from src.api.common.utils.datetime import get_current_date
from src.api.common.utils.money import ZERO, to_decimal, to_money
from src.api.contracts.models.contract import Contract
from src.api.contracts.models.contract_item import ContractItem
from src.api.contracts.models.installment import Installment
from src.api.contracts.schemas.contract import ContractCreate, ContractUpdate
from src.api.contracts.services import installment_planner, value_resolver
from src.api.contracts.services.installment_planner import PlannedInstallment
from src.api.contracts.services.recurrence_calendar import billing_dates
from src.api.contracts.services.value_resolver import ResolvedValue
from src.api.ledger.services.ledger_service import LedgerService


class ContractService:
    """
    Owns the contract aggregate: contract, items, installments and the
    ledger entries generated from them.

    Every edit replaces the whole aggregate inside one transaction, so the
    ledger always reflects the current terms. Settlement state of replaced
    installments is not carried over.
    """

    def __init__(self, db: Session, settings: Optional[EngineSettings] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.ledger = LedgerService(db)

    # Queries

    def get_contract(self, contract_id: int) -> Optional[Contract]:
        """Get a contract by ID"""
        return self.db.get(Contract, contract_id)

    def get_contracts(self, kind: Optional[ContractKind] = None,
                      status: Optional[ContractStatus] = None,
                      skip: int = 0, limit: int = 100) -> List[Contract]:
        """Get a list of contracts"""
        statement = select(Contract)
        if kind:
            statement = statement.where(Contract.kind == kind)
        if status:
            statement = statement.where(Contract.status == status)
        return self.db.exec(statement.order_by(Contract.id).offset(skip).limit(limit)).all()

    def get_installments(self, contract_id: int) -> List[Installment]:
        """Get the installments of a contract ordered by number"""
        return self.db.exec(
            select(Installment)
            .where(Installment.contract_id == contract_id)
            .order_by(Installment.number)
        ).all()

    # Computation

    def preview(self, contract_data: ContractCreate) -> Tuple[ResolvedValue, List[PlannedInstallment]]:
        """Resolve values and plan installments without persisting anything"""
        self._validate(contract_data)
        return self._compute(contract_data)

    def _compute(self, contract_data: ContractCreate) -> Tuple[ResolvedValue, List[PlannedInstallment]]:
        resolved = value_resolver.resolve(
            items=contract_data.items,
            discount=contract_data.discount,
            tax_rates=contract_data.taxes.as_list(),
        )
        schedule = self._build_schedule(contract_data)
        planned = installment_planner.plan(
            to_money(resolved.net),
            contract_data.split.policy,
            schedule,
            parts=contract_data.split.parts,
            defer_first=contract_data.split.defer_first,
        )
        return resolved, planned

    def _build_schedule(self, contract_data: ContractCreate) -> List[date]:
        """
        Billing dates the installments are laid on.

        Recurring contracts follow their recurrence period until the end date
        (capped when open-ended). One-shot contracts are billed monthly, once
        per planned installment.
        """
        split = contract_data.split
        if split.policy == SplitPolicy.CUSTOM:
            needed = installment_planner.count_dated_parts(split.parts)
        else:
            needed = split.installment_count

        if contract_data.recurring:
            cap = None if contract_data.end_date else self.settings.max_open_ended_occurrences
            return billing_dates(
                contract_data.start_date,
                contract_data.billing_day,
                contract_data.recurrence_period,
                end_date=contract_data.end_date,
                max_occurrences=cap,
            )

        if needed < 1:
            return []
        return billing_dates(
            contract_data.start_date,
            contract_data.billing_day,
            RecurrencePeriod.MONTHLY,
            max_occurrences=needed,
        )

    def _validate(self, contract_data: ContractCreate) -> None:
        """Fail fast on missing or inconsistent input, before any write"""
        if contract_data.kind == ContractKind.SALE and not contract_data.client_id:
            raise ValidationError("A client is required for sale contracts")
        if contract_data.kind == ContractKind.PURCHASE and not contract_data.supplier_id:
            raise ValidationError("A supplier is required for purchase contracts")

        missing = [name for name in ("account_category_id", "payment_method", "bank_account_id")
                   if getattr(contract_data, name) is None]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        if not contract_data.items:
            raise ValidationError("A contract requires at least one item")
        for item in contract_data.items:
            if to_decimal(item.quantity) <= 0:
                raise ValidationError(f"Item quantity must be positive, got: {item.quantity}")

        if not 1 <= contract_data.billing_day <= 31:
            raise ValidationError(
                f"Billing day must be between 1 and 31, got: {contract_data.billing_day}")
        if contract_data.end_date and contract_data.end_date < contract_data.start_date:
            raise ValidationError("End date cannot be before the start date")
        if contract_data.recurring and not contract_data.recurrence_period:
            raise ValidationError("Recurring contracts require a recurrence period")
        if contract_data.split.policy == SplitPolicy.EQUAL and contract_data.split.installment_count < 1:
            raise ValidationError("Installment count must be at least 1")

    # Commands

    def save(self, contract_data: ContractCreate) -> Contract:
        """Create a contract with its items, installments and ledger entries"""
        self._validate(contract_data)
        resolved, planned = self._compute(contract_data)

        with transaction(self.db):
            contract = Contract(
                number=self._next_number(contract_data.kind),
                kind=contract_data.kind,
                version=1,
                **self._contract_fields(contract_data, resolved),
            )
            self.db.add(contract)
            self.db.flush()
            self._persist_children(contract, contract_data, planned)

        self.db.refresh(contract)
        logger.info(f"Contract {contract.number} saved with {len(planned)} installments, "
                    f"net value {contract.net_value}")
        return contract

    def update(self, contract_id: int, contract_data: ContractUpdate) -> Contract:
        """
        Replace a contract's terms.

        Items, installments and their ledger entries are deleted and
        regenerated from the new terms. The caller must send the version it
        read; a stale version is rejected with ConflictError.
        """
        contract = self.get_contract(contract_id)
        if not contract:
            raise NotFoundError("Contract", contract_id)
        if contract_data.kind != contract.kind:
            raise ValidationError("The kind of an existing contract cannot change")
        self._validate(contract_data)
        resolved, planned = self._compute(contract_data)

        with transaction(self.db):
            contract = self._lock(contract_id, contract_data.expected_version)
            if contract.status == ContractStatus.INACTIVE:
                raise ValidationError(f"Contract {contract.number} is inactive and cannot be edited")

            removed_entries = self.ledger.delete_by_contract(contract.id)
            self._delete_children(contract.id)

            for key, value in self._contract_fields(contract_data, resolved).items():
                setattr(contract, key, value)
            contract.bump_version()
            contract.touch()
            self.db.add(contract)
            self.db.flush()
            self._persist_children(contract, contract_data, planned)

        self.db.refresh(contract)
        logger.info(f"Contract {contract.number} updated to version {contract.version}: "
                    f"replaced {removed_entries} ledger entries with {len(planned)} installments")
        return contract

    def inactivate(self, contract_id: int, expected_version: int,
                   inactivated_on: Optional[date] = None) -> Contract:
        """
        Retire a contract. Pending entries due on or after the inactivation
        date are canceled; settled and earlier entries stay as they are.
        """
        inactivated_on = inactivated_on or get_current_date()
        with transaction(self.db):
            contract = self._lock(contract_id, expected_version)
            if contract.status == ContractStatus.INACTIVE:
                raise ValidationError(f"Contract {contract.number} is already inactive")
            canceled = self.ledger.cancel_pending_from(contract.id, inactivated_on)
            contract.status = ContractStatus.INACTIVE
            contract.inactivated_on = inactivated_on
            contract.bump_version()
            contract.touch()
            self.db.add(contract)

        self.db.refresh(contract)
        logger.info(f"Contract {contract.number} inactivated on {inactivated_on}, "
                    f"{canceled} ledger entries canceled")
        return contract

    def reactivate(self, contract_id: int, expected_version: int,
                   reactivated_on: Optional[date] = None) -> Contract:
        """Bring a contract back; canceled entries due from the reactivation date are pending again"""
        reactivated_on = reactivated_on or get_current_date()
        with transaction(self.db):
            contract = self._lock(contract_id, expected_version)
            if contract.status == ContractStatus.ACTIVE:
                raise ValidationError(f"Contract {contract.number} is already active")
            restored = self.ledger.restore_canceled_from(contract.id, reactivated_on)
            contract.status = ContractStatus.ACTIVE
            contract.reactivated_on = reactivated_on
            contract.bump_version()
            contract.touch()
            self.db.add(contract)

        self.db.refresh(contract)
        logger.info(f"Contract {contract.number} reactivated on {reactivated_on}, "
                    f"{restored} ledger entries restored")
        return contract

    # Helpers

    def _lock(self, contract_id: int, expected_version: int) -> Contract:
        """Load a contract for update and check the optimistic version token"""
        contract = self.db.exec(
            select(Contract).where(Contract.id == contract_id).with_for_update()
        ).first()
        if not contract:
            raise NotFoundError("Contract", contract_id)
        if contract.version != expected_version:
            raise ConflictError(
                f"Contract {contract.number} was modified concurrently "
                f"(expected version {expected_version}, current {contract.version})")
        return contract

    def _next_number(self, kind: ContractKind) -> str:
        count = self.db.exec(
            select(func.count()).select_from(Contract).where(Contract.kind == kind)
        ).one()
        return f"{CONTRACT_NUMBER_PREFIXES[kind]}{count + 1:06d}"

    def _contract_fields(self, contract_data: ContractCreate, resolved: ResolvedValue) -> dict:
        discount_mode, discount_percent, discount_value = value_resolver.discount_to_fields(
            contract_data.discount)
        quantity = sum((to_decimal(item.quantity) for item in contract_data.items), ZERO)
        unit_value = resolved.gross / quantity if quantity > 0 else ZERO
        is_sale = contract_data.kind == ContractKind.SALE

        return {
            "client_id": contract_data.client_id if is_sale else None,
            "supplier_id": None if is_sale else contract_data.supplier_id,
            "salesperson_id": contract_data.salesperson_id if is_sale else None,
            "start_date": contract_data.start_date,
            "end_date": contract_data.end_date,
            "recurring": contract_data.recurring,
            "recurrence_period": contract_data.recurrence_period if contract_data.recurring else None,
            "billing_day": contract_data.billing_day,
            "account_category_id": contract_data.account_category_id,
            "cost_center_id": contract_data.cost_center_id,
            "quantity": quantity,
            "unit_value": to_money(unit_value),
            "discount_mode": discount_mode,
            "discount_percent": discount_percent,
            "discount_value": discount_value,
            "irrf_percent": to_decimal(contract_data.taxes.irrf),
            "pis_percent": to_decimal(contract_data.taxes.pis),
            "cofins_percent": to_decimal(contract_data.taxes.cofins),
            "csll_percent": to_decimal(contract_data.taxes.csll),
            "payment_method": contract_data.payment_method,
            "bank_account_id": contract_data.bank_account_id,
            "split_policy": contract_data.split.policy,
            "installment_count": contract_data.split.installment_count,
            "gross_value": to_money(resolved.gross),
            "discount_amount": to_money(resolved.discount_amount),
            "net_value": to_money(resolved.net),
        }

    def _persist_children(self, contract: Contract, contract_data: ContractCreate,
                          planned: List[PlannedInstallment]) -> None:
        """Write items, then installments, then one ledger entry per dated installment"""
        for item_data in contract_data.items:
            quantity = to_decimal(item_data.quantity)
            unit_value = to_decimal(item_data.unit_value)
            self.db.add(ContractItem(
                contract_id=contract.id,
                service_id=item_data.service_id,
                description=item_data.description,
                quantity=quantity,
                unit_value=unit_value,
                total_value=to_money(quantity * unit_value),
            ))
        self.db.flush()

        direction = CONTRACT_DIRECTIONS[contract.kind]
        installments = []
        for planned_installment in planned:
            installment = Installment(
                contract_id=contract.id,
                number=planned_installment.number,
                due_date=planned_installment.due_date,
                amount=planned_installment.amount,
                percent=planned_installment.percent,
                description=planned_installment.description,
                kind=planned_installment.kind,
                status=planned_installment.status,
                direction=direction,
            )
            self.db.add(installment)
            installments.append(installment)
        self.db.flush()

        for installment in installments:
            if not installment.is_go_live:
                self.ledger.create_for_installment(contract, installment)

    def _delete_children(self, contract_id: int) -> None:
        for installment in self.get_installments(contract_id):
            self.db.delete(installment)
        items = self.db.exec(
            select(ContractItem).where(ContractItem.contract_id == contract_id)).all()
        for item in items:
            self.db.delete(item)
        self.db.flush()

