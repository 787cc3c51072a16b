"""
Installment planning.

Distributes a contract's net value over a schedule of billing dates using
either an equal split or a custom percentage split. Planning is side-effect
free: it returns in-memory records and the aggregate manager persists them.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from src.api.common.constants.contracts import (
    InstallmentKind, InstallmentStatus, SplitPolicy, SPLIT_PERCENT_TOLERANCE)
from src.api.common.exceptions import ValidationError
from src.api.common.utils.money import HUNDRED, sum_money, to_decimal, to_money
from src.api.contracts.schemas.contract import CustomInstallmentPart


@dataclass
class PlannedInstallment:
    """An installment that has not been persisted yet."""

    number: int
    due_date: Optional[date]
    amount: Decimal
    kind: InstallmentKind = InstallmentKind.NORMAL
    status: InstallmentStatus = InstallmentStatus.PENDING
    percent: Optional[Decimal] = None
    description: Optional[str] = None

    @property
    def is_deferred(self) -> bool:
        return self.kind == InstallmentKind.GO_LIVE


def _distribute(total: Decimal, shares: List[Decimal]) -> List[Decimal]:
    """
    Round every share to cents and let the last one absorb the remainder,
    so the amounts always add up to the rounded total.

    A batch where any installment would be worth nothing (or less) is rejected
    as a whole.
    """
    amounts = [to_money(share) for share in shares[:-1]]
    amounts.append(to_money(total) - sum_money(amounts))
    if any(amount <= 0 for amount in amounts):
        raise ValidationError(
            f"Net value {to_money(total)} is too small to split into {len(amounts)} installments")
    return amounts


def _deferred(number: int, amount: Decimal, percent=None, description=None) -> PlannedInstallment:
    return PlannedInstallment(
        number=number,
        due_date=None,
        amount=amount,
        kind=InstallmentKind.GO_LIVE,
        status=InstallmentStatus.AWAITING_COMPLETION,
        percent=percent,
        description=description,
    )


def plan_equal(net_value: Decimal, schedule: Sequence[date],
               defer_first: bool = False) -> List[PlannedInstallment]:
    """One installment per scheduled date, each worth net / count."""
    count = len(schedule)
    if count == 0:
        raise ValidationError("At least one billing date is required to plan installments")

    shares = [net_value / count] * count
    amounts = _distribute(net_value, shares)

    planned = []
    for index, (due_date, amount) in enumerate(zip(schedule, amounts), start=1):
        if defer_first and index == 1:
            planned.append(_deferred(index, amount))
        else:
            planned.append(PlannedInstallment(number=index, due_date=due_date, amount=amount))
    return planned


def validate_custom_parts(parts: Sequence[CustomInstallmentPart]) -> None:
    """Custom percentages must be positive and add up to 100 (+/- 0.01)."""
    if not parts:
        raise ValidationError("A custom split requires at least one installment")
    for part in parts:
        if to_decimal(part.percent) <= 0:
            raise ValidationError(f"Installment percent must be positive, got: {part.percent}")
    total = sum_money(part.percent for part in parts)
    if abs(total - HUNDRED) > Decimal(SPLIT_PERCENT_TOLERANCE):
        raise ValidationError(f"Installment percentages must add up to 100%, got: {total}%")


def count_dated_parts(parts: Sequence[CustomInstallmentPart]) -> int:
    return sum(1 for part in parts if part.kind != InstallmentKind.GO_LIVE)


def plan_custom(net_value: Decimal, parts: Sequence[CustomInstallmentPart],
                schedule: Sequence[date]) -> List[PlannedInstallment]:
    """
    One installment per part, worth net x percent / 100.

    Normal parts take the scheduled dates in order; go-live parts are
    emitted without a due date, awaiting completion.
    """
    validate_custom_parts(parts)
    dated = count_dated_parts(parts)
    if len(schedule) < dated:
        raise ValidationError(
            f"{dated} billing dates are required for the custom split, got: {len(schedule)}")

    shares = [net_value * to_decimal(part.percent) / HUNDRED for part in parts]
    amounts = _distribute(net_value, shares)

    planned = []
    dates = iter(schedule)
    for index, (part, amount) in enumerate(zip(parts, amounts), start=1):
        percent = to_decimal(part.percent)
        if part.kind == InstallmentKind.GO_LIVE:
            planned.append(_deferred(index, amount, percent, part.description))
        else:
            planned.append(PlannedInstallment(
                number=index,
                due_date=next(dates),
                amount=amount,
                percent=percent,
                description=part.description,
            ))
    return planned


def plan(net_value: Decimal,
         policy: SplitPolicy,
         schedule: Sequence[date],
         parts: Optional[Sequence[CustomInstallmentPart]] = None,
         defer_first: bool = False) -> List[PlannedInstallment]:
    """
    Plan the installments of a contract.

    Raises:
        ValidationError: the whole batch is rejected when the net value is
            not positive, the schedule is empty or the custom split is invalid.
    """
    net_value = to_decimal(net_value)
    if net_value <= 0:
        raise ValidationError(f"Net value must be positive to plan installments, got: {net_value}")

    if policy == SplitPolicy.CUSTOM:
        if parts is None:
            raise ValidationError("Custom split requires installment percentages")
        return plan_custom(net_value, parts, schedule)
    return plan_equal(net_value, schedule, defer_first)
