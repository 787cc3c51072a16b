"""
Value resolution for contracts.

Turns items (or a quantity/unit pair), an optional discount and the four
percentage taxes into gross, discount and net values. All arithmetic keeps
full Decimal precision; rounding to cents happens when values are stored.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Tuple, Union

from src.api.common.constants.contracts import DiscountMode
from src.api.common.exceptions import ValidationError
from src.api.common.utils.money import HUNDRED, ZERO, to_decimal
from src.api.contracts.schemas.contract import AmountDiscount, PercentDiscount

DiscountInput = Optional[Union[PercentDiscount, AmountDiscount]]


@dataclass(frozen=True)
class ResolvedValue:
    """Result of resolving a contract's commercial terms."""

    gross: Decimal
    discount_amount: Decimal
    discount_percent: Decimal
    net_base: Decimal
    taxes_percent: Decimal
    taxes_amount: Decimal
    net: Decimal


def compute_gross(items: Optional[Iterable] = None,
                  quantity: Optional[Decimal] = None,
                  unit_value: Optional[Decimal] = None) -> Decimal:
    """
    Gross value is the sum of item line totals when items exist, otherwise
    quantity x unit value.
    """
    items = list(items or [])
    if items:
        gross = ZERO
        for item in items:
            item_quantity = to_decimal(item.quantity)
            item_unit_value = to_decimal(item.unit_value)
            if item_quantity < 0 or item_unit_value < 0:
                raise ValidationError("Item quantity and unit value cannot be negative")
            gross += item_quantity * item_unit_value
        return gross

    quantity = to_decimal(quantity)
    unit_value = to_decimal(unit_value)
    if quantity < 0 or unit_value < 0:
        raise ValidationError("Quantity and unit value cannot be negative")
    return quantity * unit_value


def resolve_discount(gross: Decimal, discount: DiscountInput) -> Tuple[Decimal, Decimal]:
    """
    Resolve a discount variant into (amount, percent).

    A percent discount derives its amount from the gross value; an amount
    discount derives its percent. A zero gross value resolves both to zero.
    """
    if discount is None:
        return ZERO, ZERO

    if isinstance(discount, PercentDiscount):
        percent = to_decimal(discount.percent)
        if percent < 0 or percent > HUNDRED:
            raise ValidationError(f"Discount percent must be between 0 and 100, got: {percent}")
        if gross <= 0:
            return ZERO, ZERO
        return gross * percent / HUNDRED, percent

    if isinstance(discount, AmountDiscount):
        amount = to_decimal(discount.amount)
        if amount < 0:
            raise ValidationError(f"Discount amount cannot be negative, got: {amount}")
        if gross <= 0:
            return ZERO, ZERO
        if amount > gross:
            raise ValidationError(
                f"Discount amount {amount} exceeds the gross value {gross}")
        return amount, amount / gross * HUNDRED

    raise ValidationError(f"Unsupported discount: {discount!r}")


def validate_tax_rates(tax_rates: Sequence) -> list:
    rates = [to_decimal(rate) for rate in tax_rates]
    for rate in rates:
        if rate < 0 or rate > HUNDRED:
            raise ValidationError(f"Tax rate must be between 0 and 100, got: {rate}")
    return rates


def resolve(items: Optional[Iterable] = None,
            quantity: Optional[Decimal] = None,
            unit_value: Optional[Decimal] = None,
            discount: DiscountInput = None,
            tax_rates: Sequence = ()) -> ResolvedValue:
    """
    Resolve gross, discount and net values.

        net_base = gross - discount
        taxes_amount = net_base * sum(tax_rates) / 100
        net = net_base - taxes_amount

    Raises:
        ValidationError: negative inputs, discount out of range, tax rate
            outside [0, 100] or a stacked tax over 100%.
    """
    gross = compute_gross(items, quantity, unit_value)
    discount_amount, discount_percent = resolve_discount(gross, discount)

    rates = validate_tax_rates(tax_rates)
    taxes_percent = sum(rates, ZERO)
    if taxes_percent > HUNDRED:
        raise ValidationError(f"Stacked taxes cannot exceed 100%, got: {taxes_percent}")

    net_base = gross - discount_amount
    taxes_amount = net_base * taxes_percent / HUNDRED
    net = net_base - taxes_amount

    return ResolvedValue(
        gross=gross,
        discount_amount=discount_amount,
        discount_percent=discount_percent,
        net_base=net_base,
        taxes_percent=taxes_percent,
        taxes_amount=taxes_amount,
        net=net,
    )


def discount_to_fields(discount: DiscountInput) -> Tuple[DiscountMode, Decimal, Decimal]:
    """
    Flatten a discount variant into the stored (mode, percent, value) columns.
    The column of the mode not selected is always zero.
    """
    if isinstance(discount, PercentDiscount):
        return DiscountMode.PERCENT, to_decimal(discount.percent), ZERO
    if isinstance(discount, AmountDiscount):
        return DiscountMode.AMOUNT, ZERO, to_decimal(discount.amount)
    return DiscountMode.NONE, ZERO, ZERO


def discount_from_fields(mode: DiscountMode, percent: Decimal, value: Decimal) -> DiscountInput:
    """Rebuild the discount variant from stored columns."""
    if mode == DiscountMode.PERCENT:
        return PercentDiscount(percent=to_decimal(percent))
    if mode == DiscountMode.AMOUNT:
        return AmountDiscount(amount=to_decimal(value))
    return None
