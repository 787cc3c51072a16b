import pytest
from decimal import Decimal

from src.api.common.constants.contracts import DiscountMode
from src.api.common.exceptions import ValidationError
from src.api.common.utils.money import to_money
from src.api.contracts.schemas.contract import AmountDiscount, ContractItemCreate, PercentDiscount
from src.api.contracts.services import value_resolver

STACKED_TAXES = [Decimal("1.5"), Decimal("0.65"), Decimal("3"), Decimal("1")]


def item(quantity, unit_value):
    return ContractItemCreate(quantity=Decimal(quantity), unit_value=Decimal(unit_value))


class TestGrossValue:
    """Test gross value computation"""

    def test_gross_from_items(self):
        """Test gross is the sum of item line totals"""
        gross = value_resolver.compute_gross(items=[item("10", "100"), item("2", "12.50")])
        assert gross == Decimal("1025")

    def test_gross_from_quantity_and_unit_value(self):
        """Test quantity x unit value is used when there are no items"""
        gross = value_resolver.compute_gross(quantity=Decimal("3"), unit_value=Decimal("33.33"))
        assert gross == Decimal("99.99")

    def test_negative_item_rejected(self):
        with pytest.raises(ValidationError):
            value_resolver.compute_gross(items=[item("-1", "100")])


class TestResolve:
    """Test net value resolution"""

    def test_percent_discount_with_stacked_taxes(self):
        """Test 10 x 100, 10% discount and 6.15% taxes resolves to 844.65"""
        resolved = value_resolver.resolve(
            items=[item("10", "100")],
            discount=PercentDiscount(percent=Decimal("10")),
            tax_rates=STACKED_TAXES,
        )

        assert resolved.gross == Decimal("1000")
        assert resolved.discount_amount == Decimal("100")
        assert resolved.net_base == Decimal("900")
        assert resolved.taxes_percent == Decimal("6.15")
        assert to_money(resolved.taxes_amount) == Decimal("55.35")
        assert to_money(resolved.net) == Decimal("844.65")

    def test_amount_discount_derives_percent(self):
        """Test an amount discount resolves its percent from the gross value"""
        resolved = value_resolver.resolve(
            items=[item("4", "50")],
            discount=AmountDiscount(amount=Decimal("50")),
        )

        assert resolved.discount_amount == Decimal("50")
        assert resolved.discount_percent == Decimal("25")
        assert resolved.net == Decimal("150")

    def test_zero_gross_resolves_to_zero(self):
        """Test zero gross yields zero discount and net without dividing by zero"""
        resolved = value_resolver.resolve(
            quantity=Decimal("0"),
            unit_value=Decimal("100"),
            discount=AmountDiscount(amount=Decimal("10")),
            tax_rates=STACKED_TAXES,
        )

        assert resolved.gross == 0
        assert resolved.discount_amount == 0
        assert resolved.discount_percent == 0
        assert resolved.net == 0

    def test_no_discount(self):
        resolved = value_resolver.resolve(items=[item("1", "200")], tax_rates=[Decimal("10")])

        assert resolved.discount_amount == 0
        assert resolved.net == Decimal("180")

    def test_resolve_is_deterministic(self):
        """Test identical inputs give identical results"""
        kwargs = dict(
            items=[item("7", "13.37")],
            discount=PercentDiscount(percent=Decimal("3.3")),
            tax_rates=STACKED_TAXES,
        )
        assert value_resolver.resolve(**kwargs) == value_resolver.resolve(**kwargs)

    @pytest.mark.parametrize("rates", [
        [Decimal("0")] * 4,
        STACKED_TAXES,
        [Decimal("25")] * 4,
        [Decimal("100"), Decimal("0"), Decimal("0"), Decimal("0")],
    ])
    def test_taxes_never_increase_net(self, rates):
        """Test net never exceeds the post-discount base"""
        resolved = value_resolver.resolve(items=[item("3", "99.90")], tax_rates=rates)

        assert resolved.net <= resolved.net_base
        assert resolved.net >= 0

    def test_stacked_taxes_over_100_rejected(self):
        with pytest.raises(ValidationError):
            value_resolver.resolve(items=[item("1", "100")],
                                   tax_rates=[Decimal("60"), Decimal("50")])

    def test_tax_rate_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            value_resolver.resolve(items=[item("1", "100")], tax_rates=[Decimal("-1")])

    def test_discount_amount_over_gross_rejected(self):
        with pytest.raises(ValidationError):
            value_resolver.resolve(items=[item("1", "100")],
                                   discount=AmountDiscount(amount=Decimal("150")))

    def test_discount_percent_over_100_rejected(self):
        with pytest.raises(ValidationError):
            value_resolver.resolve(items=[item("1", "100")],
                                   discount=PercentDiscount(percent=Decimal("120")))


class TestDiscountFields:
    """Test the stored discount columns never hold both modes"""

    def test_percent_discount_zeroes_value(self):
        mode, percent, value = value_resolver.discount_to_fields(PercentDiscount(percent=Decimal("10")))

        assert mode == DiscountMode.PERCENT
        assert percent == Decimal("10")
        assert value == 0

    def test_amount_discount_zeroes_percent(self):
        mode, percent, value = value_resolver.discount_to_fields(AmountDiscount(amount=Decimal("80")))

        assert mode == DiscountMode.AMOUNT
        assert percent == 0
        assert value == Decimal("80")

    def test_no_discount(self):
        assert value_resolver.discount_to_fields(None) == (DiscountMode.NONE, 0, 0)

    def test_rebuild_from_fields(self):
        discount = value_resolver.discount_from_fields(DiscountMode.AMOUNT, Decimal("0"), Decimal("80"))

        assert isinstance(discount, AmountDiscount)
        assert discount.amount == Decimal("80")
        assert value_resolver.discount_from_fields(DiscountMode.NONE, Decimal("0"), Decimal("0")) is None
