"""
Order and loyalty arithmetic.
"""
import pytest
from decimal import Decimal

from orders.pricing import (
    FIXED,
    PERCENTAGE,
    calculate_discount,
    calculate_points_earned,
    calculate_points_value,
    calculate_tax,
    max_redeemable_points,
    quantize_money,
    to_decimal,
)


class TestMoney:

    def test_half_up_rounding(self):
        assert quantize_money('2.345') == Decimal('2.35')
        assert quantize_money('2.344') == Decimal('2.34')

    def test_floats_keep_their_printed_value(self):
        assert to_decimal(0.1) == Decimal('0.1')

    @pytest.mark.parametrize('value', [None, True, 'abc'])
    def test_non_numbers_rejected(self, value):
        with pytest.raises(ValueError):
            to_decimal(value)


class TestTax:

    def test_tax_is_rate_times_taxable(self):
        assert calculate_tax(Decimal('20.00'), Decimal('0.05')) == Decimal('1.00')
        assert calculate_tax(Decimal('19.99'), Decimal('0.0825')) == Decimal('1.65')

    def test_no_tax_on_zero_or_negative(self):
        assert calculate_tax(0, Decimal('0.05')) == Decimal('0.00')
        assert calculate_tax(-5, Decimal('0.05')) == Decimal('0.00')

    def test_negative_rate_rejected(self):
        with pytest.raises(ValueError):
            calculate_tax(10, -0.01)


class TestDiscount:

    def test_percentage(self):
        assert calculate_discount(Decimal('40.00'), PERCENTAGE, 10) == Decimal('4.00')
        assert calculate_discount(Decimal('33.33'), PERCENTAGE, 15) == Decimal('5.00')

    def test_percentage_capped_at_100(self):
        assert calculate_discount(Decimal('12.00'), PERCENTAGE, 150) == Decimal('12.00')

    def test_fixed_capped_at_subtotal(self):
        assert calculate_discount(Decimal('30.00'), FIXED, 5) == Decimal('5.00')
        assert calculate_discount(Decimal('3.50'), FIXED, 5) == Decimal('3.50')

    def test_nothing_off_empty_cart(self):
        assert calculate_discount(0, FIXED, 5) == Decimal('0.00')

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            calculate_discount(10, 'bogo', 1)


class TestPoints:

    def test_points_are_floored(self):
        assert calculate_points_earned(Decimal('25.99')) == 25
        assert calculate_points_earned(Decimal('25.99'), Decimal('2')) == 51
        assert calculate_points_earned(Decimal('9.99'), Decimal('0.1')) == 0

    def test_no_points_for_free_orders(self):
        assert calculate_points_earned(0) == 0

    def test_points_value_uses_ratio(self):
        assert calculate_points_value(250) == Decimal('2.50')
        assert calculate_points_value(250, ratio=50) == Decimal('5.00')
        assert calculate_points_value(0) == Decimal('0.00')

    def test_ratio_must_be_positive(self):
        with pytest.raises(ValueError):
            calculate_points_value(100, ratio=0)

    def test_max_redeemable_caps_at_amount(self):
        assert max_redeemable_points(10000, Decimal('12.34')) == 1234
        assert max_redeemable_points(300, Decimal('12.34')) == 300
        assert max_redeemable_points(300, 0) == 0
