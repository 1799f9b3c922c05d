from decimal import Decimal

import pytest

from utils.formatting import format_indian_currency, to_money


@pytest.mark.unit
class TestToMoney:

    @pytest.mark.parametrize("value,expected", [
        ("1.005", "1.01"),
        ("2.675", "2.68"),
        ("-1.005", "-1.01"),
        (10, "10.00"),
        (0.1, "0.10"),
        (None, "0.00"),
    ])
    def test_half_up_to_two_places(self, value, expected):
        assert to_money(value) == Decimal(expected)
        assert str(to_money(value)) == expected


@pytest.mark.unit
class TestIndianCurrency:

    @pytest.mark.parametrize("value,expected", [
        (Decimal("12345678"), "₹ 1,23,45,678.00"),
        (Decimal("100000"), "₹ 1,00,000.00"),
        (Decimal("1000"), "₹ 1,000.00"),
        (Decimal("999.5"), "₹ 999.50"),
        (Decimal("-250000.75"), "₹ -2,50,000.75"),
        (None, "₹ 0.00"),
    ])
    def test_grouping(self, value, expected):
        assert format_indian_currency(value) == expected
