from decimal import Decimal

from feedesk.billing.money import floor_zero, money_sum, percent_of, to_money


def test_to_money_rounds_half_up_to_paise():
    assert to_money("10.005") == Decimal("10.01")
    assert to_money("10.004") == Decimal("10.00")
    assert to_money(None) == Decimal("0.00")


def test_float_inputs_keep_their_printed_value():
    assert to_money(0.1 + 0.2) == Decimal("0.30")
    assert money_sum([0.1] * 10) == Decimal("1.00")


def test_percent_of():
    assert percent_of(5000, 5) == Decimal("250.00")
    assert percent_of("333.33", "10") == Decimal("33.33")
    assert percent_of(5000, None) == Decimal("0.00")


def test_floor_zero():
    assert floor_zero(-3) == Decimal("0.00")
    assert floor_zero("12.345") == Decimal("12.35")
