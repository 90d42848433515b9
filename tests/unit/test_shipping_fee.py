# tests/unit/test_shipping_fee.py
from __future__ import annotations

from decimal import Decimal

import pytest

from shiprate.services.shipping_rates.errors import CalculationError, InvalidWeight
from shiprate.services.shipping_rates.fee import (
    additional_units,
    compute_fee,
    minor_units,
    normalize_weight,
    round_money,
)
from tests.factories import band

EU = band("EU", first_weight="1.0", first_price="5.00", additional_unit="0.5", additional_price="1.50")


@pytest.mark.parametrize(
    "weight, expected",
    [
        ("1.0", "5.00"),
        ("1.4", "6.50"),
        ("2.0", "8.00"),
    ],
)
def test_eu_worked_example(weight, expected):
    assert compute_fee(EU, normalize_weight(weight)) == Decimal(expected)


def test_first_weight_boundary_is_inclusive():
    assert compute_fee(EU, Decimal("0.2")) == Decimal("5.00")
    assert compute_fee(EU, Decimal("1.0")) == Decimal("5.00")
    assert compute_fee(EU, Decimal("1.001")) == Decimal("6.50")


def test_no_off_by_one_at_unit_edge():
    # first_weight + additional_unit 恰好 1 个续重单位
    assert additional_units(EU, Decimal("1.5")) == 1
    assert compute_fee(EU, Decimal("1.5")) == Decimal("6.50")
    assert additional_units(EU, Decimal("1.5001")) == 2


def test_fee_is_monotonic_in_weight():
    weights = [Decimal(i) / 10 for i in range(1, 100)]
    fees = [compute_fee(EU, w) for w in weights]
    assert fees == sorted(fees)


def test_float_weight_has_no_binary_noise():
    # 1.4 走 str() 转换，不会变成 1.3999999...
    assert normalize_weight(1.4) == Decimal("1.4")
    assert compute_fee(EU, normalize_weight(1.4)) == Decimal("6.50")


@pytest.mark.parametrize("weight", [None, 0, "0", -1, "-0.5", "abc", float("nan"), True])
def test_invalid_weight(weight):
    with pytest.raises(InvalidWeight):
        normalize_weight(weight)


def test_rounding_follows_currency_minor_units():
    assert minor_units("cny") == 2
    assert minor_units("JPY") == 0
    assert minor_units("KWD") == 3

    assert round_money(Decimal("1.005"), "CNY") == Decimal("1.01")
    assert round_money(Decimal("1.5"), "JPY") == Decimal("2")

    jp = band("JP", first_weight="1", first_price="500", additional_unit="0.3", additional_price="100.5", currency="JPY")
    # 500 + 2 * 100.5 = 701 → JPY 无小数
    assert compute_fee(jp, Decimal("1.5")) == Decimal("701")


def test_weight_above_limit_is_invalid():
    with pytest.raises(InvalidWeight):
        normalize_weight("1e30")
    assert normalize_weight("1000000") == Decimal("1000000")


def test_unusable_rule_raises_calculation_error():
    broken = band("EU", first_weight="1.0", additional_unit="0")
    with pytest.raises(CalculationError) as ei:
        compute_fee(broken, Decimal("2"))
    assert ei.value.error == "CALCULATION_FAILED"
    # 首重内不做除法
    assert compute_fee(broken, Decimal("1")) == Decimal("5.00")


def test_three_decimal_currency_keeps_fils():
    kw = band("KW", first_weight="1", first_price="1.235", additional_unit="1", additional_price="0.105", currency="KWD")
    assert compute_fee(kw, Decimal("1")) == Decimal("1.235")
    assert compute_fee(kw, Decimal("2")) == Decimal("1.340")
