# shiprate/services/shipping_rates/fee.py
from __future__ import annotations

from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal, DecimalException
from typing import Any

from .errors import CalculationError, InvalidWeight
from .types import RuleBand, _d

# ISO 4217 小数位（未列出的一律按 2 位）
_ZERO_DECIMAL = {"JPY", "KRW", "VND", "CLP", "ISK", "UGX", "XAF", "XOF"}
_THREE_DECIMAL = {"BHD", "KWD", "OMR", "JOD", "TND", "LYD", "IQD"}

# 单件重量上限（kg）
MAX_WEIGHT = Decimal("1000000")


def minor_units(currency: str) -> int:
    cur = (currency or "").strip().upper()
    if cur in _ZERO_DECIMAL:
        return 0
    if cur in _THREE_DECIMAL:
        return 3
    return 2


def round_money(amount: Decimal, currency: str) -> Decimal:
    """按币种最小单位四舍五入（half-up）。"""
    q = Decimal(1).scaleb(-minor_units(currency))
    return amount.quantize(q, rounding=ROUND_HALF_UP)


def normalize_weight(weight: Any) -> Decimal:
    """缺失 / 非数值 / <= 0 一律 InvalidWeight（不是 0 运费）。"""
    w = _d(weight)
    if w is None:
        raise InvalidWeight("weight is required and must be a number", context={"weight": weight})
    if w <= 0:
        raise InvalidWeight("weight must be > 0", context={"weight": str(w)})
    if w > MAX_WEIGHT:
        raise InvalidWeight(
            f"weight must be <= {MAX_WEIGHT}",
            context={"weight": str(w), "max_weight": str(MAX_WEIGHT)},
        )
    return w


def additional_units(rule: RuleBand, weight: Decimal) -> int:
    """续重单位数：ceil((weight - first_weight) / additional_unit)，首重内为 0。"""
    if weight <= rule.first_weight:
        return 0
    extra = weight - rule.first_weight
    return int((extra / rule.additional_unit).to_integral_value(rounding=ROUND_CEILING))


def compute_fee(rule: RuleBand, weight: Decimal) -> Decimal:
    """
    首重 + 续重：
      weight <= first_weight → first_price
      否则 first_price + ceil((weight - first_weight) / additional_unit) * additional_price
    """
    try:
        units = additional_units(rule, weight)
        fee = rule.first_price + units * rule.additional_price
        return round_money(fee, rule.currency)
    except DecimalException as e:
        raise CalculationError(
            f"cannot compute fee with rule {rule.id}: {e.__class__.__name__}",
            context={"rule_id": rule.id, "weight": str(weight)},
        ) from e
