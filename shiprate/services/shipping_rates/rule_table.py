# shiprate/services/shipping_rates/rule_table.py
from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from .errors import ConflictError, NoRateForRegion, ValidationError
from .types import RuleBand, _s

_INF = Decimal("Infinity")

# 与 shipping_template_rules 列定义一致：(总位数, 小数位)
WEIGHT_PRECISION = (10, 3)
PRICE_PRECISION = (12, 3)

_PRECISION = {
    "min_weight": WEIGHT_PRECISION,
    "max_weight": WEIGHT_PRECISION,
    "first_weight": WEIGHT_PRECISION,
    "additional_unit": WEIGHT_PRECISION,
    "first_price": PRICE_PRECISION,
    "additional_price": PRICE_PRECISION,
}


def band_contains(rule: RuleBand, weight: Decimal) -> bool:
    """左闭右开 [min_weight, max_weight)；max 为 None/0 视为 ∞。"""
    if weight < rule.min_weight:
        return False
    upper = rule.upper
    return upper is None or weight < upper


def bands_overlap(a: RuleBand, b: RuleBand) -> bool:
    a_hi = a.upper if a.upper is not None else _INF
    b_hi = b.upper if b.upper is not None else _INF
    return a.min_weight < b_hi and b.min_weight < a_hi


def _heaviness(rule: RuleBand):
    upper = rule.upper if rule.upper is not None else _INF
    return (upper, rule.min_weight, rule.id if rule.id is not None else 0)


def rules_for_region(rules: Iterable[RuleBand], region: str) -> List[RuleBand]:
    target = _s(region)
    if target is None:
        return []
    return [r for r in rules if r.to_region.strip() == target]


def find_applicable_rule(rules: Sequence[RuleBand], destination_region: str, weight: Decimal) -> RuleBand:
    """
    规则命中：
    1) to_region 精确匹配（无通配 / 无层级）
    2) 命中包含 weight 的重量段
    3) 都不包含：取“最重”的一段（无上限最重），超出部分靠续重公式外推
    4) 该区域一条规则都没有：NoRateForRegion
    """
    matched = rules_for_region(rules, destination_region)
    if not matched:
        raise NoRateForRegion(
            f"no rate for region: {destination_region}",
            context={"to_region": destination_region},
        )

    hits = [r for r in matched if band_contains(r, weight)]
    if hits:
        # 无重叠前提下最多一条；脏数据时取 min_weight 最大（更具体）的那条
        hits.sort(key=lambda r: (r.min_weight, r.id if r.id is not None else 0), reverse=True)
        return hits[0]

    return max(matched, key=_heaviness)


def _check_storable(field: str, value: Optional[Decimal]) -> None:
    """超出列精度的值直接拒绝，不让库里悄悄四舍五入（0.0004 存成 0.000）。"""
    if value is None:
        return
    digits, scale = _PRECISION[field]
    if abs(value) >= Decimal(10) ** (digits - scale):
        raise ValidationError(
            f"{field} is too large",
            context={"field": field, "value": str(value), "max_digits": digits, "decimal_places": scale},
        )
    if value != value.quantize(Decimal(1).scaleb(-scale)):
        raise ValidationError(
            f"{field} allows at most {scale} decimal places",
            context={"field": field, "value": str(value), "decimal_places": scale},
        )


def validate_rule_band(rule: RuleBand) -> None:
    """写入前的单条校验（不查库）。"""
    if _s(rule.to_region) is None:
        raise ValidationError("to_region is required", context={"field": "to_region"})

    for field in _PRECISION:
        _check_storable(field, getattr(rule, field))

    for field in ("min_weight", "first_weight", "first_price", "additional_price"):
        v = getattr(rule, field)
        if v < 0:
            raise ValidationError(f"{field} must be >= 0", context={"field": field, "value": str(v)})

    if rule.max_weight is not None:
        if rule.max_weight < 0:
            raise ValidationError("max_weight must be >= 0", context={"field": "max_weight"})
        if rule.max_weight != 0 and rule.max_weight <= rule.min_weight:
            raise ValidationError(
                "max_weight must be greater than min_weight",
                context={"min_weight": str(rule.min_weight), "max_weight": str(rule.max_weight)},
            )

    if rule.additional_unit <= 0:
        raise ValidationError(
            "additional_unit must be > 0",
            context={"field": "additional_unit", "value": str(rule.additional_unit)},
        )

    if rule.estimated_days < 0:
        raise ValidationError("estimated_days must be >= 0", context={"field": "estimated_days"})

    if not rule.currency:
        raise ValidationError("currency is required", context={"field": "currency"})


def find_overlaps(existing: Iterable[RuleBand], candidate: RuleBand) -> List[RuleBand]:
    """同区域、重量段相交的已有规则（排除 candidate 自身 id）。"""
    out: List[RuleBand] = []
    for r in rules_for_region(existing, candidate.to_region):
        if candidate.id is not None and r.id == candidate.id:
            continue
        if bands_overlap(r, candidate):
            out.append(r)
    return out


def ensure_no_overlap(existing: Iterable[RuleBand], candidate: RuleBand) -> None:
    conflicts = find_overlaps(existing, candidate)
    if conflicts:
        raise ConflictError(
            "rule weight band overlaps an existing rule of the same region",
            context={
                "to_region": candidate.to_region,
                "min_weight": str(candidate.min_weight),
                "max_weight": _fmt_upper(candidate),
                "conflicts": [
                    {"id": c.id, "min_weight": str(c.min_weight), "max_weight": _fmt_upper(c)}
                    for c in conflicts
                ],
            },
        )


def ensure_rule_set_consistent(rules: Sequence[RuleBand]) -> None:
    """批量写入（建模板时带 rules）：逐条校验 + 两两不重叠。"""
    accepted: List[RuleBand] = []
    for r in rules:
        validate_rule_band(r)
        ensure_no_overlap(accepted, r)
        accepted.append(r)


def _fmt_upper(r: RuleBand) -> Optional[str]:
    return str(r.upper) if r.upper is not None else None
