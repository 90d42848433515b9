# shiprate/services/shipping_rates/calc.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from shiprate.core.config import get_settings
from shiprate.metrics import CALC_TOTAL
from shiprate.models.shipping_template import ShippingTemplate

from .binding_kinds import PLATFORM_PRODUCT, PRODUCT
from .errors import CalculationError, NoTemplateBound, ShippingError, TemplateNotFound, ValidationError
from .fee import compute_fee, normalize_weight, round_money
from .resolver import load_bindings, pick_binding
from .rule_table import find_applicable_rule
from .types import FeeQuote, RuleBand, _s

log = logging.getLogger("shiprate.shipping_rates.calc")


@dataclass(frozen=True)
class TemplateSnapshot:
    """一次调用内的模板 + 规则快照；算价只读这个。"""

    id: int
    name: str
    rules: Tuple[RuleBand, ...]

    @classmethod
    def from_model(cls, tpl: ShippingTemplate) -> "TemplateSnapshot":
        return cls(
            id=int(tpl.id),
            name=str(tpl.name),
            rules=tuple(RuleBand.from_model(r) for r in tpl.rules),
        )


@dataclass(frozen=True)
class BatchItemResult:
    """批量算价单条结果：失败也占位，保证顺序与条数与输入一致。"""

    template_id: Optional[int]
    to_region: Optional[str]
    weight: Any
    quote: Optional[FeeQuote] = None
    error: Optional[ShippingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class EstimateResult:
    template_id: int
    template_name: str
    shipping_fee: Decimal
    total_shipping_fee: Decimal
    currency: str
    estimated_days: int
    source: str


def load_snapshot(db: Session, template_id: Any) -> TemplateSnapshot:
    try:
        tid = int(template_id)
    except (TypeError, ValueError):
        raise ValidationError("template_id is required", context={"template_id": template_id})

    tpl = db.get(ShippingTemplate, tid)
    if tpl is None:
        raise TemplateNotFound(f"template not found: {tid}", context={"template_id": tid})
    return TemplateSnapshot.from_model(tpl)


def quote_from_snapshot(snapshot: TemplateSnapshot, to_region: Any, weight: Any) -> FeeQuote:
    """纯计算：校验重量 → 命中规则 → 首重/续重计费。"""
    w = normalize_weight(weight)
    region = _s(to_region if to_region is None else str(to_region))
    if region is None:
        raise ValidationError("to_region is required", context={"field": "to_region"})

    rule = find_applicable_rule(snapshot.rules, region, w)
    fee = compute_fee(rule, w)

    return FeeQuote(
        template_id=snapshot.id,
        template_name=snapshot.name,
        to_region=region,
        weight=w,
        shipping_fee=fee,
        currency=rule.currency,
        estimated_days=rule.estimated_days,
        rule_id=rule.id,
    )


def calculate(db: Session, template_id: Any, to_region: Any, weight: Any) -> FeeQuote:
    """
    单条算价（指定模板）。

    每次现算，不缓存；失败抛 ShippingError 子类（InvalidWeight / TemplateNotFound /
    NoRateForRegion ...），由 API 层翻译成信封。
    """
    try:
        quote = quote_from_snapshot(load_snapshot(db, template_id), to_region, weight)
    except ShippingError as e:
        CALC_TOTAL.labels("single", e.error).inc()
        raise
    CALC_TOTAL.labels("single", "ok").inc()
    return quote


def calculate_batch(db: Session, items: Sequence[Mapping[str, Any]]) -> List[BatchItemResult]:
    """
    批量算价 = map，不是事务：
    - 每条独立求值，单条失败只记在该条上，不影响兄弟条目
    - 输出顺序 / 条数与输入严格一致
    - 同一模板在一次调用内只加载一次
    """
    settings = get_settings()
    if len(items) > settings.BATCH_MAX_ITEMS:
        raise ValidationError(
            f"too many items: {len(items)} > {settings.BATCH_MAX_ITEMS}",
            context={"max_items": settings.BATCH_MAX_ITEMS},
        )

    snapshots: Dict[Any, Any] = {}
    results: List[BatchItemResult] = []

    for idx, item in enumerate(items):
        template_id = item.get("template_id")
        to_region = item.get("to_region")
        weight = item.get("weight")

        try:
            key = template_id
            if key not in snapshots:
                try:
                    snapshots[key] = load_snapshot(db, template_id)
                except ShippingError as e:
                    snapshots[key] = e
            snap = snapshots[key]
            if isinstance(snap, ShippingError):
                raise snap
            quote = quote_from_snapshot(snap, to_region, weight)
        except ShippingError as e:
            err = e
        except Exception as e:
            log.exception("batch calc item crashed idx=%d template_id=%s", idx, template_id)
            err = CalculationError(
                f"unexpected error: {e.__class__.__name__}",
                context={"template_id": template_id},
            )
        else:
            err = None

        if err is not None:
            log.warning(
                "batch calc item failed idx=%d template_id=%s to_region=%s weight=%s error=%s",
                idx,
                template_id,
                to_region,
                weight,
                err.error,
            )
            CALC_TOTAL.labels("batch", err.error).inc()
            results.append(
                BatchItemResult(
                    template_id=_as_int(template_id),
                    to_region=to_region,
                    weight=weight,
                    error=err,
                )
            )
            continue

        CALC_TOTAL.labels("batch", "ok").inc()
        results.append(
            BatchItemResult(
                template_id=quote.template_id,
                to_region=quote.to_region,
                weight=quote.weight,
                quote=quote,
            )
        )

    return results


def estimate_for_item(
    db: Session,
    *,
    to_region: Any,
    weight: Any,
    quantity: int = 1,
    platform_product_id: Optional[int] = None,
    product_id: Optional[int] = None,
) -> EstimateResult:
    """
    订单行运费估算：
    1) 平台产品有绑定 → 用平台产品的生效模板
    2) 否则本地产品有绑定 → 用本地产品的生效模板
    3) 都没有 → NoTemplateBound

    来源一旦确定不再回退（平台产品模板没有该区域规则时直接 NoRateForRegion）。
    """
    try:
        if quantity is None or int(quantity) < 1:
            raise ValidationError("quantity must be >= 1", context={"quantity": quantity})

        binding = None
        source = None
        if platform_product_id:
            binding = pick_binding(load_bindings(db, PLATFORM_PRODUCT, int(platform_product_id)))
            source = PLATFORM_PRODUCT.name if binding is not None else None
        if binding is None and product_id:
            binding = pick_binding(load_bindings(db, PRODUCT, int(product_id)))
            source = PRODUCT.name if binding is not None else None

        if binding is None:
            raise NoTemplateBound(
                "no shipping template bound to platform product or product",
                context={"platform_product_id": platform_product_id, "product_id": product_id},
            )

        quote = quote_from_snapshot(load_snapshot(db, binding.shipping_template_id), to_region, weight)
    except ShippingError as e:
        CALC_TOTAL.labels("estimate", e.error).inc()
        raise

    CALC_TOTAL.labels("estimate", "ok").inc()
    total = round_money(quote.shipping_fee * int(quantity), quote.currency)
    return EstimateResult(
        template_id=quote.template_id,
        template_name=quote.template_name,
        shipping_fee=quote.shipping_fee,
        total_shipping_fee=total,
        currency=quote.currency,
        estimated_days=quote.estimated_days,
        source=str(source),
    )


def _as_int(v: Any) -> Optional[int]:
    try:
        return int(v)
    except (TypeError, ValueError):
        return None
