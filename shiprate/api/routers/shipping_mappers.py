# shiprate/api/routers/shipping_mappers.py
from __future__ import annotations

from typing import Any

from shiprate.api.routers.shipping_schemas import (
    BatchItemError,
    BatchItemOut,
    BindingOut,
    CalcOut,
    EstimateOut,
    RuleOut,
    TemplateDetailOut,
    TemplateOptionOut,
    TemplateOut,
)
from shiprate.models.shipping_template import ShippingTemplate
from shiprate.models.shipping_template_rule import ShippingTemplateRule
from shiprate.services.shipping_rates.binding_kinds import BindingKind
from shiprate.services.shipping_rates.calc import BatchItemResult, EstimateResult
from shiprate.services.shipping_rates.types import FeeQuote


def to_rule_out(r: ShippingTemplateRule) -> RuleOut:
    return RuleOut.model_validate(r)


def to_template_out(t: ShippingTemplate) -> TemplateOut:
    return TemplateOut(
        id=t.id,
        name=t.name,
        carrier=t.carrier,
        from_region=t.from_region,
        description=t.description,
        status=t.status,
        rule_count=t.rule_count,
        created_at=t.created_at,
        updated_at=t.updated_at,
    )


def to_template_detail_out(t: ShippingTemplate) -> TemplateDetailOut:
    base = to_template_out(t)
    return TemplateDetailOut(**base.model_dump(), rules=[to_rule_out(r) for r in t.rules])


def to_template_option_out(t: ShippingTemplate) -> TemplateOptionOut:
    return TemplateOptionOut(id=t.id, name=t.name)


def to_binding_out(kind: BindingKind, b: Any) -> BindingOut:
    # 绑定响应带上模板名 / 承运商，前端列表不用再查一次模板
    tpl = b.shipping_template
    return BindingOut(
        **{kind.entity_field: getattr(b, kind.entity_field)},
        id=b.id,
        shipping_template_id=b.shipping_template_id,
        is_default=bool(b.is_default),
        sort_order=int(b.sort_order or 0),
        template_name=tpl.name if tpl is not None else None,
        carrier=tpl.carrier if tpl is not None else None,
        status=tpl.status if tpl is not None else None,
        created_at=b.created_at,
        updated_at=b.updated_at,
    )


def to_calc_out(q: FeeQuote) -> CalcOut:
    return CalcOut(
        template_id=q.template_id,
        template_name=q.template_name,
        to_region=q.to_region,
        weight=q.weight,
        shipping_fee=q.shipping_fee,
        currency=q.currency,
        estimated_days=q.estimated_days,
    )


def to_batch_item_out(r: BatchItemResult) -> BatchItemOut:
    if r.error is not None:
        return BatchItemOut(
            ok=False,
            template_id=r.template_id,
            to_region=r.to_region,
            weight=r.weight,
            error=BatchItemError(code=r.error.code, error=r.error.error, message=r.error.message),
        )

    q = r.quote
    return BatchItemOut(
        ok=True,
        template_id=q.template_id,
        template_name=q.template_name,
        to_region=q.to_region,
        weight=q.weight,
        shipping_fee=q.shipping_fee,
        currency=q.currency,
        estimated_days=q.estimated_days,
    )


def to_estimate_out(e: EstimateResult) -> EstimateOut:
    return EstimateOut(
        template_id=e.template_id,
        template_name=e.template_name,
        shipping_fee=e.shipping_fee,
        total_shipping_fee=e.total_shipping_fee,
        currency=e.currency,
        estimated_days=e.estimated_days,
        source=e.source,
    )
