# shiprate/services/shipping_rates/templates.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shiprate.core.config import get_settings
from shiprate.metrics import MUTATIONS_TOTAL
from shiprate.models.shipping_template import ShippingTemplate, TemplateStatus
from shiprate.models.shipping_template_rule import ShippingTemplateRule

from .binding_kinds import KINDS
from .errors import ConflictError, RuleNotFound, TemplateNotFound, ValidationError
from .rule_table import ensure_no_overlap, ensure_rule_set_consistent, validate_rule_band
from .types import RuleBand, _d, _s

log = logging.getLogger("shiprate.shipping_rates.templates")

_RULE_FIELDS = (
    "to_region",
    "min_weight",
    "max_weight",
    "first_weight",
    "first_price",
    "additional_unit",
    "additional_price",
    "currency",
    "estimated_days",
)


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def _norm_status(v: Any) -> str:
    s = (str(v or "")).strip().lower()
    if s not in TemplateStatus.ALL:
        raise ValidationError(
            f"status must be one of {list(TemplateStatus.ALL)}",
            context={"field": "status", "value": v},
        )
    return s


def _norm_name(v: Any) -> str:
    t = _s(v if v is None else str(v))
    if not t:
        raise ValidationError("name is required", context={"field": "name"})
    return t


def _num(data: Mapping[str, Any], field: str, default: Optional[Decimal]) -> Optional[Decimal]:
    if field not in data or data[field] is None:
        return default
    d = _d(data[field])
    if d is None:
        raise ValidationError(f"{field} must be a number", context={"field": field, "value": data[field]})
    return d


def band_from_input(
    data: Mapping[str, Any],
    *,
    template_id: Optional[int],
    rule_id: Optional[int] = None,
) -> RuleBand:
    """请求体 → 规则快照（补默认：币种 / 续重单位）。"""
    settings = get_settings()

    currency = _s(data.get("currency")) or settings.DEFAULT_CURRENCY
    days = data.get("estimated_days")
    try:
        days_i = int(days) if days is not None else 0
    except (TypeError, ValueError):
        raise ValidationError("estimated_days must be an integer", context={"field": "estimated_days"})

    return RuleBand(
        id=rule_id,
        template_id=template_id,
        to_region=_s(data.get("to_region")) or "",
        min_weight=_num(data, "min_weight", Decimal("0")),
        max_weight=_num(data, "max_weight", None),
        first_weight=_num(data, "first_weight", Decimal("0")),
        first_price=_num(data, "first_price", Decimal("0")),
        additional_unit=_num(data, "additional_unit", Decimal(settings.DEFAULT_ADDITIONAL_UNIT)),
        additional_price=_num(data, "additional_price", Decimal("0")),
        currency=currency.upper(),
        estimated_days=days_i,
    )


def _apply_band(rule: ShippingTemplateRule, band: RuleBand) -> None:
    rule.to_region = band.to_region
    rule.min_weight = band.min_weight
    rule.max_weight = band.max_weight
    rule.first_weight = band.first_weight
    rule.first_price = band.first_price
    rule.additional_unit = band.additional_unit
    rule.additional_price = band.additional_price
    rule.currency = band.currency
    rule.estimated_days = band.estimated_days


def _lock_template(db: Session, template_id: int) -> ShippingTemplate:
    """
    规则写入按模板串行：先锁模板行再做重叠校验（sqlite 下 FOR UPDATE 自动忽略）。
    """
    tpl = (
        db.query(ShippingTemplate)
        .filter(ShippingTemplate.id == int(template_id))
        .with_for_update()
        .one_or_none()
    )
    if tpl is None:
        raise TemplateNotFound(f"template not found: {template_id}", context={"template_id": int(template_id)})
    return tpl


def _region_bands(db: Session, template_id: int, region: str) -> List[RuleBand]:
    rows = (
        db.query(ShippingTemplateRule)
        .filter(ShippingTemplateRule.template_id == int(template_id))
        .filter(ShippingTemplateRule.to_region == region)
        .all()
    )
    return [RuleBand.from_model(r) for r in rows]


# ---------------------------------------------------------------------------
# templates
# ---------------------------------------------------------------------------


def get_template(db: Session, template_id: int) -> ShippingTemplate:
    tpl = db.get(ShippingTemplate, int(template_id))
    if tpl is None:
        raise TemplateNotFound(f"template not found: {template_id}", context={"template_id": int(template_id)})
    return tpl


def list_templates(
    db: Session,
    *,
    page: int = 1,
    page_size: Optional[int] = None,
    keyword: Optional[str] = None,
    status: Optional[str] = None,
) -> Tuple[List[ShippingTemplate], int, int]:
    """
    分页列表：keyword 模糊匹配 name / carrier（不区分大小写），status 精确过滤。
    按 id 倒序（新建在前）。返回 (rows, total, 实际 page_size)。
    """
    settings = get_settings()
    size = int(page_size or settings.DEFAULT_PAGE_SIZE)
    size = max(1, min(size, settings.MAX_PAGE_SIZE))
    page = max(1, int(page or 1))

    q = db.query(ShippingTemplate)

    kw = _s(keyword)
    if kw:
        like = f"%{kw.lower()}%"
        q = q.filter(
            or_(
                func.lower(ShippingTemplate.name).like(like),
                func.lower(ShippingTemplate.carrier).like(like),
            )
        )

    st = _s(status)
    if st:
        q = q.filter(ShippingTemplate.status == _norm_status(st))

    total = q.count()
    rows = q.order_by(ShippingTemplate.id.desc()).offset((page - 1) * size).limit(size).all()
    return rows, int(total), size


def list_active_templates(db: Session) -> List[ShippingTemplate]:
    """下拉选项：只给 active 的模板（停用不影响已有绑定）。"""
    return (
        db.query(ShippingTemplate)
        .filter(ShippingTemplate.status == TemplateStatus.ACTIVE)
        .order_by(ShippingTemplate.name.asc(), ShippingTemplate.id.asc())
        .all()
    )


def create_template(
    db: Session,
    *,
    name: str,
    carrier: Optional[str] = None,
    from_region: Optional[str] = None,
    description: Optional[str] = None,
    status: Optional[str] = None,
    rules: Optional[Sequence[Mapping[str, Any]]] = None,
) -> ShippingTemplate:
    """
    新建模板（可带初始规则）：
    - 所有规则先校验（含彼此重叠），全部通过才落库
    - 模板 + 规则同一事务
    """
    bands = [band_from_input(r, template_id=None) for r in (rules or [])]
    ensure_rule_set_consistent(bands)

    tpl = ShippingTemplate(
        name=_norm_name(name),
        carrier=_s(carrier) or "",
        from_region=_s(from_region) or "",
        description=_s(description),
        status=_norm_status(status) if status is not None else TemplateStatus.ACTIVE,
    )
    for b in bands:
        rule = ShippingTemplateRule()
        _apply_band(rule, b)
        tpl.rules.append(rule)

    db.add(tpl)
    db.commit()
    db.refresh(tpl)

    MUTATIONS_TOTAL.labels("template", "create").inc()
    log.info("shipping template created id=%s name=%s rules=%d", tpl.id, tpl.name, len(bands))
    return tpl


def update_template(db: Session, template_id: int, data: Mapping[str, Any]) -> ShippingTemplate:
    """部分更新：只改传入的字段。status 切换不动绑定。"""
    tpl = get_template(db, template_id)

    if "name" in data and data["name"] is not None:
        tpl.name = _norm_name(data["name"])
    if "carrier" in data and data["carrier"] is not None:
        tpl.carrier = _s(data["carrier"]) or ""
    if "from_region" in data and data["from_region"] is not None:
        tpl.from_region = _s(data["from_region"]) or ""
    if "description" in data:
        tpl.description = _s(data["description"])
    if "status" in data and data["status"] is not None:
        new_status = _norm_status(data["status"])
        if new_status != tpl.status:
            log.info("shipping template status id=%s %s -> %s", tpl.id, tpl.status, new_status)
        tpl.status = new_status

    db.commit()
    db.refresh(tpl)
    MUTATIONS_TOTAL.labels("template", "update").inc()
    return tpl


def count_template_bindings(db: Session, template_id: int) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for name, kind in KINDS.items():
        out[name] = int(
            db.query(func.count(kind.model.id))
            .filter(kind.model.shipping_template_id == int(template_id))
            .scalar()
            or 0
        )
    return out


def delete_template(db: Session, template_id: int, *, force: bool = False) -> Dict[str, Any]:
    """
    删除策略（显式）：
    - 规则总是随模板级联删除
    - 仍有产品 / 平台产品绑定时默认拒绝（ConflictError）；force=True 时绑定一并删除
    """
    tpl = _lock_template(db, template_id)

    bound = count_template_bindings(db, template_id)
    if sum(bound.values()) > 0 and not force:
        raise ConflictError(
            "template is still bound to products; unbind first or delete with force=true",
            context={"template_id": int(template_id), "bindings": bound},
        )

    removed_bindings = 0
    if force:
        for kind in KINDS.values():
            removed_bindings += (
                db.query(kind.model)
                .filter(kind.model.shipping_template_id == int(template_id))
                .delete(synchronize_session=False)
            )

    rule_count = tpl.rule_count
    db.delete(tpl)
    db.commit()

    MUTATIONS_TOTAL.labels("template", "delete").inc()
    log.info(
        "shipping template deleted id=%s rules=%d bindings=%d force=%s",
        template_id,
        rule_count,
        removed_bindings,
        force,
    )
    return {"id": int(template_id), "deleted_rules": rule_count, "deleted_bindings": removed_bindings}


# ---------------------------------------------------------------------------
# rules
# ---------------------------------------------------------------------------


def list_rules(db: Session, template_id: int) -> List[ShippingTemplateRule]:
    get_template(db, template_id)
    return (
        db.query(ShippingTemplateRule)
        .filter(ShippingTemplateRule.template_id == int(template_id))
        .order_by(
            ShippingTemplateRule.to_region.asc(),
            ShippingTemplateRule.min_weight.asc(),
            ShippingTemplateRule.id.asc(),
        )
        .all()
    )


def get_rule(db: Session, template_id: int, rule_id: int) -> ShippingTemplateRule:
    rule = db.get(ShippingTemplateRule, int(rule_id))
    if rule is None or int(rule.template_id) != int(template_id):
        raise RuleNotFound(
            f"rule not found: {rule_id}",
            context={"template_id": int(template_id), "rule_id": int(rule_id)},
        )
    return rule


def create_rule(db: Session, template_id: int, data: Mapping[str, Any]) -> ShippingTemplateRule:
    _lock_template(db, template_id)

    band = band_from_input(data, template_id=int(template_id))
    validate_rule_band(band)
    ensure_no_overlap(_region_bands(db, template_id, band.to_region), band)

    rule = ShippingTemplateRule(template_id=int(template_id))
    _apply_band(rule, band)
    db.add(rule)
    db.commit()
    db.refresh(rule)

    MUTATIONS_TOTAL.labels("rule", "create").inc()
    log.info(
        "shipping rule created id=%s template_id=%s region=%s band=[%s, %s)",
        rule.id,
        template_id,
        rule.to_region,
        rule.min_weight,
        rule.max_weight,
    )
    return rule


def update_rule(db: Session, template_id: int, rule_id: int, data: Mapping[str, Any]) -> ShippingTemplateRule:
    """部分更新：未传字段沿用原值，合并后整条重新校验（含重叠）。"""
    _lock_template(db, template_id)
    rule = get_rule(db, template_id, rule_id)

    current = RuleBand.from_model(rule)
    merged: Dict[str, Any] = {f: getattr(current, f) for f in _RULE_FIELDS}
    for f in _RULE_FIELDS:
        if f in data and (data[f] is not None or f == "max_weight"):
            merged[f] = data[f]

    band = band_from_input(merged, template_id=int(template_id), rule_id=int(rule.id))
    validate_rule_band(band)
    ensure_no_overlap(_region_bands(db, template_id, band.to_region), band)

    _apply_band(rule, band)
    db.commit()
    db.refresh(rule)

    MUTATIONS_TOTAL.labels("rule", "update").inc()
    return rule


def delete_rule(db: Session, template_id: int, rule_id: int) -> None:
    rule = get_rule(db, template_id, rule_id)
    db.delete(rule)
    db.commit()
    MUTATIONS_TOTAL.labels("rule", "delete").inc()
    log.info("shipping rule deleted id=%s template_id=%s", rule_id, template_id)
