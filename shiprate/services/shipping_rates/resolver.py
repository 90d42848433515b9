# shiprate/services/shipping_rates/resolver.py
from __future__ import annotations

from typing import Any, Optional, Sequence, TypeVar

from sqlalchemy.orm import Session

from .binding_kinds import BindingKind
from .errors import NoTemplateBound

B = TypeVar("B")


def _priority_key(b: Any):
    # 创建顺序以自增 id 为准（同表内单调）
    return (int(b.sort_order or 0), int(b.id) if b.id is not None else 0)


def pick_binding(bindings: Sequence[B]) -> Optional[B]:
    """
    默认优先：
    1) is_default=true 的那条
    2) 否则 sort_order 最小
    3) 再按创建顺序（id asc）稳定裁决
    """
    if not bindings:
        return None
    defaults = [b for b in bindings if bool(getattr(b, "is_default", False))]
    if defaults:
        return min(defaults, key=_priority_key)
    return min(bindings, key=_priority_key)


def load_bindings(db: Session, kind: BindingKind, entity_id: int) -> list:
    model = kind.model
    return (
        db.query(model)
        .filter(kind.entity_column == int(entity_id))
        .order_by(model.is_default.desc(), model.sort_order.asc(), model.id.asc())
        .all()
    )


def resolve_binding(db: Session, kind: BindingKind, entity_id: int) -> Any:
    """
    实体 → 唯一生效绑定。

    不按区域过滤：区域适用性由规则表决定；命中模板没有该区域规则时由算价侧报
    NoRateForRegion，这里不会换下一个模板兜底。
    """
    chosen = pick_binding(load_bindings(db, kind, entity_id))
    if chosen is None:
        raise NoTemplateBound(
            f"no shipping template bound to {kind.name} {entity_id}",
            context={"entity": kind.name, "entity_id": int(entity_id)},
        )
    return chosen


def resolve_template(db: Session, kind: BindingKind, entity_id: int, destination_region: Optional[str] = None) -> int:
    # 解析与 destination_region 无关：区域是否有价由算价时的规则表判定
    return int(resolve_binding(db, kind, entity_id).shipping_template_id)
