# shiprate/services/shipping_rates/bindings.py
from __future__ import annotations

import logging
from typing import Any, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shiprate.metrics import MUTATIONS_TOTAL

from .binding_kinds import BindingKind
from .errors import BindingNotFound, ConflictError
from .resolver import load_bindings, resolve_binding
from .templates import get_template

log = logging.getLogger("shiprate.shipping_rates.bindings")


def _clear_default(db: Session, kind: BindingKind, entity_id: int) -> None:
    model = kind.model
    (
        db.query(model)
        .filter(kind.entity_column == int(entity_id))
        .filter(model.is_default.is_(True))
        .update({model.is_default: False}, synchronize_session="fetch")
    )


def _commit_or_conflict(db: Session, kind: BindingKind, entity_id: int, template_id: int) -> None:
    """
    唯一约束兜底（并发写同一实体）：
    - (entity, template) 重复
    - 同一实体两条 is_default
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(
            "binding conflicts with a concurrent write (duplicate binding or default)",
            context={"entity": kind.name, "entity_id": int(entity_id), "shipping_template_id": int(template_id)},
        ) from e


def list_bindings(db: Session, kind: BindingKind, entity_id: int) -> List[Any]:
    """默认在前，其次 sort_order / 创建顺序。"""
    return load_bindings(db, kind, entity_id)


def bind_template(
    db: Session,
    kind: BindingKind,
    *,
    entity_id: int,
    template_id: int,
    is_default: bool = False,
    sort_order: int = 0,
) -> Any:
    """
    绑定实体与模板：
    - 模板必须存在（停用模板也允许绑定，状态只影响下拉）
    - 同一 (entity, template) 只能一条
    - is_default=True 时在同一事务内先清旧默认再写入
    """
    get_template(db, template_id)

    model = kind.model
    dup = (
        db.query(model.id)
        .filter(kind.entity_column == int(entity_id))
        .filter(model.shipping_template_id == int(template_id))
        .first()
    )
    if dup is not None:
        raise ConflictError(
            f"{kind.name} {entity_id} is already bound to template {template_id}",
            context={"entity": kind.name, "entity_id": int(entity_id), "binding_id": int(dup[0])},
        )

    if is_default:
        _clear_default(db, kind, entity_id)

    row = model(
        shipping_template_id=int(template_id),
        is_default=bool(is_default),
        sort_order=int(sort_order or 0),
    )
    setattr(row, kind.entity_field, int(entity_id))
    db.add(row)
    _commit_or_conflict(db, kind, entity_id, template_id)
    db.refresh(row)

    MUTATIONS_TOTAL.labels(f"{kind.name}_binding", "create").inc()
    log.info(
        "shipping template bound %s=%s template_id=%s default=%s sort=%s",
        kind.name,
        entity_id,
        template_id,
        row.is_default,
        row.sort_order,
    )
    return row


def unbind_template(db: Session, kind: BindingKind, binding_id: int) -> None:
    row = db.get(kind.model, int(binding_id))
    if row is None:
        raise BindingNotFound(
            f"{kind.name} binding not found: {binding_id}",
            context={"entity": kind.name, "binding_id": int(binding_id)},
        )
    entity_id = row.entity_id
    db.delete(row)
    db.commit()

    MUTATIONS_TOTAL.labels(f"{kind.name}_binding", "delete").inc()
    log.info("shipping template unbound %s=%s binding_id=%s", kind.name, entity_id, binding_id)


def set_default_template(db: Session, kind: BindingKind, *, entity_id: int, template_id: int) -> Any:
    """
    切换默认：清旧默认 + 置新默认 在一个事务里完成，外部观察不到“两条默认 / 零条默认”。
    目标绑定不存在 → BindingNotFound（不隐式新建绑定）。
    """
    model = kind.model
    target = (
        db.query(model)
        .filter(kind.entity_column == int(entity_id))
        .filter(model.shipping_template_id == int(template_id))
        .with_for_update()
        .one_or_none()
    )
    if target is None:
        raise BindingNotFound(
            f"{kind.name} {entity_id} is not bound to template {template_id}",
            context={"entity": kind.name, "entity_id": int(entity_id), "shipping_template_id": int(template_id)},
        )

    if target.is_default:
        return target

    _clear_default(db, kind, entity_id)
    db.flush()
    target.is_default = True
    _commit_or_conflict(db, kind, entity_id, template_id)
    db.refresh(target)

    MUTATIONS_TOTAL.labels(f"{kind.name}_binding", "set_default").inc()
    log.info("default shipping template set %s=%s template_id=%s", kind.name, entity_id, template_id)
    return target


def get_default_binding(db: Session, kind: BindingKind, entity_id: int) -> Any:
    """当前生效绑定（默认优先，否则按优先级）。"""
    return resolve_binding(db, kind, entity_id)
