# tests/services/test_shipping_bindings_service.py
from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shiprate.models.product_shipping_template import ProductShippingTemplate
from shiprate.services.shipping_rates import bindings as bindings_svc
from shiprate.services.shipping_rates.binding_kinds import PLATFORM_PRODUCT, PRODUCT
from shiprate.services.shipping_rates.bindings import (
    bind_template,
    get_default_binding,
    list_bindings,
    set_default_template,
    unbind_template,
)
from shiprate.services.shipping_rates.errors import (
    BindingNotFound,
    ConflictError,
    NoTemplateBound,
    TemplateNotFound,
)
from shiprate.services.shipping_rates.resolver import resolve_template
from tests.factories import make_template


def _defaults(session: Session, kind, entity_id: int):
    return [b.shipping_template_id for b in list_bindings(session, kind, entity_id) if b.is_default]


def test_bind_requires_existing_template(session: Session):
    with pytest.raises(TemplateNotFound):
        bind_template(session, PRODUCT, entity_id=1, template_id=999)


def test_bind_inactive_template_is_allowed(session: Session):
    tpl = make_template(session, status="inactive")
    row = bind_template(session, PRODUCT, entity_id=1, template_id=tpl.id)
    assert row.shipping_template.name == tpl.name


def test_duplicate_binding_conflicts(session: Session):
    tpl = make_template(session)
    bind_template(session, PRODUCT, entity_id=1, template_id=tpl.id)
    with pytest.raises(ConflictError):
        bind_template(session, PRODUCT, entity_id=1, template_id=tpl.id)

    # 同一模板绑到另一个产品 / 平台产品不冲突
    bind_template(session, PRODUCT, entity_id=2, template_id=tpl.id)
    bind_template(session, PLATFORM_PRODUCT, entity_id=1, template_id=tpl.id)


def test_bind_as_default_replaces_previous_default(session: Session):
    a = make_template(session, "A")
    b = make_template(session, "B")
    bind_template(session, PRODUCT, entity_id=1, template_id=a.id, is_default=True)
    bind_template(session, PRODUCT, entity_id=1, template_id=b.id, is_default=True)
    assert _defaults(session, PRODUCT, 1) == [b.id]


def test_set_default_keeps_exactly_one(session: Session):
    tpls = [make_template(session, f"T{i}") for i in range(3)]
    for t in tpls:
        bind_template(session, PRODUCT, entity_id=5, template_id=t.id)
    assert _defaults(session, PRODUCT, 5) == []

    for t in [tpls[0], tpls[2], tpls[1], tpls[1], tpls[0]]:
        set_default_template(session, PRODUCT, entity_id=5, template_id=t.id)
        assert _defaults(session, PRODUCT, 5) == [t.id]
        assert resolve_template(session, PRODUCT, 5) == t.id


def test_set_default_is_scoped_per_entity(session: Session):
    a = make_template(session, "A")
    b = make_template(session, "B")
    bind_template(session, PRODUCT, entity_id=1, template_id=a.id, is_default=True)
    bind_template(session, PRODUCT, entity_id=2, template_id=b.id, is_default=True)
    bind_template(session, PRODUCT, entity_id=2, template_id=a.id)

    set_default_template(session, PRODUCT, entity_id=2, template_id=a.id)
    assert _defaults(session, PRODUCT, 1) == [a.id]
    assert _defaults(session, PRODUCT, 2) == [a.id]


def test_set_default_requires_existing_binding(session: Session):
    tpl = make_template(session)
    with pytest.raises(BindingNotFound):
        set_default_template(session, PRODUCT, entity_id=1, template_id=tpl.id)
    assert list_bindings(session, PRODUCT, 1) == []


def test_resolve_prefers_default_then_sort_order_then_creation(session: Session):
    a = make_template(session, "A")
    b = make_template(session, "B")
    c = make_template(session, "C")

    with pytest.raises(NoTemplateBound):
        resolve_template(session, PLATFORM_PRODUCT, 3)

    bind_template(session, PLATFORM_PRODUCT, entity_id=3, template_id=a.id, sort_order=5)
    bind_template(session, PLATFORM_PRODUCT, entity_id=3, template_id=b.id, sort_order=5)
    assert resolve_template(session, PLATFORM_PRODUCT, 3) == a.id

    bind_template(session, PLATFORM_PRODUCT, entity_id=3, template_id=c.id, sort_order=1)
    assert resolve_template(session, PLATFORM_PRODUCT, 3) == c.id

    set_default_template(session, PLATFORM_PRODUCT, entity_id=3, template_id=b.id)
    assert resolve_template(session, PLATFORM_PRODUCT, 3) == b.id
    assert get_default_binding(session, PLATFORM_PRODUCT, 3).shipping_template_id == b.id

    # 列表：默认在前，其余按 sort_order / 创建顺序
    assert [x.shipping_template_id for x in list_bindings(session, PLATFORM_PRODUCT, 3)] == [b.id, c.id, a.id]


def test_unbind(session: Session):
    tpl = make_template(session)
    binding_id = bind_template(session, PRODUCT, entity_id=1, template_id=tpl.id, is_default=True).id
    unbind_template(session, PRODUCT, binding_id)
    assert list_bindings(session, PRODUCT, 1) == []
    with pytest.raises(BindingNotFound):
        unbind_template(session, PRODUCT, binding_id)


def test_single_default_index_rejects_second_default_row(session: Session):
    a = make_template(session, "A")
    b = make_template(session, "B")
    bind_template(session, PRODUCT, entity_id=1, template_id=a.id, is_default=True)

    session.add(ProductShippingTemplate(product_id=1, shipping_template_id=b.id, is_default=True))
    with pytest.raises(IntegrityError):
        session.commit()
    session.rollback()

    # 另一个实体的默认不受影响
    session.add(ProductShippingTemplate(product_id=2, shipping_template_id=b.id, is_default=True))
    session.commit()


def test_default_index_violation_maps_to_conflict_on_bind(session: Session, monkeypatch):
    a = make_template(session, "A")
    b = make_template(session, "B")
    bind_template(session, PRODUCT, entity_id=1, template_id=a.id, is_default=True)

    # 模拟并发：另一事务在清旧默认之后又写回了默认
    monkeypatch.setattr(bindings_svc, "_clear_default", lambda *args, **kwargs: None)
    with pytest.raises(ConflictError) as ei:
        bind_template(session, PRODUCT, entity_id=1, template_id=b.id, is_default=True)
    assert ei.value.context["entity_id"] == 1

    assert not session.in_transaction()
    assert [x.shipping_template_id for x in list_bindings(session, PRODUCT, 1)] == [a.id]
    assert _defaults(session, PRODUCT, 1) == [a.id]


def test_default_index_violation_maps_to_conflict_on_set_default(session: Session, monkeypatch):
    a = make_template(session, "A")
    b = make_template(session, "B")
    bind_template(session, PLATFORM_PRODUCT, entity_id=7, template_id=a.id, is_default=True)
    bind_template(session, PLATFORM_PRODUCT, entity_id=7, template_id=b.id)

    monkeypatch.setattr(bindings_svc, "_clear_default", lambda *args, **kwargs: None)
    with pytest.raises(ConflictError):
        set_default_template(session, PLATFORM_PRODUCT, entity_id=7, template_id=b.id)

    assert not session.in_transaction()
    assert _defaults(session, PLATFORM_PRODUCT, 7) == [a.id]
