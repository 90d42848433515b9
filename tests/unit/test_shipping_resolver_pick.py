# tests/unit/test_shipping_resolver_pick.py
from __future__ import annotations

from dataclasses import dataclass

from shiprate.services.shipping_rates.resolver import pick_binding


@dataclass
class DummyBinding:
    id: int
    shipping_template_id: int
    is_default: bool = False
    sort_order: int = 0


def test_empty_bindings_pick_nothing():
    assert pick_binding([]) is None


def test_default_wins_over_sort_order():
    rows = [
        DummyBinding(id=1, shipping_template_id=10, sort_order=0),
        DummyBinding(id=2, shipping_template_id=20, sort_order=9, is_default=True),
    ]
    assert pick_binding(rows).shipping_template_id == 20


def test_lowest_sort_order_without_default():
    rows = [
        DummyBinding(id=1, shipping_template_id=10, sort_order=5),
        DummyBinding(id=2, shipping_template_id=20, sort_order=1),
        DummyBinding(id=3, shipping_template_id=30, sort_order=3),
    ]
    assert pick_binding(rows).shipping_template_id == 20


def test_creation_order_breaks_ties():
    rows = [
        DummyBinding(id=7, shipping_template_id=70),
        DummyBinding(id=3, shipping_template_id=30),
        DummyBinding(id=5, shipping_template_id=50),
    ]
    assert pick_binding(rows).shipping_template_id == 30
