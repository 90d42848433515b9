# shiprate/api/routers/shipping.py
from __future__ import annotations

from fastapi import APIRouter

from shiprate.api.routers import shipping_routes_bindings
from shiprate.api.routers import shipping_routes_calc
from shiprate.api.routers import shipping_routes_rules
from shiprate.api.routers import shipping_routes_templates

router = APIRouter(prefix="/shipping", tags=["shipping"])


def _register_all_routes() -> None:
    shipping_routes_templates.register(router)
    shipping_routes_rules.register(router)
    shipping_routes_calc.register(router)
    shipping_routes_bindings.register(router)


_register_all_routes()

__all__ = ["router"]
