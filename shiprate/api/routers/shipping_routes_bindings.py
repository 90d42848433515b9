# shiprate/api/routers/shipping_routes_bindings.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from shiprate.api.response import Envelope, ok
from shiprate.api.routers.shipping_mappers import to_binding_out
from shiprate.api.routers.shipping_schemas import (
    BindingOut,
    PlatformProductBindingIn,
    ProductBindingIn,
    SetDefaultIn,
    UnbindOut,
)
from shiprate.db.deps import get_db
from shiprate.services.shipping_rates import bindings as svc
from shiprate.services.shipping_rates.binding_kinds import PLATFORM_PRODUCT, PRODUCT


def _register_product_routes(router: APIRouter) -> None:
    @router.post(
        "/product-templates",
        response_model=Envelope[BindingOut],
        status_code=status.HTTP_201_CREATED,
    )
    def bind_product_template(payload: ProductBindingIn, db: Session = Depends(get_db)):
        row = svc.bind_template(
            db,
            PRODUCT,
            entity_id=payload.product_id,
            template_id=payload.shipping_template_id,
            is_default=payload.is_default,
            sort_order=payload.sort_order,
        )
        return ok(to_binding_out(PRODUCT, row))

    @router.delete("/product-templates/{binding_id}", response_model=Envelope[UnbindOut])
    def unbind_product_template(
        binding_id: int = Path(..., ge=1),
        db: Session = Depends(get_db),
    ):
        svc.unbind_template(db, PRODUCT, binding_id)
        return ok(UnbindOut(id=binding_id))

    @router.get("/products/{product_id}/templates", response_model=Envelope[List[BindingOut]])
    def list_product_templates(
        product_id: int = Path(..., ge=1),
        db: Session = Depends(get_db),
    ):
        rows = svc.list_bindings(db, PRODUCT, product_id)
        return ok([to_binding_out(PRODUCT, b) for b in rows])

    @router.get("/products/{product_id}/default-template", response_model=Envelope[BindingOut])
    def get_product_default_template(
        product_id: int = Path(..., ge=1),
        db: Session = Depends(get_db),
    ):
        return ok(to_binding_out(PRODUCT, svc.get_default_binding(db, PRODUCT, product_id)))

    @router.put("/products/{product_id}/default-template", response_model=Envelope[BindingOut])
    def set_product_default_template(
        product_id: int = Path(..., ge=1),
        payload: SetDefaultIn = ...,
        db: Session = Depends(get_db),
    ):
        row = svc.set_default_template(
            db, PRODUCT, entity_id=product_id, template_id=payload.shipping_template_id
        )
        return ok(to_binding_out(PRODUCT, row))


def _register_platform_product_routes(router: APIRouter) -> None:
    @router.post(
        "/platform-product-templates",
        response_model=Envelope[BindingOut],
        status_code=status.HTTP_201_CREATED,
    )
    def bind_platform_product_template(
        payload: PlatformProductBindingIn,
        db: Session = Depends(get_db),
    ):
        row = svc.bind_template(
            db,
            PLATFORM_PRODUCT,
            entity_id=payload.platform_product_id,
            template_id=payload.shipping_template_id,
            is_default=payload.is_default,
            sort_order=payload.sort_order,
        )
        return ok(to_binding_out(PLATFORM_PRODUCT, row))

    @router.delete("/platform-product-templates/{binding_id}", response_model=Envelope[UnbindOut])
    def unbind_platform_product_template(
        binding_id: int = Path(..., ge=1),
        db: Session = Depends(get_db),
    ):
        svc.unbind_template(db, PLATFORM_PRODUCT, binding_id)
        return ok(UnbindOut(id=binding_id))

    @router.get(
        "/platform-products/{platform_product_id}/templates",
        response_model=Envelope[List[BindingOut]],
    )
    def list_platform_product_templates(
        platform_product_id: int = Path(..., ge=1),
        db: Session = Depends(get_db),
    ):
        rows = svc.list_bindings(db, PLATFORM_PRODUCT, platform_product_id)
        return ok([to_binding_out(PLATFORM_PRODUCT, b) for b in rows])

    @router.get(
        "/platform-products/{platform_product_id}/default-template",
        response_model=Envelope[BindingOut],
    )
    def get_platform_product_default_template(
        platform_product_id: int = Path(..., ge=1),
        db: Session = Depends(get_db),
    ):
        row = svc.get_default_binding(db, PLATFORM_PRODUCT, platform_product_id)
        return ok(to_binding_out(PLATFORM_PRODUCT, row))

    @router.put(
        "/platform-products/{platform_product_id}/default-template",
        response_model=Envelope[BindingOut],
    )
    def set_platform_product_default_template(
        platform_product_id: int = Path(..., ge=1),
        payload: SetDefaultIn = ...,
        db: Session = Depends(get_db),
    ):
        row = svc.set_default_template(
            db,
            PLATFORM_PRODUCT,
            entity_id=platform_product_id,
            template_id=payload.shipping_template_id,
        )
        return ok(to_binding_out(PLATFORM_PRODUCT, row))


def register(router: APIRouter) -> None:
    _register_product_routes(router)
    _register_platform_product_routes(router)
