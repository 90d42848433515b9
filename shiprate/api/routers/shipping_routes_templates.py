# shiprate/api/routers/shipping_routes_templates.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from shiprate.api.response import Envelope, ok
from shiprate.api.routers.shipping_mappers import (
    to_template_detail_out,
    to_template_option_out,
    to_template_out,
)
from shiprate.api.routers.shipping_schemas import (
    TemplateCreateIn,
    TemplateDeleteOut,
    TemplateDetailOut,
    TemplateListOut,
    TemplateOptionOut,
    TemplateUpdateIn,
)
from shiprate.db.deps import get_db
from shiprate.services.shipping_rates import templates as svc


def register(router: APIRouter) -> None:
    @router.get("/templates", response_model=Envelope[TemplateListOut])
    def list_shipping_templates(
        page: int = Query(1, ge=1),
        page_size: Optional[int] = Query(None, ge=1),
        keyword: Optional[str] = Query(None),
        status: Optional[str] = Query(None),
        db: Session = Depends(get_db),
    ):
        rows, total, size = svc.list_templates(
            db, page=page, page_size=page_size, keyword=keyword, status=status
        )
        return ok(
            TemplateListOut(
                list=[to_template_out(t) for t in rows],
                total=total,
                page=page,
                page_size=size,
            )
        )

    # /all 必须先于 /{template_id} 注册
    @router.get("/templates/all", response_model=Envelope[List[TemplateOptionOut]])
    def list_active_shipping_templates(db: Session = Depends(get_db)):
        return ok([to_template_option_out(t) for t in svc.list_active_templates(db)])

    @router.get("/templates/{template_id}", response_model=Envelope[TemplateDetailOut])
    def get_shipping_template(
        template_id: int = Path(..., ge=1),
        db: Session = Depends(get_db),
    ):
        return ok(to_template_detail_out(svc.get_template(db, template_id)))

    @router.post(
        "/templates",
        response_model=Envelope[TemplateDetailOut],
        status_code=status.HTTP_201_CREATED,
    )
    def create_shipping_template(
        payload: TemplateCreateIn,
        db: Session = Depends(get_db),
    ):
        tpl = svc.create_template(
            db,
            name=payload.name,
            carrier=payload.carrier,
            from_region=payload.from_region,
            description=payload.description,
            status=payload.status,
            rules=[r.model_dump(exclude_unset=True) for r in payload.rules],
        )
        return ok(to_template_detail_out(tpl))

    @router.put("/templates/{template_id}", response_model=Envelope[TemplateDetailOut])
    def update_shipping_template(
        template_id: int = Path(..., ge=1),
        payload: TemplateUpdateIn = ...,
        db: Session = Depends(get_db),
    ):
        tpl = svc.update_template(db, template_id, payload.model_dump(exclude_unset=True))
        return ok(to_template_detail_out(tpl))

    @router.delete("/templates/{template_id}", response_model=Envelope[TemplateDeleteOut])
    def delete_shipping_template(
        template_id: int = Path(..., ge=1),
        force: bool = Query(False),
        db: Session = Depends(get_db),
    ):
        return ok(TemplateDeleteOut(**svc.delete_template(db, template_id, force=force)))
