# shiprate/api/routers/shipping_routes_rules.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from shiprate.api.response import Envelope, ok
from shiprate.api.routers.shipping_mappers import to_rule_out
from shiprate.api.routers.shipping_schemas import RuleCreateIn, RuleOut, RuleUpdateIn
from shiprate.db.deps import get_db
from shiprate.services.shipping_rates import templates as svc


def register(router: APIRouter) -> None:
    @router.get("/templates/{template_id}/rules", response_model=Envelope[List[RuleOut]])
    def list_shipping_rules(
        template_id: int = Path(..., ge=1),
        db: Session = Depends(get_db),
    ):
        return ok([to_rule_out(r) for r in svc.list_rules(db, template_id)])

    @router.post(
        "/templates/{template_id}/rules",
        response_model=Envelope[RuleOut],
        status_code=status.HTTP_201_CREATED,
    )
    def create_shipping_rule(
        template_id: int = Path(..., ge=1),
        payload: RuleCreateIn = ...,
        db: Session = Depends(get_db),
    ):
        rule = svc.create_rule(db, template_id, payload.model_dump(exclude_unset=True))
        return ok(to_rule_out(rule))

    @router.put("/templates/{template_id}/rules/{rule_id}", response_model=Envelope[RuleOut])
    def update_shipping_rule(
        template_id: int = Path(..., ge=1),
        rule_id: int = Path(..., ge=1),
        payload: RuleUpdateIn = ...,
        db: Session = Depends(get_db),
    ):
        # exclude_unset：显式传 max_weight=null 表示改成无上限
        rule = svc.update_rule(db, template_id, rule_id, payload.model_dump(exclude_unset=True))
        return ok(to_rule_out(rule))

    @router.delete("/templates/{template_id}/rules/{rule_id}", response_model=Envelope[dict])
    def delete_shipping_rule(
        template_id: int = Path(..., ge=1),
        rule_id: int = Path(..., ge=1),
        db: Session = Depends(get_db),
    ):
        svc.delete_rule(db, template_id, rule_id)
        return ok({"id": rule_id})
