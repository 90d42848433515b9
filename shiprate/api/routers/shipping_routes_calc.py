# shiprate/api/routers/shipping_routes_calc.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shiprate.api.response import Envelope, ok
from shiprate.api.routers.shipping_mappers import to_batch_item_out, to_calc_out, to_estimate_out
from shiprate.api.routers.shipping_schemas import (
    BatchCalcIn,
    BatchCalcOut,
    CalcIn,
    CalcOut,
    EstimateIn,
    EstimateOut,
)
from shiprate.db.deps import get_db
from shiprate.services.shipping_rates.calc import calculate, calculate_batch, estimate_for_item


def register(router: APIRouter) -> None:
    @router.post("/calculate", response_model=Envelope[CalcOut])
    def calculate_shipping_fee(payload: CalcIn, db: Session = Depends(get_db)):
        quote = calculate(db, payload.template_id, payload.to_region, payload.weight)
        return ok(to_calc_out(quote))

    @router.post("/calculate/batch", response_model=Envelope[BatchCalcOut])
    def calculate_shipping_fee_batch(payload: BatchCalcIn, db: Session = Depends(get_db)):
        """单条失败只体现在该条结果里（ok=false + error），整体仍然 code=0。"""
        results = calculate_batch(db, [it.model_dump() for it in payload.items])
        return ok(BatchCalcOut(results=[to_batch_item_out(r) for r in results]))

    @router.post("/estimate", response_model=Envelope[EstimateOut])
    def estimate_order_item_shipping(payload: EstimateIn, db: Session = Depends(get_db)):
        result = estimate_for_item(
            db,
            platform_product_id=payload.platform_product_id,
            product_id=payload.product_id,
            to_region=payload.to_region,
            weight=payload.weight,
            quantity=payload.quantity,
        )
        return ok(to_estimate_out(result))
