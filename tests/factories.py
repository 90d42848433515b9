# tests/factories.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

from shiprate.models.shipping_template import ShippingTemplate
from shiprate.services.shipping_rates import templates as tpl_svc
from shiprate.services.shipping_rates.types import RuleBand


def eu_rule(**overrides: Any) -> Dict[str, Any]:
    """EU 标准件：首重 1kg 5.00，续重每 0.5kg 1.50。"""
    data: Dict[str, Any] = {
        "to_region": "EU",
        "min_weight": "0",
        "max_weight": None,
        "first_weight": "1.0",
        "first_price": "5.00",
        "additional_unit": "0.5",
        "additional_price": "1.50",
        "currency": "EUR",
        "estimated_days": 5,
    }
    data.update(overrides)
    return data


def make_template(
    db,
    name: str = "DHL Standard",
    *,
    carrier: str = "DHL",
    status: Optional[str] = None,
    rules: Optional[List[Dict[str, Any]]] = None,
) -> ShippingTemplate:
    return tpl_svc.create_template(
        db,
        name=name,
        carrier=carrier,
        from_region="CN",
        status=status,
        rules=rules if rules is not None else [eu_rule()],
    )


def band(
    to_region: str = "EU",
    min_weight: str = "0",
    max_weight: Optional[str] = None,
    *,
    id: Optional[int] = None,
    first_weight: str = "1.0",
    first_price: str = "5.00",
    additional_unit: str = "0.5",
    additional_price: str = "1.50",
    currency: str = "EUR",
) -> RuleBand:
    return RuleBand(
        id=id,
        template_id=1,
        to_region=to_region,
        min_weight=Decimal(min_weight),
        max_weight=Decimal(max_weight) if max_weight is not None else None,
        first_weight=Decimal(first_weight),
        first_price=Decimal(first_price),
        additional_unit=Decimal(additional_unit),
        additional_price=Decimal(additional_price),
        currency=currency,
        estimated_days=3,
    )
