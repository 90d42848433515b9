# shiprate/services/shipping_rates/binding_kinds.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Type

from shiprate.models.platform_product_shipping_template import PlatformProductShippingTemplate
from shiprate.models.product_shipping_template import ProductShippingTemplate


@dataclass(frozen=True)
class BindingKind:
    """两种可售实体（本地产品 / 平台产品）的绑定表差异收敛到这里。"""

    name: str
    model: Type[Any]
    entity_field: str

    @property
    def entity_column(self) -> Any:
        return getattr(self.model, self.entity_field)


PRODUCT = BindingKind(name="product", model=ProductShippingTemplate, entity_field="product_id")
PLATFORM_PRODUCT = BindingKind(
    name="platform_product",
    model=PlatformProductShippingTemplate,
    entity_field="platform_product_id",
)

KINDS: Dict[str, BindingKind] = {k.name: k for k in (PRODUCT, PLATFORM_PRODUCT)}
