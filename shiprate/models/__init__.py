# shiprate/models/__init__.py
"""
统一导出 ORM 模型。
"""

from shiprate.models.platform_product_shipping_template import PlatformProductShippingTemplate
from shiprate.models.product_shipping_template import ProductShippingTemplate
from shiprate.models.shipping_template import ShippingTemplate, TemplateStatus
from shiprate.models.shipping_template_rule import ShippingTemplateRule

__all__ = [
    "ShippingTemplate",
    "TemplateStatus",
    "ShippingTemplateRule",
    "ProductShippingTemplate",
    "PlatformProductShippingTemplate",
]
