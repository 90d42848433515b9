# shiprate/services/shipping_rates/__init__.py
"""
运费模板域：

- rule_table : 纯函数（区域匹配 / 重量区间 / 重叠校验）
- fee        : 纯函数（首重 + 续重计费、金额舍入）
- templates  : 模板 + 规则 CRUD
- bindings   : 产品 / 平台产品 ↔ 模板 绑定、默认切换
- resolver   : 实体 → 生效模板
- calc       : 单条 / 批量 / 订单行估算
"""
from __future__ import annotations

from .binding_kinds import KINDS, PLATFORM_PRODUCT, PRODUCT, BindingKind
from .bindings import (
    bind_template,
    get_default_binding,
    list_bindings,
    set_default_template,
    unbind_template,
)
from .calc import (
    BatchItemResult,
    EstimateResult,
    calculate,
    calculate_batch,
    estimate_for_item,
)
from .errors import (
    BindingNotFound,
    CalculationError,
    ConflictError,
    InvalidWeight,
    NoRateForRegion,
    NoTemplateBound,
    NotFoundError,
    RuleNotFound,
    ShippingError,
    TemplateNotFound,
    ValidationError,
)
from .fee import compute_fee
from .resolver import resolve_template
from .rule_table import find_applicable_rule
from .types import FeeQuote, RuleBand

__all__ = [
    "BindingKind",
    "KINDS",
    "PRODUCT",
    "PLATFORM_PRODUCT",
    "bind_template",
    "unbind_template",
    "set_default_template",
    "list_bindings",
    "get_default_binding",
    "calculate",
    "calculate_batch",
    "estimate_for_item",
    "BatchItemResult",
    "EstimateResult",
    "compute_fee",
    "find_applicable_rule",
    "resolve_template",
    "FeeQuote",
    "RuleBand",
    "ShippingError",
    "ValidationError",
    "InvalidWeight",
    "NotFoundError",
    "TemplateNotFound",
    "RuleNotFound",
    "BindingNotFound",
    "CalculationError",
    "ConflictError",
    "NoTemplateBound",
    "NoRateForRegion",
]
