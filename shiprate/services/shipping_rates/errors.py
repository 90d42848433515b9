# shiprate/services/shipping_rates/errors.py
from __future__ import annotations

from typing import Any, Dict, Optional


class ShippingError(Exception):
    """
    运费域业务错误基类。

    - code   : 信封里的业务码（!= 0）
    - error  : 稳定的错误键，供调用方 / 批量结果按键区分
    - status : HTTP 状态
    """

    code = 40000
    error = "SHIPPING_ERROR"
    status = 400

    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"error": self.error, "message": self.message}
        if self.context:
            out["context"] = self.context
        return out


class ValidationError(ShippingError):
    code = 40001
    error = "VALIDATION_ERROR"
    status = 422


class InvalidWeight(ValidationError):
    code = 40002
    error = "INVALID_WEIGHT"


class NotFoundError(ShippingError):
    code = 40401
    error = "NOT_FOUND"
    status = 404


class TemplateNotFound(NotFoundError):
    code = 40402
    error = "TEMPLATE_NOT_FOUND"


class RuleNotFound(NotFoundError):
    code = 40403
    error = "RULE_NOT_FOUND"


class BindingNotFound(NotFoundError):
    code = 40404
    error = "BINDING_NOT_FOUND"


class ConflictError(ShippingError):
    code = 40901
    error = "CONFLICT"
    status = 409


# ---- “无答案”结果：不是系统故障，单条/批量都作为结构化结果返回 ----


class NoTemplateBound(ShippingError):
    code = 42201
    error = "NO_TEMPLATE_BOUND"
    status = 422


class NoRateForRegion(ShippingError):
    code = 42202
    error = "NO_RATE_FOR_REGION"
    status = 422


class CalculationError(ShippingError):
    """规则数据本身算不出价（如续重单位为 0）；批量里按条记录，不拖垮整批。"""

    code = 50001
    error = "CALCULATION_FAILED"
    status = 500
