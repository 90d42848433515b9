# shiprate/api/routers/shipping_schemas.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# rules
# ---------------------------------------------------------------------------


class RuleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    template_id: int
    to_region: str
    min_weight: Decimal
    # null = 无上限
    max_weight: Optional[Decimal] = None
    first_weight: Decimal
    first_price: Decimal
    additional_unit: Decimal
    additional_price: Decimal
    currency: str
    estimated_days: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RuleCreateIn(BaseModel):
    """
    数值字段在服务层统一校验（负数 / max<=min / 续重单位<=0 → 422 业务码），
    这里只做类型层面的解析。
    """

    to_region: str = Field(..., min_length=1, max_length=64)
    min_weight: Decimal = Decimal("0")
    max_weight: Optional[Decimal] = None
    first_weight: Decimal
    first_price: Decimal
    # 不传 → DEFAULT_ADDITIONAL_UNIT
    additional_unit: Optional[Decimal] = None
    additional_price: Decimal = Decimal("0")
    # 不传 → DEFAULT_CURRENCY
    currency: Optional[str] = Field(None, max_length=8)
    estimated_days: int = 0


class RuleUpdateIn(BaseModel):
    to_region: Optional[str] = Field(None, min_length=1, max_length=64)
    min_weight: Optional[Decimal] = None
    max_weight: Optional[Decimal] = None
    first_weight: Optional[Decimal] = None
    first_price: Optional[Decimal] = None
    additional_unit: Optional[Decimal] = None
    additional_price: Optional[Decimal] = None
    currency: Optional[str] = Field(None, max_length=8)
    estimated_days: Optional[int] = None


# ---------------------------------------------------------------------------
# templates
# ---------------------------------------------------------------------------


class TemplateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    carrier: str
    from_region: str
    description: Optional[str] = None
    status: str
    rule_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TemplateDetailOut(TemplateOut):
    rules: List[RuleOut] = Field(default_factory=list)


class TemplateOptionOut(BaseModel):
    id: int
    name: str


class TemplateListOut(BaseModel):
    list: List[TemplateOut]
    total: int
    page: int
    page_size: int


class TemplateCreateIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    carrier: str = Field("", max_length=64)
    from_region: str = Field("", max_length=64)
    description: Optional[str] = None
    status: Optional[str] = None
    rules: List[RuleCreateIn] = Field(default_factory=list)


class TemplateUpdateIn(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    carrier: Optional[str] = Field(None, max_length=64)
    from_region: Optional[str] = Field(None, max_length=64)
    description: Optional[str] = None
    status: Optional[str] = None


class TemplateDeleteOut(BaseModel):
    id: int
    deleted_rules: int
    deleted_bindings: int


# ---------------------------------------------------------------------------
# calculation
# ---------------------------------------------------------------------------


class CalcIn(BaseModel):
    # weight 允许缺省：缺 / <=0 由服务层报 INVALID_WEIGHT（批量里按条隔离）
    template_id: Optional[int] = None
    to_region: Optional[str] = None
    weight: Optional[Decimal] = None


class CalcOut(BaseModel):
    template_id: int
    template_name: str
    to_region: str
    weight: Decimal
    shipping_fee: Decimal
    currency: str
    estimated_days: int


class BatchCalcIn(BaseModel):
    items: List[CalcIn] = Field(default_factory=list)


class BatchItemError(BaseModel):
    code: int
    error: str
    message: str


class BatchItemOut(BaseModel):
    ok: bool
    template_id: Optional[int] = None
    template_name: Optional[str] = None
    to_region: Optional[str] = None
    weight: Optional[Decimal] = None
    shipping_fee: Optional[Decimal] = None
    currency: Optional[str] = None
    estimated_days: Optional[int] = None
    error: Optional[BatchItemError] = None


class BatchCalcOut(BaseModel):
    results: List[BatchItemOut]


class EstimateIn(BaseModel):
    platform_product_id: Optional[int] = None
    product_id: Optional[int] = None
    to_region: Optional[str] = None
    weight: Optional[Decimal] = None
    quantity: int = 1


class EstimateOut(BaseModel):
    template_id: int
    template_name: str
    shipping_fee: Decimal
    total_shipping_fee: Decimal
    currency: str
    estimated_days: int
    # platform_product / product
    source: str


# ---------------------------------------------------------------------------
# bindings
# ---------------------------------------------------------------------------


class ProductBindingIn(BaseModel):
    product_id: int = Field(..., ge=1)
    shipping_template_id: int = Field(..., ge=1)
    is_default: bool = False
    sort_order: int = 0


class PlatformProductBindingIn(BaseModel):
    platform_product_id: int = Field(..., ge=1)
    shipping_template_id: int = Field(..., ge=1)
    is_default: bool = False
    sort_order: int = 0


class SetDefaultIn(BaseModel):
    shipping_template_id: int = Field(..., ge=1)


class BindingOut(BaseModel):
    id: int
    product_id: Optional[int] = None
    platform_product_id: Optional[int] = None
    shipping_template_id: int
    is_default: bool
    sort_order: int
    template_name: Optional[str] = None
    carrier: Optional[str] = None
    # 绑定本身没有启停；这里是所绑模板的状态
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UnbindOut(BaseModel):
    id: int


__all__ = [
    "RuleOut",
    "RuleCreateIn",
    "RuleUpdateIn",
    "TemplateOut",
    "TemplateDetailOut",
    "TemplateOptionOut",
    "TemplateListOut",
    "TemplateCreateIn",
    "TemplateUpdateIn",
    "TemplateDeleteOut",
    "CalcIn",
    "CalcOut",
    "BatchCalcIn",
    "BatchItemError",
    "BatchItemOut",
    "BatchCalcOut",
    "EstimateIn",
    "EstimateOut",
    "ProductBindingIn",
    "PlatformProductBindingIn",
    "SetDefaultIn",
    "BindingOut",
    "UnbindOut",
]