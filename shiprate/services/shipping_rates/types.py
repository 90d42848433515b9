# shiprate/services/shipping_rates/types.py
from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def _s(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    t = v.strip()
    return t if t else None


def _d(v: Any) -> Optional[Decimal]:
    """
    数值统一转 Decimal：
    - float 走 str()，避免 1.4 变成 1.399999...
    - 非法 / NaN / inf 返回 None，由调用方决定报什么错
    """
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, Decimal):
        d = v
    elif isinstance(v, float):
        if math.isnan(v) or math.isinf(v):
            return None
        d = Decimal(str(v))
    else:
        try:
            d = Decimal(str(v).strip())
        except (InvalidOperation, ValueError):
            return None
    if not d.is_finite():
        return None
    return d


@dataclass(frozen=True)
class RuleBand:
    """
    规则快照（不可变）：纯函数（匹配 / 重叠校验 / 计费）只吃这个，不碰 ORM。
    """

    id: Optional[int]
    template_id: Optional[int]
    to_region: str
    min_weight: Decimal
    max_weight: Optional[Decimal]
    first_weight: Decimal
    first_price: Decimal
    additional_unit: Decimal
    additional_price: Decimal
    currency: str
    estimated_days: int = 0

    @property
    def upper(self) -> Optional[Decimal]:
        """右边界；None / 0 视为无上限。"""
        if self.max_weight is None or self.max_weight == 0:
            return None
        return self.max_weight

    @property
    def unbounded(self) -> bool:
        return self.upper is None

    @classmethod
    def from_model(cls, r: Any) -> "RuleBand":
        return cls(
            id=int(r.id) if r.id is not None else None,
            template_id=int(r.template_id) if r.template_id is not None else None,
            to_region=(r.to_region or "").strip(),
            min_weight=_d(r.min_weight) or Decimal("0"),
            max_weight=_d(r.max_weight),
            first_weight=_d(r.first_weight) or Decimal("0"),
            first_price=_d(r.first_price) or Decimal("0"),
            additional_unit=_d(r.additional_unit) or Decimal("0"),
            additional_price=_d(r.additional_price) or Decimal("0"),
            currency=(r.currency or "").strip().upper(),
            estimated_days=int(r.estimated_days or 0),
        )


@dataclass(frozen=True)
class FeeQuote:
    """单条算价结果（不落库，每次现算）。"""

    template_id: int
    template_name: str
    to_region: str
    weight: Decimal
    shipping_fee: Decimal
    currency: str
    estimated_days: int
    rule_id: Optional[int] = None
