# shiprate/models/shipping_template_rule.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiprate.db.base import Base


class ShippingTemplateRule(Base):
    """
    运费规则：一条 (目的区域, 重量段) → 首重/续重 定价

    重量段语义：左闭右开 [min_weight, max_weight)
    - max_weight 为 NULL 或 0 视为无上限
    - 同一模板 + 同一 to_region 下重量段不允许重叠（写入时校验）
    """

    __tablename__ = "shipping_template_rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    template_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("shipping_templates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    to_region: Mapped[str] = mapped_column(String(100), nullable=False)

    min_weight: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False, default=Decimal("0"))
    max_weight: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 3), nullable=True)  # null/0 = infinity

    # 首重 / 续重
    first_weight: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False, default=Decimal("0"))
    first_price: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False, default=Decimal("0"))
    additional_unit: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False)
    additional_price: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False, default=Decimal("0"))

    currency: Mapped[str] = mapped_column(String(10), nullable=False, default="CNY", server_default="CNY")
    estimated_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    template = relationship("ShippingTemplate", back_populates="rules")

    def __repr__(self) -> str:
        return (
            f"<ShippingTemplateRule id={self.id} template_id={self.template_id} "
            f"to={self.to_region} [{self.min_weight}, {self.max_weight})>"
        )
