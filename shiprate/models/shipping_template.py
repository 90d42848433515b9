# shiprate/models/shipping_template.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiprate.db.base import Base


class TemplateStatus:
    ACTIVE = "active"
    INACTIVE = "inactive"

    ALL = (ACTIVE, INACTIVE)


class ShippingTemplate(Base):
    """
    运费模板（承运商运价卡）

    - 模板独占其规则：删除模板级联删除规则
    - status=inactive 仅从“可选模板”下拉中隐藏，不影响已有绑定与算价
    """

    __tablename__ = "shipping_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    carrier: Mapped[str] = mapped_column(String(100), nullable=False, default="", server_default="")
    from_region: Mapped[str] = mapped_column(String(100), nullable=False, default="", server_default="")
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TemplateStatus.ACTIVE,
        server_default=TemplateStatus.ACTIVE,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    rules: Mapped[List["ShippingTemplateRule"]] = relationship(  # noqa: F821
        "ShippingTemplateRule",
        back_populates="template",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="[ShippingTemplateRule.to_region, ShippingTemplateRule.min_weight, ShippingTemplateRule.id]",
    )

    @property
    def rule_count(self) -> int:
        return len(self.rules)

    def __repr__(self) -> str:
        return f"<ShippingTemplate id={self.id} name={self.name!r} status={self.status}>"
