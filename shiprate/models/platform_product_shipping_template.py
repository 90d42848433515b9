# shiprate/models/platform_product_shipping_template.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, UniqueConstraint, false, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiprate.db.base import Base


class PlatformProductShippingTemplate(Base):
    """
    平台产品 ↔ 运费模板 绑定（与本地产品绑定同构）

    - (platform_product_id, shipping_template_id) 唯一
    - 每个 platform_product 至多一条 is_default=true（部分唯一索引兜底，切换默认在同一事务内完成）
    - sort_order 越小优先级越高
    """

    __tablename__ = "platform_product_shipping_templates"
    __table_args__ = (
        UniqueConstraint("platform_product_id", "shipping_template_id", name="uq_ppst_platform_product_template"),
        Index(
            "uq_ppst_platform_product_single_default",
            "platform_product_id",
            unique=True,
            sqlite_where=text("is_default"),
            postgresql_where=text("is_default"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # 平台产品镜像在订单同步侧维护，这里只记 id
    platform_product_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    shipping_template_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("shipping_templates.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    shipping_template = relationship("ShippingTemplate", lazy="joined")

    @property
    def entity_id(self) -> int:
        return self.platform_product_id

    def __repr__(self) -> str:
        return (
            f"<PlatformProductShippingTemplate id={self.id} platform_product_id={self.platform_product_id} "
            f"template_id={self.shipping_template_id} default={self.is_default}>"
        )
