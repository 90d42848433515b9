# shiprate/models/product_shipping_template.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, UniqueConstraint, false, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shiprate.db.base import Base


class ProductShippingTemplate(Base):
    """
    本地产品 ↔ 运费模板 绑定

    - (product_id, shipping_template_id) 唯一
    - 每个 product 至多一条 is_default=true（部分唯一索引兜底，切换默认在同一事务内完成）
    - sort_order 越小优先级越高
    """

    __tablename__ = "product_shipping_templates"
    __table_args__ = (
        UniqueConstraint("product_id", "shipping_template_id", name="uq_pst_product_template"),
        Index(
            "uq_pst_product_single_default",
            "product_id",
            unique=True,
            sqlite_where=text("is_default"),
            postgresql_where=text("is_default"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # 产品主数据在外部系统，这里只记 id
    product_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

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
        return self.product_id

    def __repr__(self) -> str:
        return (
            f"<ProductShippingTemplate id={self.id} product_id={self.product_id} "
            f"template_id={self.shipping_template_id} default={self.is_default}>"
        )
