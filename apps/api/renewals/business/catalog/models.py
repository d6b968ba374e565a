from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from renewals.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Variant(Base):
    __tablename__ = "catalog_variant"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    sku: Mapped[str] = mapped_column(String(128), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    track_inventory: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    stock_items: Mapped[list[StockItem]] = relationship(
        "renewals.business.catalog.models.StockItem",
        back_populates="variant",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (UniqueConstraint("sku", name="uq_catalog_variant_sku"),)


class StockItem(Base):
    __tablename__ = "catalog_stock_item"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    variant_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("catalog_variant.id", ondelete="CASCADE"),
        nullable=False,
    )
    location_code: Mapped[str] = mapped_column(String(64), nullable=False, default="default", server_default="default")
    count_on_hand: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    backorderable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    variant: Mapped[Variant] = relationship("renewals.business.catalog.models.Variant", back_populates="stock_items")

    __table_args__ = (
        UniqueConstraint("variant_id", "location_code", name="uq_catalog_stock_item_location"),
        Index("ix_catalog_stock_item_variant", "variant_id"),
    )
