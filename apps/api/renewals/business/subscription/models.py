from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from renewals.business.catalog.models import Variant
from renewals.business.customers.models import Customer
from renewals.business.orders.models import LineItem, Order
from renewals.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Subscription(Base):
    __tablename__ = "subscription"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    customer_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("customer.id", ondelete="CASCADE"), nullable=False)
    interval_length: Mapped[int] = mapped_column(Integer, nullable=False)
    interval_units: Mapped[str] = mapped_column(String(16), nullable=False, default="MONTH", server_default="MONTH")
    state: Mapped[str] = mapped_column(String(32), nullable=False, default="ACTIVE", server_default="ACTIVE")
    actionable_date: Mapped[date | None] = mapped_column(Date(), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    customer: Mapped[Customer] = relationship(Customer)
    line_item: Mapped[SubscriptionLineItem | None] = relationship(
        "renewals.business.subscription.models.SubscriptionLineItem",
        back_populates="subscription",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    installments: Mapped[list[Installment]] = relationship(
        "renewals.business.subscription.models.Installment",
        back_populates="subscription",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (Index("ix_subscription_customer_actionable", "customer_id", "actionable_date"),)

    @property
    def root_order(self) -> Order | None:
        """The order in which this subscription was originally purchased."""
        if self.line_item is None or self.line_item.origin_line_item is None:
            return None
        return self.line_item.origin_line_item.order


class SubscriptionLineItem(Base):
    __tablename__ = "subscription_line_item"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    subscription_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("subscription.id", ondelete="CASCADE"),
        nullable=False,
    )
    subscribable_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("catalog_variant.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    origin_line_item_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("order_line_item.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    subscription: Mapped[Subscription] = relationship(
        "renewals.business.subscription.models.Subscription",
        back_populates="line_item",
    )
    subscribable: Mapped[Variant] = relationship(Variant)
    origin_line_item: Mapped[LineItem | None] = relationship(LineItem)

    __table_args__ = (UniqueConstraint("subscription_id", name="uq_subscription_line_item_subscription"),)


class Installment(Base):
    __tablename__ = "subscription_installment"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    subscription_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("subscription.id", ondelete="CASCADE"),
        nullable=False,
    )
    actionable_date: Mapped[date | None] = mapped_column(Date(), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    subscription: Mapped[Subscription] = relationship(
        "renewals.business.subscription.models.Subscription",
        back_populates="installments",
    )
    details: Mapped[list[InstallmentDetail]] = relationship(
        "renewals.business.subscription.models.InstallmentDetail",
        back_populates="installment",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="InstallmentDetail.created_at",
    )

    __table_args__ = (Index("ix_subscription_installment_actionable", "actionable_date"),)

    @property
    def line_item(self) -> SubscriptionLineItem:
        line_item = self.subscription.line_item
        if line_item is None:
            raise ValueError(f"subscription {self.subscription_id} has no line item")
        return line_item

    @property
    def customer_id(self) -> uuid.UUID:
        return self.subscription.customer_id


class InstallmentDetail(Base):
    __tablename__ = "subscription_installment_detail"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    installment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("subscription_installment.id", ondelete="CASCADE"),
        nullable=False,
    )
    order_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("order_order.id", ondelete="SET NULL"),
        nullable=True,
    )
    successful: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    reason: Mapped[str | None] = mapped_column(String(64), nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    installment: Mapped[Installment] = relationship(
        "renewals.business.subscription.models.Installment",
        back_populates="details",
    )
    order: Mapped[Order | None] = relationship(Order)

    __table_args__ = (Index("ix_subscription_installment_detail_installment", "installment_id", "created_at"),)
