from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Numeric, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from renewals.business.catalog.models import Variant
from renewals.business.customers.models import Address, Customer, PaymentSource
from renewals.core.database import Base


INVALID_PAYMENT_STATES = frozenset({"failed", "invalid"})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Store(Base):
    __tablename__ = "order_store"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    default_currency: Mapped[str] = mapped_column(String(16), nullable=False, default="USD", server_default="USD")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (UniqueConstraint("code", name="uq_order_store_code"),)


class ShippingMethod(Base):
    __tablename__ = "order_shipping_method"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    store_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("order_store.id", ondelete="CASCADE"),
        nullable=True,
    )
    code: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class Order(Base):
    __tablename__ = "order_order"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    number: Mapped[str] = mapped_column(String(32), nullable=False)
    customer_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("customer.id", ondelete="SET NULL"),
        nullable=True,
    )
    store_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("order_store.id", ondelete="SET NULL"),
        nullable=True,
    )
    channel: Mapped[str] = mapped_column(String(64), nullable=False, default="storefront", server_default="storefront")
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    currency: Mapped[str] = mapped_column(String(16), nullable=False, default="USD", server_default="USD")
    state: Mapped[str] = mapped_column(String(32), nullable=False, default="cart", server_default="cart")
    ship_address_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), ForeignKey("customer_address.id"), nullable=True)
    bill_address_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), ForeignKey("customer_address.id"), nullable=True)
    payment_source_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("customer_payment_source.id"),
        nullable=True,
    )
    item_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    shipment_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    additional_tax_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    payment_state: Mapped[str | None] = mapped_column(String(32), nullable=True)
    checkout_error: Mapped[str | None] = mapped_column(String(64), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    customer: Mapped[Customer | None] = relationship(Customer)
    store: Mapped[Store | None] = relationship(Store)
    ship_address: Mapped[Address | None] = relationship(Address, foreign_keys=[ship_address_id])
    bill_address: Mapped[Address | None] = relationship(Address, foreign_keys=[bill_address_id])
    payment_source: Mapped[PaymentSource | None] = relationship(PaymentSource)
    line_items: Mapped[list[LineItem]] = relationship(
        "renewals.business.orders.models.LineItem",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="LineItem.position",
    )
    shipments: Mapped[list[Shipment]] = relationship(
        "renewals.business.orders.models.Shipment",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    payments: Mapped[list[Payment]] = relationship(
        "renewals.business.orders.models.Payment",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Payment.created_at",
    )

    __table_args__ = (
        UniqueConstraint("number", name="uq_order_order_number"),
        Index("ix_order_order_customer", "customer_id", "created_at"),
    )

    @property
    def valid_payments(self) -> list[Payment]:
        return [payment for payment in self.payments if payment.state not in INVALID_PAYMENT_STATES]

    @property
    def is_complete(self) -> bool:
        return self.state == "complete"


class LineItem(Base):
    __tablename__ = "order_line_item"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("order_order.id", ondelete="CASCADE"), nullable=False)
    variant_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("catalog_variant.id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    order: Mapped[Order] = relationship("renewals.business.orders.models.Order", back_populates="line_items")
    variant: Mapped[Variant] = relationship(Variant)

    __table_args__ = (Index("ix_order_line_item_order", "order_id"),)

    @property
    def amount(self) -> Decimal:
        return Decimal(self.price) * self.quantity


class Shipment(Base):
    __tablename__ = "order_shipment"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("order_order.id", ondelete="CASCADE"), nullable=False)
    shipping_method_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("order_shipping_method.id"), nullable=False)
    number: Mapped[str] = mapped_column(String(32), nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    state: Mapped[str] = mapped_column(String(32), nullable=False, default="pending", server_default="pending")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    order: Mapped[Order] = relationship("renewals.business.orders.models.Order", back_populates="shipments")
    shipping_method: Mapped[ShippingMethod] = relationship(ShippingMethod)

    __table_args__ = (Index("ix_order_shipment_order", "order_id"),)


class Payment(Base):
    __tablename__ = "order_payment"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), ForeignKey("order_order.id", ondelete="CASCADE"), nullable=False)
    source_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), ForeignKey("customer_payment_source.id"), nullable=True)
    payment_method: Mapped[str] = mapped_column(String(32), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    state: Mapped[str] = mapped_column(String(32), nullable=False, default="checkout", server_default="checkout")
    response_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    order: Mapped[Order] = relationship("renewals.business.orders.models.Order", back_populates="payments")
    source: Mapped[PaymentSource | None] = relationship(PaymentSource)

    __table_args__ = (Index("ix_order_payment_order", "order_id"),)
