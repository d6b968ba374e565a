from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from renewals.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Address(Base):
    __tablename__ = "customer_address"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    firstname: Mapped[str] = mapped_column(String(128), nullable=False)
    lastname: Mapped[str] = mapped_column(String(128), nullable=False)
    address1: Mapped[str] = mapped_column(String(255), nullable=False)
    address2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str] = mapped_column(String(128), nullable=False)
    zipcode: Mapped[str] = mapped_column(String(32), nullable=False)
    state_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    country_code: Mapped[str] = mapped_column(String(2), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class Customer(Base):
    __tablename__ = "customer"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    ship_address_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("customer_address.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    ship_address: Mapped[Address | None] = relationship("renewals.business.customers.models.Address")
    payment_sources: Mapped[list[PaymentSource]] = relationship(
        "renewals.business.customers.models.PaymentSource",
        back_populates="customer",
        order_by="PaymentSource.created_at",
    )

    @property
    def default_payment_source(self) -> PaymentSource | None:
        for source in self.payment_sources:
            if source.is_default:
                return source
        return None


class PaymentSource(Base):
    """A stored, reusable payment source from the customer's wallet."""

    __tablename__ = "customer_payment_source"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    customer_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("customer.id", ondelete="CASCADE"),
        nullable=True,
    )
    payment_method: Mapped[str] = mapped_column(String(32), nullable=False, default="credit_card", server_default="credit_card")
    gateway_customer_profile_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    brand: Mapped[str | None] = mapped_column(String(32), nullable=True)
    last_digits: Mapped[str | None] = mapped_column(String(4), nullable=True)
    expiry_month: Mapped[int | None] = mapped_column(Integer, nullable=True)
    expiry_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    customer: Mapped[Customer | None] = relationship(
        "renewals.business.customers.models.Customer",
        back_populates="payment_sources",
    )

    __table_args__ = (Index("ix_customer_payment_source_customer", "customer_id"),)

    def is_expired(self, today: date | None = None) -> bool:
        if self.expiry_month is None or self.expiry_year is None:
            return False
        today = today or date.today()
        return (self.expiry_year, self.expiry_month) < (today.year, today.month)
