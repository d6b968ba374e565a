from __future__ import annotations

import itertools
from collections.abc import Generator
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from renewals import events
from renewals.business.catalog.models import StockItem, Variant
from renewals.business.customers.models import Address, Customer, PaymentSource
from renewals.business.orders.models import LineItem, Order, Payment, ShippingMethod, Store
from renewals.business.subscription.models import Installment, Subscription, SubscriptionLineItem
from renewals.core.config import get_settings
from renewals.core.database import Base


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def reset_globals() -> Generator[None, None, None]:
    events.published_events.clear()
    get_settings.cache_clear()
    yield
    events.published_events.clear()
    get_settings.cache_clear()


@dataclass
class Seeder:
    session: Session
    store: Store
    shipping_method: ShippingMethod
    _counter: itertools.count = field(default_factory=lambda: itertools.count(1))

    def _next(self) -> int:
        return next(self._counter)

    def address(self, city: str = "Springfield") -> Address:
        address = Address(
            firstname="Sam",
            lastname="Rivera",
            address1=f"{self._next()} Main St",
            city=city,
            zipcode="12345",
            state_code="IL",
            country_code="US",
        )
        self.session.add(address)
        self.session.flush()
        return address

    def customer(self, *, ship_address: Address | None = None, email: str | None = None) -> Customer:
        customer = Customer(email=email or f"customer{self._next()}@example.com", ship_address=ship_address)
        self.session.add(customer)
        self.session.flush()
        return customer

    def payment_source(
        self,
        customer: Customer | None,
        *,
        is_default: bool = False,
        profile_id: str = "CUS-OK",
        expiry_year: int | None = None,
    ) -> PaymentSource:
        source = PaymentSource(
            customer=customer,
            gateway_customer_profile_id=f"{profile_id}-{self._next()}",
            brand="visa",
            last_digits="4242",
            expiry_month=12 if expiry_year is not None else None,
            expiry_year=expiry_year,
            is_default=is_default,
        )
        self.session.add(source)
        self.session.flush()
        return source

    def variant(
        self,
        *,
        price: str = "10.00",
        on_hand: int = 10,
        backorderable: bool = False,
        track_inventory: bool = True,
    ) -> Variant:
        number = self._next()
        variant = Variant(
            sku=f"SKU-{number}",
            name=f"Refill {number}",
            price=Decimal(price),
            track_inventory=track_inventory,
        )
        variant.stock_items.append(StockItem(location_code="main", count_on_hand=on_hand, backorderable=backorderable))
        self.session.add(variant)
        self.session.flush()
        return variant

    def root_order(
        self,
        customer: Customer,
        *,
        ship_address: Address | None = None,
        payment_source: PaymentSource | None = None,
        created_at: datetime | None = None,
        channel: str = "storefront",
    ) -> Order:
        order = Order(
            number=f"ORIG-{self._next()}",
            customer=customer,
            store=self.store,
            email=customer.email,
            currency="USD",
            channel=channel,
            state="complete",
            ship_address=ship_address,
            bill_address=ship_address,
            created_at=created_at or datetime.now(timezone.utc),
        )
        if payment_source is not None:
            order.payments.append(
                Payment(source=payment_source, payment_method="credit_card", amount=Decimal("10.00"), state="completed")
            )
        self.session.add(order)
        self.session.flush()
        return order

    def installment(
        self,
        customer: Customer,
        variant: Variant,
        *,
        root_order: Order,
        quantity: int = 1,
        unit_price: str | None = None,
    ) -> Installment:
        price = Decimal(unit_price) if unit_price is not None else Decimal(variant.price)
        origin = LineItem(
            variant=variant,
            quantity=quantity,
            price=price,
            position=len(root_order.line_items) + 1,
        )
        root_order.line_items.append(origin)

        subscription = Subscription(customer=customer, interval_length=1, interval_units="MONTH", state="ACTIVE")
        subscription.line_item = SubscriptionLineItem(
            subscribable_id=variant.id,
            quantity=quantity,
            unit_price=price,
            origin_line_item=origin,
        )
        installment = Installment(subscription=subscription, actionable_date=date.today())
        self.session.add_all([subscription, installment])
        self.session.flush()
        return installment


@pytest.fixture()
def seed(db_session: Session) -> Seeder:
    store = Store(code="main", name="Main Store", default_currency="USD")
    shipping_method = ShippingMethod(code="ground", name="Ground", cost=Decimal("5.00"), is_active=True)
    db_session.add_all([store, shipping_method])
    db_session.flush()
    seeder = Seeder(session=db_session, store=store, shipping_method=shipping_method)
    db_session.commit()
    return seeder
