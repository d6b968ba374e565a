from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from renewals.business.catalog.inventory import StockItemInventory
from renewals.business.catalog.models import StockItem
from renewals.business.orders.checkout import CheckoutDriver
from renewals.business.orders.models import LineItem, Order
from renewals.business.orders.service import next_order_number


def _cart_order(seed, db_session: Session, lines, *, address=None, source=None) -> Order:
    customer = seed.customer()
    order = Order(
        number=next_order_number(),
        customer=customer,
        email=customer.email,
        store=seed.store,
        currency="USD",
        state="cart",
        ship_address=address,
        payment_source=source,
    )
    for position, (variant, quantity) in enumerate(lines, start=1):
        order.line_items.append(LineItem(variant=variant, quantity=quantity, price=variant.price, position=position))
    db_session.add(order)
    db_session.commit()
    return order


def _on_hand(db_session: Session, variant_id: uuid.UUID) -> int:
    return sum(db_session.scalars(select(StockItem.count_on_hand).where(StockItem.variant_id == variant_id)).all())


def test_checkout_completes_and_captures(seed, db_session: Session) -> None:
    variant = seed.variant(price="10.00", on_hand=5)
    order = _cart_order(seed, db_session, [(variant, 2)], address=seed.address(), source=seed.payment_source(None))

    result = CheckoutDriver(inventory=StockItemInventory(db_session)).run(db_session, order)

    assert result.completed is True
    assert result.reason is None
    db_session.refresh(order)
    assert order.state == "complete"
    assert order.item_total == Decimal("20.00")
    assert order.shipment_total == Decimal("5.00")
    assert order.total == Decimal("25.00")
    assert order.payment_state == "paid"
    assert order.completed_at is not None
    assert order.bill_address_id == order.ship_address_id
    assert [shipment.state for shipment in order.shipments] == ["ready"]
    assert [(payment.state, payment.amount) for payment in order.payments] == [("completed", Decimal("25.00"))]
    assert order.payments[0].response_code.startswith("BOGUS-")
    assert _on_hand(db_session, variant.id) == 3


def test_checkout_applies_tax_rate_to_items(seed, db_session: Session) -> None:
    variant = seed.variant(price="10.00")
    order = _cart_order(seed, db_session, [(variant, 2)], address=seed.address(), source=seed.payment_source(None))

    result = CheckoutDriver(inventory=StockItemInventory(db_session), tax_rate=Decimal("0.0825")).run(db_session, order)

    assert result.completed is True
    assert order.additional_tax_total == Decimal("1.65")
    assert order.total == Decimal("26.65")


def test_empty_cart_halts_in_cart(seed, db_session: Session) -> None:
    order = _cart_order(seed, db_session, [], address=seed.address(), source=seed.payment_source(None))

    result = CheckoutDriver(inventory=StockItemInventory(db_session)).run(db_session, order)

    assert result.completed is False
    assert (result.halted_state, result.reason) == ("cart", "empty_cart")
    assert order.state == "cart"
    assert order.checkout_error == "empty_cart"


def test_missing_address_halts_after_cart_step_is_kept(seed, db_session: Session) -> None:
    variant = seed.variant()
    order = _cart_order(seed, db_session, [(variant, 1)], source=seed.payment_source(None))

    result = CheckoutDriver(inventory=StockItemInventory(db_session)).run(db_session, order)

    assert (result.halted_state, result.reason) == ("address", "address_missing")
    db_session.expire_all()
    persisted = db_session.get(Order, order.id)
    assert persisted.state == "address"
    assert persisted.item_total == Decimal("10.00")


def test_no_shipping_rates_halts_at_delivery(seed, db_session: Session) -> None:
    seed.shipping_method.is_active = False
    variant = seed.variant()
    order = _cart_order(seed, db_session, [(variant, 1)], address=seed.address(), source=seed.payment_source(None))

    result = CheckoutDriver(inventory=StockItemInventory(db_session)).run(db_session, order)

    assert (result.halted_state, result.reason) == ("delivery", "no_shipping_rates")
    assert order.state == "delivery"
    assert order.shipments == []


def test_missing_payment_source_halts_without_rolling_back_shipment(seed, db_session: Session) -> None:
    variant = seed.variant()
    order = _cart_order(seed, db_session, [(variant, 1)], address=seed.address())

    result = CheckoutDriver(inventory=StockItemInventory(db_session)).run(db_session, order)

    assert (result.halted_state, result.reason) == ("payment", "payment_source_missing")
    assert result.payment_failure is True
    db_session.expire_all()
    persisted = db_session.get(Order, order.id)
    assert persisted.state == "payment"
    assert len(persisted.shipments) == 1
    assert persisted.payments == []


def test_expired_payment_source_is_invalid(seed, db_session: Session) -> None:
    variant = seed.variant()
    expired = seed.payment_source(None, expiry_year=2001)
    order = _cart_order(seed, db_session, [(variant, 1)], address=seed.address(), source=expired)

    result = CheckoutDriver(inventory=StockItemInventory(db_session)).run(db_session, order)

    assert (result.halted_state, result.reason) == ("payment", "payment_source_invalid")


def test_declined_capture_marks_payment_failed_and_keeps_stock(seed, db_session: Session) -> None:
    variant = seed.variant(on_hand=4)
    declined = seed.payment_source(None, profile_id="FAIL")
    order = _cart_order(seed, db_session, [(variant, 1)], address=seed.address(), source=declined)

    result = CheckoutDriver(inventory=StockItemInventory(db_session)).run(db_session, order)

    assert (result.halted_state, result.reason) == ("confirm", "payment_failed")
    assert result.payment_failure is True
    db_session.expire_all()
    persisted = db_session.get(Order, order.id)
    assert persisted.state == "confirm"
    assert persisted.payment_state == "failed"
    assert persisted.checkout_error == "payment_failed"
    assert [(payment.state, payment.response_code) for payment in persisted.payments] == [("failed", "declined")]
    assert _on_hand(db_session, variant.id) == 4


def test_confirm_rechecks_stock_across_lines(seed, db_session: Session) -> None:
    variant = seed.variant(on_hand=1)
    order = _cart_order(
        seed,
        db_session,
        [(variant, 1), (variant, 1)],
        address=seed.address(),
        source=seed.payment_source(None),
    )

    result = CheckoutDriver(inventory=StockItemInventory(db_session)).run(db_session, order)

    assert (result.halted_state, result.reason) == ("confirm", "insufficient_stock")
    assert result.payment_failure is False
    assert [payment.state for payment in order.payments] == ["checkout"]
    assert _on_hand(db_session, variant.id) == 1


def test_zero_total_order_completes_without_payment(seed, db_session: Session) -> None:
    seed.shipping_method.cost = Decimal("0")
    variant = seed.variant(price="0.00")
    order = _cart_order(seed, db_session, [(variant, 1)], address=seed.address())

    result = CheckoutDriver(inventory=StockItemInventory(db_session)).run(db_session, order)

    assert result.completed is True
    assert order.total == Decimal("0.00")
    assert order.payments == []


def test_order_numbers_are_unique_and_prefixed() -> None:
    numbers = {next_order_number() for _ in range(500)}

    assert len(numbers) == 500
    assert all(number.startswith("R") and len(number) == 17 for number in numbers)
