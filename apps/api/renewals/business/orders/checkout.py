"""Checkout state machine for orders built outside the storefront.

The driver walks an order through ``cart -> address -> delivery -> payment ->
confirm -> complete`` in a single call. Each transition validates its own
precondition and is committed as soon as it succeeds, so a halt leaves every
earlier step (shipments, payments) in place for inspection or a later retry.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from sqlalchemy.orm import Session

from renewals.business.catalog.inventory import InventoryQuery, unstock
from renewals.business.orders.models import Order, Payment, Shipment
from renewals.business.orders.service import next_shipment_number, shipping_rates_for, update_totals
from renewals.business.payments.gateway import BogusGateway, PaymentGateway
from renewals.business.subscription.errors import CheckoutError
from renewals.metrics import observe_checkout_halt


CHECKOUT_STEPS: tuple[str, ...] = ("cart", "address", "delivery", "payment", "confirm", "complete")
PAYMENT_FAILURE_REASONS = frozenset({"payment_source_missing", "payment_source_invalid", "payment_failed"})

logger = logging.getLogger("renewals.checkout")
tracer = trace.get_tracer("renewals.checkout")


@dataclass(slots=True)
class CheckoutResult:
    order: Order
    completed: bool
    halted_state: str | None = None
    reason: str | None = None

    @property
    def payment_failure(self) -> bool:
        return self.reason in PAYMENT_FAILURE_REASONS


@dataclass(slots=True)
class CheckoutDriver:
    inventory: InventoryQuery
    gateway: PaymentGateway = field(default_factory=BogusGateway)
    tax_rate: Decimal = Decimal("0")

    def run(self, session: Session, order: Order) -> CheckoutResult:
        if order.state not in CHECKOUT_STEPS:
            raise ValueError(f"order {order.number} is in unknown checkout state '{order.state}'")

        with tracer.start_as_current_span("checkout.run") as span:
            span.set_attribute("order_id", str(order.id))
            span.set_attribute("order_number", order.number)
            span.set_attribute("start_state", order.state)

            try:
                while order.state != "complete":
                    self._advance(session, order)
            except CheckoutError as exc:
                order.checkout_error = exc.reason
                session.add(order)
                session.commit()

                span.set_attribute("halted_state", exc.state)
                span.set_status(Status(StatusCode.ERROR, str(exc)))
                observe_checkout_halt(exc.state, exc.reason)
                logger.warning(
                    "checkout.halted",
                    extra={
                        "order_id": str(order.id),
                        "order_number": order.number,
                        "state": exc.state,
                        "reason": exc.reason,
                        "error": exc.detail,
                    },
                )
                return CheckoutResult(order=order, completed=False, halted_state=exc.state, reason=exc.reason)

            logger.info(
                "checkout.completed",
                extra={"order_id": str(order.id), "order_number": order.number, "state": order.state},
            )
            return CheckoutResult(order=order, completed=True)

    def _advance(self, session: Session, order: Order) -> None:
        current = order.state
        transitions: dict[str, Callable[[Session, Order], None]] = {
            "cart": self._leave_cart,
            "address": self._leave_address,
            "delivery": self._leave_delivery,
            "payment": self._leave_payment,
            "confirm": self._leave_confirm,
        }
        transitions[current](session, order)

        order.state = CHECKOUT_STEPS[CHECKOUT_STEPS.index(current) + 1]
        order.checkout_error = None
        session.add(order)
        session.commit()

    def _leave_cart(self, session: Session, order: Order) -> None:
        if not order.line_items:
            raise CheckoutError("cart", "empty_cart")
        update_totals(order, self.tax_rate)

    def _leave_address(self, session: Session, order: Order) -> None:
        if order.ship_address is None:
            raise CheckoutError("address", "address_missing")
        if order.bill_address is None:
            order.bill_address = order.ship_address

    def _leave_delivery(self, session: Session, order: Order) -> None:
        if not order.shipments:
            rates = shipping_rates_for(session, order)
            if not rates:
                raise CheckoutError("delivery", "no_shipping_rates")
            method = rates[0]
            order.shipments.append(
                Shipment(shipping_method=method, number=next_shipment_number(), cost=method.cost, state="pending")
            )
        update_totals(order, self.tax_rate)

    def _leave_payment(self, session: Session, order: Order) -> None:
        update_totals(order, self.tax_rate)
        if Decimal(order.total) <= Decimal("0"):
            # nothing to collect
            return

        pending = [payment for payment in order.payments if payment.state == "checkout"]
        if pending:
            pending[-1].amount = order.total
        else:
            source = order.payment_source
            if source is None:
                raise CheckoutError("payment", "payment_source_missing")
            if source.is_expired():
                raise CheckoutError("payment", "payment_source_invalid", "payment source has expired")
            order.payments.append(
                Payment(source=source, payment_method=source.payment_method, amount=order.total, state="checkout")
            )
        order.payment_state = "balance_due"

    def _leave_confirm(self, session: Session, order: Order) -> None:
        requested: dict[uuid.UUID, int] = {}
        for line_item in order.line_items:
            requested[line_item.variant_id] = requested.get(line_item.variant_id, 0) + line_item.quantity
        for variant_id, quantity in requested.items():
            if not self.inventory.is_available(variant_id, quantity):
                raise CheckoutError("confirm", "insufficient_stock", f"variant {variant_id}")

        if Decimal(order.total) > Decimal("0"):
            pending = [payment for payment in order.payments if payment.state == "checkout"]
            if not pending:
                raise CheckoutError("confirm", "payment_source_missing")
            for payment in pending:
                self._capture(session, order, payment)

        for line_item in order.line_items:
            unstock(session, line_item.variant_id, line_item.quantity)
        for shipment in order.shipments:
            shipment.state = "ready"
        order.payment_state = "paid"
        order.completed_at = datetime.now(timezone.utc)

    def _capture(self, session: Session, order: Order, payment: Payment) -> None:
        if payment.source is None:
            payment.state = "invalid"
            session.add(payment)
            raise CheckoutError("confirm", "payment_source_missing")

        result = self.gateway.capture(payment.source, Decimal(payment.amount), currency=order.currency)
        payment.response_code = result.response_code
        if not result.success:
            payment.state = "failed"
            order.payment_state = "failed"
            session.add(payment)
            raise CheckoutError("confirm", "payment_failed", result.message)
        payment.state = "completed"
        session.add(payment)
