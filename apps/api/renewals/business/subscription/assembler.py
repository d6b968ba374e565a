from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.orm import Session

from renewals.business.customers.models import Customer
from renewals.business.orders.models import LineItem, Order
from renewals.business.orders.service import next_order_number
from renewals.business.subscription.errors import NoAddressAvailable
from renewals.business.subscription.models import Installment
from renewals.business.subscription.resolvers import resolve_payment_source, resolve_ship_address


logger = logging.getLogger("renewals.installments")


@dataclass(slots=True)
class OrderAssembler:
    """Builds the target order of a consolidation run; never touches the root order."""

    def create_order(self, session: Session, customer: Customer, root_order: Order) -> Order:
        """Open a fresh cart for the customer in the root order's store context."""
        order = Order(
            number=next_order_number(),
            customer=customer,
            email=customer.email,
            store_id=root_order.store_id,
            currency=root_order.currency,
            channel=root_order.channel,
            state="cart",
        )
        session.add(order)
        session.flush()
        return order

    def add_line_items(self, order: Order, installments: Sequence[Installment]) -> Order:
        position = len(order.line_items)
        for installment in installments:
            subscription_line_item = installment.line_item
            position += 1
            order.line_items.append(
                LineItem(
                    variant_id=subscription_line_item.subscribable_id,
                    quantity=subscription_line_item.quantity,
                    price=subscription_line_item.unit_price,
                    position=position,
                )
            )
        return order

    def apply_defaults(self, order: Order, customer: Customer, root_order: Order) -> Order:
        try:
            address = resolve_ship_address(customer, root_order)
        except NoAddressAvailable as exc:
            # checkout halts at the address step and reports it
            logger.warning("order.address_unresolved", extra={"order_id": str(order.id), "error": str(exc)})
        else:
            order.ship_address = address
            order.bill_address = address

        order.payment_source = resolve_payment_source(customer, root_order)
        return order
