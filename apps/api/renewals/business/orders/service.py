from __future__ import annotations

import uuid
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from renewals.business.orders.models import Order, ShippingMethod

CENTS = Decimal("0.01")


def q(value: Decimal | int) -> Decimal:
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def next_order_number() -> str:
    """Random 64-bit order number, not derived from existing rows."""
    return f"R{uuid.uuid4().hex[:16].upper()}"


def next_shipment_number() -> str:
    return f"H{uuid.uuid4().int % 10**11:011d}"


def update_totals(order: Order, tax_rate: Decimal = Decimal("0")) -> Order:
    item_total = sum((line_item.amount for line_item in order.line_items), Decimal("0"))
    shipment_total = sum((Decimal(shipment.cost) for shipment in order.shipments), Decimal("0"))

    order.item_total = q(item_total)
    order.shipment_total = q(shipment_total)
    order.additional_tax_total = q(item_total * Decimal(tax_rate))
    order.total = q(order.item_total + order.shipment_total + order.additional_tax_total)
    return order


def shipping_rates_for(session: Session, order: Order) -> list[ShippingMethod]:
    """Active shipping methods usable by the order's store, cheapest first."""
    stmt = select(ShippingMethod).where(ShippingMethod.is_active.is_(True))
    if order.store_id is not None:
        stmt = stmt.where(or_(ShippingMethod.store_id.is_(None), ShippingMethod.store_id == order.store_id))
    else:
        stmt = stmt.where(ShippingMethod.store_id.is_(None))
    return list(session.scalars(stmt.order_by(ShippingMethod.cost.asc(), ShippingMethod.name.asc())).all())
