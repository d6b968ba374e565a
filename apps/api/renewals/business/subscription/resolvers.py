"""Default-value resolution for a consolidation run.

Each resolver is a small, priority-ordered function so the fallback order stays
easy to audit and to test without running a checkout.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

from renewals.business.customers.models import Address, Customer, PaymentSource
from renewals.business.orders.models import Order
from renewals.business.subscription.errors import NoAddressAvailable, NoRootOrder
from renewals.business.subscription.models import Installment


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def select_root_order(installments: Sequence[Installment]) -> Order:
    """Most recently created origin order; ties go to the earliest installment."""
    if not installments:
        raise NoRootOrder("cannot select a root order from an empty installment list")

    root_order: Order | None = None
    for installment in installments:
        candidate = installment.subscription.root_order
        if candidate is None:
            continue
        if root_order is None or _as_utc(candidate.created_at) > _as_utc(root_order.created_at):
            root_order = candidate

    if root_order is None:
        raise NoRootOrder("none of the installments' subscriptions has an origin order")
    return root_order


def resolve_ship_address(customer: Customer, root_order: Order | None) -> Address:
    if customer.ship_address is not None:
        return customer.ship_address
    if root_order is not None and root_order.ship_address is not None:
        return root_order.ship_address
    raise NoAddressAvailable(f"customer {customer.id} has no shipping address to fall back on")


def resolve_payment_source(customer: Customer, root_order: Order | None) -> PaymentSource | None:
    default_source = customer.default_payment_source
    if default_source is not None:
        return default_source
    if root_order is None:
        return None

    for payment in sorted(root_order.valid_payments, key=lambda item: _as_utc(item.created_at), reverse=True):
        if payment.source is not None:
            return payment.source
    return None
