from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from renewals.context import get_correlation_id, get_customer_id
from renewals.core.events import event_bus

INSTALLMENT_SUCCEEDED = "installment.succeeded"
INSTALLMENT_OUT_OF_STOCK = "installment.out_of_stock"
INSTALLMENT_PAYMENT_FAILED = "installment.payment_failed"
INSTALLMENT_FAILED = "installment.failed"

INSTALLMENT_EVENT_TYPES = (
    INSTALLMENT_SUCCEEDED,
    INSTALLMENT_OUT_OF_STOCK,
    INSTALLMENT_PAYMENT_FAILED,
    INSTALLMENT_FAILED,
)

published_events: list[dict[str, Any]] = []


def publish(envelope: dict[str, Any]) -> None:
    if envelope.get("correlation_id") is None:
        envelope["correlation_id"] = get_correlation_id()
    if envelope.get("customer_id") is None:
        customer_id = get_customer_id()
        if customer_id is not None:
            envelope["customer_id"] = customer_id
    envelope.setdefault("occurred_at", datetime.now(timezone.utc).isoformat())

    published_events.append(envelope)
    event_type = envelope.get("event_type")
    if isinstance(event_type, str) and event_type:
        event_bus.publish(event_type, envelope)
