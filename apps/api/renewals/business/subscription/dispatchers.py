from __future__ import annotations

import logging

from renewals.core.events import InProcessEventBus, InternalEvent, event_bus
from renewals.events import INSTALLMENT_EVENT_TYPES


logger = logging.getLogger("renewals.dispatch")


def log_installment_outcome(event: InternalEvent) -> None:
    payload = event.payload
    level = logging.INFO if event.name == "installment.succeeded" else logging.WARNING
    logger.log(
        level,
        event.name,
        extra={
            "installment_id": payload.get("installment_id"),
            "subscription_id": payload.get("subscription_id"),
            "order_id": payload.get("order_id"),
            "reason": payload.get("reason"),
        },
    )


def register_dispatchers(bus: InProcessEventBus = event_bus) -> None:
    for event_name in INSTALLMENT_EVENT_TYPES:
        bus.subscribe(event_name, log_installment_outcome)
