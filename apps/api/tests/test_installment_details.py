from __future__ import annotations

from datetime import date, timedelta

from sqlalchemy.orm import Session

from renewals import events
from renewals.business.subscription.details import (
    CHECKOUT_FAILED,
    OUT_OF_STOCK,
    PAYMENT_FAILED,
    InstallmentDetailRecorder,
    translate,
)
from renewals.business.subscription.dispatchers import log_installment_outcome, register_dispatchers
from renewals.core.events import InProcessEventBus


def test_translate_known_and_unknown_reasons() -> None:
    assert "out of stock" in translate(OUT_OF_STOCK)
    assert "payment" in translate(PAYMENT_FAILED)
    assert "could not be completed" in translate(CHECKOUT_FAILED)
    assert translate("gift_card_exhausted") == "gift card exhausted"


def test_recorder_reschedules_and_publishes(seed, db_session: Session) -> None:
    customer = seed.customer()
    installment = seed.installment(customer, seed.variant(), root_order=seed.root_order(customer))
    db_session.commit()

    recorder = InstallmentDetailRecorder(reprocessing_interval=timedelta(days=3))
    detail = recorder.out_of_stock(db_session, installment)
    db_session.commit()

    assert detail.installment_id == installment.id
    assert detail.successful is False
    assert detail.reason == OUT_OF_STOCK
    assert installment.actionable_date == date.today() + timedelta(days=3)
    assert installment.details[-1].id == detail.id

    assert len(events.published_events) == 1
    envelope = events.published_events[0]
    assert envelope["event_type"] == "installment.out_of_stock"
    assert envelope["installment_id"] == str(installment.id)
    assert envelope["customer_id"] == str(customer.id)
    assert envelope["order_id"] is None
    assert envelope["reason"] == OUT_OF_STOCK
    assert envelope["occurred_at"]


def test_register_dispatchers_is_idempotent() -> None:
    bus = InProcessEventBus()

    register_dispatchers(bus)
    register_dispatchers(bus)

    for event_name in events.INSTALLMENT_EVENT_TYPES:
        assert bus.subscribers(event_name) == [log_installment_outcome]
