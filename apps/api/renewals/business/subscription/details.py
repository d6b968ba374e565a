from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy.orm import Session

from renewals import events
from renewals.business.orders.models import Order
from renewals.business.subscription.models import Installment, InstallmentDetail
from renewals.metrics import observe_installment_outcome


OUT_OF_STOCK = "out_of_stock"
PAYMENT_FAILED = "payment_failed"
CHECKOUT_FAILED = "checkout_failed"

MESSAGES: dict[str, str] = {
    OUT_OF_STOCK: "This item is out of stock and was left out of your subscription order.",
    PAYMENT_FAILED: "We could not collect payment for your subscription order.",
    CHECKOUT_FAILED: "Your subscription order could not be completed.",
}

logger = logging.getLogger("renewals.installments")


def translate(reason: str) -> str:
    return MESSAGES.get(reason, reason.replace("_", " "))


@dataclass(slots=True)
class InstallmentDetailRecorder:
    """Writes installment outcomes and reschedules failed installments."""

    reprocessing_interval: timedelta | None = timedelta(days=1)

    def out_of_stock(self, session: Session, installment: Installment) -> InstallmentDetail:
        detail = self._record_failure(session, installment, OUT_OF_STOCK, order=None)
        self._publish(events.INSTALLMENT_OUT_OF_STOCK, installment, detail, order=None)
        return detail

    def payment_failed(self, session: Session, installment: Installment, order: Order) -> InstallmentDetail:
        detail = self._record_failure(session, installment, PAYMENT_FAILED, order=order)
        self._publish(events.INSTALLMENT_PAYMENT_FAILED, installment, detail, order=order)
        return detail

    def checkout_failed(self, session: Session, installment: Installment, order: Order) -> InstallmentDetail:
        detail = self._record_failure(session, installment, CHECKOUT_FAILED, order=order)
        self._publish(events.INSTALLMENT_FAILED, installment, detail, order=order)
        return detail

    def succeeded(self, session: Session, installment: Installment, order: Order) -> None:
        # success is evidenced by the completed order's line items, no detail row
        installment.actionable_date = None
        session.add(installment)
        observe_installment_outcome("succeeded")
        self._publish(events.INSTALLMENT_SUCCEEDED, installment, None, order=order)

    def _record_failure(
        self,
        session: Session,
        installment: Installment,
        reason: str,
        *,
        order: Order | None,
    ) -> InstallmentDetail:
        detail = InstallmentDetail(
            installment=installment,
            order=order,
            successful=False,
            reason=reason,
            message=translate(reason),
        )
        session.add(detail)

        if self.reprocessing_interval is not None:
            installment.actionable_date = date.today() + self.reprocessing_interval
            session.add(installment)

        observe_installment_outcome(reason)
        logger.info(
            "installment.failed",
            extra={
                "installment_id": str(installment.id),
                "subscription_id": str(installment.subscription_id),
                "order_id": str(order.id) if order is not None else None,
                "reason": reason,
            },
        )
        return detail

    @staticmethod
    def _publish(
        event_type: str,
        installment: Installment,
        detail: InstallmentDetail | None,
        *,
        order: Order | None,
    ) -> None:
        envelope: dict[str, object] = {
            "event_type": event_type,
            "installment_id": str(installment.id),
            "subscription_id": str(installment.subscription_id),
            "customer_id": str(installment.customer_id),
            "order_id": str(order.id) if order is not None else None,
        }
        if detail is not None:
            envelope["reason"] = detail.reason
            envelope["message"] = detail.message
        events.publish(envelope)
