from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from renewals.business.customers.models import PaymentSource


logger = logging.getLogger("renewals.payments")


@dataclass(frozen=True, slots=True)
class CaptureResult:
    success: bool
    response_code: str
    message: str = ""


class PaymentGateway(Protocol):
    def capture(self, source: PaymentSource, amount: Decimal, *, currency: str) -> CaptureResult: ...


class BogusGateway:
    """In-process gateway for development and tests.

    Sources whose gateway profile id starts with ``FAIL`` are declined.
    """

    name = "bogus"

    def capture(self, source: PaymentSource, amount: Decimal, *, currency: str) -> CaptureResult:
        profile_id = source.gateway_customer_profile_id or ""
        if profile_id.upper().startswith("FAIL"):
            logger.info("payment.declined", extra={"status": "declined", "reason": "bogus_decline"})
            return CaptureResult(success=False, response_code="declined", message="Bogus gateway declined the source")
        return CaptureResult(success=True, response_code=f"BOGUS-{uuid.uuid4().hex[:12].upper()}")
