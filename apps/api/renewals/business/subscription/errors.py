from __future__ import annotations


class ConsolidationError(Exception):
    """Base error for consolidated installment processing."""


class InvalidInstallmentBatch(ConsolidationError):
    """Raised when the caller hands over a batch that cannot be consolidated."""


class NoRootOrder(InvalidInstallmentBatch):
    """Raised when no origin order can be found to seed the new order."""


class NoAddressAvailable(ConsolidationError):
    """Raised when neither the customer nor the root order has a shipping address."""


class AlreadyProcessed(ConsolidationError):
    """Raised when process() is called a second time on the same consolidation."""


class CheckoutError(ConsolidationError):
    """Raised by a checkout step whose precondition does not hold."""

    def __init__(self, state: str, reason: str, detail: str | None = None) -> None:
        self.state = state
        self.reason = reason
        self.detail = detail
        message = f"checkout halted at '{state}': {reason}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
