from __future__ import annotations

from contextvars import ContextVar, Token

correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
customer_id_var: ContextVar[str | None] = ContextVar("customer_id", default=None)


def set_correlation_id(value: str | None) -> Token[str | None]:
    return correlation_id_var.set(value)


def reset_correlation_id(token: Token[str | None]) -> None:
    correlation_id_var.reset(token)


def get_correlation_id() -> str | None:
    return correlation_id_var.get()


def set_customer_id(value: str | None) -> Token[str | None]:
    """Scope log records and events to the customer whose installments are being billed."""
    return customer_id_var.set(value)


def reset_customer_id(token: Token[str | None]) -> None:
    customer_id_var.reset(token)


def get_customer_id() -> str | None:
    return customer_id_var.get()
