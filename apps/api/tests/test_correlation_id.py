from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

from renewals.main import app
from renewals.middleware.correlation_id import resolve_correlation_id


def test_generated_correlation_id_returned_in_header() -> None:
    with TestClient(app) as client:
        response = client.get("/health")
    assert response.status_code == 200
    header_value = response.headers.get("x-correlation-id")
    assert header_value
    assert uuid.UUID(header_value)


def test_correlation_id_respected_when_provided() -> None:
    with TestClient(app) as client:
        response = client.get("/health", headers={"X-Correlation-Id": "abc-123"})
    assert response.headers.get("x-correlation-id") == "abc-123"


def test_unusable_correlation_id_is_replaced() -> None:
    assert resolve_correlation_id("ok-id:1.2_3") == "ok-id:1.2_3"

    for raw in (None, "", "has spaces", "x" * 129):
        generated = resolve_correlation_id(raw)
        assert generated != raw
        assert uuid.UUID(generated)
