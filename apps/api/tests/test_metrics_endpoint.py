from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY
from sqlalchemy.orm import Session

from renewals.core.auth import AuthUser, get_current_user
from renewals.core.config import get_settings
from renewals.core.database import get_db
from renewals.main import app


@pytest.fixture(autouse=True)
def configure_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    monkeypatch.setenv("METRICS_ENABLED", "true")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    def override_auth_user() -> AuthUser:
        return AuthUser(
            sub="metrics-admin",
            roles=["system.metrics.read", "subscriptions.installments.process"],
        )

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_auth_user
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


def test_metrics_endpoint_exposes_http_and_installment_metrics(client: TestClient, seed, db_session: Session) -> None:
    customer = seed.customer(ship_address=seed.address())
    seed.payment_source(customer, is_default=True)
    root = seed.root_order(customer)
    shipped = seed.installment(customer, seed.variant(), root_order=root)
    sold_out = seed.installment(customer, seed.variant(on_hand=0), root_order=root)
    db_session.commit()

    succeeded_before = _sample("installments_processed_total", {"outcome": "succeeded"})
    out_of_stock_before = _sample("installments_processed_total", {"outcome": "out_of_stock"})
    completed_runs_before = _sample("consolidated_runs_total", {"status": "completed"})

    assert client.get("/health").status_code == 200
    response = client.post(
        "/subscriptions/installments/process",
        json={"installment_ids": [str(shipped.id), str(sold_out.id)]},
    )
    assert response.status_code == 200

    assert _sample("installments_processed_total", {"outcome": "succeeded"}) == succeeded_before + 1
    assert _sample("installments_processed_total", {"outcome": "out_of_stock"}) == out_of_stock_before + 1
    assert _sample("consolidated_runs_total", {"status": "completed"}) == completed_runs_before + 1

    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    body = metrics.text
    assert "http_requests_total" in body
    assert "installments_processed_total" in body
    assert "consolidated_run_duration_seconds" in body
    assert 'path="/health"' in body
    assert 'path="/subscriptions/installments/process"' in body


def test_checkout_halts_are_counted(client: TestClient, seed, db_session: Session) -> None:
    customer = seed.customer()
    installment = seed.installment(customer, seed.variant(), root_order=seed.root_order(customer))
    db_session.commit()
    before = _sample("checkout_halts_total", {"state": "address", "reason": "address_missing"})

    response = client.post(
        "/subscriptions/installments/process",
        json={"installment_ids": [str(installment.id)]},
    )

    assert response.status_code == 200
    assert _sample("checkout_halts_total", {"state": "address", "reason": "address_missing"}) == before + 1


def test_metrics_require_role(client: TestClient) -> None:
    app.dependency_overrides[get_current_user] = lambda: AuthUser(sub="someone", roles=[])
    assert client.get("/metrics").status_code == 403


def test_metrics_hidden_when_disabled(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("METRICS_ENABLED", "false")
    get_settings.cache_clear()
    assert client.get("/metrics").status_code == 404
