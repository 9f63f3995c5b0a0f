"""Integration tests for API endpoints"""

from decimal import Decimal
from fastapi.testclient import TestClient


def money(value) -> Decimal:
    return Decimal(str(value))


def start_and_decide(client: TestClient, application_id: str = "app-1") -> dict:
    response = client.post(f"/v1/approvals/{application_id}/analysis")
    assert response.status_code == 202
    response = client.get(f"/v1/approvals/{application_id}/decision")
    assert response.status_code == 200
    return response.json()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "loan_approval_analysis_total" in response.text


def test_request_id_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_start_analysis(client: TestClient):
    response = client.post("/v1/approvals/app-1/analysis")

    assert response.status_code == 202
    data = response.json()
    assert data["application_id"] == "app-1"
    assert data["applicant_first_name"] == "Maria"
    assert data["analysis_state"] in ("analyzing", "decisioned")


def test_decision_scenario_a(client: TestClient):
    """1000 requested → 900 approved with four rounded plans"""
    data = start_and_decide(client)

    assert data["signal"] == "decision-ready"
    assert money(data["approved_amount"]) == Decimal("900")
    assert [(o["tenor_months"], money(o["monthly_payment"])) for o in data["options"]] == [
        (3, Decimal("321.00")),
        (6, Decimal("169.50")),
        (9, Decimal("120.00")),
        (12, Decimal("97.50")),
    ]


def test_decision_scenario_b(client: TestClient):
    data = start_and_decide(client, "app-small")

    assert money(data["approved_amount"]) == Decimal("50")
    assert money(data["options"][0]["monthly_payment"]) == Decimal("17.83")


def test_missing_application_redirects(client: TestClient):
    response = client.post("/v1/approvals/unknown/analysis")

    assert response.status_code == 404
    detail = response.json()["detail"]
    assert detail["signal"] == "redirect-required"
    assert detail["redirect_to"] == "/simular"


def test_unknown_session_redirects(client: TestClient):
    response = client.put("/v1/approvals/app-1/selection", json={"tenor_months": 3})

    assert response.status_code == 404
    assert response.json()["detail"]["signal"] == "redirect-required"


def test_selection_returns_schedule(client: TestClient):
    start_and_decide(client)

    client.put("/v1/approvals/app-1/selection", json={"tenor_months": 12})
    response = client.put("/v1/approvals/app-1/selection", json={"tenor_months": 6})

    assert response.status_code == 200
    data = response.json()
    assert data["signal"] == "schedule-ready"
    assert data["tenor_months"] == 6
    assert [entry["installment_number"] for entry in data["installments"]] == [1, 2, 3, 4, 5, 6]
    assert all(money(entry["amount"]) == Decimal("169.50") for entry in data["installments"])


def test_selection_unsupported_tenor(client: TestClient):
    start_and_decide(client)

    response = client.put("/v1/approvals/app-1/selection", json={"tenor_months": 5})

    assert response.status_code == 422


def test_confirm_without_selection(client: TestClient, stores):
    start_and_decide(client)

    response = client.post("/v1/approvals/app-1/confirmation")

    assert response.status_code == 422
    assert stores["app-1"].submissions == []


def test_confirm_selected_plan(client: TestClient, stores):
    start_and_decide(client)
    client.put("/v1/approvals/app-1/selection", json={"tenor_months": 9})

    response = client.post("/v1/approvals/app-1/confirmation")

    assert response.status_code == 200
    data = response.json()
    assert data["signal"] == "confirmed"
    assert data["status"] == "approved"
    assert data["next_step"] == "/documentos"
    assert data["installments_option"] == 9
    assert money(data["total_with_interest"]) == Decimal("1080.00")
    assert len(stores["app-1"].submissions) == 1

    # Confirmed is terminal: the session is released and later lookups redirect
    assert "app-1" not in client.app.state.sessions
    response = client.get("/v1/approvals/app-1")
    assert response.status_code == 404
    assert response.json()["detail"]["signal"] == "redirect-required"


def test_confirm_store_failure_allows_retry(client: TestClient, stores):
    start_and_decide(client)
    client.put("/v1/approvals/app-1/selection", json={"tenor_months": 3})
    stores["app-1"].failure = RuntimeError("store down")

    response = client.post("/v1/approvals/app-1/confirmation")
    assert response.status_code == 502
    assert client.get("/v1/approvals/app-1").json()["approval_state"] == "selected"

    stores["app-1"].failure = None
    response = client.post("/v1/approvals/app-1/confirmation")
    assert response.status_code == 200


def test_abandon_clears_application(client: TestClient, stores):
    client.post("/v1/approvals/app-1/analysis")

    response = client.delete("/v1/approvals/app-1")

    assert response.status_code == 204
    assert stores["app-1"].application_id is None
    assert client.get("/v1/approvals/app-1").status_code == 404


def test_update_in_flight_rejects_selection_and_confirmation(client: TestClient, stores):
    """While the store reports an update in flight, both actions answer 409 and nothing is sent"""
    start_and_decide(client)
    client.put("/v1/approvals/app-1/selection", json={"tenor_months": 3})
    stores["app-1"].loading = True

    assert client.put("/v1/approvals/app-1/selection", json={"tenor_months": 6}).status_code == 409
    assert client.post("/v1/approvals/app-1/confirmation").status_code == 409
    assert client.get("/v1/approvals/app-1").json()["approval_state"] == "submitting"
    assert stores["app-1"].submissions == []

    stores["app-1"].loading = False
    response = client.post("/v1/approvals/app-1/confirmation")

    assert response.status_code == 200
    assert response.json()["installments_option"] == 3


def test_failed_confirmation_keeps_session(client: TestClient, stores):
    start_and_decide(client)
    client.put("/v1/approvals/app-1/selection", json={"tenor_months": 3})
    stores["app-1"].failure = RuntimeError("store down")

    client.post("/v1/approvals/app-1/confirmation")

    assert "app-1" in client.app.state.sessions
