"""Integration tests for API endpoints"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def standard_card_payload() -> dict:
    return {
        "card_id": "card-std",
        "name": "Standard Card",
        "credit_limit": 10000,
        "current_balance": 5000,
        "statement_day": 15,
        "due_day": 10,
    }


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "credit-optimizer"}


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "credit_optimizer_calculations_total" in response.text


def test_request_id_header(client: TestClient):
    """Test request ID is generated, or echoed when the caller sends one"""
    assert client.get("/health").headers["X-Request-ID"]

    response = client.get("/health", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"


def test_plan_endpoint(client: TestClient, standard_card_payload: dict):
    """Test POST /v1/plan with the two-payment schedule"""
    response = client.post(
        "/v1/plan",
        json={"card": standard_card_payload, "target_utilization": 0.05, "reference_date": "2024-01-01"},
    )

    assert response.status_code == 200
    data = response.json()
    assert [p["purpose"] for p in data["payments"]] == ["optimization", "balance"]
    assert [p["amount"] for p in data["payments"]] == [4500, 500]
    assert data["payments"][0]["date"] == "2024-01-13"
    assert data["next_due_date"] == "2024-02-10"
    assert data["utilization_status"] == "high"


def test_plan_endpoint_invalid_card(client: TestClient, standard_card_payload: dict):
    """Test card validation errors are 422"""
    standard_card_payload["credit_limit"] = 0
    response = client.post("/v1/plan", json={"card": standard_card_payload})
    assert response.status_code == 422

    standard_card_payload["credit_limit"] = 10000
    standard_card_payload["statement_day"] = 32
    response = client.post("/v1/plan", json={"card": standard_card_payload})
    assert response.status_code == 422


def test_optimize_endpoint(client: TestClient, portfolio_payload: list[dict]):
    response = client.post("/v1/optimize", json={"cards": portfolio_payload, "reference_date": "2024-01-01"})

    assert response.status_code == 200
    data = response.json()
    assert data["total_credit_limit"] == 33000
    assert data["total_current_balance"] == 15000
    assert data["current_overall_utilization"] == pytest.approx(45.45, abs=0.01)
    assert data["cards"][0]["card"]["card_id"] == "card-b"
    assert data["estimated_score_impact"] == {"min": 55, "max": 81}


def test_schedule_endpoint(client: TestClient, portfolio_payload: list[dict]):
    response = client.post(
        "/v1/schedule",
        json={"cards": portfolio_payload, "reference_date": "2024-01-01", "include_statement_dates": True},
    )

    assert response.status_code == 200
    events = response.json()
    assert len(events) == 9
    assert events[0]["date"] == "2024-01-03"
    assert {e["kind"] for e in events} == {"optimization", "balance", "statement"}


def test_score_impact_endpoint(client: TestClient):
    response = client.get("/v1/score-impact", params={"improvement": 0})
    assert response.json() == {"min": 0, "max": 0}

    response = client.get("/v1/score-impact", params={"improvement": 40, "starting_utilization": 45})
    assert response.json() == {"min": 43, "max": 64}


def test_priority_endpoint(client: TestClient, portfolio_payload: list[dict]):
    response = client.post("/v1/priority", json={"cards": portfolio_payload, "reference_date": "2024-01-01"})

    assert response.status_code == 200
    data = response.json()
    assert [s["card_id"] for s in data] == ["card-b", "card-a", "card-c"]
    assert data[0]["rank"] == 1
    assert set(data[0]["breakdown"]) == {"utilization_impact", "apr_weight", "time_urgency", "credit_limit_weight"}


def test_allocate_endpoint(client: TestClient, portfolio_payload: list[dict]):
    response = client.post(
        "/v1/allocate",
        json={"strategy": "min_interest", "cards": portfolio_payload, "budget": 1000},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["type"] == "min_interest"
    assert {a["card_id"]: a["amount"] for a in data["allocations"]} == pytest.approx(
        {"card-a": 795, "card-b": 180, "card-c": 25}
    )


def test_allocate_insufficient_budget(client: TestClient, portfolio_payload: list[dict]):
    """Test budget below minimums is 422 with the shortfall"""
    response = client.post("/v1/allocate", json={"cards": portfolio_payload, "budget": 300})

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["shortfall"] == 5.0
    assert detail["required"] == 305


def test_allocate_unknown_strategy(client: TestClient, portfolio_payload: list[dict]):
    response = client.post(
        "/v1/allocate",
        json={"strategy": "snowball", "cards": portfolio_payload, "budget": 1000},
    )
    assert response.status_code == 404


def test_allocate_compare_endpoint(client: TestClient, portfolio_payload: list[dict]):
    response = client.post("/v1/allocate/compare", json={"cards": portfolio_payload, "budget": 2000})

    assert response.status_code == 200
    assert [s["type"] for s in response.json()] == [
        "max_score",
        "min_interest",
        "utilization_focus",
        "equal_distribution",
    ]


def test_scenario_payment_endpoint(client: TestClient, portfolio_payload: list[dict]):
    response = client.post(
        "/v1/scenarios/payment",
        json={"cards": portfolio_payload, "card_id": "card-a", "amount": 4500},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["applied"] is True
    assert data["estimated_score_impact"] == {"min": 17, "max": 30}


def test_scenario_refusal_is_not_an_error(client: TestClient, portfolio_payload: list[dict]):
    """Test guard failures come back as 200 with the baseline and a warning"""
    response = client.post(
        "/v1/scenarios/payment",
        json={"cards": portfolio_payload, "card_id": "missing", "amount": 100},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["applied"] is False
    assert data["warnings"] == ["Card not found"]
    assert data["utilization_change"] == 0


def test_scenario_missing_parameter(client: TestClient, portfolio_payload: list[dict]):
    response = client.post("/v1/scenarios/payment", json={"cards": portfolio_payload, "card_id": "card-a"})

    assert response.status_code == 422
    assert "amount" in response.json()["detail"]


def test_scenario_unknown_kind(client: TestClient, portfolio_payload: list[dict]):
    response = client.post("/v1/scenarios/lottery", json={"cards": portfolio_payload})
    assert response.status_code == 404


def test_scenario_new_card_endpoint(client: TestClient, portfolio_payload: list[dict]):
    response = client.post(
        "/v1/scenarios/new_card",
        json={"cards": portfolio_payload, "new_limit": 10000, "include_hard_inquiry": False},
    )

    assert response.status_code == 200
    data = response.json()
    assert len(data["cards"]) == 4
    assert data["score_change"] == {"min": 17, "max": 30}


def test_scenario_balance_transfer_endpoint(client: TestClient, portfolio_payload: list[dict]):
    response = client.post(
        "/v1/scenarios/balance_transfer",
        json={
            "cards": portfolio_payload,
            "from_card_id": "card-b",
            "to_card_id": "card-a",
            "amount": 2000,
            "transfer_fee_percent": 5,
        },
    )

    assert response.status_code == 200
    assert response.json()["metrics"]["total_balance"] == 15100


def test_scenario_compare_endpoint(client: TestClient, portfolio_payload: list[dict]):
    """Test comparing two results returned by the scenario endpoint"""
    baseline = client.post(
        "/v1/scenarios/payment",
        json={"cards": portfolio_payload, "card_id": "missing", "amount": 1},
    ).json()
    scenario = client.post(
        "/v1/scenarios/payment",
        json={"cards": portfolio_payload, "card_id": "card-a", "amount": 4500},
    ).json()

    response = client.post("/v1/scenarios/compare", json={"baseline": baseline, "scenario": scenario})

    assert response.status_code == 200
    data = response.json()
    assert data["net_change"] == "positive"
    assert len(data["improvements"]) == 3


def test_compare_endpoints_recorded_separately(client: TestClient, portfolio_payload: list[dict]):
    """Test strategy and scenario comparisons land on distinct operation labels"""
    client.post("/v1/allocate/compare", json={"cards": portfolio_payload, "budget": 2000})
    baseline = client.post(
        "/v1/scenarios/payment",
        json={"cards": portfolio_payload, "card_id": "missing", "amount": 1},
    ).json()
    client.post("/v1/scenarios/compare", json={"baseline": baseline, "scenario": baseline})

    metrics = client.get("/metrics").text
    assert 'credit_optimizer_calculations_total{operation="allocate_compare"}' in metrics
    assert 'credit_optimizer_calculations_total{operation="scenario_compare"}' in metrics
    assert 'operation="compare"' not in metrics
