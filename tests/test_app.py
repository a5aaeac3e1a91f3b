from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from mesconges.app import app
from mesconges.db import get_session_factory


@pytest.fixture
def client(session_factory):
    """TestClient bound to the per-test in-memory database."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_request_accept_flow(client, hr, worker):
    response = client.post(
        "/api/requests",
        json={
            "employee_id": worker.id,
            "kind": "paid_leave",
            "start": "2024-06-03T14:00:00",
            "end": "2024-06-05T11:00:00",
            "reason": "Vacances",
        },
    )
    assert response.status_code == 201
    request_id = response.json()["id"]
    assert response.json()["status"] == "pending"

    decision = client.post(
        f"/api/requests/{request_id}/decision",
        json={"actor_id": hr.id, "decision": "accepted"},
    )
    assert decision.status_code == 200
    body = decision.json()
    assert body["status"] == "accepted"
    assert body["debited"] is True
    assert Decimal(body["entry"]["delta"]) == Decimal(-2)

    replay = client.post(
        f"/api/requests/{request_id}/decision",
        json={"actor_id": hr.id, "decision": "accepted"},
    )
    assert replay.status_code == 200
    assert replay.json()["debited"] is False

    balance = client.get(f"/api/employees/{worker.id}/balance").json()
    assert Decimal(balance["leave_days_balance"]) == Decimal(23)
    assert balance["display"] == "23 jours et 10h"

    listed = client.get("/api/requests", params={"employee_id": worker.id}).json()
    assert [r["id"] for r in listed] == [request_id]
    assert listed[0]["decided_by_id"] == hr.id


def test_weekend_request_is_explained(client, worker):
    response = client.post(
        "/api/requests",
        json={
            "employee_id": worker.id,
            "kind": "paid_leave",
            "start": "2024-06-08T09:00:00",
            "end": "2024-06-08T17:00:00",
        },
    )
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert "no working day" in body["error"]


def test_overtime_adjustment_and_ledger(client, hr, worker):
    response = client.post(
        f"/api/employees/{worker.id}/adjustments",
        json={
            "actor_id": hr.id,
            "kind": "overtime_hours",
            "variation": 2,
            "reason": "Inventaire",
            "activity_at": "2024-06-09T10:00:00",
        },
    )
    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["applied_delta"]) == Decimal(4)
    assert Decimal(body["new_balance"]) == Decimal(14)
    assert body["rate_label"] == "Sunday (100%)"

    entries = client.get(f"/api/employees/{worker.id}/ledger").json()
    assert entries[0]["source"] == "manual"
    assert Decimal(entries[0]["raw_hours"]) == Decimal(2)
    assert len(entries) == 3


def test_overtime_credit_without_reason_is_refused(client, hr, worker):
    response = client.post(
        f"/api/employees/{worker.id}/adjustments",
        json={"actor_id": hr.id, "kind": "overtime_hours", "variation": 2},
    )
    assert response.status_code == 400
    assert "reason" in response.json()["error"]


def test_unauthorized_adjustment(client, worker, colleague):
    response = client.post(
        f"/api/employees/{worker.id}/adjustments",
        json={"actor_id": colleague.id, "kind": "leave_days", "variation": 3},
    )
    assert response.status_code == 403
    assert response.json()["code"] == "PERMISSION_DENIED"


def test_unknown_employee_balance(client):
    response = client.get("/api/employees/999/balance")
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_calendar_endpoint(client):
    response = client.get(
        "/api/calendar/non-working-days",
        params={"start": "2024-05-06", "end": "2024-05-12"},
    )
    assert response.status_code == 200
    assert response.json()["days"] == ["2024-05-08", "2024-05-09", "2024-05-11", "2024-05-12"]

    reversed_range = client.get(
        "/api/calendar/non-working-days",
        params={"start": "2024-05-12", "end": "2024-05-06"},
    )
    assert reversed_range.status_code == 400
