import logging

import pytest
from fastapi.testclient import TestClient

from access_gate.core.security import create_access_token
from access_gate.main import create_app
from tests.fakes import EVENT


def auth(role="controller", sub="op-1", name="Laura"):
    token = create_access_token({"sub": sub, "name": name, "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(engine, session_factory, seed):
    seed("12345678A", "Ana Ruiz", can_workshop=True)
    app = create_app(session_factory=session_factory, engine=engine, event_scope=EVENT)
    with TestClient(app) as client:
        yield client


def test_importing_the_app_configures_logging():
    root = logging.getLogger()

    assert any(type(h) is logging.StreamHandler for h in root.handlers)
    assert logging.getLogger("sqlalchemy").level == logging.WARNING


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["active_event"] == EVENT


def test_scan_requires_token(client):
    response = client.post("/api/stations/gate-1/scan", json={"raw": "12345678A", "mode": "registration"})

    assert response.status_code == 401


def test_scan_ack_cycle(client):
    headers = auth()

    response = client.post(
        "/api/stations/gate-1/scan",
        json={"raw": "12345678A", "mode": "registration"},
        headers=headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["participant"] == {"identifier": "12345678A", "name": "Ana Ruiz"}

    busy = client.post(
        "/api/stations/gate-1/scan",
        json={"raw": "12345678A", "mode": "workshop", "direction": "enter"},
        headers=headers,
    )
    assert busy.status_code == 409

    status = client.get("/api/stations/gate-1", headers=headers).json()
    assert status["busy"] is True
    assert status["last_outcome"]["success"] is True

    ack = client.post("/api/stations/gate-1/ack", headers=headers)
    assert ack.status_code == 200
    assert ack.json()["busy"] is False

    response = client.post(
        "/api/stations/gate-1/scan",
        json={"raw": "12345678A", "mode": "workshop", "direction": "enter"},
        headers=headers,
    )
    assert response.json()["success"] is True

    occupancy = client.get("/api/reports/occupancy", headers=headers).json()
    assert occupancy == {"registered": 1, "main_hall": 0, "workshop": 1, "dinner": 0}


def test_denied_scan_is_still_http_200(client):
    response = client.post(
        "/api/stations/gate-2/scan",
        json={"raw": "12345678A", "mode": "dinner", "direction": "enter"},
        headers=auth(),
    )

    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["reason"] == "no_permission"


def test_ack_with_nothing_pending(client):
    response = client.post("/api/stations/gate-3/ack", headers=auth())

    assert response.status_code == 409


def test_invalid_mode_is_rejected(client):
    response = client.post(
        "/api/stations/gate-1/scan",
        json={"raw": "12345678A", "mode": "cloakroom"},
        headers=auth(),
    )

    assert response.status_code == 422


def test_reports(client):
    headers = auth()
    client.post("/api/stations/gate-1/scan", json={"raw": "12345678A", "mode": "registration"}, headers=headers)

    stats = client.get("/api/reports/stats/registration", headers=headers).json()
    assert stats == {"mode": "registration", "unique_entrances": 1, "max_simultaneous": 1}

    logs = client.get("/api/reports/logs/registration", headers=headers).json()
    assert [log["identifier"] for log in logs] == ["12345678A"]

    permissions = client.get("/api/reports/permissions", headers=headers).json()
    assert permissions == {"registration": 1, "main_hall": 1, "workshop": 1, "dinner": 0}


def test_enrolment_needs_admin(client):
    payload = {"identifier": "87654321b", "name": "Joan Puig", "can_dinner": True}

    forbidden = client.post("/api/admin/participants", json=payload, headers=auth())
    assert forbidden.status_code == 403

    created = client.post("/api/admin/participants", json=payload, headers=auth(role="admin"))
    assert created.status_code == 201
    assert created.json()["identifier"] == "87654321B"
    assert created.json()["event_id"] == EVENT

    duplicate = client.post("/api/admin/participants", json=payload, headers=auth(role="admin"))
    assert duplicate.status_code == 409
