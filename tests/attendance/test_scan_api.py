import pytest

from src.pickup_system.pickup_system.core.enums import ChildStatus
from src.pickup_system.pickup_system.main import create_app


@pytest.fixture
def client(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(container=container)
    return app.test_client()


def login(client, user_id, role):
    with client.session_transaction() as s:
        s["user_id"] = user_id
        s["role"] = role


def test_scan_requires_login(client, todays_code):
    resp = client.post("/api/scan", json={"code": todays_code})

    assert resp.status_code == 401


def test_guardian_scan_returns_itemized_result(client, store, todays_code):
    login(client, 2, "guardian")

    resp = client.post("/api/scan", json={"code": todays_code})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "success"
    assert [r["child_name"] for r in body["results"]] == ["Omar", "Lina"]
    assert store.status_of(10) == ChildStatus.PRESENT


def test_missing_code_is_bad_request(client):
    login(client, 2, "guardian")

    resp = client.post("/api/scan", json={})

    assert resp.status_code == 400


def test_expired_code_reports_reason(client):
    login(client, 2, "guardian")

    resp = client.post("/api/scan", json={"code": "KG-001-2025-03-09"})

    assert resp.status_code == 400
    assert resp.get_json()["reason"] == "EXPIRED"


def test_admin_session_cannot_scan(client, todays_code):
    login(client, 1, "admin")

    resp = client.post("/api/scan", json={"code": todays_code})

    assert resp.status_code == 403


def test_foreign_child_is_forbidden(client, todays_code):
    login(client, 2, "guardian")

    resp = client.post("/api/scan", json={"code": todays_code, "child_ids": [20]})

    assert resp.status_code == 403


def test_admin_override_status(client, store):
    login(client, 1, "admin")

    resp = client.put("/api/children/10/status", json={"status": "PICKUP_REQUESTED"})

    assert resp.status_code == 200
    assert store.status_of(10) == ChildStatus.PICKUP_REQUESTED


def test_guardian_cannot_use_admin_routes(client):
    login(client, 2, "guardian")

    assert client.put("/api/children/10/status", json={"status": "ABSENT"}).status_code == 403
    assert client.get("/api/admin/dashboard").status_code == 403
    assert client.get("/api/qr/today").status_code == 403


def test_todays_code_and_image(client, todays_code):
    login(client, 1, "admin")

    body = client.get("/api/qr/today").get_json()
    image = client.get("/admin/qr/image")

    assert body["code"] == todays_code
    assert body["validity"] == "daily"
    assert image.status_code == 200
    assert image.mimetype == "image/png"


def test_dashboard(client, todays_code):
    login(client, 2, "guardian")
    client.post("/api/scan", json={"code": todays_code, "child_ids": [10]})
    login(client, 1, "admin")

    body = client.get("/api/admin/dashboard").get_json()

    assert body["present_today"] == 1
    assert body["recent_activities"][0]["type"] == "CHECK_IN"
