"""API tests for the timer endpoints."""

from datetime import datetime, timedelta

import pytest

from app.crud import time_entries as time_crud


@pytest.fixture()
def clock(monkeypatch):
    """Freeze the timer's notion of "now"; advance with ``clock.tick(seconds)``."""

    class Clock:
        now = datetime(2024, 5, 10, 12, 0, 0)

        def tick(self, seconds):
            self.now += timedelta(seconds=seconds)

    frozen = Clock()
    monkeypatch.setattr(time_crud, "utcnow", lambda: frozen.now)
    return frozen


def test_timer_endpoints_require_bearer(client):
    for method, path in [
        ("post", "/time/start"),
        ("post", "/time/end"),
        ("get", "/time/today"),
        ("get", "/time/history"),
        ("get", "/time/entries"),
    ]:
        response = getattr(client, method)(path)
        assert response.status_code == 401, path
        assert response.json()["code"] == "unauthorized"


def test_start_then_stop_after_125_seconds(client, auth_headers, clock):
    response = client.post("/time/start", headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"message": "Started"}

    clock.tick(125)
    response = client.post("/time/end", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "Stopped", "seconds": 125}


def test_start_twice_is_rejected(client, auth_headers, clock):
    client.post("/time/start", headers=auth_headers)
    response = client.post("/time/start", headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"code": "already_running", "message": "Already running"}


def test_end_without_start_is_rejected(client, auth_headers):
    response = client.post("/time/end", headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"code": "no_running_entry", "message": "No running entry"}


def test_today_reflects_running_timer(client, auth_headers, clock, utc_day):
    assert client.get("/time/today", headers=auth_headers).json() == {"total_seconds": 0, "running": False}

    client.post("/time/start", headers=auth_headers)
    clock.tick(300)

    assert client.get("/time/today", headers=auth_headers).json() == {"total_seconds": 300, "running": True}

    client.post("/time/end", headers=auth_headers)
    clock.tick(600)

    assert client.get("/time/today", headers=auth_headers).json() == {"total_seconds": 300, "running": False}


def test_history_lists_days_newest_first(client, auth_headers, clock, utc_day):
    client.post("/time/start", headers=auth_headers)
    clock.tick(3600)
    client.post("/time/end", headers=auth_headers)
    clock.tick(24 * 3600)
    client.post("/time/start", headers=auth_headers)
    clock.tick(1800)
    client.post("/time/end", headers=auth_headers)

    response = client.get("/time/history", params={"days": 2}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {
        "history": [
            {"day": "2024-05-11", "total_seconds": 1800},
            {"day": "2024-05-10", "total_seconds": 3600},
        ]
    }


def test_history_rejects_non_positive_days(client, auth_headers):
    response = client.get("/time/history", params={"days": 0}, headers=auth_headers)
    assert response.status_code == 422


def test_entries_list_newest_first(client, auth_headers, clock):
    client.post("/time/start", headers=auth_headers)
    clock.tick(60)
    client.post("/time/end", headers=auth_headers)
    clock.tick(60)
    client.post("/time/start", headers=auth_headers)
    clock.tick(30)

    entries = client.get("/time/entries", headers=auth_headers).json()

    assert [entry["end_at"] is None for entry in entries] == [True, False]
    assert entries[1]["seconds"] == 60
    assert entries[0]["seconds"] >= 0


def test_timers_are_isolated_between_users(client, auth_headers, clock):
    from conftest import login, register

    register(client, email="grace@example.com", full_name="Grace Hopper")
    other = {"Authorization": f"Bearer {login(client, email='grace@example.com').json()['token']}"}

    client.post("/time/start", headers=auth_headers)

    assert client.get("/time/today", headers=other).json()["running"] is False
    assert client.post("/time/start", headers=other).status_code == 200
