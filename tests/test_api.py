from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from lantern.api import create_app
from lantern.core.app import TrackerApp

from .conftest import FakeMotivationBackend, FakePrayerBackend

TODAY = "2026-03-01"


@pytest.fixture
def tracker(config, store, scheduler, clock):
    app = TrackerApp(
        config,
        store=store,
        task_manager=scheduler,
        prayer_backend=FakePrayerBackend(clock),
        motivation_backend=FakeMotivationBackend(),
        clock=clock,
    )
    app.start()
    yield app
    app.shutdown()


@pytest.fixture
def client(tracker):
    return TestClient(create_app(tracker))


def test_today_view(client) -> None:
    body = client.get("/api/today").json()

    assert body["date"] == TODAY
    assert body["timings"]["Maghrib"] == "18:00"
    assert body["locks"] == {"fajr": True, "dhuhr": True, "asr": True, "maghrib": True, "isha": True}
    assert body["is_ramadan"] is True
    assert body["ramadan_status"] == "Ramadhan day 5"
    assert body["manual_unlock"] is False
    assert body["record"]["fasting"]["status"] == "none"


def test_toggle_before_time_is_conflict(client) -> None:
    response = client.post(f"/api/records/{TODAY}/prayers/fajr/toggle")

    assert response.status_code == 409
    assert response.json()["error"] == "not_yet_time"
    assert client.get(f"/api/records/{TODAY}").json()["record"]["prayers"]["fajr"]["done"] is False


def test_toggle_after_time(client, clock) -> None:
    clock.now = datetime(2026, 3, 1, 4, 51)

    response = client.post(f"/api/records/{TODAY}/prayers/fajr/toggle")

    assert response.status_code == 200
    assert response.json()["record"]["prayers"]["fajr"]["done"] is True


def test_unlock_needs_confirm(client) -> None:
    assert client.post("/api/unlock", json={"confirm": False}).json()["manual_unlock"] is False

    body = client.post("/api/unlock", json={"confirm": True}).json()

    assert body["manual_unlock"] is True
    assert body["unlock_expires_at"].startswith("2026-03-01T04:59:30")
    assert client.post(f"/api/records/{TODAY}/prayers/isha/toggle").status_code == 200


def test_fasting_quran_and_night_prayer(client) -> None:
    assert client.put(f"/api/records/{TODAY}/fasting", json={"status": "fasting"}).status_code == 200
    assert client.put(f"/api/records/{TODAY}/quran", json={"pages": 10}).status_code == 200
    night = client.post(f"/api/records/{TODAY}/night-prayer/toggle").json()

    assert night["record"]["fasting"]["status"] == "fasting"
    assert night["record"]["sunnah"] == {"night_prayer_done": True, "quran_pages_read": 10}


def test_invalid_input_is_422(client) -> None:
    assert client.put(f"/api/records/{TODAY}/quran", json={"pages": -1}).status_code == 422
    assert client.put(f"/api/records/{TODAY}/fasting", json={"status": "kinda"}).status_code == 422
    assert client.get("/api/records/31-02-2026").status_code == 422
    assert client.get(f"/api/records/{TODAY}").json()["record"]["sunnah"]["quran_pages_read"] == 0


def test_history_stats_and_profile(client) -> None:
    client.put("/api/records/2026-03-01/fasting", json={"status": "fasting"})
    client.put("/api/records/2026-03-02/fasting", json={"status": "fasting"})
    client.get("/api/records/2026-03-03")

    stats = client.get("/api/stats").json()
    history = client.get("/api/history").json()
    profile = client.get("/api/profile").json()

    assert stats["total_days"] == 3
    assert stats["fasting_days"] == 2
    assert [h["date"] for h in history] == ["2026-03-03", "2026-03-02", "2026-03-01"]
    assert profile["profile"]["goals"]["quran_pages_per_day"] == 5
    assert profile["stats"]["fasting_days"] == 2


def test_settings_endpoints(client) -> None:
    assert client.post("/api/settings/theme/toggle").json()["theme"] == "dark"

    settings = client.put("/api/settings", json={"location_mode": "manual", "manual_city": "Medan"}).json()

    assert settings["manual_city"] == "Medan"
    assert client.get("/api/components/prayer/data").json()["city"] == "Medan"


def test_unknown_theme_is_rejected(client) -> None:
    response = client.put("/api/settings", json={"theme": "blue"})

    assert response.status_code == 422
    assert client.post("/api/settings/theme/toggle").json()["theme"] == "dark"


def test_reset(client) -> None:
    client.put(f"/api/records/{TODAY}/fasting", json={"status": "fasting"})

    assert client.post("/api/reset", json={"confirmation": "yes"}).status_code == 422
    assert client.post("/api/reset", json={"confirmation": "RESET"}).json() == {"status": "reset"}
    assert client.get("/api/stats").json()["fasting_days"] == 0


def test_plugin_routes(client) -> None:
    prayer = client.get("/api/components/prayer/data").json()
    motivation = client.get("/api/components/motivation/data").json()

    assert prayer["hijri_label"] == "Ramadhan day 5"
    assert prayer["timings"]["Imsak"] == "04:40"
    assert motivation["quote"] == "Sabar itu indah"


def test_prayer_route_404_without_schedule(config, store, scheduler, clock) -> None:
    app = TrackerApp(
        config,
        store=store,
        task_manager=scheduler,
        prayer_backend=FakePrayerBackend(clock, fail=True),
        motivation_backend=FakeMotivationBackend(),
        clock=clock,
    )
    app.start()
    client = TestClient(create_app(app))

    assert client.get("/api/components/prayer/data").status_code == 404
    assert "Offline mode" in client.get("/api/today").json()["notices"][0]


def test_proxy_relays_upstream(client) -> None:
    response = client.get("/api/kataislami")

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.json() == {"result": {"message": "from https://quotes.test/kata"}}


def test_proxy_failure_is_500(client, tracker) -> None:
    tracker.motivation_service.backend.fail = True

    response = client.get("/api/motivasi-islam")

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch data"}
