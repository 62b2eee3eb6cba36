from __future__ import annotations

import logging
from typing import Iterable

import pytest
from fastapi.testclient import TestClient

from lunar import ORBIT


@pytest.fixture()
def api_client(monkeypatch: pytest.MonkeyPatch) -> Iterable[TestClient]:
    monkeypatch.delenv("LUNAR_LOG_LEVEL", raising=False)
    monkeypatch.delenv("LUNAR_KEPLER_MAX_ITER", raising=False)
    monkeypatch.delenv("LUNAR_HUNT_MAX_ITER", raising=False)
    from moon_api import app

    with TestClient(app) as client:
        yield client


def test_health_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["model"] == "moontool"
    assert payload["epoch_jd"] == ORBIT.epoch
    assert payload["synodic_month"] == ORBIT.synodic_month


def test_phase_endpoint_full_moon(api_client: TestClient) -> None:
    response = api_client.get("/moon/phase", params={"at": "2000-01-21T04:40:00Z"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["at_utc"] == "2000-01-21T04:40:00Z"
    assert payload["phase"] == pytest.approx(0.5, abs=0.01)
    assert payload["illumination"] > 0.99
    assert payload["source"] == "moontool"


def test_phase_endpoint_naive_is_utc(api_client: TestClient) -> None:
    naive = api_client.get("/moon/phase", params={"at": "2000-01-21T04:40:00"}).json()
    aware = api_client.get("/moon/phase", params={"at": "2000-01-21T04:40:00+00:00"}).json()
    assert naive == aware


def test_phase_endpoint_defaults_to_now(api_client: TestClient) -> None:
    response = api_client.get("/moon/phase")
    assert response.status_code == 200
    assert 0.0 <= response.json()["phase"] < 1.0


def test_phasehunt_endpoint(api_client: TestClient) -> None:
    response = api_client.get(
        "/moon/phasehunt",
        params={"at": "2000-01-15T12:00:00Z", "offset_hours": 2},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["lunation"] == 1237
    assert payload["offset_hours"] == 2
    names = [event["name"] for event in payload["events"]]
    assert names == ["new_moon", "first_quarter", "full_moon", "last_quarter", "next_new_moon"]
    first = payload["events"][0]
    assert first["utc"].startswith("2000-01-06T")
    assert first["utc"].endswith("Z")
    assert first["local"].startswith("2000-01-06T")
    assert first["local"].endswith("+02:00")


def test_phasehunt_endpoint_without_offset(api_client: TestClient) -> None:
    payload = api_client.get("/moon/phasehunt", params={"at": "2000-01-15T12:00:00Z"}).json()
    assert all(event["local"] is None for event in payload["events"])


def test_validation_error(api_client: TestClient) -> None:
    response = api_client.get(
        "/moon/phasehunt",
        params={"at": "2000-01-15T12:00:00Z", "offset_hours": 30},
    )
    assert response.status_code == 422
    payload = response.json()
    assert payload["code"] == "validation_error"
    assert payload["ok"] is False


def test_malformed_datetime(api_client: TestClient) -> None:
    response = api_client.get("/moon/phase", params={"at": "yesterday-ish"})
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


def test_non_convergence_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LUNAR_HUNT_MAX_ITER", "1")
    from moon_api import app

    with TestClient(app) as client:
        response = client.get("/moon/phasehunt", params={"at": "2000-01-15T12:00:00Z"})
    assert response.status_code == 500
    payload = response.json()
    assert payload["code"] == "non_convergence"
    assert payload["ok"] is False


def test_phasehunt_echoes_requested_instant(api_client: TestClient) -> None:
    payload = api_client.get("/moon/phasehunt", params={"at": "2000-01-15T12:00:00Z"}).json()
    assert payload["at_utc"] == "2000-01-15T12:00:00Z"


def test_invalid_log_level_fails_startup(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("LUNAR_LOG_LEVEL", "chatty")
    from moon_api import app

    with pytest.raises(ValueError, match="LUNAR_LOG_LEVEL"):
        with TestClient(app):
            pass
    assert any("config_invalid" in record.getMessage() for record in caplog.records)


def test_log_level_applied_at_startup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LUNAR_LOG_LEVEL", "warning")
    from moon_api import app

    root = logging.getLogger()
    previous = root.level
    try:
        with TestClient(app):
            assert root.level == logging.WARNING
    finally:
        root.setLevel(previous)
