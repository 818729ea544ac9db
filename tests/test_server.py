"""
Tests for the HTTP layer.

Verifies that the service:
- Rejects a missing or empty name without touching the engine
- Serves plans as pretty-printed, uncached, cross-origin JSON
- Orders batches newest -> oldest
- Converts unexpected exceptions into the ok:false envelope
"""

from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from sas_timestamps import server
from sas_timestamps.engine import plan

PLAN_FIELDS = {
    "ok",
    "input",
    "effectiveName",
    "category",
    "categoryKey",
    "categoryIndex",
    "slot",
    "offsetSeconds",
    "payloadUsed",
    "isoLocal",
    "isoUTC",
    "epochMillis",
}


def _boom(*args, **kwargs):
    raise RuntimeError("engine exploded")


class TestMissingName:
    @pytest.mark.parametrize("url", ["/api", "/api?name=", "/api?other=1"])
    def test_failure_envelope(self, client: TestClient, url: str) -> None:
        resp = client.get(url)
        assert resp.status_code == 200
        assert resp.json() == {"ok": False, "error": "Missing 'name' query param"}

    def test_engine_not_called(self, client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(server, "plan", _boom)
        resp = client.get("/api")
        assert resp.json() == {"ok": False, "error": "Missing 'name' query param"}

    def test_order_without_names(self, client: TestClient) -> None:
        resp = client.get("/api/order")
        assert resp.json()["ok"] is False

    def test_logs_error_code(self, client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger="sas_timestamps.server")
        client.get("/api")
        assert any(r.getMessage() == "MISSING_NAME: GET /api" for r in caplog.records)


class TestPlanEndpoint:
    def test_plan_shape(self, client: TestClient, utc_config) -> None:
        resp = client.get("/api", params={"name": "boot"})
        body = resp.json()
        assert set(body) == PLAN_FIELDS
        assert body["ok"] is True
        assert body["input"] == "boot"
        assert body["effectiveName"] == "SYS_BOOT"
        assert body["category"] == "SYS_*"
        assert body["categoryKey"] == "SYS_"
        assert body["epochMillis"] == plan("boot", utc_config).epoch_millis

    def test_headers(self, client: TestClient) -> None:
        resp = client.get("/api", params={"name": "BOOT"})
        assert resp.headers["content-type"] == "application/json; charset=utf-8"
        assert resp.headers["cache-control"] == "no-store"
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_pretty_printed(self, client: TestClient) -> None:
        resp = client.get("/api", params={"name": "BOOT"})
        assert resp.text.startswith('{\n  "ok": true,\n  "input": "BOOT"')

    def test_sub_path(self, client: TestClient) -> None:
        direct = client.get("/api", params={"name": "RESTART"}).json()
        nested = client.get("/catalog/v2/api", params={"name": "RESTART"}).json()
        assert nested == direct
        assert nested["effectiveName"] == "RAA_RESTART"

    def test_preflight(self, client: TestClient) -> None:
        resp = client.options(
            "/api",
            headers={"Origin": "https://catalog.example", "Access-Control-Request-Method": "GET"},
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_debug_payload(self, client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
        assert "debug" not in client.get("/api", params={"name": "BOOT"}).json()

        monkeypatch.setenv("SAS_DEBUG", "1")
        body = client.get("/api", params={"name": "BOOT"}).json()
        assert set(body["debug"]) == {"fraction", "nudge", "baseEpochMillis"}
        assert body["debug"]["nudge"] in (0, 1)
        assert body["epochMillis"] == body["debug"]["baseEpochMillis"] - body["offsetSeconds"] * 1000


class TestOrderEndpoint:
    def test_newest_first(self, client: TestClient) -> None:
        resp = client.get("/api/order", params={"name": ["ZZZ_OPL", "boot", "", "APP_X"]})
        body = resp.json()
        assert body["ok"] is True
        assert body["count"] == 3
        assert [item["effectiveName"] for item in body["items"]] == ["APP_X", "SYS_BOOT", "ZZZ_OPL"]
        millis = [item["epochMillis"] for item in body["items"]]
        assert millis == sorted(millis, reverse=True)


class TestGuard:
    def test_unexpected_error_is_enveloped(self, client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(server, "plan", _boom)
        resp = client.get("/api", params={"name": "BOOT"})
        assert resp.status_code == 200
        assert resp.json() == {"ok": False, "error": "Unexpected error in timestamp service."}

    def test_debug_includes_details(self, client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SAS_DEBUG", "1")
        monkeypatch.setattr(server, "plan", _boom)
        body = client.get("/api", params={"name": "BOOT"}).json()
        assert body["details"] == {"type": "RuntimeError", "message": "engine exploded"}


class TestHealth:
    @pytest.mark.parametrize("url", ["/", "/healthz"])
    def test_ok(self, client: TestClient, url: str) -> None:
        assert client.get(url).json() == {"ok": True, "status": "ok"}
