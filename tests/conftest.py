from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from sas_timestamps.config import EngineConfig
from sas_timestamps.server import create_app


@pytest.fixture(autouse=True)
def _no_debug(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SAS_DEBUG", raising=False)


@pytest.fixture
def utc_config() -> EngineConfig:
    """Pin the base instant to UTC so renderings do not depend on the host zone."""
    return EngineConfig(timezone="UTC")


@pytest.fixture
def client(utc_config: EngineConfig) -> TestClient:
    return TestClient(create_app(utc_config))
