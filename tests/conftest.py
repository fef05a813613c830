from __future__ import annotations

import pytest

from autobound_config.settings import SECRET_NAMES, Credentials
from autobound_mcp.http_client import HttpClient
from autobound_mcp.registry import build_registry
from tests.helpers.credentials import ALL_SECRETS
from tests.helpers.fake_http import RecordingSession
from tests.helpers.mcp_runtime import build_test_env


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """No real secrets and no telemetry files leak into unit tests."""
    for name in SECRET_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AUTOBOUND_MCP_DISABLE_TELEMETRY", "1")
    monkeypatch.setenv("AUTOBOUND_MCP_TELEMETRY_DIR", str(tmp_path / "telemetry"))


@pytest.fixture()
def credentials() -> Credentials:
    return Credentials(ALL_SECRETS)


@pytest.fixture()
def session() -> RecordingSession:
    return RecordingSession()


@pytest.fixture()
def http_client(session) -> HttpClient:
    return HttpClient(session=session)


@pytest.fixture()
def registry(credentials, http_client):
    return build_registry(credentials, http_client=http_client)


@pytest.fixture()
def server_env(tmp_path) -> dict[str, str]:
    """Subprocess environment for the stdio server (no secrets, telemetry under tmp_path)."""
    return build_test_env(tmp_path)
