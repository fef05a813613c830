import os

import pytest

from autobound_config import settings as s
from autobound_config.settings import (
    DEFAULT_PREDICTLEADS_URL,
    SECRET_NAMES,
    Credentials,
    HttpSettings,
    ProviderUrls,
    ServerSettings,
)


def test_credentials_from_env_reads_only_known_secrets(monkeypatch):
    monkeypatch.setenv("YOUCOM_API_KEY", "yk")
    monkeypatch.setenv("UNRELATED_SECRET", "nope")

    creds = Credentials.from_env()

    assert creds.get("YOUCOM_API_KEY") == "yk"
    assert creds.get("UNRELATED_SECRET") is None
    assert creds.missing(SECRET_NAMES) == ["AUTOBOUND_API_KEY", "PREDICTLEADS_API_KEY", "PREDICTLEADS_API_TOKEN"]


def test_blank_secret_counts_as_missing():
    creds = Credentials.from_env({"AUTOBOUND_API_KEY": "", "YOUCOM_API_KEY": "   "})
    assert creds.get("AUTOBOUND_API_KEY") is None
    assert creds.get("YOUCOM_API_KEY") is None


def test_credentials_are_read_only_and_never_printed():
    creds = Credentials({"YOUCOM_API_KEY": "super-secret"})
    with pytest.raises(TypeError):
        creds.values["YOUCOM_API_KEY"] = "other"  # type: ignore[index]
    assert "super-secret" not in repr(creds)
    assert "YOUCOM_API_KEY" in repr(creds)


def test_server_settings_defaults(monkeypatch):
    for name in ("MCP_TRANSPORT", "AUTOBOUND_MCP_HOST", "AUTOBOUND_MCP_PORT"):
        monkeypatch.delenv(name, raising=False)
    assert ServerSettings.from_env() == ServerSettings(transport="http", host="127.0.0.1", port=8787)


def test_server_settings_reject_unknown_transport(monkeypatch):
    monkeypatch.setenv("MCP_TRANSPORT", "carrier-pigeon")
    with pytest.raises(RuntimeError, match="MCP_TRANSPORT"):
        ServerSettings.from_env()


def test_http_settings_fall_back_on_malformed_numbers(monkeypatch):
    monkeypatch.setenv("AUTOBOUND_MCP_HTTP_CONNECT_TIMEOUT", "fast")
    monkeypatch.setenv("AUTOBOUND_MCP_HTTP_READ_TIMEOUT", "12.5")
    assert HttpSettings.from_env().timeout == (3.05, 12.5)


def test_provider_urls_override(monkeypatch):
    monkeypatch.setenv("PREDICTLEADS_BASE_URL", "http://localhost:9000/api/v3/")
    monkeypatch.delenv("YOUCOM_BASE_URL", raising=False)
    urls = ProviderUrls.from_env()
    assert urls.predictleads == "http://localhost:9000/api/v3"
    assert urls.youcom == ProviderUrls().youcom
    assert ProviderUrls().predictleads == DEFAULT_PREDICTLEADS_URL


def test_load_env_once_does_not_override_existing(monkeypatch, tmp_path):
    env_file = tmp_path / "custom.env"
    env_file.write_text("AUTOBOUND_TEST_FROM_FILE=loaded\nAUTOBOUND_TEST_PRESET=from-file\n", encoding="utf-8")
    monkeypatch.setenv("AUTOBOUND_MCP_ENV_FILE", str(env_file))
    monkeypatch.setenv("AUTOBOUND_TEST_PRESET", "from-env")

    s.load_env_once.cache_clear()
    try:
        assert s.load_env_once() == env_file.resolve()
        assert os.environ["AUTOBOUND_TEST_FROM_FILE"] == "loaded"
        assert os.environ["AUTOBOUND_TEST_PRESET"] == "from-env"
    finally:
        os.environ.pop("AUTOBOUND_TEST_FROM_FILE", None)
        s.load_env_once.cache_clear()


def test_telemetry_dir_and_switch(monkeypatch, tmp_path):
    monkeypatch.setenv("AUTOBOUND_MCP_TELEMETRY_DIR", str(tmp_path / "t"))
    monkeypatch.setenv("AUTOBOUND_MCP_DISABLE_TELEMETRY", "yes")
    assert s.telemetry_dir() == (tmp_path / "t").resolve()
    assert not s.telemetry_enabled()

    monkeypatch.setenv("AUTOBOUND_MCP_DISABLE_TELEMETRY", "0")
    assert s.telemetry_enabled()
