import logging
import os

import pytest

from mcp_openapi_sync.core.config import load_settings
from mcp_openapi_sync.core.errors import ConfigurationError
from mcp_openapi_sync.core.log import configure_logging, get_logger, resolve_log_level


def test_load_settings_defaults(monkeypatch):
    for name in ("LOG_LEVEL", "TIMEOUT", "SETTLE_DELAY"):
        monkeypatch.delenv(f"MCP_OPENAPI_SYNC_{name}", raising=False)

    s = load_settings(dotenv=False)
    assert s.log_level == "WARNING"
    assert s.timeout_s == 30.0
    assert s.settle_delay_s == 0.0


def test_load_settings_from_env(monkeypatch):
    monkeypatch.setenv("MCP_OPENAPI_SYNC_LOG_LEVEL", "debug")
    monkeypatch.setenv("MCP_OPENAPI_SYNC_TIMEOUT", "5")
    monkeypatch.setenv("MCP_OPENAPI_SYNC_SETTLE_DELAY", "1")

    s = load_settings(dotenv=False)
    assert s.log_level == "debug"
    assert s.timeout_s == 5.0
    assert s.settle_delay_s == 1.0


def test_load_settings_reads_dotenv(monkeypatch, tmp_path):
    monkeypatch.delenv("MCP_OPENAPI_SYNC_TIMEOUT", raising=False)
    (tmp_path / ".env").write_text("MCP_OPENAPI_SYNC_TIMEOUT=12\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    try:
        assert load_settings().timeout_s == 12.0
    finally:
        os.environ.pop("MCP_OPENAPI_SYNC_TIMEOUT", None)


@pytest.mark.parametrize("value", ["soon", "-1"])
def test_load_settings_rejects_bad_numbers(monkeypatch, value):
    monkeypatch.setenv("MCP_OPENAPI_SYNC_SETTLE_DELAY", value)
    with pytest.raises(ConfigurationError):
        load_settings(dotenv=False)


def test_resolve_log_level():
    assert resolve_log_level("debug") == 10
    assert resolve_log_level("nonsense") == 20
    assert resolve_log_level(None) == 20


def test_configure_logging_attaches_one_handler(monkeypatch):
    monkeypatch.setattr(logging.getLogger("mcp_openapi_sync"), "handlers", [])
    logger = configure_logging("INFO")
    configure_logging("DEBUG")

    assert len(logger.handlers) == 1
    assert logger.level == 10
    assert get_logger("fetcher").name == "mcp_openapi_sync.fetcher"
