"""
Unit tests for talos_mcp/config.py
"""

from __future__ import annotations

import pytest

from talos_mcp.config import Settings
from talos_mcp.errors import ConfigurationError


def test_minimal_env():
    settings = Settings.from_env({"TALOSCONFIG": "/etc/talos/config"})
    assert settings == Settings(talosconfig="/etc/talos/config")
    assert settings.timeout is None
    assert settings.read_only is False
    assert settings.talosctl == "talosctl"


@pytest.mark.parametrize("value", ["", "   "])
def test_missing_talosconfig_is_fatal(value):
    with pytest.raises(ConfigurationError, match="TALOSCONFIG"):
        Settings.from_env({"TALOSCONFIG": value})


def test_absent_talosconfig_is_fatal():
    with pytest.raises(ConfigurationError, match="TALOSCONFIG env var not set"):
        Settings.from_env({})


@pytest.mark.parametrize("value, expected", [("1", True), ("true", True), ("YES", True), ("no", False), ("", False)])
def test_read_only_flag(value, expected):
    settings = Settings.from_env({"TALOSCONFIG": "/c", "TALOS_MCP_READ_ONLY": value})
    assert settings.read_only is expected


def test_timeout_parsed():
    assert Settings.from_env({"TALOSCONFIG": "/c", "TALOS_MCP_TIMEOUT": "90"}).timeout == 90.0


@pytest.mark.parametrize("value", ["soon", "0", "-3"])
def test_bad_timeout(value):
    with pytest.raises(ConfigurationError, match="TALOS_MCP_TIMEOUT"):
        Settings.from_env({"TALOSCONFIG": "/c", "TALOS_MCP_TIMEOUT": value})


def test_custom_binary_and_log_level():
    settings = Settings.from_env(
        {"TALOSCONFIG": "/c", "TALOS_MCP_TALOSCTL": "/usr/local/bin/talosctl", "TALOS_MCP_LOG_LEVEL": "debug"}
    )
    assert settings.talosctl == "/usr/local/bin/talosctl"
    assert settings.log_level == "DEBUG"


def test_bad_log_level():
    with pytest.raises(ConfigurationError, match="TALOS_MCP_LOG_LEVEL"):
        Settings.from_env({"TALOSCONFIG": "/c", "TALOS_MCP_LOG_LEVEL": "chatty"})


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("TALOSCONFIG", "/from/env")
    assert Settings.from_env().talosconfig == "/from/env"
