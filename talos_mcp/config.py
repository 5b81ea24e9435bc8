"""
Server settings read from environment variables.

  TALOSCONFIG=/path/to/talosconfig  — talosctl client configuration (required)
  TALOS_MCP_READ_ONLY=true          — only register non-destructive tools
  TALOS_MCP_TALOSCTL=talosctl       — talosctl binary name or path
  TALOS_MCP_TIMEOUT=300             — per-call timeout in seconds (default: none)
  TALOS_MCP_LOG_LEVEL=INFO          — logging level for stderr output
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

from talos_mcp.errors import ConfigurationError

_TRUTHY = ("1", "true", "yes")


@dataclass(frozen=True)
class Settings:
    talosconfig: str
    read_only: bool = False
    talosctl: str = "talosctl"
    timeout: float | None = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ

        talosconfig = env.get("TALOSCONFIG", "").strip()
        if not talosconfig:
            raise ConfigurationError("TALOSCONFIG env var not set")

        timeout: float | None = None
        raw_timeout = env.get("TALOS_MCP_TIMEOUT", "").strip()
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ConfigurationError(f"TALOS_MCP_TIMEOUT is not a number: {raw_timeout!r}") from None
            if timeout <= 0:
                raise ConfigurationError("TALOS_MCP_TIMEOUT must be positive")

        log_level = env.get("TALOS_MCP_LOG_LEVEL", "INFO").strip().upper() or "INFO"
        if not isinstance(logging.getLevelName(log_level), int):
            raise ConfigurationError(f"TALOS_MCP_LOG_LEVEL is not a logging level: {log_level!r}")

        return cls(
            talosconfig=talosconfig,
            read_only=env.get("TALOS_MCP_READ_ONLY", "").lower() in _TRUTHY,
            talosctl=env.get("TALOS_MCP_TALOSCTL", "").strip() or "talosctl",
            timeout=timeout,
            log_level=log_level,
        )
