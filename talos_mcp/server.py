"""
Talos MCP server — stdio JSON-RPC transport.

Exposes talosctl-backed tools, one JSON request per input line and one JSON
response per output line, across eight families:
  • Inspection — containers, stats, processes, memory, cpu
  • Files      — list, read, copy, usage, mounts
  • Network    — addresses, routes, netstat, pcap, io cgroups
  • Services   — dmesg, service control, logs, events
  • Storage    — disks
  • Cluster    — health, version, time
  • Nodes      — reboot, shutdown, reset, upgrades
  • Config     — apply/validate machine config, etcd operations

Environment variables: see ``talos_mcp.config``.

Run with:
    python -m talos_mcp.server
"""

from __future__ import annotations

import asyncio
import enum
import logging
import os
import shutil
import sys
from typing import Any, AsyncIterable, Protocol

import anyio

from talos_mcp.codec import Response, decode, encode
from talos_mcp.config import Settings
from talos_mcp.dispatcher import Dispatcher, build_dispatcher
from talos_mcp.errors import ConfigurationError, DecodeError, ExecutionFailed, InternalError, RpcError
from talos_mcp.talosctl import SubprocessExecutor, Talosctl

log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Transport loop
# ---------------------------------------------------------------------------


class LoopState(enum.Enum):
    IDLE = "idle"
    AWAITING_LINE = "awaiting_line"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSED = "closed"


class LineWriter(Protocol):
    async def write(self, data: bytes) -> Any: ...
    async def flush(self) -> Any: ...


class TransportLoop:
    """Reads request lines, answers each one fully before reading the next."""

    def __init__(self, dispatcher: Dispatcher) -> None:
        self.dispatcher = dispatcher
        self.state = LoopState.IDLE

    async def process(self, line: bytes | str) -> Response | None:
        """Turn one input line into a response, or ``None`` for a notification."""
        request_id = None
        try:
            request = decode(line)
            request_id = request.id
            if request.is_notification:
                log.debug("notification %s", request.method)
                return None
            result = await self.dispatcher.dispatch(request.method, request.params)
        except DecodeError as e:
            log.info("rejected line: %s", e.message)
            return Response.failure(e.request_id, e.to_error_data())
        except ExecutionFailed as e:
            log.info("execution failed (exit %s): %s", e.exit_status, e.reason)
            return Response.failure(request_id, e.to_error_data())
        except RpcError as e:
            log.info("request %r failed: %s", request_id, e.message)
            return Response.failure(request_id, e.to_error_data())
        except Exception as exc:  # noqa: BLE001
            log.exception("unexpected error handling request %r", request_id)
            return Response.failure(request_id, InternalError(f"Unexpected error: {exc}").to_error_data())
        return Response.success(request_id, result)

    async def handle_line(self, line: bytes | str) -> bytes | None:
        if not line.strip():
            return None
        response = await self.process(line)
        if response is None:
            return None
        return encode(response)

    async def serve(self, reader: AsyncIterable[bytes], writer: LineWriter) -> None:
        self.state = LoopState.AWAITING_LINE
        try:
            async for line in reader:
                self.state = LoopState.PROCESSING
                out = await self.handle_line(line)
                if out is not None:
                    self.state = LoopState.WRITING
                    await writer.write(out)
                    await writer.flush()
                self.state = LoopState.AWAITING_LINE
        finally:
            self.state = LoopState.CLOSED
        log.info("input closed, shutting down")


# ---------------------------------------------------------------------------
# Startup preflight
# ---------------------------------------------------------------------------

async def _preflight(settings: Settings, talosctl: Talosctl) -> None:
    """Check talosctl availability and the client config before serving."""
    if not os.path.isfile(settings.talosconfig):
        log.warning("TALOSCONFIG points to a missing file: %s", settings.talosconfig)
    if not shutil.which(settings.talosctl):
        log.warning("%s not found on PATH. Tools will fail until it is installed.", settings.talosctl)
        return

    try:
        version = await talosctl.run(["version", "--client", "--short"])
        log.info("talosctl client: %s", version)
    except ExecutionFailed as e:
        log.warning("talosctl version check failed: %s", e.reason)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

async def _run(settings: Settings, loop: TransportLoop) -> None:
    mode = "read-only" if settings.read_only else "full"
    log.info(
        "talos MCP server starting — %d tools registered (%s mode)",
        len(loop.dispatcher.registry),
        mode,
    )
    await _preflight(settings, loop.dispatcher.talosctl)
    stdin = anyio.wrap_file(sys.stdin.buffer)
    stdout = anyio.wrap_file(sys.stdout.buffer)
    await loop.serve(stdin, stdout)


def main() -> None:
    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        print(f"FATAL: {e}", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    talosctl = Talosctl(
        settings.talosconfig,
        SubprocessExecutor(timeout=settings.timeout),
        program=settings.talosctl,
    )
    try:
        dispatcher = build_dispatcher(talosctl, read_only=settings.read_only)
    except ConfigurationError as e:
        log.critical("FATAL: %s", e)
        sys.exit(1)

    asyncio.run(_run(settings, TransportLoop(dispatcher)))


if __name__ == "__main__":
    main()
