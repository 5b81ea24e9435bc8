"""
Unit tests for talos_mcp/server.py — the stdio transport loop end to end, with
the command executor faked out.
"""

from __future__ import annotations

import json
import logging

import pytest

from talos_mcp.config import Settings
from talos_mcp.errors import (
    EXECUTION_FAILED,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    ConfigurationError,
    ExecutionFailed,
)
from talos_mcp.server import LoopState, TransportLoop, _preflight, main
from talos_mcp.talosctl import CommandOutput
from tests.conftest import HEALTH_TEXT, request_line


class _Lines:
    def __init__(self, lines):
        self._lines = list(lines)

    def __aiter__(self):
        return self._gen()

    async def _gen(self):
        for line in self._lines:
            yield line


class _Sink:
    def __init__(self):
        self.chunks: list[bytes] = []
        self.flushes = 0

    async def write(self, data: bytes):
        self.chunks.append(data)

    async def flush(self):
        self.flushes += 1

    @property
    def responses(self) -> list[dict]:
        return [json.loads(c) for c in self.chunks]


async def _serve(transport: TransportLoop, *lines) -> _Sink:
    sink = _Sink()
    await transport.serve(_Lines(lines), sink)
    return sink


# ---------------------------------------------------------------------------
# Concrete scenarios
# ---------------------------------------------------------------------------

async def test_get_version_scenario(transport, executor):
    executor.queue("v1.2.3")
    out = await transport.handle_line(b'{"jsonrpc":"2.0","method":"get_version","params":{},"id":1}')
    payload = json.loads(out)
    assert payload["id"] == 1
    assert payload["error"] is None
    assert payload["result"]["version"] == "v1.2.3"


async def test_missing_required_scenario(transport, executor):
    out = await transport.handle_line(b'{"jsonrpc":"2.0","method":"reboot_node","params":{},"id":2}')
    payload = json.loads(out)
    assert payload["id"] == 2
    assert payload["result"] is None
    assert payload["error"]["code"] == INVALID_PARAMS
    assert "node" in payload["error"]["message"]
    assert executor.calls == []


async def test_malformed_then_valid(transport, executor):
    executor.queue("v1.2.3")
    sink = await _serve(
        transport,
        b"not json\n",
        b'{"jsonrpc":"2.0","method":"get_version","params":{},"id":3}\n',
    )
    bad, good = sink.responses
    assert bad["id"] is None
    assert bad["result"] is None
    assert bad["error"]["code"] == PARSE_ERROR
    assert good["id"] == 3
    assert good["result"]["version"] == "v1.2.3"


async def test_unknown_method_then_valid(transport, executor):
    executor.queue("v1.2.3")
    sink = await _serve(
        transport,
        request_line("format_cluster", {}, id=10),
        request_line("get_version", {}, id=11),
    )
    unknown, ok = sink.responses
    assert unknown["error"]["code"] == METHOD_NOT_FOUND
    assert unknown["id"] == 10
    assert ok["error"] is None
    assert ok["id"] == 11


async def test_identical_read_only_calls_are_byte_identical(transport, executor):
    executor.queue(CommandOutput("", HEALTH_TEXT), CommandOutput("", HEALTH_TEXT))
    line = request_line("get_health", {}, id=7)
    first = await transport.handle_line(line)
    second = await transport.handle_line(line)
    assert first == second


# ---------------------------------------------------------------------------
# id round-trip
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("request_id", [0, 1, -5, 2.5, "abc", "", None])
async def test_id_round_trip_success(transport, request_id):
    payload = json.loads(await transport.handle_line(request_line("ping", {}, id=request_id)))
    assert payload["id"] == request_id
    assert payload["result"] == {}


@pytest.mark.parametrize("request_id", [42, "req-9", None])
async def test_id_round_trip_error(transport, request_id):
    payload = json.loads(await transport.handle_line(request_line("nope", {}, id=request_id)))
    assert payload["id"] == request_id
    assert payload["error"]["code"] == METHOD_NOT_FOUND


async def test_absent_id_echoed_as_null(transport):
    out = await transport.handle_line(b'{"jsonrpc":"2.0","method":"ping"}')
    assert json.loads(out)["id"] is None
    assert b'"id":null' in out


async def test_invalid_request_keeps_id(transport):
    out = await transport.handle_line(b'{"jsonrpc":"1.0","method":"ping","id":"keep"}')
    payload = json.loads(out)
    assert payload["id"] == "keep"
    assert payload["error"]["code"] == INVALID_REQUEST


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

async def test_execution_failure_response(transport, executor):
    executor.queue(ExecutionFailed("talosctl failed: connection refused", exit_status=1, stderr="x"))
    payload = json.loads(await transport.handle_line(request_line("dmesg", {"node": "n1"}, id=4)))
    assert payload["result"] is None
    assert payload["error"] == {
        "code": EXECUTION_FAILED,
        "message": "talosctl failed: connection refused",
        "data": {"exit_status": 1},
    }


async def test_non_finite_id_is_parse_error_with_strict_json_reply(transport, executor):
    executor.queue("v1.2.3")
    sink = await _serve(
        transport,
        b'{"jsonrpc":"2.0","method":"ping","params":{},"id":NaN}\n',
        b'{"jsonrpc":"2.0","method":"get_logs","params":{"node":"n1","service":"kubelet","tail":Infinity},"id":1}\n',
        request_line("get_version", {}, id=2),
    )
    for chunk in sink.chunks:
        assert b"NaN" not in chunk and b"Infinity" not in chunk
    nan_id, inf_tail, ok = sink.responses
    assert nan_id["id"] is None
    assert nan_id["error"]["code"] == PARSE_ERROR
    assert inf_tail["error"]["code"] == PARSE_ERROR
    assert ok["result"]["version"] == "v1.2.3"
    assert len(executor.calls) == 1


async def test_oversized_integer_id_is_parse_error(transport):
    line = b'{"jsonrpc":"2.0","method":"ping","id":' + b"9" * 5000 + b"}"
    payload = json.loads(await transport.handle_line(line))
    assert payload["error"]["code"] == PARSE_ERROR
    assert payload["id"] is None


async def test_unexpected_handler_error_is_internal(transport, executor):
    executor.queue(RuntimeError("boom"))
    payload = json.loads(await transport.handle_line(request_line("dmesg", {"node": "n1"}, id=5)))
    assert payload["error"]["code"] == INTERNAL_ERROR
    assert "boom" in payload["error"]["message"]
    assert payload["id"] == 5


async def test_validation_error_data(transport):
    line = request_line("get_processes", {"node": "n1", "sort": "pid"}, id=6)
    payload = json.loads(await transport.handle_line(line))
    assert payload["error"]["data"] == {"field": "sort", "value": "pid"}


# ---------------------------------------------------------------------------
# Loop behaviour
# ---------------------------------------------------------------------------

async def test_notifications_get_no_response(transport):
    sink = await _serve(
        transport,
        b'{"jsonrpc":"2.0","method":"notifications/initialized"}\n',
        request_line("ping", {}, id=1),
    )
    assert [r["id"] for r in sink.responses] == [1]


async def test_blank_lines_skipped(transport):
    sink = await _serve(transport, b"\n", b"   \n", request_line("ping", {}, id=1))
    assert len(sink.responses) == 1


async def test_every_response_is_flushed(transport):
    sink = await _serve(transport, request_line("ping", id=1), request_line("ping", id=2))
    assert sink.flushes == 2
    assert all(c.endswith(b"\n") and c.count(b"\n") == 1 for c in sink.chunks)


async def test_responses_in_request_order(transport, executor):
    executor.queue("first", "second")
    sink = await _serve(
        transport,
        request_line("dmesg", {"node": "n1"}, id="a"),
        request_line("get_events", {"node": "n1"}, id="b"),
    )
    assert [r["id"] for r in sink.responses] == ["a", "b"]
    assert sink.responses[0]["result"] == {"dmesg": "first"}
    assert sink.responses[1]["result"] == {"events": "second"}


async def test_state_transitions(transport):
    assert transport.state is LoopState.IDLE
    await _serve(transport, request_line("ping", id=1))
    assert transport.state is LoopState.CLOSED


async def test_empty_input_closes_cleanly(transport):
    sink = await _serve(transport)
    assert sink.chunks == []
    assert transport.state is LoopState.CLOSED


async def test_initialize_over_the_wire(transport, executor):
    payload = json.loads(await transport.handle_line(request_line("initialize", id=0)))
    assert payload["error"] is None
    assert {t["name"] for t in payload["result"]["tools"]} == transport.dispatcher.registry.names()
    assert executor.calls == []


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------

def test_main_exits_without_talosconfig(monkeypatch, capsys):
    monkeypatch.delenv("TALOSCONFIG", raising=False)
    with pytest.raises(SystemExit) as info:
        main()
    assert info.value.code == 1
    assert "FATAL: TALOSCONFIG env var not set" in capsys.readouterr().err


def test_main_exits_when_dispatcher_cannot_be_built(monkeypatch, caplog):
    monkeypatch.setenv("TALOSCONFIG", "/etc/talos/talosconfig")

    def broken(talosctl, *, read_only=False):
        raise ConfigurationError("No handler for declared tools: dmesg")

    monkeypatch.setattr("talos_mcp.server.build_dispatcher", broken)
    with caplog.at_level(logging.CRITICAL, logger="talos_mcp.server"):
        with pytest.raises(SystemExit) as info:
            main()
    assert info.value.code == 1
    assert "FATAL: No handler for declared tools: dmesg" in caplog.text


# ---------------------------------------------------------------------------
# Preflight
# ---------------------------------------------------------------------------

async def test_preflight_reports_missing_config_without_binary(monkeypatch, ctl, executor, caplog):
    monkeypatch.setattr("talos_mcp.server.shutil.which", lambda name: None)
    settings = Settings(talosconfig="/nonexistent/talosconfig")
    with caplog.at_level(logging.WARNING, logger="talos_mcp.server"):
        await _preflight(settings, ctl)
    assert "TALOSCONFIG points to a missing file: /nonexistent/talosconfig" in caplog.text
    assert "talosctl not found on PATH" in caplog.text
    assert executor.calls == []


async def test_preflight_checks_client_version(monkeypatch, ctl, executor, caplog):
    monkeypatch.setattr("talos_mcp.server.shutil.which", lambda name: "/usr/bin/talosctl")
    monkeypatch.setattr("talos_mcp.server.os.path.isfile", lambda path: True)
    executor.queue("v1.7.0")
    with caplog.at_level(logging.INFO, logger="talos_mcp.server"):
        await _preflight(Settings(talosconfig="/etc/talos/talosconfig"), ctl)
    assert executor.last_args == ["version", "--client", "--short"]
    assert "talosctl client: v1.7.0" in caplog.text
    assert "missing file" not in caplog.text
