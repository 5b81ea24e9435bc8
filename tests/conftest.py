"""
Shared fixtures for the test suite.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from talos_mcp.dispatcher import build_dispatcher
from talos_mcp.server import TransportLoop
from talos_mcp.talosctl import CommandOutput, Talosctl

TALOSCONFIG = "/etc/talos/talosconfig"


# ---------------------------------------------------------------------------
# Subprocess mock factory
# ---------------------------------------------------------------------------

def make_proc(stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0):
    """Mimics the object returned by asyncio.create_subprocess_exec."""
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    proc.kill = MagicMock()
    return proc


@pytest.fixture
def mock_run(monkeypatch):
    """
    Patches asyncio.create_subprocess_exec with a fake that pops responses
    from a queue.

    Usage:
        mock_run((b"output", b"", 0))
        mock_run((b"out1", b"", 0), (b"out2", b"", 0))  # multiple calls
    """
    responses: list[tuple[bytes, bytes, int]] = []

    async def fake_exec(*args, **kwargs):
        assert responses, f"Unexpected talosctl call: {args}"
        stdout, stderr, rc = responses.pop(0)
        return make_proc(stdout, stderr, rc)

    monkeypatch.setattr("asyncio.create_subprocess_exec", fake_exec)

    def queue(*items: tuple[bytes, bytes, int]):
        responses.extend(items)

    return queue


# ---------------------------------------------------------------------------
# Command executor fake
# ---------------------------------------------------------------------------

class FakeExecutor:
    """In-memory command executor.

    Queue plain strings (stdout), ``CommandOutput`` values, or exceptions to
    raise; each ``execute`` call pops the next one and records its arguments.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, list[str], dict[str, str]]] = []
        self._responses: list = []

    def queue(self, *items) -> None:
        self._responses.extend(items)

    async def execute(self, program, args, env) -> CommandOutput:
        self.calls.append((program, list(args), dict(env)))
        assert self._responses, f"Unexpected talosctl call: {args}"
        item = self._responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, CommandOutput):
            return item
        return CommandOutput(stdout=item, stderr="")

    @property
    def last_args(self) -> list[str]:
        """Arguments of the last call, without the --talosconfig prefix."""
        args = self.calls[-1][1]
        assert args[:2] == ["--talosconfig", TALOSCONFIG]
        return args[2:]


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def ctl(executor) -> Talosctl:
    return Talosctl(TALOSCONFIG, executor)


@pytest.fixture
def dispatcher(ctl):
    return build_dispatcher(ctl)


@pytest.fixture
def transport(dispatcher) -> TransportLoop:
    return TransportLoop(dispatcher)


def request_line(method: str, params: dict | None = None, id=1, **extra) -> bytes:
    payload = {"jsonrpc": "2.0", "method": method, "id": id, **extra}
    if params is not None:
        payload["params"] = params
    return (json.dumps(payload) + "\n").encode()


# ---------------------------------------------------------------------------
# Sample talosctl output
# ---------------------------------------------------------------------------

VERSION_TEXT = "Client:\n\tTag:         v1.7.4\n\tSHA:         abc1234"

CONTAINERS_TEXT = "\n".join(
    [
        "NODE          NAMESPACE   ID         IMAGE                                  PID    STATUS",
        "10.5.0.2      system      apid       ghcr.io/siderolabs/apid:v1.7.4         1210   RUNNING",
        "10.5.0.2      system      trustd     ghcr.io/siderolabs/trustd:v1.7.4       1302   RUNNING",
    ]
)

HEALTH_TEXT = "\n".join(
    [
        "discovered nodes: [\"10.5.0.2\" \"10.5.0.3\"]",
        "waiting for etcd to be healthy: ...",
        "waiting for etcd to be healthy: OK",
        "waiting for all k8s nodes to report ready: OK",
    ]
)
