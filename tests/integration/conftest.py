"""
Integration test fixtures — requires talosctl and a reachable Talos cluster.

Set TALOSCONFIG to the client configuration and TALOS_TEST_NODE to a node
address the configuration can reach.
"""

from __future__ import annotations

import os
import shutil
import subprocess

import pytest

from talos_mcp.dispatcher import build_dispatcher
from talos_mcp.server import TransportLoop
from talos_mcp.talosctl import Talosctl

TEST_NODE = os.environ.get("TALOS_TEST_NODE", "")


def _cluster_reachable() -> bool:
    talosconfig = os.environ.get("TALOSCONFIG")
    if not (talosconfig and TEST_NODE and shutil.which("talosctl")):
        return False
    try:
        result = subprocess.run(
            ["talosctl", "--talosconfig", talosconfig, "--nodes", TEST_NODE, "version", "--short"],
            capture_output=True,
            timeout=10,
        )
        return result.returncode == 0
    except (OSError, subprocess.TimeoutExpired):
        return False


skip_no_cluster = pytest.mark.skipif(
    not _cluster_reachable(),
    reason="Talos cluster not reachable — set TALOSCONFIG and TALOS_TEST_NODE to run integration tests",
)


@pytest.fixture
def live_transport() -> TransportLoop:
    return TransportLoop(build_dispatcher(Talosctl(os.environ["TALOSCONFIG"])))
