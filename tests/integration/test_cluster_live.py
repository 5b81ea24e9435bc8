"""
Integration tests for read-only tools against a live Talos cluster.
"""

from __future__ import annotations

import json

import pytest

from tests.conftest import request_line
from tests.integration.conftest import TEST_NODE, skip_no_cluster

pytestmark = [pytest.mark.integration, skip_no_cluster]


async def _call(transport, method, params, id=1) -> dict:
    return json.loads(await transport.handle_line(request_line(method, params, id=id)))


async def test_version_live(live_transport):
    payload = await _call(live_transport, "get_version", {"short": True})
    assert payload["error"] is None
    assert payload["result"]["version"]


async def test_containers_live(live_transport):
    payload = await _call(live_transport, "containers", {"node": TEST_NODE})
    assert payload["error"] is None
    assert "apid" in payload["result"]["containers"]


async def test_etcd_members_live(live_transport):
    payload = await _call(live_transport, "get_etcd_members", {"node": TEST_NODE})
    # Worker nodes do not run etcd; either outcome is a well-formed response.
    assert (payload["result"] is None) != (payload["error"] is None)


async def test_read_os_release_live(live_transport):
    payload = await _call(live_transport, "read", {"node": TEST_NODE, "path": "/etc/os-release"})
    assert payload["error"] is None
    assert "Talos" in payload["result"]["content"]


async def test_unreachable_node_is_execution_failure(live_transport):
    payload = await _call(live_transport, "get_mounts", {"node": "192.0.2.1"}, id="x")
    assert payload["id"] == "x"
    assert payload["result"] is None
    assert payload["error"]["message"]
