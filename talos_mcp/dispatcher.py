"""
Method routing.

The dispatcher owns two tables built once at start-up: the schema registry
and the handler table. Their key sets must match exactly, so a tool that is
advertised but cannot be run (or the reverse) stops the server before it reads
its first line.

Protocol methods (``initialize``, ``tools/list``, ``tools/call``, ``ping``)
are answered here and never reach the command executor. Every other method
name is a tool name and is validated and run directly.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from mcp.types import LATEST_PROTOCOL_VERSION, CallToolResult, TextContent

from talos_mcp.errors import ConfigurationError, ValidationError
from talos_mcp.schema import SchemaRegistry
from talos_mcp.talosctl import Talosctl
from talos_mcp.tools.cluster import CLUSTER_HANDLERS, CLUSTER_TOOLS
from talos_mcp.tools.common import Handler
from talos_mcp.tools.etcd import ETCD_HANDLERS, ETCD_TOOLS
from talos_mcp.tools.files import FILE_HANDLERS, FILE_TOOLS
from talos_mcp.tools.inspection import INSPECTION_HANDLERS, INSPECTION_TOOLS
from talos_mcp.tools.network import NETWORK_HANDLERS, NETWORK_TOOLS
from talos_mcp.tools.nodes import NODE_HANDLERS, NODE_TOOLS
from talos_mcp.tools.services import SERVICE_HANDLERS, SERVICE_TOOLS
from talos_mcp.tools.storage import STORAGE_HANDLERS, STORAGE_TOOLS
from talos_mcp.validator import validate

log = logging.getLogger(__name__)

SERVER_NAME = "talos-mcp-server"
SERVER_TITLE = "Talos OS MCP Server"
SERVER_VERSION = "1.0.0"

ALL_TOOLS = (
    INSPECTION_TOOLS
    + FILE_TOOLS
    + NETWORK_TOOLS
    + SERVICE_TOOLS
    + STORAGE_TOOLS
    + CLUSTER_TOOLS
    + NODE_TOOLS
    + ETCD_TOOLS
)

ALL_HANDLERS: dict[str, Handler] = {
    **INSPECTION_HANDLERS,
    **FILE_HANDLERS,
    **NETWORK_HANDLERS,
    **SERVICE_HANDLERS,
    **STORAGE_HANDLERS,
    **CLUSTER_HANDLERS,
    **NODE_HANDLERS,
    **ETCD_HANDLERS,
}

PROTOCOL_METHODS = frozenset({"initialize", "tools/list", "tools/call", "ping"})


class Dispatcher:
    def __init__(
        self,
        registry: SchemaRegistry,
        handlers: Mapping[str, Handler],
        talosctl: Talosctl,
    ) -> None:
        missing = registry.names() - handlers.keys()
        if missing:
            raise ConfigurationError(f"No handler for declared tools: {', '.join(sorted(missing))}")
        extra = handlers.keys() - registry.names()
        if extra:
            raise ConfigurationError(f"Handlers without a tool schema: {', '.join(sorted(extra))}")
        clash = registry.names() & PROTOCOL_METHODS
        if clash:
            raise ConfigurationError(f"Tool names shadow protocol methods: {', '.join(sorted(clash))}")

        self.registry = registry
        self._handlers = dict(handlers)
        self.talosctl = talosctl

    # -----------------------------------------------------------------------
    # Protocol methods
    # -----------------------------------------------------------------------

    def capabilities(self) -> dict[str, Any]:
        """The capability advertisement: every registered tool schema."""
        tools = [t.model_dump(mode="json", by_alias=True, exclude_none=True) for t in self.registry.tools()]
        return {"tools": tools}

    def initialize(self, params: Mapping[str, Any]) -> dict[str, Any]:
        client = params.get("clientInfo")
        if isinstance(client, dict):
            log.info("client connected: %s %s", client.get("name", "?"), client.get("version", ""))
        return {
            "protocolVersion": LATEST_PROTOCOL_VERSION,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": SERVER_NAME, "title": SERVER_TITLE, "version": SERVER_VERSION},
            **self.capabilities(),
        }

    async def call_tool(self, params: Mapping[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str):
            raise ValidationError("name", "missing tool name", name)
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        elif not isinstance(arguments, dict):
            raise ValidationError("arguments", "expected an object", arguments)

        content = await self.run_tool(name, arguments)
        text = json.dumps(content, indent=2)
        result = CallToolResult(content=[TextContent(type="text", text=text)])
        return result.model_dump(mode="json", by_alias=True, exclude_none=True)

    # -----------------------------------------------------------------------
    # Tools
    # -----------------------------------------------------------------------

    async def run_tool(self, name: str, raw_params: Mapping[str, Any]) -> dict[str, Any]:
        schema = self.registry.lookup(name)
        params = validate(name, raw_params, schema)

        # Audit logging for write operations
        if schema.destructive:
            log.warning("[AUDIT] %s %s", name, dict(params))
        else:
            log.info("call %s %s", name, dict(params))

        return await self._handlers[name](params, self.talosctl)

    async def dispatch(self, method: str, raw_params: Mapping[str, Any]) -> dict[str, Any]:
        """Route one request. Raises an ``RpcError`` subclass on failure."""
        if method == "initialize":
            return self.initialize(raw_params)
        if method == "tools/list":
            return self.capabilities()
        if method == "ping":
            return {}
        if method == "tools/call":
            return await self.call_tool(raw_params)
        return await self.run_tool(method, raw_params)


def build_registry(read_only: bool = False) -> SchemaRegistry:
    registry = SchemaRegistry(ALL_TOOLS)
    return registry.without_destructive() if read_only else registry


def build_dispatcher(talosctl: Talosctl, *, read_only: bool = False) -> Dispatcher:
    registry = build_registry(read_only)
    handlers = {name: ALL_HANDLERS[name] for name in registry.names() if name in ALL_HANDLERS}
    return Dispatcher(registry, handlers, talosctl)
