"""
Network tools (read-only).

Tools:
  interfaces               — addresses resource (talosctl get addresses)
  routes                   — routes resource (talosctl get routes)
  get_netstat              — socket/connection listing
  capture_packets          — pcap on an interface for a fixed duration
  get_network_io_cgroups   — io cgroup preset
  list_network_interfaces  — /sys/class/net directory listing
"""

from __future__ import annotations

from talos_mcp.schema import ParameterSpec, ParamType, ToolSchema
from talos_mcp.talosctl import Talosctl
from talos_mcp.tools.common import get_resource, node, node_args, output_format, resource_namespace
from talos_mcp.validator import ResolvedParams

# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

NETWORK_TOOLS: list[ToolSchema] = [
    ToolSchema(
        name="interfaces",
        description="Get detailed network interface information including addresses and links",
        parameters=(node(), resource_namespace(), output_format()),
    ),
    ToolSchema(
        name="routes",
        description="Get network routing table information for a Talos node",
        parameters=(node(), resource_namespace(), output_format()),
    ),
    ToolSchema(
        name="get_netstat",
        description="Get network connection statistics from a Talos node",
        parameters=(node(),),
    ),
    ToolSchema(
        name="capture_packets",
        description="Capture network packets on a Talos node interface",
        parameters=(
            node("IP address or hostname of the Talos node to capture from"),
            ParameterSpec(
                "interface",
                ParamType.STRING,
                "Network interface to capture from (defaults to eth0)",
                default="eth0",
            ),
            ParameterSpec(
                "duration",
                ParamType.STRING,
                "Duration to capture packets (defaults to 10s)",
                default="10s",
            ),
        ),
    ),
    ToolSchema(
        name="get_network_io_cgroups",
        description="Get network I/O cgroup statistics from a Talos node",
        parameters=(node(),),
    ),
    ToolSchema(
        name="list_network_interfaces",
        description="List network interfaces on a Talos node (legacy method)",
        parameters=(node(),),
    ),
]


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

async def handle_interfaces(params: ResolvedParams, ctl: Talosctl) -> dict:
    out, namespace, output = await get_resource(params, ctl, "addresses")
    return {"interfaces": out, "namespace": namespace, "output_format": output}


async def handle_routes(params: ResolvedParams, ctl: Talosctl) -> dict:
    out, namespace, output = await get_resource(params, ctl, "routes")
    return {"routes": out, "namespace": namespace, "output_format": output}


async def handle_netstat(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "netstat"))
    return {"netstat": out}


async def handle_capture_packets(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(
        node_args(params, "pcap", "--interface", params["interface"], "--duration", params["duration"])
    )
    return {"packets": out, "interface": params["interface"], "duration": params["duration"]}


async def handle_network_io_cgroups(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "cgroups", "--preset", "io"))
    return {"network_io": out}


async def handle_list_network_interfaces(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "list", "/sys/class/net"))
    return {"interfaces": out}


NETWORK_HANDLERS = {
    "interfaces": handle_interfaces,
    "routes": handle_routes,
    "get_netstat": handle_netstat,
    "capture_packets": handle_capture_packets,
    "get_network_io_cgroups": handle_network_io_cgroups,
    "list_network_interfaces": handle_list_network_interfaces,
}
