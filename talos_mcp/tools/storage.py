"""
Storage and hardware tools (read-only).

Tools:
  disks       — disks resource (talosctl get disks)
  list_disks  — /sys/block directory listing
"""

from __future__ import annotations

from talos_mcp.schema import ToolSchema
from talos_mcp.talosctl import Talosctl
from talos_mcp.tools.common import get_resource, node, node_args, output_format, resource_namespace
from talos_mcp.validator import ResolvedParams

STORAGE_TOOLS: list[ToolSchema] = [
    ToolSchema(
        name="disks",
        description="Get detailed disk information from a Talos node",
        parameters=(node(), resource_namespace(), output_format()),
    ),
    ToolSchema(
        name="list_disks",
        description="List disk devices on a Talos node",
        parameters=(node(),),
    ),
]


async def handle_disks(params: ResolvedParams, ctl: Talosctl) -> dict:
    out, namespace, output = await get_resource(params, ctl, "disks")
    return {"disks": out, "namespace": namespace, "output_format": output}


async def handle_list_disks(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "list", "/sys/block"))
    return {"disks": out}


STORAGE_HANDLERS = {
    "disks": handle_disks,
    "list_disks": handle_list_disks,
}
