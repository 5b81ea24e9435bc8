"""
File system tools.

Tools:
  list        — list a directory (long, humanize, recurse/depth, type filter)
  read        — read a file
  copy        — copy a file or directory out of the node
  get_usage   — disk usage for a path
  get_mounts  — mount table
"""

from __future__ import annotations

from talos_mcp.schema import ParameterSpec, ParamType, ToolSchema
from talos_mcp.talosctl import Talosctl
from talos_mcp.tools.common import node, node_args
from talos_mcp.validator import ResolvedParams

# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

FILE_TOOLS: list[ToolSchema] = [
    ToolSchema(
        name="list",
        description="List files and directories at a specified path on a Talos node",
        parameters=(
            node(),
            ParameterSpec("path", ParamType.STRING, "Directory path to list (defaults to root /)", default="/"),
            ParameterSpec("long", ParamType.BOOLEAN, "Display additional file details", default=False),
            ParameterSpec("humanize", ParamType.BOOLEAN, "Humanize size and time in the output", default=False),
            ParameterSpec("recurse", ParamType.BOOLEAN, "Recurse into subdirectories", default=False),
            ParameterSpec(
                "depth",
                ParamType.INTEGER,
                "Maximum recursion depth (defaults to 1)",
                default=1,
                minimum=1,
            ),
            ParameterSpec(
                "type",
                ParamType.STRING_ARRAY,
                "Filter by specified file types",
                allowed_values=("f", "d", "l", "L"),
            ),
        ),
    ),
    ToolSchema(
        name="read",
        description="Read the contents of a file on a Talos node",
        parameters=(
            node(),
            ParameterSpec("path", ParamType.STRING, "Full path to the file to read", required=True),
        ),
    ),
    ToolSchema(
        name="copy",
        description="Copy files to/from a Talos node",
        parameters=(
            node("IP address or hostname of the Talos node"),
            ParameterSpec("source", ParamType.STRING, "Source file path (local or remote)", required=True),
            ParameterSpec(
                "destination", ParamType.STRING, "Destination file path (local or remote)", required=True
            ),
        ),
    ),
    ToolSchema(
        name="get_usage",
        description="Get disk usage information for a path on a Talos node",
        parameters=(
            node(),
            ParameterSpec(
                "path", ParamType.STRING, "Path to check disk usage for (defaults to root /)", default="/"
            ),
        ),
    ),
    ToolSchema(
        name="get_mounts",
        description="Get filesystem mount information from a Talos node",
        parameters=(node(),),
    ),
]


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

async def handle_list(params: ResolvedParams, ctl: Talosctl) -> dict:
    path = params["path"]
    long = params["long"]
    humanize = params["humanize"]
    recurse = params["recurse"]
    depth = params["depth"]
    file_types = params.get("type")

    args = node_args(params, "list", path)
    if long:
        args.append("--long")
    if humanize:
        args.append("--humanize")
    # --recurse and --depth are mutually exclusive
    if recurse:
        args.append("--recurse")
    elif depth != 1:
        args += ["--depth", str(depth)]
    for file_type in file_types or []:
        args += ["--type", file_type]

    out = await ctl.run(args)
    return {
        "list": out,
        "path": path,
        "long": long,
        "humanize": humanize,
        "recurse": recurse,
        "depth": depth,
        "types": file_types,
    }


async def handle_read(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "read", params["path"]))
    return {"content": out}


async def handle_copy(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "copy", params["source"], params["destination"]))
    return {"copy": out}


async def handle_usage(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "usage", params["path"]))
    return {"usage": out}


async def handle_mounts(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "mounts"))
    return {"mounts": out}


FILE_HANDLERS = {
    "list": handle_list,
    "read": handle_read,
    "copy": handle_copy,
    "get_usage": handle_usage,
    "get_mounts": handle_mounts,
}
