"""
System inspection tools (read-only).

Tools:
  containers            — running containers (system or k8s.io namespace)
  stats                 — container CPU/memory statistics
  get_processes         — process list sorted by rss or cpu
  memory_verbose        — detailed memory usage
  get_cpu_memory_usage  — memory plus cpu cgroup summary
"""

from __future__ import annotations

from talos_mcp.schema import ParameterSpec, ParamType, ToolSchema
from talos_mcp.talosctl import Talosctl
from talos_mcp.tools.common import containerd_namespace, kubernetes_flag, node, node_args
from talos_mcp.validator import ResolvedParams

# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

INSPECTION_TOOLS: list[ToolSchema] = [
    ToolSchema(
        name="containers",
        description="List running containers on a Talos node with their current status",
        parameters=(
            node(),
            kubernetes_flag(
                "Use the k8s.io containerd namespace to list Kubernetes containers (defaults to false)"
            ),
        ),
    ),
    ToolSchema(
        name="stats",
        description="Get resource usage statistics (CPU, memory) for containers on a Talos node",
        parameters=(
            node(),
            kubernetes_flag(
                "Use the k8s.io containerd namespace to get Kubernetes containers stats (defaults to false)"
            ),
        ),
    ),
    ToolSchema(
        name="get_processes",
        description="List running processes on a Talos node",
        parameters=(
            node(),
            ParameterSpec(
                "sort",
                ParamType.ENUM,
                "Column to sort output by (defaults to 'rss')",
                default="rss",
                allowed_values=("rss", "cpu"),
            ),
        ),
    ),
    ToolSchema(
        name="memory_verbose",
        description="Get detailed memory usage information from a Talos node",
        parameters=(node(),),
    ),
    ToolSchema(
        name="get_cpu_memory_usage",
        description="Get CPU and memory usage statistics from a Talos node",
        parameters=(node(),),
    ),
]


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

async def handle_containers(params: ResolvedParams, ctl: Talosctl) -> dict:
    kubernetes = params["kubernetes"]
    args = node_args(params, "containers")
    if kubernetes:
        args.append("--kubernetes")
    out = await ctl.run(args)
    return {"containers": out, "namespace": containerd_namespace(kubernetes)}


async def handle_stats(params: ResolvedParams, ctl: Talosctl) -> dict:
    kubernetes = params["kubernetes"]
    args = node_args(params, "stats")
    if kubernetes:
        args.append("--kubernetes")
    out = await ctl.run(args)
    return {"stats": out, "namespace": containerd_namespace(kubernetes)}


async def handle_processes(params: ResolvedParams, ctl: Talosctl) -> dict:
    sort = params["sort"]
    out = await ctl.run(node_args(params, "processes", "--sort", sort))
    return {"processes": out, "sort_by": sort}


async def handle_memory_verbose(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "memory", "--verbose"))
    return {"memory_verbose": out}


async def handle_cpu_memory_usage(params: ResolvedParams, ctl: Talosctl) -> dict:
    memory = await ctl.run(node_args(params, "memory"))
    cpu = await ctl.run(node_args(params, "cgroups", "--preset", "cpu"))
    return {"memory": memory, "cpu": cpu}


INSPECTION_HANDLERS = {
    "containers": handle_containers,
    "stats": handle_stats,
    "get_processes": handle_processes,
    "memory_verbose": handle_memory_verbose,
    "get_cpu_memory_usage": handle_cpu_memory_usage,
}
