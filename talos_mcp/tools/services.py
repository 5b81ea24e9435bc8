"""
Service and logging tools.

Tools:
  dmesg       — kernel ring buffer
  service     — service status/start/stop/restart  (destructive)
  restart     — restart a service                  (destructive)
  get_logs    — service or container logs
  get_events  — machine event stream
"""

from __future__ import annotations

from talos_mcp.schema import ParameterSpec, ParamType, ToolSchema
from talos_mcp.talosctl import Talosctl
from talos_mcp.tools.common import containerd_namespace, kubernetes_flag, node, node_args
from talos_mcp.validator import ResolvedParams

# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

SERVICE_TOOLS: list[ToolSchema] = [
    ToolSchema(
        name="dmesg",
        description="Get kernel ring buffer messages (system logs) from a Talos node",
        parameters=(node(),),
    ),
    ToolSchema(
        name="service",
        description=(
            "Manage services on a Talos node (get status, start, stop, restart). "
            "Not available in read-only mode, including action=status"
        ),
        parameters=(
            node(),
            ParameterSpec(
                "service",
                ParamType.STRING,
                "Name of the service to manage (e.g., kubelet, etcd, containerd)",
                required=True,
            ),
            ParameterSpec(
                "action",
                ParamType.ENUM,
                "Action to perform on the service (defaults to 'status')",
                default="status",
                allowed_values=("status", "start", "stop", "restart"),
            ),
        ),
        destructive=True,
    ),
    ToolSchema(
        name="restart",
        description="Restart a specific service on a Talos node",
        parameters=(
            node("IP address or hostname of the Talos node"),
            ParameterSpec(
                "service",
                ParamType.STRING,
                "Name of the service to restart (e.g., kubelet, etcd, containerd)",
                required=True,
            ),
        ),
        destructive=True,
    ),
    ToolSchema(
        name="get_logs",
        description="Get service logs from a Talos node",
        parameters=(
            node(),
            ParameterSpec(
                "service",
                ParamType.STRING,
                "Name of the service to get logs for (e.g., kubelet, etcd)",
                required=True,
            ),
            ParameterSpec(
                "tail",
                ParamType.INTEGER,
                "Number of lines to show from the end of the logs (e.g., 100)",
                minimum=1,
            ),
            kubernetes_flag(
                "Use the k8s.io containerd namespace to access Kubernetes containers (defaults to false)"
            ),
        ),
    ),
    ToolSchema(
        name="get_events",
        description="Get system events from a Talos node",
        parameters=(node(),),
    ),
]


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

async def handle_dmesg(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "dmesg"))
    return {"dmesg": out}


async def handle_service(params: ResolvedParams, ctl: Talosctl) -> dict:
    service = params["service"]
    action = params["action"]
    out = await ctl.run(node_args(params, "service", service, action))
    return {"service": out, "name": service, "action": action}


async def handle_restart(params: ResolvedParams, ctl: Talosctl) -> dict:
    service = params["service"]
    out = await ctl.run(node_args(params, "service", service, "restart"))
    return {"restart": out, "name": service}


async def handle_logs(params: ResolvedParams, ctl: Talosctl) -> dict:
    service = params["service"]
    tail = params.get("tail")
    kubernetes = params["kubernetes"]

    args = node_args(params, "logs", service)
    if tail is not None:
        args += ["--tail", str(tail)]
    if kubernetes:
        args.append("--kubernetes")

    out = await ctl.run(args)
    return {
        "logs": out,
        "service": service,
        "tail_lines": tail,
        "namespace": containerd_namespace(kubernetes),
    }


async def handle_events(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "events"))
    return {"events": out}


SERVICE_HANDLERS = {
    "dmesg": handle_dmesg,
    "service": handle_service,
    "restart": handle_restart,
    "get_logs": handle_logs,
    "get_events": handle_events,
}
