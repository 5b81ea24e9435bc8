"""
Core cluster tools (read-only).

Tools:
  get_health   — talosctl health across control plane and worker nodes
  get_version  — talosctl client version
  get_time     — node time, optionally checked against an NTP server

``talosctl health`` writes its progress report to stderr, so ``get_health``
captures stderr instead of stdout.
"""

from __future__ import annotations

from talos_mcp.errors import ExecutionFailed, ValidationError
from talos_mcp.schema import ParameterSpec, ParamType, ToolSchema
from talos_mcp.talosctl import Talosctl
from talos_mcp.tools.common import node
from talos_mcp.validator import ResolvedParams

DEFAULT_CONTROL_PLANES = ("192.168.1.77",)

# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

CLUSTER_TOOLS: list[ToolSchema] = [
    ToolSchema(
        name="get_health",
        description="Check the health status of the Talos cluster",
        parameters=(
            ParameterSpec(
                "control_planes",
                ParamType.STRING_ARRAY,
                "Array of IP addresses or hostnames of control plane nodes (defaults to [192.168.1.77])",
                default=DEFAULT_CONTROL_PLANES,
            ),
            ParameterSpec(
                "worker_nodes",
                ParamType.STRING_ARRAY,
                "Array of IP addresses or hostnames of worker nodes",
            ),
            ParameterSpec("init_node", ParamType.STRING, "IP address or hostname of the init node"),
            ParameterSpec(
                "timeout",
                ParamType.STRING,
                "Timeout duration for health check (defaults to 120s)",
                default="120s",
            ),
            ParameterSpec(
                "run_e2e", ParamType.BOOLEAN, "Run Kubernetes e2e test (defaults to false)", default=False
            ),
            ParameterSpec("k8s_endpoint", ParamType.STRING, "Use endpoint instead of kubeconfig default"),
            ParameterSpec(
                "server", ParamType.BOOLEAN, "Run server-side check (defaults to true)", default=True
            ),
        ),
    ),
    ToolSchema(
        name="get_version",
        description="Get Talos client version information",
        parameters=(
            ParameterSpec(
                "short", ParamType.BOOLEAN, "Print the short version (defaults to false)", default=False
            ),
        ),
    ),
    ToolSchema(
        name="get_time",
        description="Get current time from a Talos node",
        parameters=(
            node(),
            ParameterSpec(
                "check",
                ParamType.STRING,
                "Check server time against specified NTP server (e.g., 'pool.ntp.org')",
            ),
        ),
    ),
]


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def health_args(params: ResolvedParams) -> list[str]:
    """Build the ``talosctl health`` argument list in flag order."""
    control_planes = params["control_planes"]
    if not control_planes:
        raise ValidationError("control_planes", "at least one control plane node must be specified", [])

    args = ["--nodes", control_planes[0], "health"]
    args += ["--control-plane-nodes", ",".join(control_planes)]
    workers = params.get("worker_nodes")
    if workers is not None:
        args += ["--worker-nodes", ",".join(workers)]
    if params.get("init_node"):
        args += ["--init-node", params["init_node"]]
    args += ["--wait-timeout", params["timeout"]]
    if params["run_e2e"]:
        args.append("--run-e2e")
    if params.get("k8s_endpoint"):
        args += ["--k8s-endpoint", params["k8s_endpoint"]]
    # --server defaults to true on the talosctl side
    if not params["server"]:
        args.append("--server=false")
    return args


async def handle_health(params: ResolvedParams, ctl: Talosctl) -> dict:
    args = health_args(params)
    try:
        out = await ctl.run_stderr(args)
    except ExecutionFailed as e:
        raise ExecutionFailed(
            f"Health check failed: {e.reason}", exit_status=e.exit_status, stderr=e.stderr
        ) from e
    return {
        "health": out,
        "cluster_info": {
            "control_planes": params["control_planes"],
            "worker_nodes": params.get("worker_nodes"),
            "init_node": params.get("init_node"),
            "timeout": params["timeout"],
            "run_e2e": params["run_e2e"],
            "k8s_endpoint": params.get("k8s_endpoint"),
            "server_side": params["server"],
        },
    }


async def handle_version(params: ResolvedParams, ctl: Talosctl) -> dict:
    short = params["short"]
    args = ["version", "--client"]
    if short:
        args.append("--short")
    out = await ctl.run(args)
    return {"version": out, "short_format": short}


async def handle_time(params: ResolvedParams, ctl: Talosctl) -> dict:
    target = params["node"]
    if not target:
        raise ValidationError(
            "node", "time command requires a node to be specified", target
        )
    check = params.get("check")
    args = ["--nodes", target, "time"]
    if check:
        args += ["--check", check]
    out = await ctl.run(args)
    return {"time": out, "node": target, "ntp_check": check}


CLUSTER_HANDLERS = {
    "get_health": handle_health,
    "get_version": handle_version,
    "get_time": handle_time,
}
