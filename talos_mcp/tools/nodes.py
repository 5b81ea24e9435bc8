"""
Node lifecycle tools — write operations that change node or cluster state.

All of these are destructive and are hidden in read-only mode.

Tools:
  reboot_node    — reboot a node
  shutdown_node  — power a node off
  reset_node     — wipe a node back to factory defaults
  upgrade_node   — upgrade Talos on a node to an installer image
  upgrade_k8s    — upgrade the Kubernetes control plane
"""

from __future__ import annotations

from talos_mcp.schema import ParameterSpec, ParamType, ToolSchema
from talos_mcp.talosctl import Talosctl
from talos_mcp.tools.common import node, node_args
from talos_mcp.validator import ResolvedParams

DEFAULT_INSTALLER_IMAGE = "ghcr.io/siderolabs/installer:latest"

# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

NODE_TOOLS: list[ToolSchema] = [
    ToolSchema(
        name="reboot_node",
        description="Reboot a Talos node (DESTRUCTIVE OPERATION)",
        parameters=(node("IP address or hostname of the Talos node to reboot"),),
        destructive=True,
    ),
    ToolSchema(
        name="shutdown_node",
        description="Shutdown a Talos node (DESTRUCTIVE OPERATION)",
        parameters=(node("IP address or hostname of the Talos node to shutdown"),),
        destructive=True,
    ),
    ToolSchema(
        name="reset_node",
        description="Reset a Talos node to factory defaults (DESTRUCTIVE OPERATION)",
        parameters=(node("IP address or hostname of the Talos node to reset"),),
        destructive=True,
    ),
    ToolSchema(
        name="upgrade_node",
        description="Upgrade a Talos node to a new image version",
        parameters=(
            node("IP address or hostname of the Talos node to upgrade"),
            ParameterSpec(
                "image",
                ParamType.STRING,
                "Container image to upgrade to (defaults to latest installer)",
                default=DEFAULT_INSTALLER_IMAGE,
            ),
        ),
        destructive=True,
    ),
    ToolSchema(
        name="upgrade_k8s",
        description="Upgrade Kubernetes cluster version",
        parameters=(
            ParameterSpec(
                "from", ParamType.STRING, "Current Kubernetes version (defaults to 1.28.0)", default="1.28.0"
            ),
            ParameterSpec(
                "to", ParamType.STRING, "Target Kubernetes version (defaults to 1.29.0)", default="1.29.0"
            ),
        ),
        destructive=True,
    ),
]


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

async def handle_reboot(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "reboot"))
    return {"status": "reboot initiated", "node": params["node"], "output": out}


async def handle_shutdown(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "shutdown"))
    return {"status": "node shutdown initiated", "node": params["node"], "output": out}


async def handle_reset(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "reset"))
    return {"status": "node reset initiated", "node": params["node"], "output": out}


async def handle_upgrade_node(params: ResolvedParams, ctl: Talosctl) -> dict:
    image = params["image"]
    out = await ctl.run(node_args(params, "upgrade", "--image", image))
    return {"status": "upgrade initiated", "node": params["node"], "image": image, "output": out}


async def handle_upgrade_k8s(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(["upgrade-k8s", "--from", params["from"], "--to", params["to"]])
    return {"status": "k8s upgrade initiated", "from": params["from"], "to": params["to"], "output": out}


NODE_HANDLERS = {
    "reboot_node": handle_reboot,
    "shutdown_node": handle_shutdown,
    "reset_node": handle_reset,
    "upgrade_node": handle_upgrade_node,
    "upgrade_k8s": handle_upgrade_k8s,
}
