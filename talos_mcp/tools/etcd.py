"""
Machine configuration and etcd tools.

Tools:
  apply_config      — apply a machine config file to a node  (destructive)
  validate_config   — validate a machine config file locally
  get_etcd_status   — etcd member status
  get_etcd_members  — etcd member list
  bootstrap_etcd    — bootstrap etcd on the first control plane node  (destructive)
  defrag_etcd       — defragment the etcd database  (destructive)
"""

from __future__ import annotations

from talos_mcp.schema import ParameterSpec, ParamType, ToolSchema
from talos_mcp.talosctl import Talosctl
from talos_mcp.tools.common import node, node_args
from talos_mcp.validator import ResolvedParams

# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------

ETCD_TOOLS: list[ToolSchema] = [
    ToolSchema(
        name="apply_config",
        description="Apply a configuration file to a Talos node",
        parameters=(
            node("IP address or hostname of the Talos node to configure"),
            ParameterSpec("file", ParamType.STRING, "Path to the configuration file to apply", required=True),
        ),
        destructive=True,
    ),
    ToolSchema(
        name="validate_config",
        description="Validate a Talos configuration file",
        parameters=(
            ParameterSpec(
                "config", ParamType.STRING, "Path to the configuration file to validate", required=True
            ),
            ParameterSpec(
                "mode", ParamType.STRING, "Validation mode (defaults to 'container')", default="container"
            ),
        ),
    ),
    ToolSchema(
        name="get_etcd_status",
        description="Get etcd cluster status from a Talos node",
        parameters=(node(),),
    ),
    ToolSchema(
        name="get_etcd_members",
        description="Get etcd cluster member information from a Talos node",
        parameters=(node(),),
    ),
    ToolSchema(
        name="bootstrap_etcd",
        description="Bootstrap etcd cluster on a Talos node",
        parameters=(node("IP address or hostname of the Talos node to bootstrap"),),
        destructive=True,
    ),
    ToolSchema(
        name="defrag_etcd",
        description="Defragment etcd database on a Talos node",
        parameters=(node("IP address or hostname of the Talos node to defragment"),),
        destructive=True,
    ),
]


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

async def handle_apply_config(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "apply-config", "--file", params["file"]))
    return {"status": "config applied", "file": params["file"], "output": out}


async def handle_validate_config(params: ResolvedParams, ctl: Talosctl) -> dict:
    mode = params["mode"]
    out = await ctl.run(["validate", "--config", params["config"], "--mode", mode])
    return {"validation": out, "mode": mode}


async def handle_etcd_status(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "etcd", "status"))
    return {"etcd_status": out}


async def handle_etcd_members(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "etcd", "members"))
    return {"etcd_members": out}


async def handle_bootstrap_etcd(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "bootstrap"))
    return {"status": "etcd bootstrapped", "output": out}


async def handle_defrag_etcd(params: ResolvedParams, ctl: Talosctl) -> dict:
    out = await ctl.run(node_args(params, "etcd", "defrag"))
    return {"status": "etcd defragmented", "output": out}


ETCD_HANDLERS = {
    "apply_config": handle_apply_config,
    "validate_config": handle_validate_config,
    "get_etcd_status": handle_etcd_status,
    "get_etcd_members": handle_etcd_members,
    "bootstrap_etcd": handle_bootstrap_etcd,
    "defrag_etcd": handle_defrag_etcd,
}
