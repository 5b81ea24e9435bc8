"""Parameter specs and helpers shared by the tool families."""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from talos_mcp.schema import ParameterSpec, ParamType
from talos_mcp.talosctl import Talosctl
from talos_mcp.validator import ResolvedParams

Handler = Callable[[ResolvedParams, Talosctl], Awaitable[dict[str, Any]]]

NODE_QUERY = "IP address or hostname of the Talos node to query"
OUTPUT_FORMATS = ("json", "table", "yaml", "jsonpath")


def node(description: str = NODE_QUERY) -> ParameterSpec:
    return ParameterSpec("node", ParamType.STRING, description, required=True)


def resource_namespace() -> ParameterSpec:
    return ParameterSpec(
        "namespace",
        ParamType.STRING,
        "Resource namespace (default is to use default namespace per resource)",
    )


def output_format() -> ParameterSpec:
    return ParameterSpec(
        "output",
        ParamType.ENUM,
        "Output mode (default: table)",
        default="table",
        allowed_values=OUTPUT_FORMATS,
    )


def kubernetes_flag(description: str) -> ParameterSpec:
    return ParameterSpec("kubernetes", ParamType.BOOLEAN, description, default=False)


def containerd_namespace(kubernetes: bool) -> str:
    return "k8s.io" if kubernetes else "system"


def node_args(params: ResolvedParams, *command: str) -> list[str]:
    """``--nodes <node>`` followed by the sub-command."""
    return ["--nodes", params["node"], *command]


async def get_resource(params: ResolvedParams, ctl: Talosctl, resource: str) -> tuple[str, str | None, str]:
    """Run ``talosctl get <resource>`` with the shared namespace/output flags."""
    args = node_args(params, "get", resource)
    namespace = params.get("namespace")
    if namespace:
        args += ["--namespace", namespace]
    output = params["output"]
    args += ["--output", output]
    return await ctl.run(args), namespace, output
