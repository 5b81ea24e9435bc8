"""
Async talosctl wrapper.

Uses asyncio.create_subprocess_exec, no shell involved. All callers pass node
names, paths and flag values as explicit list elements, never interpolated
into a shell string.

Two layers:
  - ``SubprocessExecutor`` runs any program and returns its captured output,
    or raises ``ExecutionFailed`` with the exit status and stderr.
  - ``Talosctl`` binds the executor to the talosctl binary and the client
    configuration (``--talosconfig``), which is what the tool handlers use.

No timeout is applied unless one is configured; a hung talosctl call blocks
the server until it returns.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Protocol, Sequence

from talos_mcp.errors import ExecutionFailed

log = logging.getLogger(__name__)

MAX_OUTPUT_BYTES = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Error enrichment
# ---------------------------------------------------------------------------

_ERROR_HINTS = {
    "executable file not found": (
        "talosctl binary not found. Ensure talosctl is installed and on your PATH."
    ),
    "No such file or directory": (
        "A file could not be found. Check the talosctl binary and the TALOSCONFIG path."
    ),
    "connection refused": (
        "Connection refused by the Talos API. The node may be down or the endpoint is wrong."
    ),
    "certificate signed by unknown authority": (
        "TLS verification failed. The talosconfig does not match this cluster's CA."
    ),
    "context deadline exceeded": (
        "The Talos API did not answer in time. Check node reachability and endpoints."
    ),
    "no request forwarding": (
        "The endpoint refused to proxy to the target node. Check --nodes against the talosconfig endpoints."
    ),
    "PermissionDenied": (
        "The talosconfig role is not allowed to perform this operation."
    ),
}


def _enrich_error(raw_stderr: str) -> str:
    """Prepend an actionable hint to common talosctl errors."""
    for pattern, hint in _ERROR_HINTS.items():
        if pattern in raw_stderr:
            return f"{hint}\n\ntalosctl stderr: {raw_stderr}"
    return raw_stderr


# ---------------------------------------------------------------------------
# Command executor
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CommandOutput:
    stdout: str
    stderr: str


class CommandExecutor(Protocol):
    async def execute(
        self, program: str, args: Sequence[str], env: Mapping[str, str]
    ) -> CommandOutput: ...


class SubprocessExecutor:
    """Runs a program as a child process and captures both output streams."""

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    async def execute(
        self, program: str, args: Sequence[str], env: Mapping[str, str]
    ) -> CommandOutput:
        command = f"{program} {' '.join(args)}"
        log.debug("exec: %s", command)
        try:
            proc = await asyncio.create_subprocess_exec(
                program,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=dict(env),
            )
        except OSError as exc:
            raise ExecutionFailed(_enrich_error(f"{program}: {exc.strerror or exc}")) from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            proc.kill()
            raise ExecutionFailed(f"{program} timed out after {self.timeout}s: {command}")

        if len(stdout) > MAX_OUTPUT_BYTES:
            stdout = stdout[:MAX_OUTPUT_BYTES] + b"\n[... output truncated at 10 MB ...]"

        err = stderr.decode(errors="replace").strip()
        if proc.returncode != 0:
            log.debug("exec failed (%s): %s", proc.returncode, err)
            raise ExecutionFailed(
                f"{program} failed: {_enrich_error(err)}" if err else f"{program} exited with code {proc.returncode}",
                exit_status=proc.returncode,
                stderr=err,
            )

        return CommandOutput(stdout=stdout.decode(errors="replace").strip(), stderr=err)


# ---------------------------------------------------------------------------
# talosctl binding
# ---------------------------------------------------------------------------

class Talosctl:
    """talosctl bound to one client configuration file."""

    def __init__(
        self,
        talosconfig: str,
        executor: CommandExecutor | None = None,
        *,
        program: str = "talosctl",
    ) -> None:
        self.talosconfig = talosconfig
        self.executor = executor or SubprocessExecutor()
        self.program = program

    def build_args(self, args: Sequence[str]) -> list[str]:
        return ["--talosconfig", self.talosconfig, *args]

    def environment(self) -> dict[str, str]:
        env = dict(os.environ)
        env["TALOSCONFIG"] = self.talosconfig
        return env

    async def _execute(self, args: Sequence[str]) -> CommandOutput:
        return await self.executor.execute(self.program, self.build_args(args), self.environment())

    async def run(self, args: Sequence[str]) -> str:
        """Run talosctl and return stdout as a string."""
        return (await self._execute(args)).stdout

    async def run_stderr(self, args: Sequence[str]) -> str:
        """Run talosctl and return stderr; ``talosctl health`` reports progress there."""
        return (await self._execute(args)).stderr
