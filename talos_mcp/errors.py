"""
Exception hierarchy shared by the codec, validator, dispatcher and executor.

Every per-request failure is an ``RpcError`` carrying its JSON-RPC code, so the
transport loop can turn any of them into an error object without knowing where
it was raised. ``ConfigurationError`` sits outside that hierarchy: it is only
raised at start-up and ends the process.
"""

from __future__ import annotations

from typing import Any

from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    ErrorData,
)

# Implementation-defined server error (JSON-RPC reserves -32000..-32099).
EXECUTION_FAILED = -32000

__all__ = [
    "EXECUTION_FAILED",
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "ConfigurationError",
    "DecodeError",
    "ExecutionFailed",
    "InternalError",
    "RpcError",
    "UnknownMethod",
    "ValidationError",
]


class ConfigurationError(Exception):
    """Start-up misconfiguration: duplicate schema, missing handler, missing env."""


class RpcError(Exception):
    """Base class for failures reported back to the client as an error object."""

    code: int = INTERNAL_ERROR

    def __init__(self, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.data = data

    def to_error_data(self) -> ErrorData:
        return ErrorData(code=self.code, message=self.message, data=self.data)


class DecodeError(RpcError):
    """The input line could not be turned into a request.

    ``request_id`` is the id recovered from the line when it was a JSON object
    with a well-formed id; otherwise it stays ``None``.
    """

    def __init__(self, message: str, *, code: int = INVALID_REQUEST, request_id: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.request_id = request_id


class UnknownMethod(RpcError):
    code = METHOD_NOT_FOUND

    def __init__(self, method: str) -> None:
        super().__init__(f"Unknown method: {method}")
        self.method = method


class ValidationError(RpcError):
    """A parameter is missing, mistyped, out of range or not an allowed value."""

    code = INVALID_PARAMS

    _MISSING = object()

    def __init__(self, field: str, reason: str, value: Any = _MISSING) -> None:
        data: dict[str, Any] = {"field": field}
        if value is not self._MISSING:
            data["value"] = value
        super().__init__(f"Invalid parameter '{field}': {reason}", data=data)
        self.field = field
        self.reason = reason


class ExecutionFailed(RpcError):
    """The command executor reported a failure; ``reason`` holds the diagnostics."""

    code = EXECUTION_FAILED

    def __init__(self, reason: str, *, exit_status: int | None = None, stderr: str = "") -> None:
        super().__init__(reason, data={"exit_status": exit_status} if exit_status is not None else None)
        self.reason = reason
        self.exit_status = exit_status
        self.stderr = stderr


class InternalError(RpcError):
    code = INTERNAL_ERROR
