"""
Line codec for the stdio JSON-RPC transport.

One request per input line, one response per output line. ``decode`` only
checks the envelope (``jsonrpc``, ``method``, ``params``, ``id``); it never
looks at the schema registry. ``encode`` always emits both ``result`` and
``error`` members, one of them ``null``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from mcp.types import ErrorData

from talos_mcp.errors import INVALID_REQUEST, PARSE_ERROR, DecodeError

JSONRPC_VERSION = "2.0"


@dataclass(frozen=True)
class Request:
    method: str
    params: dict[str, Any] = field(default_factory=dict)
    id: Any = None
    jsonrpc: str = JSONRPC_VERSION

    @property
    def is_notification(self) -> bool:
        return self.method.startswith("notifications/")


@dataclass(frozen=True)
class Response:
    id: Any = None
    result: Any = None
    error: ErrorData | None = None

    def __post_init__(self) -> None:
        if (self.result is None) == (self.error is None):
            raise ValueError("Response needs exactly one of result or error")

    @classmethod
    def success(cls, request_id: Any, result: Any) -> Response:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Any, error: ErrorData) -> Response:
        return cls(id=request_id, error=error)

    def to_dict(self) -> dict[str, Any]:
        error = None
        if self.error is not None:
            error = {"code": self.error.code, "message": self.error.message, "data": self.error.data}
        return {"jsonrpc": JSONRPC_VERSION, "result": self.result, "error": error, "id": self.id}


def _valid_id(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return value is None or isinstance(value, (str, int, float))


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def decode(line: bytes | str) -> Request:
    """Parse one input line into a ``Request`` or raise ``DecodeError``.

    ``NaN`` and ``Infinity`` literals, oversized integers and nesting too deep
    to parse are all reported as parse errors.
    """
    try:
        if isinstance(line, bytes):
            line = line.decode("utf-8")
        payload = json.loads(line, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        raise DecodeError(f"Parse error: {exc}", code=PARSE_ERROR) from None

    if not isinstance(payload, dict):
        raise DecodeError("Invalid request: expected a JSON object", code=INVALID_REQUEST)

    request_id = payload.get("id")
    if not _valid_id(request_id):
        raise DecodeError("Invalid request: id must be a string, a number or null")

    if payload.get("jsonrpc") != JSONRPC_VERSION:
        raise DecodeError(
            f"Invalid request: jsonrpc must be {JSONRPC_VERSION!r}", request_id=request_id
        )

    method = payload.get("method")
    if not isinstance(method, str):
        raise DecodeError("Invalid request: method must be a string", request_id=request_id)

    params = payload.get("params")
    if params is None:
        params = {}
    elif not isinstance(params, dict):
        raise DecodeError("Invalid request: params must be an object", request_id=request_id)

    return Request(method=method, params=params, id=request_id)


def encode(response: Response) -> bytes:
    """Serialize a response as a single newline-terminated UTF-8 line."""
    text = json.dumps(response.to_dict(), separators=(",", ":"), allow_nan=False)
    return (text + "\n").encode("utf-8")
