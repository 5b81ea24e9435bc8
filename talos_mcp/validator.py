"""
Schema-driven parameter validation.

``validate`` is the only place raw JSON parameters are inspected. Its output,
``ResolvedParams``, is an immutable mapping whose values are guaranteed to
match the declared types, with defaults filled in. Handlers read from it and
never see the raw request.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Iterator

from talos_mcp.errors import ValidationError
from talos_mcp.schema import ParameterSpec, ParamType, ToolSchema


class ResolvedParams(Mapping):
    """Validated parameters for one call. Absent optional parameters are missing keys."""

    def __init__(self, method: str, values: dict[str, Any]) -> None:
        self.method = method
        self._values = MappingProxyType(values)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ResolvedParams({self.method!r}, {dict(self._values)!r})"


def _check_type(spec: ParameterSpec, value: Any) -> Any:
    """Return the value in its resolved form, or raise if it has the wrong type."""
    expected = spec.type
    if expected in (ParamType.STRING, ParamType.ENUM):
        if not isinstance(value, str):
            raise ValidationError(spec.name, "expected a string", value)
        return value
    if expected is ParamType.INTEGER:
        # bool is an int subclass; true/false are not integers on the wire.
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(spec.name, "expected an integer", value)
        return value
    if expected is ParamType.BOOLEAN:
        if not isinstance(value, bool):
            raise ValidationError(spec.name, "expected a boolean", value)
        return value
    if expected is ParamType.STRING_ARRAY:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ValidationError(spec.name, "expected an array of strings", value)
        return list(value)
    raise AssertionError(f"unhandled parameter type {expected}")


def _check_constraints(spec: ParameterSpec, value: Any) -> None:
    if spec.minimum is not None and value < spec.minimum:
        raise ValidationError(spec.name, f"must be at least {spec.minimum}", value)
    if spec.allowed_values is None:
        return
    candidates = value if spec.type is ParamType.STRING_ARRAY else [value]
    for candidate in candidates:
        if candidate not in spec.allowed_values:
            allowed = ", ".join(spec.allowed_values)
            raise ValidationError(
                spec.name, f"{candidate!r} is not one of: {allowed}", value
            )


def _default_for(spec: ParameterSpec) -> Any:
    if isinstance(spec.default, tuple):
        return list(spec.default)
    return spec.default


def validate(method: str, raw_params: Mapping[str, Any], schema: ToolSchema) -> ResolvedParams:
    """Check ``raw_params`` against ``schema`` in declared parameter order.

    A key that is absent or explicitly ``null`` is treated as not supplied.
    Keys the schema does not declare are ignored. The first failing parameter
    raises ``ValidationError``; errors are not aggregated.
    """
    resolved: dict[str, Any] = {}
    for spec in schema.parameters:
        value = raw_params.get(spec.name)
        if value is None:
            if spec.has_default:
                resolved[spec.name] = _default_for(spec)
            elif spec.required:
                raise ValidationError(spec.name, "missing required parameter")
            continue
        value = _check_type(spec, value)
        _check_constraints(spec, value)
        resolved[spec.name] = value
    return ResolvedParams(method, resolved)
