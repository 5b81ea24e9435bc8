"""
Tool schema types and the schema registry.

A ``ToolSchema`` is the declared shape of one tool: its name, description and
an ordered list of ``ParameterSpec``. The ``SchemaRegistry`` is built once at
start-up from the tool catalogue in ``talos_mcp.tools`` and is read-only
afterwards. Its ``tools()`` projection (``mcp.types.Tool`` models) is what the
client sees from ``initialize`` and ``tools/list``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Iterator

from mcp.types import Tool, ToolAnnotations

from talos_mcp.errors import ConfigurationError, UnknownMethod


class ParamType(enum.Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    STRING_ARRAY = "array"
    ENUM = "enum"


@dataclass(frozen=True)
class ParameterSpec:
    """One declared parameter of a tool.

    ``default`` is ``None`` when the parameter has no default; no parameter in
    the catalogue uses ``null`` as a meaningful default. List defaults are
    stored as tuples so the parameter stays hashable and cannot be mutated through a
    resolved value.
    """

    name: str
    type: ParamType
    description: str
    required: bool = False
    default: Any = None
    allowed_values: tuple[str, ...] | None = None
    minimum: int | None = None

    def __post_init__(self) -> None:
        if isinstance(self.default, list):
            object.__setattr__(self, "default", tuple(self.default))
        if self.allowed_values is not None and not isinstance(self.allowed_values, tuple):
            object.__setattr__(self, "allowed_values", tuple(self.allowed_values))

        if self.required and self.has_default:
            raise ConfigurationError(f"Parameter '{self.name}' is required and also has a default")
        if self.type is ParamType.ENUM and not self.allowed_values:
            raise ConfigurationError(f"Enum parameter '{self.name}' declares no allowed values")
        if self.minimum is not None and self.type is not ParamType.INTEGER:
            raise ConfigurationError(f"Parameter '{self.name}' has a minimum but is not an integer")
        if self.has_default and self.allowed_values is not None:
            values = self.default if isinstance(self.default, tuple) else (self.default,)
            bad = [v for v in values if v not in self.allowed_values]
            if bad:
                raise ConfigurationError(
                    f"Default for parameter '{self.name}' is not an allowed value: {bad[0]!r}"
                )

    @property
    def has_default(self) -> bool:
        return self.default is not None

    def json_schema(self) -> dict[str, Any]:
        """Render the property entry used under ``inputSchema.properties``."""
        prop: dict[str, Any] = {}
        if self.type is ParamType.ENUM:
            prop["type"] = "string"
        else:
            prop["type"] = self.type.value
        prop["description"] = self.description

        if self.type is ParamType.STRING_ARRAY:
            items: dict[str, Any] = {"type": "string"}
            if self.allowed_values is not None:
                items["enum"] = list(self.allowed_values)
            prop["items"] = items
        elif self.allowed_values is not None:
            prop["enum"] = list(self.allowed_values)

        if self.minimum is not None:
            prop["minimum"] = self.minimum
        if self.has_default:
            prop["default"] = list(self.default) if isinstance(self.default, tuple) else self.default
        return prop


@dataclass(frozen=True)
class ToolSchema:
    name: str
    description: str
    parameters: tuple[ParameterSpec, ...] = ()
    destructive: bool = False
    _by_name: MappingProxyType = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.parameters, tuple):
            object.__setattr__(self, "parameters", tuple(self.parameters))
        by_name: dict[str, ParameterSpec] = {}
        for spec in self.parameters:
            if spec.name in by_name:
                raise ConfigurationError(f"Tool '{self.name}' declares parameter '{spec.name}' twice")
            by_name[spec.name] = spec
        object.__setattr__(self, "_by_name", MappingProxyType(by_name))

    def parameter(self, name: str) -> ParameterSpec:
        return self._by_name[name]

    @property
    def required(self) -> list[str]:
        return [p.name for p in self.parameters if p.required]

    def input_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.json_schema() for p in self.parameters},
        }
        if self.required:
            schema["required"] = self.required
        return schema

    def to_tool(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_schema(),
            annotations=ToolAnnotations(
                readOnlyHint=not self.destructive,
                destructiveHint=self.destructive,
                openWorldHint=True,
            ),
        )


class SchemaRegistry:
    """Immutable catalogue of tool schemas, keyed by tool name."""

    def __init__(self, schemas: Iterable[ToolSchema]) -> None:
        by_name: dict[str, ToolSchema] = {}
        for schema in schemas:
            if schema.name in by_name:
                raise ConfigurationError(f"Duplicate tool schema: {schema.name}")
            by_name[schema.name] = schema
        self._schemas = MappingProxyType(by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __iter__(self) -> Iterator[ToolSchema]:
        return iter(self._schemas.values())

    def __len__(self) -> int:
        return len(self._schemas)

    def lookup(self, method: str) -> ToolSchema:
        try:
            return self._schemas[method]
        except KeyError:
            raise UnknownMethod(method) from None

    def all_schemas(self) -> tuple[ToolSchema, ...]:
        return tuple(self._schemas.values())

    def names(self) -> frozenset[str]:
        return frozenset(self._schemas)

    def without_destructive(self) -> SchemaRegistry:
        return SchemaRegistry(s for s in self._schemas.values() if not s.destructive)

    def tools(self) -> list[Tool]:
        """The capability advertisement, rebuilt on every call."""
        return [s.to_tool() for s in self._schemas.values()]
