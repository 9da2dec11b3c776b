"""Data model produced by a compile pass.

Every object here is created once per document and handed read-only to
downstream generators: attributes are frozen and mappings are exposed as
read-only ``MappingProxyType`` views. Raw document fragments kept for
output (``SecurityScheme.raw``, ``ParameterDescriptor.schema``) are
read-only at the top level only. ``to_dict()`` methods give the
JSON-serializable boundary shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from .errors import DocumentShapeWarning

# Parameter locations OpenAPI 3 allows
PARAMETER_LOCATIONS = ("query", "header", "path", "cookie")


def _frozen(obj: Any, name: str, value: Mapping[str, Any]) -> None:
    object.__setattr__(obj, name, MappingProxyType(dict(value)))


@dataclass(frozen=True)
class SchemaNode:
    """A fully materialized schema tree (no $ref markers)."""

    type: str = "string"
    description: str | None = None
    enum: tuple[Any, ...] | None = None
    items: SchemaNode | None = None
    properties: Mapping[str, SchemaNode] = field(default_factory=dict, hash=False)
    required: tuple[str, ...] = ()
    # Set on placeholders emitted when a component references itself
    recursive_ref: str | None = None

    def __post_init__(self) -> None:
        _frozen(self, "properties", self.properties)
        # required must be an ordered, unique subset of properties
        seen: list[str] = []
        for name in self.required:
            if name in self.properties and name not in seen:
                seen.append(name)
        object.__setattr__(self, "required", tuple(seen))
        if self.enum is not None:
            object.__setattr__(self, "enum", tuple(self.enum))

    @property
    def is_placeholder(self) -> bool:
        return self.recursive_ref is not None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type}
        if self.description is not None:
            out["description"] = self.description
        if self.enum is not None:
            out["enum"] = list(self.enum)
        if self.items is not None:
            out["items"] = self.items.to_dict()
        if self.type == "object" or self.properties:
            out["properties"] = {k: v.to_dict() for k, v in self.properties.items()}
            out["required"] = list(self.required)
        return out


@dataclass(frozen=True)
class ParameterDescriptor:
    """A validated operation parameter."""

    name: str
    location: str  # query / header / path / cookie
    required: bool = False
    description: str | None = None
    schema: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _frozen(self, "schema", self.schema)


@dataclass(frozen=True)
class ParameterSkip:
    """Decision to drop a malformed parameter, with the reason."""

    reason: str
    raw: Any = field(default=None, hash=False)


def validate_parameter(raw: Any) -> ParameterDescriptor | ParameterSkip:
    """Validate a raw parameter object.

    Returns a ParameterDescriptor, or a ParameterSkip when ``name`` or
    ``in`` is missing or ``in`` is not a known location. Skips are never
    errors. Only a real boolean ``true`` marks a parameter required.
    """
    if not isinstance(raw, dict):
        return ParameterSkip("parameter is not an object", raw)
    name = raw.get("name")
    location = raw.get("in")
    if not name:
        return ParameterSkip("missing 'name'", raw)
    if not location:
        return ParameterSkip(f"parameter {name!r} missing 'in'", raw)
    if location not in PARAMETER_LOCATIONS:
        return ParameterSkip(f"parameter {name!r} has unknown location {location!r}", raw)
    schema = raw.get("schema")
    return ParameterDescriptor(
        name=name,
        location=location,
        required=raw.get("required") is True,
        description=raw.get("description") or None,
        schema=schema if isinstance(schema, dict) else {},
    )


class SchemeKind(str, Enum):
    API_KEY = "apiKey"
    HTTP_BEARER = "http-bearer"
    HTTP_BASIC = "http-basic"
    OAUTH2 = "oauth2"
    OPENID_CONNECT = "openIdConnect"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class SecurityScheme:
    """A declared security scheme, narrowed to the kinds we can apply."""

    kind: SchemeKind
    param_name: str | None = None  # apiKey only
    location: str | None = None  # apiKey only: header / query / cookie
    raw: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _frozen(self, "raw", self.raw)

    @property
    def is_supported(self) -> bool:
        return self.kind in (SchemeKind.API_KEY, SchemeKind.HTTP_BEARER, SchemeKind.HTTP_BASIC)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.raw)


@dataclass(frozen=True)
class ToolDescriptor:
    """One callable tool per HTTP operation.

    Each security requirement is a read-only mapping of scheme name to a
    tuple of scopes.
    """

    id: str
    name: str
    description: str
    method: str
    path: str
    input_schema: SchemaNode
    security: tuple[Mapping[str, tuple[str, ...]], ...] = field(default=(), hash=False)

    def __post_init__(self) -> None:
        requirements = tuple(
            MappingProxyType({scheme: tuple(scopes or ()) for scheme, scopes in r.items()})
            for r in self.security
        )
        object.__setattr__(self, "security", requirements)

    def scheme_names(self) -> list[str]:
        """All scheme names across every requirement alternative, in order."""
        names: list[str] = []
        for requirement in self.security:
            for name in requirement:
                if name not in names:
                    names.append(name)
        return names

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "method": self.method,
            "path": self.path,
            "inputSchema": self.input_schema.to_dict(),
            "security": [{k: list(v) for k, v in r.items()} for r in self.security],
        }


@dataclass(frozen=True)
class CompileResult:
    """Everything a compile pass hands to downstream generators."""

    tools: tuple[ToolDescriptor, ...] = ()
    tool_map: Mapping[str, ToolDescriptor] = field(default_factory=dict, hash=False)
    security_schemes: Mapping[str, SecurityScheme] = field(default_factory=dict, hash=False)
    warnings: tuple[DocumentShapeWarning, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "tools", tuple(self.tools))
        _frozen(self, "tool_map", self.tool_map)
        _frozen(self, "security_schemes", self.security_schemes)

    @property
    def tool_count(self) -> int:
        return len(self.tools)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tools": [t.to_dict() for t in self.tools],
            "securitySchemes": {k: v.to_dict() for k, v in self.security_schemes.items()},
        }
