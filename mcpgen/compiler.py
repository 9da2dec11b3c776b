"""Compile an OpenAPI document into MCP tool descriptors.

Walks paths and operations in declared order, merges parameters and the
JSON request body into one input schema per operation, and attaches the
security requirements that apply to it.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from .document import (
    get_default_security,
    get_paths,
    get_security_schemes,
    has_version_field,
    is_reference,
)
from .errors import DocumentShapeWarning, UnsupportedSecuritySchemeNotice
from .models import (
    CompileResult,
    ParameterSkip,
    SchemaNode,
    SecurityScheme,
    ToolDescriptor,
    validate_parameter,
)
from .naming import build_description, build_tool_id, build_tool_name
from .schema_resolver import SchemaResolver
from .security import parse_security_schemes, unsupported_notice

log = logging.getLogger(__name__)

# Operation keys of a path item that become tools
HTTP_METHODS = ("get", "post", "put", "delete", "patch", "options", "head")

# Methods whose JSON request body is merged into the input schema
BODY_METHODS = ("post", "put", "patch")

JSON_MEDIA_TYPE = "application/json"


class _InputSchemaBuilder:
    """Mutable accumulator for one tool's input schema."""

    def __init__(self) -> None:
        self.properties: dict[str, SchemaNode] = {}
        self.required: list[str] = []

    def add(self, name: str, node: SchemaNode, required: bool = False) -> None:
        self.properties[name] = node
        if required:
            self.require(name)

    def require(self, name: str) -> None:
        if name not in self.required:
            self.required.append(name)

    def replace_with(self, node: SchemaNode) -> None:
        # Shallow overwrite: the resolved object schema wins wholesale
        self.properties = dict(node.properties)
        self.required = list(node.required)

    def build(self) -> SchemaNode:
        return SchemaNode(
            type="object",
            properties=dict(self.properties),
            required=tuple(r for r in self.required if r in self.properties),
        )


class ToolCompiler:
    """Build the ordered tool list and security map for one document."""

    def __init__(self, document: dict[str, Any], logger: logging.Logger | None = None) -> None:
        self.document = document
        self._log = logger or log
        self._resolver = SchemaResolver(document, logger=self._log)

    def compile(self) -> CompileResult:
        """Compile every operation; raises ComponentNotFoundError on a dangling $ref."""
        security_schemes = parse_security_schemes(get_security_schemes(self.document))
        self._report_unsupported(security_schemes)

        warnings: list[DocumentShapeWarning] = []
        if not has_version_field(self.document):
            warnings.append(self._warn(
                "The document might not be a valid OpenAPI specification:"
                " missing 'openapi' or 'swagger' version field"
            ))

        paths = get_paths(self.document)
        if not paths:
            warnings.append(self._warn("No paths found in OpenAPI specification"))
            return CompileResult(security_schemes=security_schemes, warnings=tuple(warnings))

        self._log.info("Processing %d API paths...", len(paths))

        tools: list[ToolDescriptor] = []
        tool_map: dict[str, ToolDescriptor] = {}

        for path, path_item in paths.items():
            if not isinstance(path_item, dict):
                continue

            for method, operation in path_item.items():
                if method.lower() not in HTTP_METHODS or not isinstance(operation, dict):
                    continue

                tool = self._build_tool(method.lower(), path, operation)
                if tool.id in tool_map:
                    self._log.debug("Duplicate tool id %s, last definition wins", tool.id)
                tools.append(tool)
                tool_map[tool.id] = tool

        if not tools:
            warnings.append(self._warn(
                "No API tools were generated from the specification."
                " The spec might not contain valid paths/operations."
            ))

        self._log.info("Generated %d MCP tools from the OpenAPI spec", len(tools))

        return CompileResult(
            tools=tuple(tools),
            tool_map=tool_map,
            security_schemes=security_schemes,
            warnings=tuple(warnings),
        )

    def _build_tool(self, method: str, path: str, operation: dict[str, Any]) -> ToolDescriptor:
        tool_id = build_tool_id(method, path)
        self._log.debug("Processing endpoint: %s %s -> Tool ID: %s", method.upper(), path, tool_id)

        schema = _InputSchemaBuilder()
        self._merge_parameters(schema, operation)
        if method in BODY_METHODS:
            self._merge_request_body(schema, operation)

        if "security" in operation:
            security = operation["security"] or []
        else:
            security = get_default_security(self.document)

        return ToolDescriptor(
            id=tool_id,
            name=build_tool_name(method, path, operation),
            description=build_description(method, path, operation),
            method=method.upper(),
            path=path,
            input_schema=schema.build(),
            security=tuple(dict(r) for r in security),
        )

    def _merge_parameters(self, schema: _InputSchemaBuilder, operation: dict[str, Any]) -> None:
        for raw in operation.get("parameters") or []:
            param = validate_parameter(raw)
            if isinstance(param, ParameterSkip):
                self._log.debug("Skipping parameter: %s", param.reason)
                continue

            node = self._resolver.resolve_inline(
                param.schema, param.name, default_description=f"{param.name} parameter",
            )
            node = replace(node, description=param.description or f"{param.name} parameter")
            schema.add(param.name, node, required=param.required)

    def _merge_request_body(self, schema: _InputSchemaBuilder, operation: dict[str, Any]) -> None:
        request_body = operation.get("requestBody") or {}
        media = (request_body.get("content") or {}).get(JSON_MEDIA_TYPE) or {}
        body_schema = media.get("schema")
        if not body_schema:
            return

        if body_schema.get("properties") is not None:
            for prop_name, prop_schema in body_schema["properties"].items():
                schema.add(prop_name, self._resolver.resolve_inline(prop_schema, prop_name))
            required = body_schema.get("required")
            if isinstance(required, list):
                for name in required:
                    schema.require(name)
        elif is_reference(body_schema):
            resolved = self._resolver.resolve_ref(body_schema["$ref"])
            if resolved.type != "object":
                self._log.debug(
                    "Request body %s resolves to a %s, not merged",
                    body_schema["$ref"], resolved.type,
                )
                return
            schema.replace_with(resolved)

    def _report_unsupported(self, schemes: dict[str, SecurityScheme]) -> None:
        for name, scheme in schemes.items():
            if not scheme.is_supported:
                self._log.info("%s", UnsupportedSecuritySchemeNotice(unsupported_notice(name, scheme)))

    def _warn(self, message: str) -> DocumentShapeWarning:
        self._log.warning("Warning: %s", message)
        return DocumentShapeWarning(message)


def compile_document(document: dict[str, Any], logger: logging.Logger | None = None) -> CompileResult:
    """Compile ``document`` into tools and security schemes."""
    return ToolCompiler(document, logger=logger).compile()
