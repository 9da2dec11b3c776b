"""Materialize OpenAPI schemas into SchemaNode trees.

Handles:
- $ref resolution against #/components/schemas (last path segment)
- $ref inside object properties and array items (inlined, not pointed to)
- enum and description carry-through
- absent types (default "string")
- self- and mutually-referential components (placeholder, no expansion)
"""

from __future__ import annotations

import logging
from typing import Any

from .document import component_name, get_schemas, is_reference
from .errors import ComponentNotFoundError
from .models import SchemaNode

log = logging.getLogger(__name__)


def _enum_of(schema: dict[str, Any]) -> tuple[Any, ...] | None:
    values = schema.get("enum")
    if values is None:
        return None
    return tuple(values)


class SchemaResolver:
    """Resolve component schemas of one document into inlined trees.

    The resolver keeps no state between calls; the set of components on
    the active resolution path is threaded through the recursion.
    """

    def __init__(self, document: dict[str, Any], logger: logging.Logger | None = None) -> None:
        self._schemas = get_schemas(document)
        self._log = logger or log

    def resolve(self, name: str) -> SchemaNode:
        """Resolve a component by name, e.g. 'Pet'."""
        return self._resolve_component(name, frozenset())

    def resolve_ref(self, ref: str) -> SchemaNode:
        """Resolve a '$ref' string such as '#/components/schemas/Pet'."""
        return self.resolve(component_name(ref))

    def resolve_inline(
        self,
        schema: dict[str, Any] | None,
        name: str,
        default_description: str | None = None,
    ) -> SchemaNode:
        """Convert one property or parameter schema.

        ``default_description`` defaults to '<name> property'.
        """
        if default_description is None:
            default_description = f"{name} property"
        return self._convert(schema, default_description, frozenset())

    def _resolve_component(self, name: str, active: frozenset[str]) -> SchemaNode:
        if name in active:
            self._log.debug("Recursive reference to %s, not expanding", name)
            return SchemaNode(
                type="object",
                description=f"Recursive reference to {name}",
                recursive_ref=name,
            )

        if name not in self._schemas:
            raise ComponentNotFoundError(name)

        component = self._schemas[name] or {}
        active = active | {name}

        declared = component.get("properties")
        if declared is None:
            # Aliases ($ref-only), arrays and scalar components
            return self._convert(component, None, active, default_type="object")

        properties: dict[str, SchemaNode] = {}
        for prop_name, prop_schema in declared.items():
            properties[prop_name] = self._convert(
                prop_schema, f"{prop_name} property", active,
            )

        required = component.get("required")
        if not isinstance(required, list):
            required = []
        dropped = [r for r in required if r not in properties]
        if dropped:
            self._log.debug("Component %s lists undeclared required names: %s", name, dropped)

        return SchemaNode(type="object", properties=properties, required=tuple(required))

    def _convert(
        self,
        schema: dict[str, Any] | None,
        default_description: str | None,
        active: frozenset[str],
        default_type: str = "string",
    ) -> SchemaNode:
        if is_reference(schema):
            return self._resolve_component(component_name(schema["$ref"]), active)

        schema = schema or {}
        schema_type = schema.get("type") or default_type

        items = None
        if schema_type == "array":
            raw_items = schema.get("items")
            if is_reference(raw_items):
                items = self._resolve_component(component_name(raw_items["$ref"]), active)
            elif isinstance(raw_items, dict):
                items = SchemaNode(type=raw_items.get("type") or "string")

        return SchemaNode(
            type=schema_type,
            description=schema.get("description") or default_description,
            enum=_enum_of(schema),
            items=items,
        )
