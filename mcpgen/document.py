"""Accessors for the parts of an OpenAPI document the compiler reads.

The document is an already-loaded dict; nothing here touches disk or network.
"""

from __future__ import annotations

from typing import Any


def get_paths(document: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the document."""
    return document.get("paths") or {}


def get_schemas(document: dict[str, Any]) -> dict[str, Any]:
    """Extract component schemas from the document."""
    return (document.get("components") or {}).get("schemas") or {}


def get_security_schemes(document: dict[str, Any]) -> dict[str, Any]:
    """Extract declared security schemes from the document."""
    return (document.get("components") or {}).get("securitySchemes") or {}


def get_default_security(document: dict[str, Any]) -> list[dict[str, list[str]]]:
    """Top-level security requirements applied when an operation has none."""
    return document.get("security") or []


def has_version_field(document: dict[str, Any]) -> bool:
    return "openapi" in document or "swagger" in document


def is_reference(schema: Any) -> bool:
    """True when the schema is a {"$ref": ...} pointer."""
    return isinstance(schema, dict) and "$ref" in schema


def component_name(ref: str) -> str:
    """Map '#/components/schemas/Pet' to 'Pet' (last path segment)."""
    return ref.rsplit("/", 1)[-1]
