"""Error and warning types raised or reported while compiling a document."""

from __future__ import annotations


class McpGenError(Exception):
    """Base class for compile failures."""


class ComponentNotFoundError(McpGenError, KeyError):
    """A $ref points at a schema component the document does not declare."""

    def __init__(self, component_name: str) -> None:
        self.component_name = component_name
        super().__init__(component_name)

    def __str__(self) -> str:
        return f"Schema component not found: #/components/schemas/{self.component_name}"


class DocumentShapeWarning(UserWarning):
    """The document is usable but not shaped as expected (e.g. no paths)."""


class UnsupportedSecuritySchemeNotice(UserWarning):
    """An oauth2/openIdConnect (or unknown) scheme needs manual configuration."""
