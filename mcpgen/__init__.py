"""Compile OpenAPI documents into MCP tool descriptors."""

from .compiler import ToolCompiler, compile_document
from .errors import ComponentNotFoundError, DocumentShapeWarning, McpGenError
from .models import CompileResult, SchemaNode, SecurityScheme, ToolDescriptor
from .schema_resolver import SchemaResolver
from .security import CredentialAuth, env_names_for

__all__ = [
    "CompileResult",
    "ComponentNotFoundError",
    "CredentialAuth",
    "DocumentShapeWarning",
    "McpGenError",
    "SchemaNode",
    "SchemaResolver",
    "SecurityScheme",
    "ToolCompiler",
    "ToolDescriptor",
    "compile_document",
    "env_names_for",
]
