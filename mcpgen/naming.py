"""Derive tool identifiers, names and descriptions from HTTP method + path.

Pattern: {VERB}-{path without leading slash or braces}

Examples:
  GET    /pets               -> GET-pets
  GET    /pets/{petId}       -> GET-pets-petId
  DELETE /pets/{petId}       -> DELETE-pets-petId
  POST   /store/order.json   -> POST-store-order-json
"""

from __future__ import annotations

import re
from typing import Any

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9-]")


def _clean_path(path: str) -> str:
    """Strip one leading slash and the braces around path parameters."""
    if path.startswith("/"):
        path = path[1:]
    return path.replace("{", "").replace("}", "")


def build_tool_id(method: str, path: str) -> str:
    """Build a tool id like 'GET-pets-petId'.

    The verb is part of the id, so operations on the same path never share one.
    """
    raw = f"{method.upper()}-{_clean_path(path)}"
    return _UNSAFE_ID_CHARS.sub("-", raw)


def build_tool_name(method: str, path: str, operation: dict[str, Any]) -> str:
    """operationId, else summary, else 'VERB path'."""
    return operation.get("operationId") or operation.get("summary") or f"{method.upper()} {path}"


def build_description(method: str, path: str, operation: dict[str, Any]) -> str:
    return operation.get("description") or f"Make a {method.upper()} request to {path}"
