"""Shared OpenAPI documents for compiler tests.

Fixtures hand out deep copies so a test can tweak its document freely.
"""

from __future__ import annotations

import copy
from typing import Any

import pytest


PETSTORE: dict[str, Any] = {
    "openapi": "3.0.0",
    "info": {"title": "Petstore", "version": "1.0.0"},
    "security": [{"api_key": []}],
    "paths": {
        "/pets": {
            "get": {
                "operationId": "listPets",
                "description": "List all pets",
                "parameters": [
                    {
                        "name": "limit",
                        "in": "query",
                        "description": "How many items to return",
                        "schema": {"type": "integer"},
                    },
                    {
                        "name": "status",
                        "in": "query",
                        "schema": {"type": "string", "enum": ["available", "sold"]},
                    },
                    {"name": "broken", "schema": {"type": "string"}},
                ],
            },
            "post": {
                "summary": "Create a pet",
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {"$ref": "#/components/schemas/Pet"},
                        }
                    }
                },
            },
        },
        "/pets/{petId}": {
            "parameters": [
                {"name": "petId", "in": "path", "required": True, "schema": {"type": "string"}},
            ],
            "get": {
                "operationId": "showPetById",
                "security": [{"bearerAuth": []}, {"basicAuth": []}],
                "parameters": [
                    {"name": "petId", "in": "path", "required": True, "schema": {"type": "string"}},
                ],
            },
            "put": {
                "operationId": "updatePet",
                "parameters": [
                    {"name": "petId", "in": "path", "required": True, "schema": {"type": "string"}},
                ],
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {"$ref": "#/components/schemas/Pet"},
                        }
                    }
                },
            },
            "delete": {
                "security": [],
                "parameters": [
                    {"name": "petId", "in": "path", "required": True, "schema": {"type": "string"}},
                ],
            },
        },
        "/store/order": {
            "x-internal": True,
            "post": {
                "operationId": "placeOrder",
                "parameters": [
                    {"name": "X-Request-Id", "in": "header", "schema": {"type": "string"}},
                ],
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "properties": {
                                    "quantity": {"type": "integer", "description": "Units to order"},
                                    "status": {"type": "string", "enum": ["placed", "approved"]},
                                    "tags": {"type": "array", "items": {"type": "string"}},
                                    "pet": {"$ref": "#/components/schemas/Pet"},
                                },
                                "required": ["quantity", "pet"],
                            },
                        }
                    }
                },
            },
        },
    },
    "components": {
        "schemas": {
            "Pet": {
                "type": "object",
                "required": ["name"],
                "properties": {
                    "name": {"type": "string", "description": "Pet name"},
                    "tag": {"type": "string"},
                },
            },
        },
        "securitySchemes": {
            "api_key": {"type": "apiKey", "name": "X-API-Key", "in": "header"},
            "bearerAuth": {"type": "http", "scheme": "bearer"},
            "basicAuth": {"type": "http", "scheme": "basic"},
            "petstore_auth": {
                "type": "oauth2",
                "flows": {
                    "implicit": {
                        "authorizationUrl": "https://petstore.example.com/oauth/authorize",
                        "scopes": {"read:pets": "read your pets"},
                    }
                },
            },
        },
    },
}


SCHEMAS: dict[str, Any] = {
    "components": {
        "schemas": {
            "Order": {
                "type": "object",
                "required": ["id", "customer"],
                "properties": {
                    "id": {"type": "integer"},
                    "customer": {"$ref": "#/components/schemas/Customer"},
                    "lines": {
                        "type": "array",
                        "items": {"$ref": "#/components/schemas/OrderLine"},
                    },
                    "notes": {"type": "array", "items": {"type": "string"}},
                    "state": {"type": "string", "enum": ["open", "closed"]},
                    "untyped": {},
                },
            },
            "Customer": {
                "properties": {
                    "name": {"type": "string", "description": "Full name"},
                    "address": {"$ref": "#/components/schemas/Address"},
                },
                "required": ["name", "email"],
            },
            "Address": {
                "properties": {
                    "city": {"type": "string"},
                    "country": {"$ref": "#/components/schemas/Country"},
                },
            },
            "Country": {
                "properties": {
                    "code": {"type": "string", "enum": ["NL", "DE"]},
                },
            },
            "OrderLine": {
                "properties": {
                    "sku": {"type": "string"},
                    "qty": {"type": "integer"},
                },
                "required": ["sku"],
            },
            "Tags": {
                "type": "array",
                "description": "Free-form labels",
                "items": {"type": "string"},
            },
            "Lines": {
                "type": "array",
                "items": {"$ref": "#/components/schemas/OrderLine"},
            },
            "LineAlias": {"$ref": "#/components/schemas/OrderLine"},
            "SelfAlias": {"$ref": "#/components/schemas/SelfAlias"},
            "Holder": {
                "properties": {
                    "tags": {"$ref": "#/components/schemas/Tags"},
                    "line": {"$ref": "#/components/schemas/LineAlias"},
                },
                "required": ["line"],
            },
            "Status": {
                "type": "string",
                "description": "Lifecycle state",
                "enum": ["new", "done"],
            },
            "TreeNode": {
                "properties": {
                    "value": {"type": "string"},
                    "children": {
                        "type": "array",
                        "items": {"$ref": "#/components/schemas/TreeNode"},
                    },
                    "parent": {"$ref": "#/components/schemas/TreeNode"},
                },
            },
            "Employee": {
                "properties": {
                    "department": {"$ref": "#/components/schemas/Department"},
                },
            },
            "Department": {
                "properties": {
                    "manager": {"$ref": "#/components/schemas/Employee"},
                },
            },
            "Dangling": {
                "properties": {
                    "missing": {"$ref": "#/components/schemas/DoesNotExist"},
                },
            },
        }
    }
}


@pytest.fixture
def petstore() -> dict[str, Any]:
    return copy.deepcopy(PETSTORE)


@pytest.fixture
def schemas_doc() -> dict[str, Any]:
    return copy.deepcopy(SCHEMAS)


def find_refs(node: Any) -> list[str]:
    """Collect every '$ref' value left anywhere in a nested structure."""
    found: list[str] = []
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "$ref":
                found.append(value)
            else:
                found.extend(find_refs(value))
    elif isinstance(node, list):
        for value in node:
            found.extend(find_refs(value))
    return found


@pytest.fixture
def refs_in():
    return find_refs
