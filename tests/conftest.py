"""Shared fixtures for api_typegen tests."""

from __future__ import annotations

import copy
import logging
from typing import Any

import pytest

from api_typegen.core.schema import SchemaStore
from api_typegen.logging_config import PACKAGE_LOGGER

PETSTORE: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Pets", "version": "1.0.0"},
    "paths": {
        "/pets": {
            "get": {
                "operationId": "listPets",
                "responses": {
                    "200": {
                        "description": "A page of pets",
                        "content": {
                            "application/json": {
                                "schema": {"$ref": "#/components/schemas/PetResultsPage"}
                            }
                        },
                    }
                },
            },
            "post": {
                "operationId": "createPet",
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "properties": {
                                    "name": {"type": "string"},
                                    "vaccinated": {"type": "boolean"},
                                },
                            }
                        }
                    }
                },
                "responses": {
                    "201": {
                        "description": "Created",
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}
                        },
                    }
                },
            },
        }
    },
    "components": {
        "schemas": {
            "Pet": {
                "type": "object",
                "description": "A pet.",
                "required": ["id", "name"],
                "properties": {
                    "id": {"type": "integer", "format": "int64"},
                    "name": {"type": "string"},
                    "status": {"$ref": "#/components/schemas/PetStatus"},
                    "born": {"type": "string", "format": "date"},
                    "updated_at": {"type": "string", "format": "date-time"},
                    "tags": {"type": "array", "items": {"type": "string"}},
                    "owner": {"$ref": "#/components/schemas/Owner"},
                    "weight": {"type": "number", "format": "float"},
                    "vaccinated": {"type": "boolean"},
                },
            },
            "PetStatus": {"type": "string", "enum": ["available", "pending", "sold"]},
            "Owner": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "pets": {"type": "array", "items": {"$ref": "#/components/schemas/Pet"}},
                },
            },
            "PetResultsPage": {
                "type": "object",
                "properties": {
                    "items": {"type": "array", "items": {"$ref": "#/components/schemas/Pet"}},
                    "next_page": {"type": "string"},
                },
            },
        }
    },
}

SHAPES: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Shapes", "version": "1.0.0"},
    "components": {
        "schemas": {
            "Shape": {
                "oneOf": [
                    {
                        "type": "object",
                        "required": ["kind", "data"],
                        "properties": {
                            "kind": {"type": "string", "enum": ["circle"]},
                            "data": {
                                "type": "object",
                                "properties": {"radius": {"type": "number"}},
                            },
                        },
                    },
                    {
                        "type": "object",
                        "required": ["kind", "data"],
                        "properties": {
                            "kind": {"type": "string", "enum": ["square"]},
                            "data": {
                                "type": "object",
                                "properties": {"side": {"type": "number"}},
                            },
                        },
                    },
                ]
            },
            "Drawing": {
                "type": "object",
                "required": ["shape"],
                "properties": {"shape": {"$ref": "#/components/schemas/Shape"}},
            },
        }
    },
}


def components(schemas: dict[str, Any], **extra: Any) -> dict[str, Any]:
    """A minimal OpenAPI document holding ``schemas`` as components."""
    document = {
        "openapi": "3.0.3",
        "info": {"title": "Test", "version": "1"},
        "components": {"schemas": schemas},
    }
    document.update(extra)
    return document


@pytest.fixture
def petstore() -> dict[str, Any]:
    return copy.deepcopy(PETSTORE)


@pytest.fixture
def shapes() -> dict[str, Any]:
    return copy.deepcopy(SHAPES)


@pytest.fixture
def petstore_store(petstore: dict[str, Any]) -> SchemaStore:
    return SchemaStore.from_document(petstore)


@pytest.fixture
def package_logs(caplog: pytest.LogCaptureFixture):
    """Capture package logs even when ``setup_logging`` stopped propagation."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    propagate = logger.propagate
    logger.propagate = True
    caplog.set_level(logging.DEBUG, logger=PACKAGE_LOGGER)
    yield caplog
    logger.propagate = propagate
