"""Tests for schema document wrapping and reference resolution."""

from __future__ import annotations

from typing import Any

import pytest

from api_typegen.core.schema import (
    SchemaError,
    SchemaKind,
    SchemaNode,
    SchemaStore,
    UnresolvedReferenceError,
)


@pytest.mark.parametrize(
    ("raw", "kind"),
    [
        ({"$ref": "#/components/schemas/Pet"}, SchemaKind.REFERENCE),
        ({"type": "string", "enum": ["a"]}, SchemaKind.ENUMERATION),
        ({"const": "a"}, SchemaKind.ENUMERATION),
        ({"type": "integer", "const": 1}, SchemaKind.PRIMITIVE),
        ({"oneOf": [{"type": "string"}]}, SchemaKind.ONE_OF),
        ({"anyOf": [{"type": "string"}]}, SchemaKind.ANY_OF),
        ({"allOf": [{"type": "string"}]}, SchemaKind.ALL_OF),
        ({"type": "array", "items": {"type": "string"}}, SchemaKind.ARRAY),
        ({"type": "object", "properties": {"a": {"type": "string"}}}, SchemaKind.RECORD),
        ({"type": "object", "additionalProperties": {"type": "integer"}}, SchemaKind.MAP),
        ({"type": "object"}, SchemaKind.PRIMITIVE),
        ({}, SchemaKind.PRIMITIVE),
        ({"type": "integer"}, SchemaKind.PRIMITIVE),
        ({"not": {"type": "string"}}, SchemaKind.UNKNOWN),
        ({"type": "tuple"}, SchemaKind.UNKNOWN),
    ],
)
def test_node_kind(raw: dict[str, Any], kind: SchemaKind) -> None:
    """Nodes are classified by their structural keywords."""
    assert SchemaNode.from_raw(raw).kind is kind


def test_string_const_is_single_literal() -> None:
    assert SchemaNode.from_raw({"const": "circle"}).enum_values == ("circle",)
    assert SchemaNode.from_raw({"type": "integer", "const": 1}).enum_values == ()


def test_node_is_read_only() -> None:
    """Raw mappings are frozen on wrap."""
    node = SchemaNode.from_raw({"type": "object", "properties": {"a": {"type": "string"}}})
    with pytest.raises(TypeError):
        node.raw["type"] = "string"  # type: ignore[index]


def test_node_type_list_nullable() -> None:
    """A ``["string", "null"]`` type list is a nullable string."""
    node = SchemaNode.from_raw({"type": ["string", "null"]})
    assert node.schema_type == "string"
    assert node.nullable
    assert node.kind is SchemaKind.PRIMITIVE


def test_node_children_pointers() -> None:
    """Child pointers extend the parent pointer, escaping slashes."""
    node = SchemaNode.from_raw(
        {"type": "object", "properties": {"a/b": {"type": "string"}}}, "#/components/schemas/X"
    )
    child = node.properties["a/b"]
    assert child.pointer == "#/components/schemas/X/properties/a~1b"


def test_node_extensions_and_default() -> None:
    node = SchemaNode.from_raw({"default": ["x"], "x-always-default": True})
    assert node.default == ["x"]
    assert node.extensions == {"x-always-default": True}


def test_node_rejects_non_mapping() -> None:
    with pytest.raises(SchemaError):
        SchemaNode.from_raw(["not", "a", "schema"])


def test_store_components_in_document_order(petstore_store: SchemaStore) -> None:
    """Components keep document order and their names."""
    comps = petstore_store.components()
    assert list(comps) == ["Pet", "PetStatus", "Owner", "PetResultsPage"]
    assert comps["Pet"].name == "Pet"
    assert comps["Pet"].pointer == "#/components/schemas/Pet"


def test_store_definitions_fallback() -> None:
    """Swagger 2 documents keep their schemas under ``definitions``."""
    store = SchemaStore.from_document(
        {"swagger": "2.0", "definitions": {"Thing": {"type": "object"}}}
    )
    assert list(store.components()) == ["Thing"]
    assert store.components()["Thing"].pointer == "#/definitions/Thing"


def test_store_resolve_caches_nodes(petstore_store: SchemaStore) -> None:
    first = petstore_store.resolve("#/components/schemas/Owner")
    assert petstore_store.resolve("#/components/schemas/Owner") is first


def test_store_resolve_nested_pointer(petstore_store: SchemaStore) -> None:
    """Pointers into nested nodes resolve without a component name."""
    node = petstore_store.resolve("#/components/schemas/Pet/properties/tags/items")
    assert node.schema_type == "string"
    assert node.name is None


@pytest.mark.parametrize(
    "ref",
    ["#/components/schemas/Missing", "https://example.com/schema.json#/Pet"],
)
def test_store_unresolved_reference(petstore_store: SchemaStore, ref: str) -> None:
    with pytest.raises(UnresolvedReferenceError):
        petstore_store.resolve(ref)


def test_store_rejects_non_mapping_document() -> None:
    with pytest.raises(SchemaError):
        SchemaStore(["not", "a", "document"])  # type: ignore[arg-type]


def test_operation_schemas(petstore_store: SchemaStore) -> None:
    """Request and response bodies are yielded with operation-based hints."""
    found = [(hint, node.kind, is_request) for hint, node, is_request in petstore_store.operation_schemas()]
    assert found == [
        ("listPets response", SchemaKind.REFERENCE, False),
        ("createPet request", SchemaKind.RECORD, True),
        ("createPet response", SchemaKind.REFERENCE, False),
    ]


def test_operation_schemas_without_operation_id() -> None:
    """Operations without an id are named after method and path."""
    store = SchemaStore.from_document(
        {
            "paths": {
                "/things": {
                    "delete": {
                        "responses": {
                            "200": {
                                "content": {
                                    "application/vnd.api+json": {"schema": {"type": "string"}}
                                }
                            }
                        }
                    }
                }
            }
        }
    )
    hints = [hint for hint, _, _ in store.operation_schemas()]
    assert hints == ["delete /things response"]
