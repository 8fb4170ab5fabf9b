"""Tests for per-field serialization policies."""

from __future__ import annotations

from typing import Any

import pytest
from conftest import components

from api_typegen.core.config import DATETIME_RFC3339_SECONDS, GeneratorConfig, load_config
from api_typegen.core.policy import DecodeMode, EncodeMode, PolicyEngine, SkipRule
from api_typegen.core.schema import SchemaStore
from api_typegen.core.synthesizer import synthesize
from api_typegen.core.typespace import TypeSpace, UnresolvableSchemaError, WireShape


def _policies(synthesis, record: str) -> dict[str, Any]:
    return {f.wire_name: f.policy for f in synthesis.lookup(record).fields}


def test_policies_by_shape(petstore: dict[str, Any]) -> None:
    """Each wire shape gets its decode mode, skip rule and default."""
    policies = _policies(synthesize(petstore), "Pet")
    expected = {
        "id": (WireShape.INT64, DecodeMode.NULL_AS_ZERO, SkipRule.IS_ZERO),
        "name": (WireShape.STRING, DecodeMode.NULL_AS_EMPTY_STRING, SkipRule.IS_EMPTY),
        "status": (WireShape.ENUM, DecodeMode.ENUM_FALLTHROUGH, SkipRule.IS_NOOP),
        "born": (WireShape.OPTIONAL, DecodeMode.LENIENT_DATE, SkipRule.IS_NONE),
        "updated_at": (WireShape.OPTIONAL, DecodeMode.LENIENT_DATE_TIME, SkipRule.IS_NONE),
        "tags": (WireShape.ARRAY, DecodeMode.NULL_AS_EMPTY_LIST, SkipRule.IS_EMPTY),
        "owner": (WireShape.OPTIONAL, DecodeMode.RECORD, SkipRule.IS_NONE),
        "weight": (WireShape.FLOAT32, DecodeMode.NULL_AS_ZERO, SkipRule.IS_ZERO),
        "vaccinated": (WireShape.BOOLEAN, DecodeMode.NULL_AS_FALSE, SkipRule.NEVER),
    }
    assert {k: (p.shape, p.decode, p.skip) for k, p in policies.items()} == expected
    assert all(p.default for p in policies.values())


def test_encode_modes(petstore: dict[str, Any]) -> None:
    policies = _policies(synthesize(petstore), "Pet")
    assert policies["status"].encode is EncodeMode.ENUM
    assert policies["born"].encode is EncodeMode.DATE
    assert policies["updated_at"].encode is EncodeMode.DATE_TIME
    assert policies["updated_at"].datetime_format == "rfc3339"
    assert policies["owner"].encode is EncodeMode.RECORD


def test_request_booleans_are_optional(petstore: dict[str, Any]) -> None:
    """Request bodies must tell an omitted boolean from false."""
    policy = _policies(synthesize(petstore), "CreatePetRequest")["vaccinated"]
    assert policy.wrap_optional
    assert policy.decode is DecodeMode.NULL_AS_NONE
    assert policy.skip is SkipRule.IS_NONE


def test_request_suffix_marks_request_records() -> None:
    synthesis = synthesize(
        components(
            {
                "UpdateRequest": {
                    "type": "object",
                    "properties": {"enabled": {"type": "boolean"}},
                }
            }
        )
    )
    assert _policies(synthesis, "UpdateRequest")["enabled"].wrap_optional


def test_provider_optional_booleans(petstore: dict[str, Any]) -> None:
    config = load_config(custom_config={"provider_name": "Google Drive"})
    policy = _policies(synthesize(petstore, config), "Pet")["vaccinated"]
    assert policy.wrap_optional
    assert policy.decode is DecodeMode.NULL_AS_NONE


def test_provider_datetime_format(petstore: dict[str, Any]) -> None:
    config = load_config(custom_config={"provider_name": "Google Calendar"})
    policy = _policies(synthesize(petstore, config), "Pet")["updated_at"]
    assert policy.datetime_format == DATETIME_RFC3339_SECONDS


def test_provider_profile_on_config_object(petstore: dict[str, Any]) -> None:
    """A config built directly, without the manager, still carries its provider profile."""
    config = GeneratorConfig(provider_name="Google Calendar")
    policy = _policies(synthesize(petstore, config), "Pet")["updated_at"]
    assert policy.datetime_format == DATETIME_RFC3339_SECONDS


def test_keep_null_fields() -> None:
    """Listed optional fields are sent as explicit nulls."""
    document = components(
        {
            "Protection": {
                "type": "object",
                "properties": {
                    "restrictions": {
                        "type": "object",
                        "nullable": True,
                        "properties": {"users": {"type": "array", "items": {"type": "string"}}},
                    },
                    "other": {
                        "type": "object",
                        "nullable": True,
                        "properties": {"teams": {"type": "array", "items": {"type": "string"}}},
                    },
                },
            }
        }
    )
    config = load_config(custom_config={"provider_name": "GitHub"})
    policies = _policies(synthesize(document, config), "Protection")
    assert policies["restrictions"].skip is SkipRule.NEVER
    assert policies["other"].skip is SkipRule.IS_NONE


def test_enum_with_default_is_never_skipped() -> None:
    synthesis = synthesize(
        components(
            {
                "Mode": {"type": "string", "enum": ["fast", "slow"], "default": "slow"},
                "Job": {
                    "type": "object",
                    "properties": {"mode": {"$ref": "#/components/schemas/Mode"}},
                },
            }
        )
    )
    assert _policies(synthesis, "Job")["mode"].skip is SkipRule.NEVER


def test_required_record_has_no_default() -> None:
    synthesis = synthesize(
        components(
            {
                "Inner": {"type": "object", "properties": {"a": {"type": "string"}}},
                "Outer": {
                    "type": "object",
                    "required": ["inner"],
                    "properties": {"inner": {"$ref": "#/components/schemas/Inner"}},
                },
            }
        )
    )
    policy = _policies(synthesis, "Outer")["inner"]
    assert policy.shape is WireShape.RECORD
    assert policy.required
    assert policy.skip is SkipRule.NEVER


def test_required_paginated_record_skips_when_empty() -> None:
    synthesis = synthesize(
        components(
            {
                "ItemPage": {"type": "object", "properties": {"items": {"type": "array", "items": {}}}},
                "Holder": {
                    "type": "object",
                    "required": ["page"],
                    "properties": {"page": {"$ref": "#/components/schemas/ItemPage"}},
                },
            }
        )
    )
    policy = _policies(synthesis, "Holder")["page"]
    assert policy.default
    assert policy.skip is SkipRule.IS_EMPTY


def test_map_and_url_policies() -> None:
    synthesis = synthesize(
        components(
            {
                "Resource": {
                    "type": "object",
                    "properties": {
                        "labels": {"type": "object", "additionalProperties": {"type": "string"}},
                        "html_url": {"type": "string", "format": "uri"},
                        "count": {"type": "integer", "format": "uint32"},
                    },
                }
            }
        )
    )
    policies = _policies(synthesis, "Resource")
    assert policies["labels"].decode is DecodeMode.NULL_AS_EMPTY_MAP
    assert policies["html_url"].decode is DecodeMode.EMPTY_URL_AS_NONE
    assert policies["count"].skip is SkipRule.IS_ZERO


def test_unknown_shape_raises() -> None:
    """Deciding a policy for an unresolvable type is fatal."""
    store = SchemaStore.from_document(
        components({"Weird": {"type": "object", "properties": {"x": {"not": {"type": "string"}}}}})
    )
    typespace = TypeSpace(store)
    typespace.resolve_components()
    x_id = typespace.get(typespace.lookup("Weird")).details.fields["x"]
    with pytest.raises(UnresolvableSchemaError):
        PolicyEngine(typespace).decide("Weird", "x", x_id)


def test_is_paginated_patterns() -> None:
    synthesis = synthesize(components({}))
    engine = PolicyEngine(synthesis.typespace, GeneratorConfig(paginated_patterns=["*List"]))
    assert engine.is_paginated("UserList")
    assert not engine.is_paginated("UserPage")


def test_policy_to_dict(petstore: dict[str, Any]) -> None:
    policy = _policies(synthesize(petstore), "Pet")["id"]
    assert policy.to_dict() == {
        "shape": "int64",
        "default": True,
        "decode": "null_as_zero",
        "skip": "is_zero",
        "encode": "plain",
        "datetime_format": None,
        "wrap_optional": False,
    }
