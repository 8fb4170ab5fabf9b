"""
Field policy engine.

Decides, per emitted field, how the value tolerates absence and null, when
it is omitted on output, and how it is decoded and encoded. Decisions
dispatch on the field's ``WireShape`` and the surrounding context (record
name, request-body membership, provider configuration).
"""

from dataclasses import asdict, dataclass, replace
from enum import Enum
from fnmatch import fnmatchcase
from typing import Any, Dict, Optional

from ..logging_config import get_logger
from .config import GeneratorConfig
from .typespace import (
    NUMERIC_SHAPES,
    TypeId,
    TypeKind,
    TypeSpace,
    UnresolvableSchemaError,
    WireShape,
)

logger = get_logger(__name__)


class DecodeMode(Enum):
    """How a wire value is turned into a field value."""

    PLAIN = "plain"
    NULL_AS_EMPTY_STRING = "null_as_empty_string"
    NULL_AS_EMPTY_LIST = "null_as_empty_list"
    NULL_AS_EMPTY_MAP = "null_as_empty_map"
    NULL_AS_ZERO = "null_as_zero"
    NULL_AS_FALSE = "null_as_false"
    NULL_AS_NONE = "null_as_none"
    ENUM_FALLTHROUGH = "enum_fallthrough"
    LENIENT_DATE = "lenient_date"
    LENIENT_DATE_TIME = "lenient_date_time"
    EMPTY_URL_AS_NONE = "empty_url_as_none"
    RECORD = "record"


class SkipRule(Enum):
    """When a field is omitted from encoded output."""

    NEVER = "never"
    IS_EMPTY = "is_empty"
    IS_ZERO = "is_zero"
    IS_NONE = "is_none"
    IS_NOOP = "is_noop"


class EncodeMode(Enum):
    """How a field value is written back to the wire."""

    PLAIN = "plain"
    DATE = "date"
    DATE_TIME = "date_time"
    ENUM = "enum"
    RECORD = "record"


@dataclass(frozen=True)
class FieldPolicy:
    """Serialization directives for one field."""

    shape: WireShape
    default: bool
    decode: DecodeMode
    skip: SkipRule = SkipRule.NEVER
    encode: EncodeMode = EncodeMode.PLAIN
    datetime_format: Optional[str] = None
    wrap_optional: bool = False

    @property
    def required(self) -> bool:
        return not self.default

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.value
        return data


class PolicyEngine:
    """Computes field policies for one frozen ``TypeSpace``."""

    def __init__(self, typespace: TypeSpace, config: Optional[GeneratorConfig] = None):
        self.typespace = typespace
        self.config = config or GeneratorConfig()
        self._always_default = set(self.config.always_default_types)
        self._keep_null = set(self.config.keep_null_fields)

    # Record traits

    def is_paginated(self, name: str) -> bool:
        return any(fnmatchcase(name, pattern) for pattern in self.config.paginated_patterns)

    def is_request_record(self, name: str, type_id: Optional[TypeId] = None) -> bool:
        if type_id is not None and type_id in self.typespace.request_body_ids:
            return True
        return any(name.endswith(suffix) for suffix in self.config.request_suffixes)

    def is_default_constructible(self, type_id: TypeId) -> bool:
        """Whether the emitted type behind ``type_id`` can be built empty."""
        target = self.typespace.unwrap(type_id)
        entry = self.typespace.get(target)
        kind = entry.details.kind

        if kind is TypeKind.ENUM:
            return True
        if kind not in (TypeKind.OBJECT, TypeKind.ALL_OF, TypeKind.ANY_OF, TypeKind.ONE_OF):
            return False
        if entry.name in self._always_default:
            return True
        if entry.details.data.extension("x-always-default") is True:
            return True
        return kind is not TypeKind.ONE_OF and self.is_paginated(entry.name or "")

    def skips_when_empty(self, type_id: TypeId) -> bool:
        entry = self.typespace.get(self.typespace.unwrap(type_id))
        return entry.details.kind is TypeKind.OBJECT and self.is_paginated(entry.name or "")

    # Field policy

    def decide(
        self,
        record_name: str,
        prop: str,
        type_id: TypeId,
        record_id: Optional[TypeId] = None,
    ) -> FieldPolicy:
        """Decide the policy of property ``prop`` of record ``record_name``."""
        shape = self.typespace.wire_shape(type_id)

        if shape is WireShape.STRING:
            return FieldPolicy(shape, True, DecodeMode.NULL_AS_EMPTY_STRING, SkipRule.IS_EMPTY)

        if shape is WireShape.ARRAY:
            return FieldPolicy(shape, True, DecodeMode.NULL_AS_EMPTY_LIST, SkipRule.IS_EMPTY)

        if shape is WireShape.MAP:
            return FieldPolicy(shape, True, DecodeMode.NULL_AS_EMPTY_MAP, SkipRule.IS_EMPTY)

        if shape in NUMERIC_SHAPES:
            return FieldPolicy(shape, True, DecodeMode.NULL_AS_ZERO, SkipRule.IS_ZERO)

        if shape is WireShape.BOOLEAN:
            if self.config.optional_booleans or self.is_request_record(record_name, record_id):
                return FieldPolicy(
                    shape,
                    True,
                    DecodeMode.NULL_AS_NONE,
                    SkipRule.IS_NONE,
                    wrap_optional=True,
                )
            return FieldPolicy(shape, True, DecodeMode.NULL_AS_FALSE)

        if shape is WireShape.ENUM:
            details = self.typespace.get(self.typespace.resolve_alias(type_id)).details
            skip = SkipRule.NEVER if details.data.default is not None else SkipRule.IS_NOOP
            return FieldPolicy(
                shape, True, DecodeMode.ENUM_FALLTHROUGH, skip, encode=EncodeMode.ENUM
            )

        if shape is WireShape.OPTIONAL:
            return self._optional_policy(prop, type_id)

        if shape in (WireShape.DATE, WireShape.DATE_TIME, WireShape.URL):
            # Only reached for an unwrapped date; treat it as optional.
            policy = self._optional_policy(prop, type_id, inner_shape=shape)
            return replace(policy, wrap_optional=True)

        if shape in (WireShape.RECORD, WireShape.UNION):
            default = self.is_default_constructible(type_id)
            skip = SkipRule.IS_EMPTY if self.skips_when_empty(type_id) else SkipRule.NEVER
            return FieldPolicy(shape, default, DecodeMode.RECORD, skip, encode=EncodeMode.RECORD)

        if shape is WireShape.ANY:
            return FieldPolicy(shape, True, DecodeMode.NULL_AS_NONE, SkipRule.IS_NONE)

        raise UnresolvableSchemaError(
            f"field {record_name}.{prop} has no concrete type ({type_id})"
        )

    def _optional_policy(
        self, prop: str, type_id: TypeId, inner_shape: Optional[WireShape] = None
    ) -> FieldPolicy:
        if inner_shape is None:
            inner = self.typespace.get(self.typespace.resolve_alias(type_id)).details.inner
            inner_shape = self.typespace.wire_shape(inner)

        skip = SkipRule.IS_NONE
        if prop in self._keep_null:
            logger.debug(f"Keeping explicit null for {prop}")
            skip = SkipRule.NEVER

        if inner_shape is WireShape.DATE:
            return FieldPolicy(
                WireShape.OPTIONAL, True, DecodeMode.LENIENT_DATE, skip, encode=EncodeMode.DATE
            )
        if inner_shape is WireShape.DATE_TIME:
            return FieldPolicy(
                WireShape.OPTIONAL,
                True,
                DecodeMode.LENIENT_DATE_TIME,
                skip,
                encode=EncodeMode.DATE_TIME,
                datetime_format=self.config.datetime_output_format,
            )
        if inner_shape is WireShape.URL:
            return FieldPolicy(WireShape.OPTIONAL, True, DecodeMode.EMPTY_URL_AS_NONE, skip)
        if inner_shape in (WireShape.RECORD, WireShape.UNION):
            return FieldPolicy(
                WireShape.OPTIONAL, True, DecodeMode.RECORD, skip, encode=EncodeMode.RECORD
            )
        return FieldPolicy(WireShape.OPTIONAL, True, DecodeMode.NULL_AS_NONE, skip)
