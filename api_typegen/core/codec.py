"""
Runtime field codec.

Applies the policies of a ``RecordDefinition`` to plain payload dicts:
``decode`` tolerates absent and null values the way the policy says, and
``encode`` writes values back, omitting the ones the skip rules drop.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import dateparser

from ..logging_config import get_logger
from .config import DATETIME_RFC3339, DATETIME_RFC3339_SECONDS
from .emitters import Definition, EnumDefinition, FieldDefinition, RecordDefinition
from .policy import DecodeMode, EncodeMode, FieldPolicy, SkipRule
from .typespace import WireShape

logger = get_logger(__name__)

FLOAT_SHAPES = {WireShape.FLOAT32, WireShape.FLOAT64}


class FieldDecodeError(Exception):
    """A payload value cannot be decoded under its field policy."""

    def __init__(self, record: str, field: str, message: str):
        self.record = record
        self.field = field
        super().__init__(f"{record}.{field}: {message}")


class FallthroughValue(str):
    """An enum wire value the schema does not document."""

    def __repr__(self) -> str:
        return f"FallthroughValue({str.__repr__(self)})"


def format_datetime(value: datetime, output_format: str = DATETIME_RFC3339) -> str:
    """Format a datetime for output; naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)

    if output_format == DATETIME_RFC3339:
        text = value.astimezone(timezone.utc).isoformat()
        return text.replace("+00:00", "Z")
    if output_format == DATETIME_RFC3339_SECONDS:
        return value.isoformat(timespec="seconds")
    return value.strftime(output_format)


def parse_datetime(text: str) -> Optional[datetime]:
    """Parse a date-time, accepting RFC 3339 and looser formats."""
    candidate = f"{text[:-1]}+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(candidate)
    except ValueError:
        pass
    return dateparser.parse(text, settings={"RETURN_AS_TIMEZONE_AWARE": True})


def parse_date(text: str) -> Optional[date]:
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    parsed = dateparser.parse(text)
    return parsed.date() if parsed is not None else None


class RecordCodec:
    """Decodes and encodes payloads of one record definition.

    Args:
        definition: Record to apply.
        definitions: Other definitions by name; nested records and enums found
            here are decoded with their own policies, others pass through.
    """

    def __init__(
        self,
        definition: RecordDefinition,
        definitions: Optional[Mapping[str, Definition]] = None,
    ):
        self.definition = definition
        self.definitions = definitions or {}

    def _nested(self, field: FieldDefinition) -> Optional[Definition]:
        if field.target is None:
            return None
        return self.definitions.get(field.target)

    def _fail(self, field: FieldDefinition, message: str) -> FieldDecodeError:
        return FieldDecodeError(self.definition.name, field.name, message)

    # Decoding

    def decode(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Decode a wire payload into field values keyed by field name."""
        if not isinstance(payload, Mapping):
            raise FieldDecodeError(self.definition.name, "<root>", "payload is not an object")

        values = {}
        for field in self.definition.fields:
            if field.flatten:
                values[field.name] = self._decode_value(field, payload)
            elif field.wire_name in payload:
                values[field.name] = self._decode_value(field, payload[field.wire_name])
            elif field.policy.default:
                values[field.name] = self._decode_value(field, None)
            else:
                raise self._fail(field, "missing required field")
        return values

    def _decode_value(self, field: FieldDefinition, raw: Any) -> Any:
        policy = field.policy
        mode = policy.decode

        if mode is DecodeMode.NULL_AS_EMPTY_STRING:
            if raw is None:
                return ""
            if isinstance(raw, str):
                return raw
            if isinstance(raw, (dict, list, bool)):
                raise self._fail(field, f"expected a string, got {type(raw).__name__}")
            return str(raw)

        if mode in (DecodeMode.NULL_AS_EMPTY_LIST, DecodeMode.NULL_AS_EMPTY_MAP):
            expected = list if mode is DecodeMode.NULL_AS_EMPTY_LIST else dict
            if raw is None:
                return expected()
            if not isinstance(raw, expected):
                raise self._fail(field, f"expected {expected.__name__}, got {type(raw).__name__}")
            return raw

        if mode is DecodeMode.NULL_AS_ZERO:
            return self._decode_number(field, raw)

        if mode is DecodeMode.NULL_AS_FALSE:
            if raw is None:
                return False
            if not isinstance(raw, bool):
                raise self._fail(field, f"expected a boolean, got {raw!r}")
            return raw

        if mode is DecodeMode.NULL_AS_NONE:
            return raw

        if mode is DecodeMode.ENUM_FALLTHROUGH:
            return self._decode_enum(field, raw)

        if mode is DecodeMode.LENIENT_DATE:
            return self._decode_temporal(field, raw, parse_date)

        if mode is DecodeMode.LENIENT_DATE_TIME:
            return self._decode_temporal(field, raw, parse_datetime)

        if mode is DecodeMode.EMPTY_URL_AS_NONE:
            if raw is None or raw == "":
                return None
            if not isinstance(raw, str):
                raise self._fail(field, f"expected a URL string, got {raw!r}")
            return raw

        if mode is DecodeMode.RECORD:
            return self._decode_record(field, raw)

        return raw

    def _decode_number(self, field: FieldDefinition, raw: Any) -> Any:
        is_float = field.policy.shape in FLOAT_SHAPES
        if raw is None:
            return 0.0 if is_float else 0
        if isinstance(raw, bool):
            raise self._fail(field, f"expected a number, got {raw!r}")
        if isinstance(raw, str):
            # 64-bit integers are often sent as strings.
            try:
                return float(raw) if is_float else int(raw)
            except ValueError as e:
                raise self._fail(field, f"expected a number, got {raw!r}") from e
        if not isinstance(raw, (int, float)):
            raise self._fail(field, f"expected a number, got {raw!r}")
        return float(raw) if is_float else raw

    def _decode_enum(self, field: FieldDefinition, raw: Any) -> Any:
        definition = self._nested(field)
        if raw is None:
            if isinstance(definition, EnumDefinition):
                return definition.default_value
            return ""
        if not isinstance(raw, str):
            raise self._fail(field, f"expected an enum string, got {raw!r}")
        if isinstance(definition, EnumDefinition) and raw not in definition.wire_values:
            logger.debug(f"Undocumented value {raw!r} for {definition.name}")
            return FallthroughValue(raw)
        return raw

    def _decode_temporal(self, field: FieldDefinition, raw: Any, parse) -> Any:
        if raw is None or raw == "":
            return None
        if isinstance(raw, (date, datetime)):
            return raw
        if not isinstance(raw, str):
            raise self._fail(field, f"expected a date string, got {raw!r}")
        parsed = parse(raw)
        if parsed is None:
            raise self._fail(field, f"unparseable date {raw!r}")
        return parsed

    def _decode_record(self, field: FieldDefinition, raw: Any) -> Any:
        definition = self._nested(field)
        if raw is None:
            if field.policy.shape is WireShape.OPTIONAL:
                return None
            if not field.policy.default:
                raise self._fail(field, "null for a required record")
            raw = {}
        if isinstance(definition, RecordDefinition) and isinstance(raw, Mapping):
            return RecordCodec(definition, self.definitions).decode(raw)
        return raw

    # Encoding

    def encode(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        """Encode field values (keyed by field name) into a wire payload."""
        payload: Dict[str, Any] = {}
        for field in self.definition.fields:
            value = values.get(field.name)
            if self._skip(field.policy, value):
                continue
            encoded = self._encode_value(field, value)
            if field.policy.skip is SkipRule.IS_EMPTY and encoded in ({}, [], ""):
                continue
            if field.flatten and isinstance(encoded, Mapping):
                payload.update(encoded)
            else:
                payload[field.wire_name] = encoded
        return payload

    @staticmethod
    def _skip(policy: FieldPolicy, value: Any) -> bool:
        skip = policy.skip
        if skip is SkipRule.NEVER:
            return False
        if skip is SkipRule.IS_NONE:
            return value is None
        if skip is SkipRule.IS_ZERO:
            return value is None or value == 0
        if skip is SkipRule.IS_NOOP:
            return value is None or value == ""
        return value is None or (hasattr(value, "__len__") and len(value) == 0)

    def _encode_value(self, field: FieldDefinition, value: Any) -> Any:
        encode = field.policy.encode
        if value is None:
            return None
        if encode is EncodeMode.DATE_TIME and isinstance(value, datetime):
            return format_datetime(value, field.policy.datetime_format or DATETIME_RFC3339)
        if encode is EncodeMode.DATE and isinstance(value, date):
            return value.isoformat()
        if encode is EncodeMode.ENUM:
            return str(value.value) if isinstance(value, Enum) else str(value)
        if encode is EncodeMode.RECORD:
            definition = self._nested(field)
            if isinstance(definition, RecordDefinition) and isinstance(value, Mapping):
                return RecordCodec(definition, self.definitions).encode(value)
        return value
