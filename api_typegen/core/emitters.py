"""
Type emitters.

Walk a frozen ``TypeSpace`` in first-discovery order and turn every named
composite entry into a definition: records (objects and flattened
intersections), enums and unions. Each record field carries its
``FieldPolicy``.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from ..logging_config import get_logger
from .config import GeneratorConfig
from .naming import field_name, struct_name
from .policy import FieldPolicy, PolicyEngine
from .typespace import (
    EMITTED_KINDS,
    TypeEntry,
    TypeId,
    TypeKind,
    TypeSpace,
    WireShape,
)

logger = get_logger(__name__)

NOOP_VARIANT = "Noop"
FALLTHROUGH_VARIANT = "FallthroughString"

FLATTENED_DESCRIPTION = "All of the following types are flattened into one object:\n\n"


@dataclass(frozen=True)
class FieldDefinition:
    """One field of an emitted record."""

    name: str
    wire_name: str
    type_id: TypeId
    type_expr: str
    policy: FieldPolicy
    description: str = ""
    flatten: bool = False
    target: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "wire_name": self.wire_name,
            "type_id": self.type_id.value,
            "type": self.type_expr,
            "description": self.description,
            "flatten": self.flatten,
            "target": self.target,
            "policy": self.policy.to_dict(),
        }


@dataclass(frozen=True)
class RecordDefinition:
    """A record: an object schema or a flattened intersection."""

    name: str
    type_id: TypeId
    fields: Tuple[FieldDefinition, ...]
    description: str = ""
    default_constructible: bool = False
    skip_when_empty: bool = False
    flattened: bool = False

    kind = "record"

    def field(self, name: str) -> Optional[FieldDefinition]:
        for candidate in self.fields:
            if candidate.name == name or candidate.wire_name == name:
                return candidate
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "name": self.name,
            "type_id": self.type_id.value,
            "description": self.description,
            "default_constructible": self.default_constructible,
            "skip_when_empty": self.skip_when_empty,
            "flattened": self.flattened,
            "fields": [f.to_dict() for f in self.fields],
        }


@dataclass(frozen=True)
class EnumVariant:
    name: str
    wire_value: str


@dataclass(frozen=True)
class EnumDefinition:
    """An enumeration of string literals.

    ``noop`` marks the ``""`` sentinel used when no default is declared;
    ``fallthrough`` marks the catch-all variant for undocumented values.
    """

    name: str
    type_id: TypeId
    variants: Tuple[EnumVariant, ...]
    description: str = ""
    default: Optional[str] = None
    noop: bool = False
    fallthrough: bool = True

    kind = "enum"

    @property
    def default_constructible(self) -> bool:
        return True

    @property
    def wire_values(self) -> List[str]:
        return [v.wire_value for v in self.variants]

    @property
    def default_value(self) -> str:
        """Wire value used when the field is absent or null."""
        if self.default is not None:
            return self.default
        return ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "name": self.name,
            "type_id": self.type_id.value,
            "description": self.description,
            "default": self.default,
            "noop": self.noop,
            "fallthrough": self.fallthrough,
            "variants": [{"name": v.name, "value": v.wire_value} for v in self.variants],
        }


@dataclass(frozen=True)
class UnionVariant:
    name: str
    type_id: TypeId
    type_expr: str
    tag_value: Optional[str] = None
    payload: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class UnionDefinition:
    """A one-of union, tagged when its alternatives carry a literal tag field."""

    name: str
    type_id: TypeId
    variants: Tuple[UnionVariant, ...]
    description: str = ""
    tag: Optional[str] = None
    content: Optional[str] = None
    default_constructible: bool = False

    kind = "union"

    @property
    def tagged(self) -> bool:
        return self.tag is not None

    def variant_for(self, tag_value: str) -> Optional[UnionVariant]:
        for variant in self.variants:
            if variant.tag_value == tag_value:
                return variant
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "name": self.name,
            "type_id": self.type_id.value,
            "description": self.description,
            "tag": self.tag,
            "content": self.content,
            "default_constructible": self.default_constructible,
            "variants": [
                {
                    "name": v.name,
                    "type_id": v.type_id.value,
                    "type": v.type_expr,
                    "tag_value": v.tag_value,
                    "payload": [list(p) for p in v.payload],
                }
                for v in self.variants
            ],
        }


Definition = Union[RecordDefinition, EnumDefinition, UnionDefinition]


class TypeEmitter:
    """Produces definitions from a frozen ``TypeSpace``."""

    def __init__(
        self,
        typespace: TypeSpace,
        config: Optional[GeneratorConfig] = None,
        policy: Optional[PolicyEngine] = None,
    ):
        self.typespace = typespace
        self.config = config or GeneratorConfig()
        self.policy = policy or PolicyEngine(typespace, self.config)
        self.reserved_fields = frozenset(self.config.reserved_field_names)
        self.warnings: List[str] = []

    def _warn(self, message: str):
        logger.warning(message)
        self.warnings.append(message)

    def emit_all(self) -> List[Definition]:
        """Emit every named composite entry, in TypeId order."""
        definitions = []
        for entry in self.typespace.entries():
            if entry.details.kind in EMITTED_KINDS and entry.name:
                definitions.append(self.emit(entry))
        logger.info(f"Emitted {len(definitions)} type definitions")
        return definitions

    def emit(self, entry: TypeEntry) -> Definition:
        kind = entry.details.kind
        if kind is TypeKind.ENUM:
            return self.emit_enum(entry)
        if kind is TypeKind.OBJECT:
            return self.emit_object(entry)
        if kind is TypeKind.ONE_OF:
            return self.emit_one_of(entry)
        return self.emit_flattened(entry)

    def _target_name(self, type_id: TypeId) -> Optional[str]:
        entry = self.typespace.get(self.typespace.unwrap(type_id))
        if entry.details.kind in EMITTED_KINDS:
            return entry.name
        return None

    def emit_enum(self, entry: TypeEntry) -> EnumDefinition:
        details = entry.details
        default = details.data.default
        if default is not None and default not in details.values:
            self._warn(f"enum {entry.name} declares default {default!r} outside its values")
            default = None

        variants = []
        seen: Dict[str, str] = {}
        for value in details.values:
            name = struct_name(value)
            if name in seen:
                self._warn(
                    f"enum {entry.name} values {seen[name]!r} and {value!r} share variant name {name}"
                )
                name = f"{name}{len(variants)}"
            seen[name] = value
            variants.append(EnumVariant(name, value))

        noop = default is None
        if noop and "" not in details.values:
            variants.append(EnumVariant(NOOP_VARIANT, ""))

        return EnumDefinition(
            name=entry.name,
            type_id=entry.id,
            variants=tuple(variants),
            description=self.typespace.render_docs(entry.id),
            default=default,
            noop=noop,
            fallthrough=True,
        )

    def emit_object(self, entry: TypeEntry) -> RecordDefinition:
        fields = []
        names: Dict[str, str] = {}
        for prop, type_id in entry.details.properties:
            name = field_name(prop, self.reserved_fields)
            if name in names:
                self._warn(
                    f"record {entry.name} properties {names[name]!r} and {prop!r} share field name {name}"
                )
            names[name] = prop

            fields.append(
                FieldDefinition(
                    name=name,
                    wire_name=prop,
                    type_id=type_id,
                    type_expr=self.typespace.render_type(type_id, prop=prop),
                    policy=self.policy.decide(entry.name, prop, type_id, entry.id),
                    description=self.typespace.render_docs(type_id),
                    target=self._target_name(type_id),
                )
            )

        return RecordDefinition(
            name=entry.name,
            type_id=entry.id,
            fields=tuple(fields),
            description=self.typespace.render_docs(entry.id),
            default_constructible=self.policy.is_default_constructible(entry.id),
            skip_when_empty=self.policy.skips_when_empty(entry.id),
        )

    def _tag_of(self, type_id: TypeId) -> Optional[Tuple[str, str]]:
        """The single-literal enum property of a record alternative.

        None unless exactly one property is a single-literal enum.
        """
        details = self.typespace.get(self.typespace.resolve_alias(type_id)).details
        if details.kind is not TypeKind.OBJECT:
            return None
        literals = []
        for prop, prop_id in details.properties:
            prop_details = self.typespace.get(self.typespace.unwrap(prop_id)).details
            if prop_details.kind is TypeKind.ENUM and len(prop_details.values) == 1:
                literals.append((prop, prop_details.values[0]))
        return literals[0] if len(literals) == 1 else None

    def emit_one_of(self, entry: TypeEntry) -> UnionDefinition:
        alternatives = sorted(set(entry.details.alternatives))

        tag = content = None
        for type_id in alternatives:
            found = self._tag_of(type_id)
            if found is None:
                continue
            tag = tag or found[0]
            properties = self.typespace.get(self.typespace.resolve_alias(type_id)).details.properties
            if len(properties) == 2 and content is None:
                content = next(p for p, _ in properties if p != found[0])

        variants = []
        seen = set()
        for type_id in alternatives:
            type_expr = self.typespace.render_type(type_id, prop=entry.name)
            found = self._tag_of(type_id) if tag else None
            if found is not None:
                tag_value = found[1]
                name = struct_name(tag_value)
                properties = self.typespace.get(self.typespace.resolve_alias(type_id)).details.properties
                payload = tuple(
                    (prop, self.typespace.render_type(prop_id, prop=prop))
                    for prop, prop_id in properties
                    if prop != found[0]
                )
            else:
                tag_value = None
                name = struct_name(type_expr)
                payload = ()

            if name in seen:
                self._warn(f"union {entry.name} has two variants named {name}")
            seen.add(name)
            variants.append(UnionVariant(name, type_id, type_expr, tag_value, payload))

        if tag:
            logger.debug(f"Union {entry.name} is tagged by {tag!r}")

        return UnionDefinition(
            name=entry.name,
            type_id=entry.id,
            variants=tuple(variants),
            description=self.typespace.render_docs(entry.id),
            tag=tag,
            content=content,
            default_constructible=self.policy.is_default_constructible(entry.id),
        )

    def _flattened_field_name(self, type_id: TypeId, rendered: str) -> str:
        shape = self.typespace.wire_shape(type_id)
        if shape is WireShape.ARRAY:
            item = self.typespace.get(self.typespace.resolve_alias(type_id)).details.item
            return f"{struct_name(self.typespace.render_type(item))}Vector"
        if shape is WireShape.ANY:
            return "Value"
        return struct_name(rendered)

    def emit_flattened(self, entry: TypeEntry) -> RecordDefinition:
        """Emit an AllOf/AnyOf as a record embedding one field per alternative."""
        alternatives = entry.details.alternatives
        rendered = [self.typespace.render_type(tid, prop=entry.name) for tid in alternatives]

        description = FLATTENED_DESCRIPTION + "".join(f"- `{r}`\n" for r in rendered)
        declared = self.typespace.render_docs(entry.id)
        if declared:
            description = f"{declared}\n\n{description}"

        fields = []
        merged = set()
        for type_id, type_expr in zip(alternatives, rendered):
            raw_name = self._flattened_field_name(type_id, type_expr)
            if raw_name in merged:
                logger.debug(f"Merging duplicate alternative {raw_name} of {entry.name}")
                continue
            merged.add(raw_name)

            docs = self.typespace.render_docs(type_id)
            fields.append(
                FieldDefinition(
                    name=field_name(raw_name, self.reserved_fields),
                    wire_name=raw_name,
                    type_id=type_id,
                    type_expr=type_expr,
                    policy=self.policy.decide(entry.name, raw_name, type_id, entry.id),
                    description=docs if docs != description else "",
                    flatten=True,
                    target=self._target_name(type_id),
                )
            )

        return RecordDefinition(
            name=entry.name,
            type_id=entry.id,
            fields=tuple(fields),
            description=description.rstrip("\n"),
            default_constructible=self.policy.is_default_constructible(entry.id),
            flattened=True,
        )
