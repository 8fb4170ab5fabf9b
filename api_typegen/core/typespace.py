"""
Type registry and resolver.

``TypeSpace`` assigns a stable ``TypeId`` to every distinct schema node,
memoizes structurally identical nodes, and holds the resolved
``TypeDetails`` for each id. ``TypeSpace.select`` is the classifier: it
decides the structural category of a node and resolves its children
through the registry.

Resolution is two-phase. Every named component first receives a
placeholder id, then each placeholder is filled. References always resolve
to the (possibly still pending) id of their target, so self-referential
schemas never recurse.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from ..logging_config import get_logger
from .naming import FORCED_STRING_FIELDS, forces_string_type, struct_name
from .schema import SchemaKind, SchemaNode, SchemaStore

logger = get_logger(__name__)


class SynthesisError(Exception):
    """Base exception for type synthesis failures. Always fatal."""

    pass


class UnresolvableSchemaError(SynthesisError):
    """A schema node matches none of the known classifications."""

    pass


class UnrenderableTypeError(SynthesisError):
    """A TypeId cannot be rendered to a type expression."""

    def __init__(self, prop: Optional[str], type_id: "TypeId", reason: str):
        self.prop = prop
        self.type_id = type_id
        self.reason = reason
        super().__init__(f"rendering type {prop or '<root>'} {type_id} failed: {reason}")


class RegistryFrozenError(SynthesisError):
    """The registry was modified after emission started."""

    pass


class Primitive(Enum):
    """Primitive value types a schema can resolve to."""

    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    BOOLEAN = "boolean"
    DATE = "date"
    DATE_TIME = "date-time"
    URL = "url"
    ANY = "any"


class WireShape(Enum):
    """How a type behaves on the wire; computed once per TypeId."""

    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    BOOLEAN = "boolean"
    DATE = "date"
    DATE_TIME = "date-time"
    URL = "url"
    ANY = "any"
    ARRAY = "array"
    MAP = "map"
    ENUM = "enum"
    RECORD = "record"
    UNION = "union"
    OPTIONAL = "optional"
    UNKNOWN = "unknown"


PRIMITIVE_SHAPES = {primitive: WireShape(primitive.value) for primitive in Primitive}

NUMERIC_SHAPES = frozenset(
    {
        WireShape.INT32,
        WireShape.INT64,
        WireShape.UINT32,
        WireShape.UINT64,
        WireShape.FLOAT32,
        WireShape.FLOAT64,
    }
)

# Shapes with no "empty" value of their own; absent or null input needs an
# Optional wrapper.
OPTIONAL_SHAPES = frozenset(
    {WireShape.RECORD, WireShape.UNION, WireShape.DATE, WireShape.DATE_TIME, WireShape.URL}
)

# Shapes that are Optional even when the property is required: APIs send
# "" for missing dates and links.
ALWAYS_OPTIONAL_SHAPES = frozenset({WireShape.DATE, WireShape.DATE_TIME, WireShape.URL})


class TypeKind(Enum):
    """Tag of the TypeDetails union."""

    ENUM = "enum"
    OBJECT = "object"
    ONE_OF = "one_of"
    ANY_OF = "any_of"
    ALL_OF = "all_of"
    ARRAY = "array"
    MAP = "map"
    NAMED_TYPE = "named_type"
    OPTIONAL = "optional"
    BASIC = "basic"
    UNKNOWN = "unknown"
    PENDING = "pending"


# Kinds emitted as top-level definitions.
EMITTED_KINDS = frozenset(
    {TypeKind.ENUM, TypeKind.OBJECT, TypeKind.ONE_OF, TypeKind.ANY_OF, TypeKind.ALL_OF}
)


@dataclass(frozen=True, order=True)
class TypeId:
    """Opaque, totally ordered identifier of a resolved schema node."""

    value: int

    def __str__(self) -> str:
        return f"TypeId({self.value})"


@dataclass(frozen=True)
class SchemaData:
    """Metadata carried alongside every resolved node."""

    description: Optional[str] = None
    default: Any = None
    nullable: bool = False
    format: Optional[str] = None
    extensions: Tuple[Tuple[str, Any], ...] = ()

    @classmethod
    def from_node(cls, node: SchemaNode) -> "SchemaData":
        return cls(
            description=node.description,
            default=node.default,
            nullable=node.nullable,
            format=node.format,
            extensions=tuple(sorted(node.extensions.items())),
        )

    def extension(self, key: str, fallback: Any = None) -> Any:
        for name, value in self.extensions:
            if name == key:
                return value
        return fallback

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "default": self.default,
            "nullable": self.nullable,
            "format": self.format,
            "extensions": dict(self.extensions),
        }


class TypeDetails:
    """Base of the TypeDetails tagged union."""

    kind: ClassVar[TypeKind]
    data: SchemaData

    def children(self) -> Tuple[TypeId, ...]:
        return ()

    def payload(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, **self.payload(), "data": self.data.to_dict()}


@dataclass(frozen=True)
class EnumDetails(TypeDetails):
    kind: ClassVar[TypeKind] = TypeKind.ENUM
    values: Tuple[str, ...]
    data: SchemaData = field(default_factory=SchemaData)

    def payload(self):
        return {"values": list(self.values)}


@dataclass(frozen=True)
class ObjectDetails(TypeDetails):
    kind: ClassVar[TypeKind] = TypeKind.OBJECT
    properties: Tuple[Tuple[str, TypeId], ...]
    data: SchemaData = field(default_factory=SchemaData)

    @property
    def fields(self) -> Dict[str, TypeId]:
        return dict(self.properties)

    def children(self):
        return tuple(tid for _, tid in self.properties)

    def payload(self):
        return {"properties": [[name, tid.value] for name, tid in self.properties]}


@dataclass(frozen=True)
class OneOfDetails(TypeDetails):
    kind: ClassVar[TypeKind] = TypeKind.ONE_OF
    alternatives: Tuple[TypeId, ...]
    data: SchemaData = field(default_factory=SchemaData)

    def children(self):
        return self.alternatives

    def payload(self):
        return {"alternatives": [tid.value for tid in self.alternatives]}


@dataclass(frozen=True)
class AnyOfDetails(OneOfDetails):
    kind: ClassVar[TypeKind] = TypeKind.ANY_OF


@dataclass(frozen=True)
class AllOfDetails(OneOfDetails):
    kind: ClassVar[TypeKind] = TypeKind.ALL_OF


@dataclass(frozen=True)
class ArrayDetails(TypeDetails):
    kind: ClassVar[TypeKind] = TypeKind.ARRAY
    item: TypeId
    data: SchemaData = field(default_factory=SchemaData)

    def children(self):
        return (self.item,)

    def payload(self):
        return {"item": self.item.value}


@dataclass(frozen=True)
class MapDetails(TypeDetails):
    kind: ClassVar[TypeKind] = TypeKind.MAP
    value: TypeId
    data: SchemaData = field(default_factory=SchemaData)

    def children(self):
        return (self.value,)

    def payload(self):
        return {"value": self.value.value}


@dataclass(frozen=True)
class OptionalDetails(TypeDetails):
    kind: ClassVar[TypeKind] = TypeKind.OPTIONAL
    inner: TypeId
    data: SchemaData = field(default_factory=SchemaData)

    def children(self):
        return (self.inner,)

    def payload(self):
        return {"inner": self.inner.value}


@dataclass(frozen=True)
class NamedTypeDetails(TypeDetails):
    kind: ClassVar[TypeKind] = TypeKind.NAMED_TYPE
    target: TypeId
    data: SchemaData = field(default_factory=SchemaData)

    def children(self):
        return (self.target,)

    def payload(self):
        return {"target": self.target.value}


@dataclass(frozen=True)
class BasicDetails(TypeDetails):
    kind: ClassVar[TypeKind] = TypeKind.BASIC
    primitive: Primitive
    data: SchemaData = field(default_factory=SchemaData)

    def payload(self):
        return {"primitive": self.primitive.value}


@dataclass(frozen=True)
class UnknownDetails(TypeDetails):
    kind: ClassVar[TypeKind] = TypeKind.UNKNOWN
    reason: str = ""
    data: SchemaData = field(default_factory=SchemaData)

    def payload(self):
        return {"reason": self.reason}


@dataclass(frozen=True)
class PendingDetails(TypeDetails):
    """Placeholder for a declared node whose children are not resolved yet."""

    kind: ClassVar[TypeKind] = TypeKind.PENDING
    pointer: str = ""
    data: SchemaData = field(default_factory=SchemaData)

    def payload(self):
        return {"pointer": self.pointer}


@dataclass(frozen=True)
class TypeEntry:
    """A registry entry: identity, declared name and resolved details."""

    id: TypeId
    name: Optional[str]
    details: TypeDetails

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id.value, "name": self.name, "details": self.details.to_dict()}


class TypeRenderer:
    """Turns resolved types into type expressions.

    The base class renders a language-neutral notation; renderers for a
    target language override the hooks.
    """

    primitives: Dict[Primitive, str] = {primitive: primitive.value for primitive in Primitive}

    def primitive(self, primitive: Primitive) -> str:
        return self.primitives[primitive]

    def array(self, item: str) -> str:
        return f"list[{item}]"

    def map(self, value: str) -> str:
        return f"map[string, {value}]"

    def optional(self, inner: str) -> str:
        return f"optional[{inner}]"

    def named(self, name: str) -> str:
        return name


NEUTRAL_RENDERER = TypeRenderer()


def _canonical(name: Optional[str], details: TypeDetails) -> str:
    return json.dumps({"name": name, "details": details.to_dict()}, sort_keys=True, default=repr)


class TypeSpace:
    """Registry of resolved types for one synthesis run."""

    def __init__(
        self, store: SchemaStore, forced_string_fields: Iterable[str] = FORCED_STRING_FIELDS
    ):
        self.store = store
        self.forced_string_fields = frozenset(forced_string_fields)
        self.name_to_id: Dict[str, TypeId] = {}
        self.ref_to_id: Dict[str, TypeId] = {}
        self.request_body_ids: Set[TypeId] = set()
        self.collisions: List[str] = []
        self._entries: Dict[TypeId, TypeEntry] = {}
        self._by_key: Dict[str, TypeId] = {}
        self._anonymous_by_key: Dict[str, TypeId] = {}
        self._pending_nodes: Dict[TypeId, SchemaNode] = {}
        self._shapes: Dict[TypeId, WireShape] = {}
        self._next_id = 0
        self._frozen = False

    # Registry access

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, type_id: TypeId) -> bool:
        return type_id in self._entries

    def entries(self) -> Iterator[TypeEntry]:
        """Entries in first-discovery order."""
        return iter(list(self._entries.values()))

    def get(self, type_id: TypeId, prop: Optional[str] = None) -> TypeEntry:
        entry = self._entries.get(type_id)
        if entry is None:
            raise UnrenderableTypeError(prop, type_id, "not in registry")
        return entry

    def lookup(self, name: str) -> Optional[TypeId]:
        return self.name_to_id.get(struct_name(name))

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self):
        """End the resolution sweep; later ``select`` calls raise."""
        pending = [str(tid) for tid in self._pending_nodes]
        if pending:
            raise SynthesisError(f"unresolved placeholders left: {', '.join(pending)}")
        self._frozen = True
        logger.debug(f"Registry frozen with {len(self)} entries")

    def _check_mutable(self):
        if self._frozen:
            raise RegistryFrozenError("type registry is read-only once emission starts")

    def _allocate(self, name: Optional[str], details: TypeDetails) -> TypeId:
        type_id = TypeId(self._next_id)
        self._next_id += 1
        self._entries[type_id] = TypeEntry(type_id, name, details)
        return type_id

    def _bind_name(self, name: Optional[str], type_id: TypeId):
        if not name:
            return
        bound = self.name_to_id.get(name)
        if bound is None:
            self.name_to_id[name] = type_id
        elif bound != type_id:
            message = f"type name {name!r} is used by both {bound} and {type_id}"
            logger.warning(message)
            self.collisions.append(message)

    def _intern(
        self, name: Optional[str], details: TypeDetails, anonymous: bool = False
    ) -> TypeId:
        """Return the id of an identical entry, allocating one if needed."""
        if anonymous:
            key, index = _canonical(None, details), self._anonymous_by_key
        else:
            key, index = _canonical(name, details), self._by_key

        existing = index.get(key)
        if existing is not None:
            if name and details.kind in EMITTED_KINDS:
                logger.debug(f"Reusing {existing} for structurally identical {name!r}")
            return existing

        type_id = self._allocate(name, details)
        index[key] = type_id
        if details.kind in EMITTED_KINDS:
            self._bind_name(name, type_id)
        return type_id

    # Resolution

    def declare_components(self) -> List[TypeId]:
        """Phase one: allocate a placeholder id for every named component."""
        self._check_mutable()
        declared = []
        for name, node in self.store.components().items():
            declared.append(self._declare(node.pointer, node))
        logger.debug(f"Declared {len(declared)} component placeholders")
        return declared

    def resolve_components(self) -> List[TypeId]:
        """Declare, then fill, every named component."""
        declared = self.declare_components()
        for type_id in declared:
            if type_id in self._pending_nodes:
                self._fill(type_id)
        return declared

    def _declare(self, ref: str, node: SchemaNode) -> TypeId:
        if ref in self.ref_to_id:
            return self.ref_to_id[ref]
        raw_name = node.name or node.title or ref.rsplit("/", 1)[-1]
        type_id = self._allocate(struct_name(raw_name), PendingDetails(pointer=ref))
        self.ref_to_id[ref] = type_id
        self._pending_nodes[type_id] = node
        return type_id

    def _fill(self, type_id: TypeId):
        node = self._pending_nodes[type_id]
        entry = self._entries[type_id]

        if node.kind is SchemaKind.REFERENCE:
            details = NamedTypeDetails(self._select_ref(node.ref), SchemaData.from_node(node))
        else:
            details = self._classify(entry.name, node)

        self._entries[type_id] = replace(entry, details=details)
        del self._pending_nodes[type_id]
        self._by_key.setdefault(_canonical(entry.name, details), type_id)
        if details.kind in EMITTED_KINDS:
            self._bind_name(entry.name, type_id)
        logger.debug(f"Resolved {entry.name} as {details.kind.value} ({type_id})")

    def _select_ref(self, ref: str) -> TypeId:
        type_id = self.ref_to_id.get(ref)
        if type_id is not None:
            return type_id
        node = self.store.resolve(ref)
        type_id = self._declare(ref, node)
        self._fill(type_id)
        return type_id

    def select(
        self, name_hint: Optional[str], node: SchemaNode, request_body: bool = False
    ) -> TypeId:
        """Return the TypeId for the canonical resolved form of ``node``.

        Args:
            name_hint: Name to derive type names from when the node has none.
            node: Schema node or reference.
            request_body: Mark the resolved type as a request body.
        """
        self._check_mutable()

        if node.kind is SchemaKind.REFERENCE:
            type_id = self._select_ref(node.ref)
        else:
            title = node.title
            name = struct_name(title or name_hint or node.pointer.rsplit("/", 1)[-1])
            details = self._classify(name, node)
            if details.kind in EMITTED_KINDS:
                type_id = self._intern(name, details, anonymous=title is None)
            else:
                type_id = self._intern(None, details)

        if request_body:
            self.mark_request_body(type_id)
        return type_id

    def mark_request_body(self, type_id: TypeId):
        target = self.unwrap(type_id)
        self.request_body_ids.add(target)

    def _classify(self, name: str, node: SchemaNode) -> TypeDetails:
        """Decide the TypeDetails variant of an inline node."""
        data = SchemaData.from_node(node)
        kind = node.kind

        if kind is SchemaKind.ENUMERATION:
            return self._classify_enum(name, node, data)

        if kind is SchemaKind.RECORD:
            return ObjectDetails(self._select_properties(name, node), data)

        if kind is SchemaKind.MAP:
            value = self.select(f"{name} value", node.additional_properties)
            return MapDetails(value, data)

        if kind is SchemaKind.ARRAY:
            items = node.items or SchemaNode.from_raw({}, f"{node.pointer}/items")
            return ArrayDetails(self.select(f"{name} item", items), data)

        if kind in (SchemaKind.ONE_OF, SchemaKind.ANY_OF, SchemaKind.ALL_OF):
            if node.raw.get("properties"):
                return self._classify_with_base(name, node, data)
            return self._classify_alternatives(name, node, kind, data)

        if kind is SchemaKind.PRIMITIVE:
            return BasicDetails(self._primitive(node), data)

        logger.warning(f"Schema at {node.pointer} matches no known shape")
        return UnknownDetails(f"unsupported schema at {node.pointer}", data)

    def _classify_enum(self, name: str, node: SchemaNode, data: SchemaData) -> TypeDetails:
        values = [v for v in node.enum_values if v is not None]
        if len(values) != len(node.enum_values):
            data = replace(data, nullable=True)

        if not values:
            return UnknownDetails(f"enum without values at {node.pointer}", data)

        if not all(isinstance(v, str) for v in values):
            # Numeric and boolean enums keep their primitive type.
            logger.debug(f"Non-string enum at {node.pointer} resolved as a primitive")
            return BasicDetails(self._primitive(node), data)

        unique = tuple(dict.fromkeys(values))
        return EnumDetails(unique, data)

    def _classify_alternatives(
        self, name: str, node: SchemaNode, kind: SchemaKind, data: SchemaData
    ) -> TypeDetails:
        keyword, details_cls, label = {
            SchemaKind.ONE_OF: ("oneOf", OneOfDetails, "variant"),
            SchemaKind.ANY_OF: ("anyOf", AnyOfDetails, "any of"),
            SchemaKind.ALL_OF: ("allOf", AllOfDetails, "all of"),
        }[kind]

        members = []
        for member in node.alternatives(keyword):
            if member.raw.get("type") == "null":
                data = replace(data, nullable=True)
                continue
            members.append(member)

        if not members:
            return UnknownDetails(f"{keyword} without alternatives at {node.pointer}", data)

        alternatives = []
        inline_count = 0
        for index, member in enumerate(members):
            if member.kind is SchemaKind.REFERENCE:
                hint = name
            elif keyword == "oneOf":
                hint = self._variant_hint(name, member, index)
            else:
                inline_count += 1
                hint = f"{name} {label}" if inline_count == 1 else f"{name} {label} {inline_count}"
            alternatives.append(self.select(hint, member))

        if len(alternatives) == 1:
            return NamedTypeDetails(alternatives[0], data)
        return details_cls(tuple(alternatives), data)

    def _classify_with_base(self, name: str, node: SchemaNode, data: SchemaData) -> TypeDetails:
        """A composite with sibling properties: merge the shared base with it."""
        raw = dict(node.raw)
        base = {k: v for k, v in raw.items() if k not in ("oneOf", "anyOf", "allOf", "title")}
        composite = {k: v for k, v in raw.items() if k not in ("properties", "required", "title")}

        members = []
        if "allOf" in raw:
            members.extend(node.alternatives("allOf"))
            composite.pop("allOf")
        base_id = self.select(f"{name} base", SchemaNode.from_raw(base, f"{node.pointer}/base"))
        alternatives = [base_id]
        for index, member in enumerate(members):
            hint = name if member.kind is SchemaKind.REFERENCE else f"{name} all of {index + 1}"
            alternatives.append(self.select(hint, member))
        if "oneOf" in composite or "anyOf" in composite:
            composite_node = SchemaNode.from_raw(composite, f"{node.pointer}/variants")
            alternatives.append(self.select(f"{name} variants", composite_node))
        return AllOfDetails(tuple(alternatives), data)

    def _variant_hint(self, parent: str, member: SchemaNode, index: int) -> str:
        if member.title:
            return member.title
        for child in member.properties.values():
            values = child.enum_values
            if len(values) == 1 and isinstance(values[0], str):
                return f"{parent} {values[0]}"
        return f"{parent} variant {index}"

    def _select_properties(self, name: str, node: SchemaNode) -> Tuple[Tuple[str, TypeId], ...]:
        required = set(node.required)
        properties = []
        for prop, child in node.properties.items():
            if forces_string_type(prop, self.forced_string_fields):
                data = SchemaData(description=child.description)
                properties.append((prop, self._intern(None, BasicDetails(Primitive.STRING, data))))
                continue
            type_id = self.select(f"{name} {prop}", child)
            nullable = self._node_nullable(child)
            shape = self._shape_hint(type_id)
            if shape in ALWAYS_OPTIONAL_SHAPES or (
                shape in OPTIONAL_SHAPES and (prop not in required or nullable)
            ):
                type_id = self._intern(None, OptionalDetails(type_id))
            properties.append((prop, type_id))
        return tuple(properties)

    @staticmethod
    def _node_nullable(node: SchemaNode) -> bool:
        if node.nullable or None in node.enum_values:
            return True
        for keyword in ("oneOf", "anyOf"):
            if any(m.raw.get("type") == "null" for m in node.alternatives(keyword)):
                return True
        return False

    @staticmethod
    def _primitive(node: SchemaNode) -> Primitive:
        schema_type = node.schema_type
        fmt = (node.format or "").lower()

        if schema_type == "string":
            if fmt == "date":
                return Primitive.DATE
            if fmt == "date-time":
                return Primitive.DATE_TIME
            if fmt in ("uri", "url"):
                return Primitive.URL
            return Primitive.STRING
        if schema_type == "integer":
            if fmt in ("int32", "int16", "int8"):
                return Primitive.INT32
            if fmt in ("uint32", "uint16", "uint8", "uint"):
                return Primitive.UINT32
            if fmt == "uint64":
                return Primitive.UINT64
            return Primitive.INT64
        if schema_type == "number":
            if fmt == "float":
                return Primitive.FLOAT32
            return Primitive.FLOAT64
        if schema_type == "boolean":
            return Primitive.BOOLEAN
        return Primitive.ANY

    # Views used by emitters

    def resolve_alias(self, type_id: TypeId, prop: Optional[str] = None) -> TypeId:
        """Follow NamedType links to the entry that carries the details."""
        seen = set()
        while True:
            entry = self.get(type_id, prop)
            if entry.details.kind is not TypeKind.NAMED_TYPE:
                return type_id
            if type_id in seen:
                raise UnresolvableSchemaError(f"alias cycle through {entry.name} ({type_id})")
            seen.add(type_id)
            type_id = entry.details.target

    def unwrap(self, type_id: TypeId) -> TypeId:
        """Follow NamedType and Optional links."""
        type_id = self.resolve_alias(type_id)
        details = self.get(type_id).details
        while details.kind is TypeKind.OPTIONAL:
            type_id = self.resolve_alias(details.inner)
            details = self.get(type_id).details
        return type_id

    def wire_shape(self, type_id: TypeId) -> WireShape:
        """Classify how ``type_id`` behaves on the wire."""
        if type_id in self._shapes:
            return self._shapes[type_id]

        details = self.get(type_id).details
        if details.kind is TypeKind.PENDING:
            return self._node_shape(self._pending_nodes[type_id], set())

        target = self.get(self.resolve_alias(type_id)).details
        shape = {
            TypeKind.ENUM: WireShape.ENUM,
            TypeKind.OBJECT: WireShape.RECORD,
            TypeKind.ANY_OF: WireShape.RECORD,
            TypeKind.ALL_OF: WireShape.RECORD,
            TypeKind.ONE_OF: WireShape.UNION,
            TypeKind.ARRAY: WireShape.ARRAY,
            TypeKind.MAP: WireShape.MAP,
            TypeKind.OPTIONAL: WireShape.OPTIONAL,
            TypeKind.UNKNOWN: WireShape.UNKNOWN,
        }.get(target.kind)
        if target.kind is TypeKind.BASIC:
            shape = PRIMITIVE_SHAPES[target.primitive]
        if target.kind is TypeKind.PENDING:
            return self._node_shape(self._pending_nodes[self.resolve_alias(type_id)], set())

        if self._frozen:
            self._shapes[type_id] = shape
        return shape

    def _shape_hint(self, type_id: TypeId) -> WireShape:
        try:
            return self.wire_shape(type_id)
        except UnresolvableSchemaError:
            return WireShape.UNKNOWN

    def _node_shape(self, node: SchemaNode, seen: Set[str]) -> WireShape:
        """Shape of a node whose entry is still a placeholder."""
        kind = node.kind
        if kind is SchemaKind.REFERENCE:
            if node.ref in seen:
                return WireShape.UNKNOWN
            seen.add(node.ref)
            type_id = self.ref_to_id.get(node.ref)
            if type_id is not None and type_id not in self._pending_nodes:
                return self._shape_hint(type_id)
            return self._node_shape(self.store.resolve(node.ref), seen)
        if kind is SchemaKind.ENUMERATION:
            values = [v for v in node.enum_values if v is not None]
            if values and all(isinstance(v, str) for v in values):
                return WireShape.ENUM
            return PRIMITIVE_SHAPES[self._primitive(node)]
        if kind in (SchemaKind.ONE_OF, SchemaKind.ANY_OF, SchemaKind.ALL_OF):
            keyword = {SchemaKind.ONE_OF: "oneOf", SchemaKind.ANY_OF: "anyOf"}.get(kind, "allOf")
            members = [m for m in node.alternatives(keyword) if m.raw.get("type") != "null"]
            if len(members) == 1 and not node.raw.get("properties"):
                return self._node_shape(members[0], seen)
            if kind is SchemaKind.ONE_OF and not node.raw.get("properties"):
                return WireShape.UNION
            return WireShape.RECORD
        return {
            SchemaKind.RECORD: WireShape.RECORD,
            SchemaKind.MAP: WireShape.MAP,
            SchemaKind.ARRAY: WireShape.ARRAY,
            SchemaKind.PRIMITIVE: PRIMITIVE_SHAPES[self._primitive(node)],
        }.get(kind, WireShape.UNKNOWN)

    def render_type(
        self,
        type_id: TypeId,
        renderer: Optional[TypeRenderer] = None,
        prop: Optional[str] = None,
    ) -> str:
        """Render ``type_id`` as a type expression.

        Raises:
            UnresolvableSchemaError: The type (or a child) is ``Unknown``.
            UnrenderableTypeError: The id is dangling or unnamed where a name is needed.
        """
        renderer = renderer or NEUTRAL_RENDERER
        type_id = self.resolve_alias(type_id, prop)
        entry = self.get(type_id, prop)
        details = entry.details
        kind = details.kind

        if kind is TypeKind.BASIC:
            return renderer.primitive(details.primitive)
        if kind is TypeKind.ARRAY:
            return renderer.array(self.render_type(details.item, renderer, prop))
        if kind is TypeKind.MAP:
            return renderer.map(self.render_type(details.value, renderer, prop))
        if kind is TypeKind.OPTIONAL:
            return renderer.optional(self.render_type(details.inner, renderer, prop))
        if kind in EMITTED_KINDS:
            if not entry.name:
                raise UnrenderableTypeError(prop, type_id, "composite type has no name")
            return renderer.named(entry.name)
        if kind is TypeKind.UNKNOWN:
            raise UnresolvableSchemaError(
                f"property {prop or '<root>'} has no concrete type ({type_id}): {details.reason}"
            )
        raise UnrenderableTypeError(prop, type_id, f"unexpected {kind.value} entry")

    def render_docs(self, type_id: TypeId) -> str:
        """Description attached to ``type_id``, or an empty string.

        Optional and alias wrappers without a description of their own
        defer to the type they wrap.
        """
        seen = set()
        while type_id not in seen:
            seen.add(type_id)
            details = self.get(type_id).details
            if details.data.description:
                return details.data.description.strip()
            if details.kind is TypeKind.OPTIONAL:
                type_id = details.inner
            elif details.kind is TypeKind.NAMED_TYPE:
                type_id = details.target
            else:
                break
        return ""
