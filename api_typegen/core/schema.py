"""
Core schema representation for type synthesis.

Wraps a loaded OpenAPI / JSON-Schema document in immutable nodes that the
resolver can classify consistently.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from ..logging_config import get_logger
from ..utils import load_document

logger = get_logger(__name__)

COMPONENTS_PREFIX = "#/components/schemas/"
DEFINITIONS_PREFIX = "#/definitions/"

PRIMITIVE_TYPES = {"string", "integer", "number", "boolean"}

BODY_CONTENT_TYPES = ("application/json", "application/problem+json", "*/*")

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


class SchemaError(Exception):
    """Base exception for malformed schema documents."""

    pass


class UnresolvedReferenceError(SchemaError):
    """Raised when a ``$ref`` does not point at a node of the document."""

    pass


class SchemaKind(Enum):
    """Structural kinds a schema node can take."""

    PRIMITIVE = "primitive"
    ARRAY = "array"
    MAP = "map"
    RECORD = "record"
    ENUMERATION = "enumeration"
    ONE_OF = "one_of"
    ANY_OF = "any_of"
    ALL_OF = "all_of"
    REFERENCE = "reference"
    UNKNOWN = "unknown"


def freeze(value: Any) -> Any:
    """Recursively turn dicts into read-only mappings and lists into tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of :func:`freeze`, for values handed back to callers."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class SchemaNode:
    """A single schema object of the source document."""

    raw: Mapping[str, Any]
    pointer: str
    name: Optional[str] = None

    @classmethod
    def from_raw(
        cls, raw: Any, pointer: str = "#", name: Optional[str] = None
    ) -> "SchemaNode":
        """Build a node from a plain mapping (freezing it)."""
        if isinstance(raw, bool):
            # JSON-Schema boolean schemas: ``true`` accepts anything.
            raw = {} if raw else {"not": {}}
        if not isinstance(raw, Mapping):
            raise SchemaError(f"Schema at {pointer} is not an object: {raw!r}")
        if not isinstance(raw, MappingProxyType):
            raw = freeze(raw)
        return cls(raw=raw, pointer=pointer, name=name)

    def _child(self, raw: Any, *path: Union[str, int]) -> "SchemaNode":
        suffix = "/".join(str(p).replace("~", "~0").replace("/", "~1") for p in path)
        return SchemaNode.from_raw(raw, f"{self.pointer}/{suffix}")

    # Plain attributes

    @property
    def ref(self) -> Optional[str]:
        return self.raw.get("$ref")

    @property
    def title(self) -> Optional[str]:
        title = self.raw.get("title")
        return title if isinstance(title, str) and title.strip() else None

    @property
    def description(self) -> Optional[str]:
        return self.raw.get("description")

    @property
    def default(self) -> Any:
        return thaw(self.raw.get("default"))

    @property
    def format(self) -> Optional[str]:
        return self.raw.get("format")

    @property
    def extensions(self) -> Dict[str, Any]:
        """``x-`` annotations carried on the node."""
        return {k: thaw(v) for k, v in self.raw.items() if k.startswith("x-")}

    @property
    def schema_type(self) -> Optional[str]:
        """Declared type with any ``"null"`` member of a type list removed."""
        declared = self.raw.get("type")
        if isinstance(declared, tuple):
            concrete = [t for t in declared if t != "null"]
            if len(concrete) == 1:
                return concrete[0]
            return None if not concrete else "|".join(concrete)
        return declared

    @property
    def nullable(self) -> bool:
        declared = self.raw.get("type")
        if isinstance(declared, tuple) and "null" in declared:
            return True
        return bool(self.raw.get("nullable", False))

    @property
    def required(self) -> Tuple[str, ...]:
        required = self.raw.get("required", ())
        return tuple(required) if isinstance(required, tuple) else ()

    @property
    def enum_values(self) -> Tuple[Any, ...]:
        """Allowed literals; a string ``const`` is a one-value enum."""
        if "enum" in self.raw:
            return tuple(self.raw["enum"])
        if isinstance(self.raw.get("const"), str):
            return (self.raw["const"],)
        return ()

    # Children

    @property
    def properties(self) -> Dict[str, "SchemaNode"]:
        """Declared properties, in document order."""
        props = self.raw.get("properties") or {}
        return {
            name: self._child(value, "properties", name) for name, value in props.items()
        }

    @property
    def items(self) -> Optional["SchemaNode"]:
        items = self.raw.get("items")
        if items is None:
            return None
        if isinstance(items, tuple):
            # Tuple validation collapses onto its first member.
            return self._child(items[0], "items", 0) if items else None
        return self._child(items, "items")

    @property
    def additional_properties(self) -> Optional["SchemaNode"]:
        extra = self.raw.get("additionalProperties")
        if extra is None or extra is False:
            return None
        if extra is True:
            return self._child({}, "additionalProperties")
        return self._child(extra, "additionalProperties")

    def alternatives(self, keyword: str) -> List["SchemaNode"]:
        """Members of a ``oneOf`` / ``anyOf`` / ``allOf`` list."""
        return [
            self._child(value, keyword, index)
            for index, value in enumerate(self.raw.get(keyword, ()))
        ]

    @property
    def kind(self) -> SchemaKind:
        """Classify the node's structural shape."""
        raw = self.raw
        if "$ref" in raw:
            return SchemaKind.REFERENCE
        if "enum" in raw or isinstance(raw.get("const"), str):
            return SchemaKind.ENUMERATION
        if "oneOf" in raw:
            return SchemaKind.ONE_OF
        if "anyOf" in raw:
            return SchemaKind.ANY_OF
        if "allOf" in raw:
            return SchemaKind.ALL_OF
        if "not" in raw:
            return SchemaKind.UNKNOWN

        schema_type = self.schema_type
        if schema_type == "array":
            return SchemaKind.ARRAY
        if schema_type in (None, "object"):
            if raw.get("properties"):
                return SchemaKind.RECORD
            if self.additional_properties is not None:
                return SchemaKind.MAP
            if schema_type == "object" or "type" not in raw:
                # Free-form value.
                return SchemaKind.PRIMITIVE
            return SchemaKind.UNKNOWN
        if schema_type in PRIMITIVE_TYPES:
            return SchemaKind.PRIMITIVE
        return SchemaKind.UNKNOWN


class SchemaStore:
    """Read-only holder of a loaded schema document."""

    def __init__(self, document: Mapping[str, Any], source: str = "<memory>"):
        if not isinstance(document, Mapping):
            raise SchemaError("Schema document must be a mapping")
        self.source = source
        self._document = freeze(document)
        self._nodes: Dict[str, SchemaNode] = {}
        logger.debug(f"Schema store created for {source}")

    @classmethod
    def from_document(
        cls, document: Mapping[str, Any], source: str = "<memory>"
    ) -> "SchemaStore":
        return cls(document, source)

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> "SchemaStore":
        source, document = load_document(file_path=file_path)
        return cls(document, source)

    @classmethod
    def from_url(cls, url: str, timeout: int = 30) -> "SchemaStore":
        source, document = load_document(url=url, timeout=timeout)
        return cls(document, source)

    @property
    def title(self) -> Optional[str]:
        info = self._document.get("info") or {}
        return info.get("title")

    def _raw_components(self) -> Tuple[str, Mapping[str, Any]]:
        components = self._document.get("components") or {}
        if components.get("schemas"):
            return COMPONENTS_PREFIX, components["schemas"]
        return DEFINITIONS_PREFIX, self._document.get("definitions") or {}

    def components(self) -> Dict[str, SchemaNode]:
        """Top-level named schemas, in document order."""
        prefix, schemas = self._raw_components()
        return {name: self.resolve(f"{prefix}{name}") for name in schemas}

    def resolve(self, ref: str) -> SchemaNode:
        """Return the node a local ``$ref`` points at."""
        if ref in self._nodes:
            return self._nodes[ref]

        if not ref.startswith("#"):
            raise UnresolvedReferenceError(f"Only local references are supported: {ref}")

        target: Any = self._document
        for part in ref[1:].lstrip("/").split("/") if ref != "#" else []:
            part = part.replace("~1", "/").replace("~0", "~")
            try:
                if isinstance(target, tuple):
                    target = target[int(part)]
                else:
                    target = target[part]
            except (KeyError, IndexError, ValueError, TypeError) as e:
                raise UnresolvedReferenceError(f"Unresolvable reference: {ref}") from e

        name = None
        for prefix in (COMPONENTS_PREFIX, DEFINITIONS_PREFIX):
            if ref.startswith(prefix) and "/" not in ref[len(prefix):]:
                name = ref[len(prefix):].replace("~1", "/").replace("~0", "~")

        node = SchemaNode.from_raw(target, ref, name)
        self._nodes[ref] = node
        return node

    def operation_schemas(self) -> Iterator[Tuple[str, SchemaNode, bool]]:
        """Yield inline request/response body schemas reachable from ``paths``.

        Yields:
            Tuples of (name hint, schema node, is request body). Reference
            nodes are yielded as-is so they resolve to their component.
        """
        paths = self._document.get("paths") or {}
        for path, item in paths.items():
            for method in HTTP_METHODS:
                operation = item.get(method)
                if not operation:
                    continue
                base = operation.get("operationId") or f"{method} {path}"
                pointer = f"#/paths/{path.replace('~', '~0').replace('/', '~1')}/{method}"

                body = operation.get("requestBody") or {}
                if "$ref" in body:
                    body = self.resolve(body["$ref"]).raw
                for content_type, media in self._json_media(body):
                    yield (
                        f"{base} request",
                        SchemaNode.from_raw(
                            media["schema"],
                            f"{pointer}/requestBody/content/{content_type.replace('/', '~1')}/schema",
                        ),
                        True,
                    )

                for status, response in (operation.get("responses") or {}).items():
                    if "$ref" in response:
                        response = self.resolve(response["$ref"]).raw
                    for content_type, media in self._json_media(response):
                        yield (
                            f"{base} response",
                            SchemaNode.from_raw(
                                media["schema"],
                                f"{pointer}/responses/{status}/content/{content_type.replace('/', '~1')}/schema",
                            ),
                            False,
                        )

    @staticmethod
    def _json_media(container: Mapping[str, Any]) -> Iterator[Tuple[str, Mapping]]:
        content = container.get("content") or {}
        candidates = [t for t in BODY_CONTENT_TYPES if t in content]
        candidates += [t for t in content if "json" in t and t not in candidates]
        for content_type in candidates:
            media = content[content_type]
            if media and media.get("schema") is not None:
                yield content_type, media
                return
