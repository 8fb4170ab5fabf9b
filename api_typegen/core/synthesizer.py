"""
Synthesis pass.

``Synthesizer`` owns one ``TypeSpace``: it resolves the component schemas,
accepts extra entry points (request and response bodies), then freezes the
registry and emits the definitions.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from ..logging_config import get_logger
from .codec import RecordCodec
from .config import GeneratorConfig
from .emitters import Definition, RecordDefinition, TypeEmitter
from .naming import struct_name
from .policy import PolicyEngine
from .schema import SchemaNode, SchemaStore
from .typespace import TypeId, TypeSpace

logger = get_logger(__name__)


@dataclass
class Synthesis:
    """Result of a synthesis run."""

    typespace: TypeSpace
    definitions: List[Definition]
    warnings: List[str] = field(default_factory=list)

    def __post_init__(self):
        self._by_name = {d.name: d for d in self.definitions}

    def lookup(self, name: str) -> Optional[Definition]:
        """Definition emitted under ``name`` (raw names are normalized)."""
        return self._by_name.get(name) or self._by_name.get(struct_name(name))

    def supports_default(self, name: str) -> bool:
        definition = self.lookup(name)
        return bool(definition is not None and definition.default_constructible)

    def codec(self, name: str) -> RecordCodec:
        definition = self.lookup(name)
        if not isinstance(definition, RecordDefinition):
            raise KeyError(f"No record named {name!r}")
        return RecordCodec(definition, self._by_name)

    @property
    def records(self) -> List[RecordDefinition]:
        return [d for d in self.definitions if d.kind == "record"]

    @property
    def enums(self) -> List[Definition]:
        return [d for d in self.definitions if d.kind == "enum"]

    @property
    def unions(self) -> List[Definition]:
        return [d for d in self.definitions if d.kind == "union"]

    @property
    def names(self) -> List[str]:
        return [d.name for d in self.definitions]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "definitions": [d.to_dict() for d in self.definitions],
            "warnings": list(self.warnings),
        }


class Synthesizer:
    """Drives one resolution sweep and the emission that follows it."""

    def __init__(self, store: SchemaStore, config: Optional[GeneratorConfig] = None):
        self.store = store
        self.config = config or GeneratorConfig()
        self.typespace = TypeSpace(store, self.config.forced_string_fields)
        self._declared: Optional[List[TypeId]] = None

    def resolve_components(self) -> List[TypeId]:
        """Resolve every component schema; safe to call more than once."""
        if self._declared is not None:
            return list(self._declared)
        self._declared = self.typespace.resolve_components()
        logger.info(f"Resolved {len(self._declared)} component schemas from {self.store.source}")
        return list(self._declared)

    def add_entry_point(
        self,
        hint: str,
        node: Union[SchemaNode, Mapping[str, Any]],
        request_body: bool = False,
    ) -> TypeId:
        """Resolve an inline schema the endpoint layer needs a type for."""
        self.resolve_components()
        if not isinstance(node, SchemaNode):
            node = SchemaNode.from_raw(node, f"#/entry/{hint}")
        type_id = self.typespace.select(hint, node, request_body=request_body)
        logger.debug(f"Entry point {hint!r} resolved to {type_id}")
        return type_id

    def add_operation_schemas(self) -> List[TypeId]:
        """Resolve the request and response bodies declared under ``paths``."""
        ids = []
        for hint, node, is_request in self.store.operation_schemas():
            ids.append(self.add_entry_point(hint, node, request_body=is_request))
        return ids

    def emit(self) -> Synthesis:
        """Freeze the registry and emit the definitions."""
        self.resolve_components()
        if not self.typespace.frozen:
            self.typespace.freeze()

        emitter = TypeEmitter(self.typespace, self.config, PolicyEngine(self.typespace, self.config))
        definitions = emitter.emit_all()
        warnings = list(self.typespace.collisions) + emitter.warnings
        return Synthesis(self.typespace, definitions, warnings)


def synthesize(
    source: Union[SchemaStore, Mapping[str, Any]],
    config: Optional[GeneratorConfig] = None,
    include_operations: bool = True,
) -> Synthesis:
    """Run a full synthesis over a store or a loaded document."""
    store = source if isinstance(source, SchemaStore) else SchemaStore.from_document(source)
    synthesizer = Synthesizer(store, config)
    synthesizer.resolve_components()
    if include_operations:
        synthesizer.add_operation_schemas()
    return synthesizer.emit()
