"""
Core type synthesis components.

Provides the schema store, type registry and resolver, emitters, field
policies and the base classes used by all renderers.
"""

from .schema import SchemaError, SchemaKind, SchemaNode, SchemaStore, UnresolvedReferenceError
from .typespace import (
    Primitive,
    RegistryFrozenError,
    SynthesisError,
    TypeEntry,
    TypeId,
    TypeKind,
    TypeRenderer,
    TypeSpace,
    UnrenderableTypeError,
    UnresolvableSchemaError,
    WireShape,
)
from .naming import NameSanitizer, NamingCase, field_name, struct_name
from .policy import DecodeMode, EncodeMode, FieldPolicy, PolicyEngine, SkipRule
from .emitters import (
    EnumDefinition,
    FieldDefinition,
    RecordDefinition,
    TypeEmitter,
    UnionDefinition,
)
from .codec import FieldDecodeError, RecordCodec
from .synthesizer import Synthesis, Synthesizer, synthesize
from .generator import CodeGenerator, GeneratorError, GenerationResult, generate_code
from .config import GeneratorConfig, ConfigManager, ConfigError, load_config
from .templates import TemplateEngine, TemplateError, create_template_engine

__all__ = [
    # Schema store
    "SchemaError",
    "SchemaKind",
    "SchemaNode",
    "SchemaStore",
    "UnresolvedReferenceError",
    # Registry and resolver
    "Primitive",
    "RegistryFrozenError",
    "SynthesisError",
    "TypeEntry",
    "TypeId",
    "TypeKind",
    "TypeRenderer",
    "TypeSpace",
    "UnrenderableTypeError",
    "UnresolvableSchemaError",
    "WireShape",
    # Naming
    "NameSanitizer",
    "NamingCase",
    "field_name",
    "struct_name",
    # Field policy
    "DecodeMode",
    "EncodeMode",
    "FieldPolicy",
    "PolicyEngine",
    "SkipRule",
    # Emitters and runtime codec
    "EnumDefinition",
    "FieldDefinition",
    "RecordDefinition",
    "TypeEmitter",
    "UnionDefinition",
    "FieldDecodeError",
    "RecordCodec",
    # Synthesis pass
    "Synthesis",
    "Synthesizer",
    "synthesize",
    # Base generator interface
    "CodeGenerator",
    "GeneratorError",
    "GenerationResult",
    "generate_code",
    # Configuration system
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
]
