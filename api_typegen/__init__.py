"""
api_typegen: schema-to-bindings type synthesis.

Resolves the schemas of an OpenAPI / JSON-Schema document into a flat set
of named type definitions with per-field serialization policies, and
renders them through the generator registry.
"""

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .core.config import GeneratorConfig, ConfigManager, load_config
from .core.generator import CodeGenerator, GenerationResult, generate_code
from .core.schema import SchemaError, SchemaNode, SchemaStore
from .core.synthesizer import Synthesis, Synthesizer, synthesize
from .core.typespace import SynthesisError
from .logging_config import get_logger, setup_logging
from .registry import GeneratorRegistry, get_generator, get_registry, list_supported_languages
from .utils import DocumentLoaderError, load_document

logger = get_logger(__name__)

# Version info
__version__ = "0.1.0"


def generate(
    source: Union[SchemaStore, Mapping[str, Any], str, Path],
    language: str = "python",
    config: Optional[Union[GeneratorConfig, Dict[str, Any], str, Path]] = None,
    include_operations: bool = True,
) -> GenerationResult:
    """
    Synthesize types from a document and render them.

    Args:
        source: Schema store, loaded document, URL, or path to a JSON document
        language: Output name or alias
        config: Generator configuration, dict of overrides, or config file path
        include_operations: Also resolve request/response bodies under ``paths``

    Returns:
        GenerationResult with generated code; failed (and empty) on any
        synthesis or rendering error
    """
    generator = get_generator(language, config)

    if isinstance(source, str) and source.startswith(("http://", "https://")):
        source = SchemaStore.from_url(source)
    elif isinstance(source, (str, Path)):
        source = SchemaStore.from_file(source)

    try:
        synthesis = synthesize(source, generator.config, include_operations)
    except (SchemaError, SynthesisError) as e:
        logger.error(f"Type synthesis failed: {e}")
        return GenerationResult.error(f"Type synthesis failed: {e}", exception=e)

    return generate_code(generator, synthesis)


def quick_generate(document: Union[Mapping[str, Any], str], language: str = "python", **options) -> str:
    """
    Quick code generation from a document.

    Args:
        document: Loaded document or JSON text
        language: Output name
        **options: Configuration overrides

    Returns:
        Generated code string
    """
    if isinstance(document, str):
        import json

        document = json.loads(document)

    result = generate(document, language, options)

    if result.success:
        return result.code
    else:
        raise RuntimeError(f"Code generation failed: {result.error_message}")


__all__ = [
    "CodeGenerator",
    "ConfigManager",
    "DocumentLoaderError",
    "GenerationResult",
    "GeneratorConfig",
    "GeneratorRegistry",
    "SchemaNode",
    "SchemaStore",
    "Synthesis",
    "SynthesisError",
    "Synthesizer",
    "generate",
    "generate_code",
    "get_generator",
    "get_logger",
    "get_registry",
    "list_supported_languages",
    "load_config",
    "load_document",
    "quick_generate",
    "setup_logging",
    "synthesize",
]
