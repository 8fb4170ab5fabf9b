"""
Renderer base class and the guarded generation entry point.

A renderer turns a finished :class:`Synthesis` into source text. It never
touches the type space beyond reading it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..logging_config import get_logger
from .config import GeneratorConfig
from .synthesizer import Synthesis
from .templates import TemplateEngine, TemplateError, create_template_engine
from .typespace import SynthesisError

logger = get_logger(__name__)

MAX_BLANK_LINES = 2


class GeneratorError(Exception):
    """A renderer could not produce output."""

    pass


class CodeGenerator(ABC):
    """Base class for output renderers."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        self.config = config or GeneratorConfig()
        self._template_engine: Optional[TemplateEngine] = None

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Registry name of the output (e.g. 'python', 'manifest')."""

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Extension for written output (e.g. '.py', '.json')."""

    def get_template_directory(self) -> Optional[Path]:
        """Directory of this renderer's templates, or None for none."""
        return None

    @property
    def template_engine(self) -> TemplateEngine:
        if self._template_engine is None:
            self._template_engine = create_template_engine(self.get_template_directory())
        return self._template_engine

    @abstractmethod
    def generate(self, synthesis: Synthesis) -> str:
        """Render every definition of ``synthesis`` into one output text."""

    def validate_definitions(self, synthesis: Synthesis) -> List[str]:
        """
        Warnings about definitions the output would carry as-is.

        Renderers extend this with format-specific checks.
        """
        warnings = []
        seen = set()
        for definition in synthesis.definitions:
            if definition.name in seen:
                warnings.append(f"Type '{definition.name}' is defined more than once")
            seen.add(definition.name)
            if definition.kind == "record" and not definition.fields:
                warnings.append(f"Record '{definition.name}' has no fields")
        return warnings

    def format_code(self, code: str) -> str:
        """Strip trailing whitespace, cap blank runs and apply the configured line ending."""
        lines = []
        blank_run = 0
        for line in code.split("\n"):
            line = line.rstrip()
            blank_run = blank_run + 1 if not line else 0
            if blank_run <= MAX_BLANK_LINES:
                lines.append(line)

        code = "\n".join(lines).strip("\n") + "\n"
        if self.config.line_ending != "\n":
            code = code.replace("\n", self.config.line_ending)
        return code

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        return self.template_engine.render_template(template_name, context)

    def template_exists(self, template_name: str) -> bool:
        return self.template_engine.template_exists(template_name)


@dataclass
class GenerationResult:
    """Output of :func:`generate_code`: code plus warnings, or an error."""

    code: str
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    success: bool = True
    error_message: Optional[str] = None
    exception: Optional[Exception] = None

    @classmethod
    def error(cls, message: str, exception: Optional[Exception] = None) -> "GenerationResult":
        return cls(code="", success=False, error_message=message, exception=exception)


def _metadata(generator: CodeGenerator, synthesis: Synthesis) -> Dict[str, Any]:
    return {
        "language": generator.language_name,
        "file_extension": generator.file_extension,
        "definition_count": len(synthesis.definitions),
        "record_count": len(synthesis.records),
        "enum_count": len(synthesis.enums),
        "union_count": len(synthesis.unions),
        "type_count": len(synthesis.typespace),
        "has_collisions": bool(synthesis.typespace.collisions),
    }


def generate_code(generator: CodeGenerator, synthesis: Synthesis) -> GenerationResult:
    """
    Run ``generator`` over ``synthesis`` and capture failures.

    Synthesis, template and renderer errors yield a failed result with
    empty code; partial output is never returned.
    """
    try:
        renderer_warnings = generator.validate_definitions(synthesis)
        code = generator.format_code(generator.generate(synthesis))
    except (SynthesisError, TemplateError, GeneratorError) as e:
        logger.error(f"Code generation failed: {e}")
        return GenerationResult.error(f"Code generation failed: {e}", exception=e)

    for warning in renderer_warnings:
        logger.warning(warning)
    warnings = list(synthesis.warnings) + renderer_warnings
    return GenerationResult(code, warnings, _metadata(generator, synthesis))
