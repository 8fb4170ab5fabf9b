"""
Python code generator implementation.

Renders synthesized definitions as a module of keyword-only dataclasses,
``str`` enums with a fallthrough member, and union aliases, using
templates.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from ...core.config import GeneratorConfig, load_config
from ...core.emitters import (
    FALLTHROUGH_VARIANT,
    EnumDefinition,
    FieldDefinition,
    RecordDefinition,
    UnionDefinition,
)
from ...core.generator import CodeGenerator, GeneratorError
from ...core.policy import DecodeMode
from ...core.synthesizer import Synthesis
from ...core.typespace import WireShape
from ...logging_config import get_logger
from .config import (
    PythonConfig,
    PythonTypeRenderer,
    get_dataclass_config,
    get_strict_dataclass_config,
)
from .naming import constant_name, create_enum_sanitizer, enum_member_name

logger = get_logger(__name__)

FLOAT_SHAPES = {WireShape.FLOAT32, WireShape.FLOAT64}


def py_string(value: str) -> str:
    """Double-quoted Python string literal."""
    return json.dumps(value, ensure_ascii=False)


def docstring(text: str, indent: int = 4) -> str:
    """Indented docstring block for ``text``."""
    pad = " " * indent
    text = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"').strip()
    lines = text.split("\n")
    if len(lines) == 1:
        return f'{pad}"""{lines[0]}"""'
    body = "\n".join(f"{pad}{line}".rstrip() for line in lines)
    return f'{pad}"""\n{body}\n{pad}"""'


def comment(text: str, indent: int = 0) -> str:
    pad = " " * indent
    return "\n".join(f"{pad}# {line}".rstrip() for line in text.strip().split("\n"))


class PythonGenerator(CodeGenerator):
    """Renders definitions as Python dataclasses and enums."""

    def __init__(self, config: GeneratorConfig):
        """Initialize Python generator with configuration."""
        super().__init__(config)

        self.python_config = PythonConfig(**config.language_config)
        self.type_renderer = PythonTypeRenderer(self.python_config)
        self.enum_sanitizer = create_enum_sanitizer()

        # State tracking
        self.types_used = set()
        self._enum_members: Dict[str, Dict[str, str]] = {}
        self._typespace = None

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "python"

    @property
    def file_extension(self) -> str:
        """Return Python file extension."""
        return ".py"

    def get_template_directory(self) -> Path:
        """Return the Python templates directory."""
        return Path(__file__).parent / "templates"

    def generate(self, synthesis: Synthesis) -> str:
        """Generate a complete Python module for all definitions."""
        self.types_used = set()
        self._enum_members = {}
        self._typespace = synthesis.typespace

        # Enums first: record defaults refer to their members.
        enums = [self._enum_data(d) for d in synthesis.enums]
        records = [self._record_data(d, synthesis) for d in synthesis.records]
        unions = [self._union_data(d, synthesis) for d in synthesis.unions]

        if unions:
            self.types_used.add("Union")
        if enums:
            self.types_used.add("Enum")

        context = {
            "title": self.config.package_name or "types",
            "source": synthesis.typespace.store.source,
            "provider": self.config.provider_name,
            "imports": self._get_imports(bool(records)),
            "enums": enums,
            "records": records,
            "unions": unions,
            "tag_maps": [u for u in unions if u["tagged_variants"]],
        }
        return self.render_template("module.py.j2", context)

    def _render(self, type_id, prop: Optional[str] = None) -> str:
        rendered = self._typespace.render_type(type_id, self.type_renderer, prop=prop)
        self.types_used.add(rendered)
        return rendered

    # Enums

    def _enum_data(self, definition: EnumDefinition) -> Dict[str, Any]:
        self.enum_sanitizer.reset_used_names()
        members = []
        by_value = {}
        for variant in definition.variants:
            name = enum_member_name(self.enum_sanitizer, variant.name, self.python_config.enum_case)
            members.append({"name": name, "value": py_string(variant.wire_value)})
            by_value[variant.wire_value] = name

        fallthrough = enum_member_name(
            self.enum_sanitizer, FALLTHROUGH_VARIANT, self.python_config.enum_case
        )
        self._enum_members[definition.name] = by_value

        return {
            "name": definition.name,
            "docstring": self._docstring(definition.description),
            "members": members,
            "fallthrough_repr": py_string(fallthrough),
            "noop": definition.noop,
        }

    # Records

    def _record_data(self, definition: RecordDefinition, synthesis: Synthesis) -> Dict[str, Any]:
        fields = []
        for field in definition.fields:
            fields.append(self._field_data(field, definition, synthesis))

        if not self.python_config.dataclass_kw_only:
            # Positional dataclasses need required fields first.
            fields.sort(key=lambda f: not f["required"])

        args = self.python_config.decorator_arguments()
        return {
            "name": definition.name,
            "decorator": f"({args})" if args else "",
            "docstring": self._docstring(definition.description),
            "fields": fields,
        }

    def _field_data(
        self, field: FieldDefinition, record: RecordDefinition, synthesis: Synthesis
    ) -> Dict[str, Any]:
        python_type = self._render(field.type_id, prop=field.wire_name)
        if field.policy.wrap_optional:
            python_type = self.type_renderer.optional(python_type)

        default = self._field_default(field, synthesis)
        if default is None and record.default_constructible:
            # Default-constructible records need every field to have a default.
            python_type = self.type_renderer.optional(python_type)
            default = ("value", "None")

        metadata = None
        if self.python_config.field_metadata:
            metadata = {"wire_name": field.wire_name, "skip": field.policy.skip.value}
            if field.flatten:
                metadata["flatten"] = True

        comment_text = ""
        if self.config.add_comments and field.description:
            comment_text = comment(field.description, indent=4)

        return {
            "name": field.name,
            "type": python_type,
            "assignment": self._assignment(default, metadata),
            "comment": comment_text,
            "required": default is None,
        }

    def _field_default(self, field: FieldDefinition, synthesis: Synthesis):
        """Default of a field as ("value", expr) or ("factory", expr), or None."""
        policy = field.policy
        if not policy.default:
            return None

        if policy.wrap_optional or policy.shape is WireShape.OPTIONAL:
            return ("value", "None")

        mode = policy.decode
        if mode is DecodeMode.NULL_AS_EMPTY_STRING:
            return ("value", '""')
        if mode is DecodeMode.NULL_AS_EMPTY_LIST:
            return ("factory", "list")
        if mode is DecodeMode.NULL_AS_EMPTY_MAP:
            return ("factory", "dict")
        if mode is DecodeMode.NULL_AS_ZERO:
            return ("value", "0.0" if policy.shape in FLOAT_SHAPES else "0")
        if mode is DecodeMode.NULL_AS_FALSE:
            return ("value", "False")
        if mode is DecodeMode.NULL_AS_NONE:
            return ("value", "None")
        if mode is DecodeMode.ENUM_FALLTHROUGH:
            target = synthesis.lookup(field.target or "")
            if not isinstance(target, EnumDefinition):
                raise GeneratorError(f"Enum field {field.name} has no enum definition")
            member = self._enum_members[target.name].get(target.default_value)
            if member is None:
                return ("value", f"{target.name}({py_string(target.default_value)})")
            return ("value", f"{target.name}.{member}")
        if mode is DecodeMode.RECORD:
            target = synthesis.lookup(field.target or "")
            if isinstance(target, RecordDefinition):
                return ("factory", f"lambda: {target.name}()")
        return None

    @staticmethod
    def _assignment(default, metadata: Optional[Dict[str, Any]]) -> str:
        if metadata is None:
            if default is None:
                return ""
            kind, expr = default
            if kind == "value":
                return f" = {expr}"
            return f" = dataclasses.field(default_factory={expr})"

        args = []
        if default is not None:
            kind, expr = default
            args.append(f"default={expr}" if kind == "value" else f"default_factory={expr}")
        args.append(f"metadata={metadata!r}")
        return f" = dataclasses.field({', '.join(args)})"

    # Unions

    def _union_data(self, definition: UnionDefinition, synthesis: Synthesis) -> Dict[str, Any]:
        members = []
        tagged_variants = []
        for variant in definition.variants:
            python_type = self._render(variant.type_id, prop=definition.name)
            members.append(py_string(python_type))
            if definition.tagged and variant.tag_value is not None:
                tagged_variants.append({"tag_repr": py_string(variant.tag_value), "type": python_type})

        comment_text = ""
        if self.config.add_comments and definition.description:
            comment_text = comment(definition.description)

        return {
            "name": definition.name,
            "comment": comment_text,
            "members": ", ".join(members),
            "tag_constant": constant_name(definition.name, "TAG"),
            "tag_repr": py_string(definition.tag) if definition.tag else None,
            "content_constant": constant_name(definition.name, "CONTENT"),
            "content_repr": py_string(definition.content) if definition.content else None,
            "variants_constant": constant_name(definition.name, "VARIANTS"),
            "tagged_variants": tagged_variants,
        }

    # Helpers

    def _docstring(self, text: str) -> str:
        if not self.config.add_comments or not text:
            return ""
        return docstring(text, indent=4)

    def _get_imports(self, has_records: bool) -> List[str]:
        """Import lines needed by the generated module."""
        imports = self.python_config.get_required_imports(self.types_used)
        lines = []
        if has_records:
            lines.append("import dataclasses")
        for module in sorted(imports):
            names = ", ".join(sorted(imports[module]))
            lines.append(f"from {module} import {names}")
        return lines

    def validate_definitions(self, synthesis: Synthesis) -> List[str]:
        """Validate definitions for Python generation."""
        warnings = super().validate_definitions(synthesis)

        for definition in synthesis.records:
            if definition.flattened:
                warnings.append(
                    f"Record {definition.name} flattens its members; "
                    "dataclasses keep them as nested fields"
                )
        return warnings


# Factory functions
def create_python_generator(config: GeneratorConfig = None) -> PythonGenerator:
    """Create a Python generator with default dataclass settings."""
    if config is None:
        config = load_config("python", custom_config={"language_config": get_dataclass_config()})

    return PythonGenerator(config)


def create_strict_dataclass_generator(package_name: str = "types") -> PythonGenerator:
    """Create a generator for frozen, slotted dataclasses."""
    config = load_config(
        "python",
        custom_config={
            "package_name": package_name,
            "language_config": get_strict_dataclass_config(),
        },
    )
    return PythonGenerator(config)
