"""
Python-specific configuration and type mappings.

Provides the primitive type mapping and the dataclass options used by the
Python renderer.
"""

import re
from typing import Dict, Iterable, Set

from ...core.naming import NamingCase
from ...core.typespace import Primitive, TypeRenderer


# Python type mappings
PYTHON_TYPE_MAP: Dict[Primitive, str] = {
    Primitive.STRING: "str",
    Primitive.INT32: "int",
    Primitive.INT64: "int",
    Primitive.UINT32: "int",
    Primitive.UINT64: "int",
    Primitive.FLOAT32: "float",
    Primitive.FLOAT64: "float",
    Primitive.BOOLEAN: "bool",
    Primitive.DATE: "date",
    Primitive.DATE_TIME: "datetime",
    Primitive.URL: "str",
    Primitive.ANY: "Any",
}

# Types that require imports
PYTHON_IMPORT_MAP = {
    "datetime": ("datetime", "datetime"),
    "date": ("datetime", "date"),
    "Any": ("typing", "Any"),
    "Union": ("typing", "Union"),
    "Enum": ("enum", "Enum"),
}


class PythonConfig:
    """Python-specific configuration."""

    def __init__(self, **kwargs):
        """Initialize Python configuration."""
        # Type preferences
        self.int_type = kwargs.get("int_type", "int")
        self.float_type = kwargs.get("float_type", "float")
        self.string_type = kwargs.get("string_type", "str")
        self.bool_type = kwargs.get("bool_type", "bool")
        self.date_type = kwargs.get("date_type", "date")
        self.datetime_type = kwargs.get("datetime_type", "datetime")
        self.url_type = kwargs.get("url_type", "str")
        self.unknown_type = kwargs.get("unknown_type", "Any")

        # Dataclass-specific options
        self.dataclass_frozen = kwargs.get("dataclass_frozen", False)
        self.dataclass_slots = kwargs.get("dataclass_slots", False)
        self.dataclass_kw_only = kwargs.get("dataclass_kw_only", True)

        # Field metadata carrying wire names and skip rules
        self.field_metadata = kwargs.get("field_metadata", True)

        enum_case = kwargs.get("enum_case", NamingCase.SCREAMING_SNAKE.value)
        try:
            self.enum_case = NamingCase(enum_case)
        except ValueError:
            self.enum_case = NamingCase.SCREAMING_SNAKE

        # Build type map with configured types
        self.type_map = PYTHON_TYPE_MAP.copy()
        for primitive in (Primitive.INT32, Primitive.INT64, Primitive.UINT32, Primitive.UINT64):
            self.type_map[primitive] = self.int_type
        for primitive in (Primitive.FLOAT32, Primitive.FLOAT64):
            self.type_map[primitive] = self.float_type
        self.type_map[Primitive.STRING] = self.string_type
        self.type_map[Primitive.BOOLEAN] = self.bool_type
        self.type_map[Primitive.DATE] = self.date_type
        self.type_map[Primitive.DATE_TIME] = self.datetime_type
        self.type_map[Primitive.URL] = self.url_type
        self.type_map[Primitive.ANY] = self.unknown_type

    def decorator_arguments(self) -> str:
        """Arguments of the ``@dataclasses.dataclass`` decorator."""
        args = []
        if self.dataclass_frozen:
            args.append("frozen=True")
        if self.dataclass_slots:
            args.append("slots=True")
        if self.dataclass_kw_only:
            args.append("kw_only=True")
        return ", ".join(args)

    def get_required_imports(self, types_used: Iterable[str]) -> Dict[str, Set[str]]:
        """Map of module to names the given type expressions need."""
        imports: Dict[str, Set[str]] = {}
        for type_string in types_used:
            for base_type in self._extract_base_types(type_string):
                if base_type in PYTHON_IMPORT_MAP:
                    module, name = PYTHON_IMPORT_MAP[base_type]
                    imports.setdefault(module, set()).add(name)
        return imports

    @staticmethod
    def _extract_base_types(type_string: str) -> Set[str]:
        """Extract identifiers from complex type strings."""
        return set(re.findall(r"\b([A-Za-z_][A-Za-z0-9_]*)\b", type_string))


class PythonTypeRenderer(TypeRenderer):
    """Renders resolved types as Python annotations."""

    def __init__(self, config: PythonConfig):
        self.primitives = config.type_map

    def array(self, item: str) -> str:
        return f"list[{item}]"

    def map(self, value: str) -> str:
        return f"dict[str, {value}]"

    def optional(self, inner: str) -> str:
        return f"{inner} | None"


def get_dataclass_config() -> Dict[str, object]:
    """Language options for mutable keyword-only dataclasses."""
    return {"dataclass_kw_only": True, "dataclass_slots": False, "dataclass_frozen": False}


def get_strict_dataclass_config() -> Dict[str, object]:
    """Language options for frozen, slotted dataclasses."""
    return {"dataclass_kw_only": True, "dataclass_slots": True, "dataclass_frozen": True}
