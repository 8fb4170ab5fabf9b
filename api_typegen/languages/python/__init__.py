"""
Python code generator module.

Generates Python dataclasses and enums from synthesized type definitions.
"""

from .generator import PythonGenerator, create_python_generator, create_strict_dataclass_generator
from .naming import constant_name, create_enum_sanitizer, enum_member_name
from .config import (
    PythonConfig,
    PythonTypeRenderer,
    get_dataclass_config,
    get_strict_dataclass_config,
)

__all__ = [
    # Generator
    "PythonGenerator",
    "create_python_generator",
    "create_strict_dataclass_generator",
    # Naming
    "create_enum_sanitizer",
    "enum_member_name",
    "constant_name",
    # Configuration
    "PythonConfig",
    "PythonTypeRenderer",
    "get_dataclass_config",
    "get_strict_dataclass_config",
]
