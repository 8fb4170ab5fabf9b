"""
Python-specific naming for enum members and module constants.

Field and type names come from :mod:`api_typegen.core.naming`; this module
only covers names the Python renderer invents itself.
"""

import keyword

from ...core.naming import NameSanitizer, NamingCase, to_snake_case

PYTHON_RESERVED_WORDS = frozenset(word.lower() for word in keyword.kwlist)

# Enum attributes a member name must not shadow
ENUM_RESERVED_MEMBERS = frozenset({"name", "value", "mro"})


def create_enum_sanitizer() -> NameSanitizer:
    """Sanitizer for enum member names; ``unique`` calls disambiguate members."""
    return NameSanitizer(set(PYTHON_RESERVED_WORDS | ENUM_RESERVED_MEMBERS))


def enum_member_name(
    sanitizer: NameSanitizer, variant_name: str, case: NamingCase = NamingCase.SCREAMING_SNAKE
) -> str:
    """Member name for an enum variant, unique within the current enum."""
    return sanitizer.sanitize_name(variant_name, case, suffix_on_conflict="_", unique=True)


def constant_name(type_name: str, suffix: str) -> str:
    """Module-level constant name derived from a type name, e.g. ``SHAPE_TAG``."""
    return f"{to_snake_case(type_name).upper()}_{suffix}"
