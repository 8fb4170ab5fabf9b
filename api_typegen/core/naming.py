"""
Naming utilities for safe type synthesis.

Handles name sanitization, case conversions, keyword conflicts, sigil
stripping and the other naming concerns shared by the resolver, the
emitters and the renderers.
"""

import re
import unicodedata
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Set


class NamingCase(Enum):
    """Different naming case styles."""

    SNAKE_CASE = "snake"  # user_name
    CAMEL_CASE = "camel"  # userName
    PASCAL_CASE = "pascal"  # UserName
    KEBAB_CASE = "kebab"  # user-name
    SCREAMING_SNAKE = "screaming_snake"  # USER_NAME


# Property names that cannot be used verbatim as field names.
RESERVED_FIELD_NAMES: FrozenSet[str] = frozenset(
    {
        # Python keywords
        "and", "as", "assert", "async", "await", "break", "class", "continue",
        "def", "del", "elif", "else", "except", "finally", "for", "from",
        "global", "if", "import", "in", "is", "lambda", "nonlocal", "not",
        "or", "pass", "raise", "return", "try", "while", "with", "yield",
        # Names that broke generated clients in practice
        "ref", "type", "self", "box", "match", "foo", "enum", "const", "use",
    }
)

# Type names that would shadow names the generated module imports.
RESERVED_TYPE_NAMES: FrozenSet[str] = frozenset(
    {"Any", "Dict", "Enum", "False", "List", "None", "Optional", "Self",
     "True", "Type", "Union"}
)

# Appended to a field name that is a reserved word.
RESERVED_MARKER = "_"

# Leading sigils, and the marker that replaces each one.
SIGIL_SUFFIXES: Dict[str, str] = {
    "$": "__",
    "@": "_at",
    "_": "",
}

# Names that are not identifiers at all.
LITERAL_TOKENS: Dict[str, str] = {
    "+1": "plus_one",
    "-1": "minus_one",
}

# Properties whose declared type is ignored: pagination cursors arrive as
# strings, numbers or objects depending on the API.
FORCED_STRING_FIELDS: FrozenSet[str] = frozenset({"next"})

_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+\d*|[A-Z]+\d*|\d+")


def _ascii(name: str) -> str:
    normalized = unicodedata.normalize("NFKD", name)
    return normalized.encode("ascii", "ignore").decode("ascii")


def split_words(name: str) -> list[str]:
    """Split a raw name on separators and case boundaries."""
    return _WORD_RE.findall(_ascii(name))


def to_snake_case(name: str) -> str:
    """Convert to snake_case."""
    return "_".join(word.lower() for word in split_words(name))


def to_pascal_case(name: str) -> str:
    """Convert to PascalCase."""
    return "".join(word.capitalize() for word in split_words(name))


def to_camel_case(name: str) -> str:
    """Convert to camelCase."""
    pascal = to_pascal_case(name)
    words = split_words(pascal)
    if not words:
        return pascal
    return words[0].lower() + "".join(word.capitalize() for word in words[1:])


def struct_name(raw: str, reserved: Iterable[str] = RESERVED_TYPE_NAMES) -> str:
    """Produce the canonical type name for a declared or synthesized name.

    Deterministic and idempotent: ``struct_name(struct_name(x)) ==
    struct_name(x)``.
    """
    text = LITERAL_TOKENS.get(raw.strip(), raw)
    name = to_pascal_case(text)
    # One-letter words merge into a capital run ("a_b" -> "AB") that the
    # next split reads as one word; settle on the form a re-split keeps.
    while to_pascal_case(name) != name:
        name = to_pascal_case(name)

    if not name:
        return "Empty"
    if name[0].isdigit():
        name = f"N{name}"
    if name in reserved:
        name = f"{name}Type"
    return name


def field_name(raw: str, reserved: Iterable[str] = RESERVED_FIELD_NAMES) -> str:
    """Produce the canonical field name for a raw property name.

    Steps, in order: special-case substitution, reserved-word escaping,
    sigil stripping, literal tokens, case normalization and a second
    reserved-word check. Deterministic and idempotent.
    """
    reserved = frozenset(reserved)
    name = raw.strip()
    suffix = ""

    if name in reserved:
        suffix = RESERVED_MARKER

    if name and name[0] in SIGIL_SUFFIXES:
        sigil = name[0]
        name = name.lstrip(sigil)
        suffix = SIGIL_SUFFIXES[sigil] + suffix

    name = LITERAL_TOKENS.get(name, name)

    # Trailing underscores are markers from an earlier pass.
    stem = name.rstrip("_")
    suffix = name[len(stem):] + suffix

    stem = to_snake_case(stem)
    if not stem:
        stem = "field"
    elif stem[0].isdigit():
        stem = f"field_{stem}"

    name = f"{stem}{suffix}"
    if name in reserved:
        name = f"{name}{RESERVED_MARKER}"
    return name


def forces_string_type(
    raw: str, forced_fields: Iterable[str] = FORCED_STRING_FIELDS
) -> bool:
    """Whether a property is always typed as a string, whatever its schema says."""
    return raw.strip() in set(forced_fields)


class NameSanitizer:
    """Handles name sanitization and case conversion for renderers."""

    def __init__(self, reserved_words: Set[str] = None, builtin_types: Set[str] = None):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
            builtin_types: Set of builtin type names that might conflict
        """
        self.reserved_words = reserved_words or set()
        self.builtin_types = builtin_types or set()
        self._name_cache: Dict[str, str] = {}
        self._used_names: Set[str] = set()

    def sanitize_name(
        self,
        name: str,
        target_case: NamingCase = NamingCase.SNAKE_CASE,
        suffix_on_conflict: str = "_",
        unique: bool = False,
    ) -> str:
        """
        Sanitize a name for safe use in target language.

        Args:
            name: Original name to sanitize
            target_case: Desired case style
            suffix_on_conflict: Suffix to add for conflicts
            unique: Whether to disambiguate against names handed out before

        Returns:
            Sanitized name safe for use
        """
        cache_key = f"{name}_{target_case.value}_{suffix_on_conflict}"
        if cache_key in self._name_cache and not unique:
            return self._name_cache[cache_key]

        converted = self._convert_case(name, target_case)
        if not converted:
            converted = "field" if target_case != NamingCase.PASCAL_CASE else "Field"
        if converted[0].isdigit():
            converted = f"_{converted}"

        final_name = self._resolve_conflicts(converted, suffix_on_conflict, unique)

        self._name_cache[cache_key] = final_name
        self._used_names.add(final_name)

        return final_name

    def _convert_case(self, name: str, target_case: NamingCase) -> str:
        """Convert name to target case style."""
        if target_case == NamingCase.SNAKE_CASE:
            return to_snake_case(name)
        elif target_case == NamingCase.CAMEL_CASE:
            return to_camel_case(name)
        elif target_case == NamingCase.PASCAL_CASE:
            return to_pascal_case(name)
        elif target_case == NamingCase.KEBAB_CASE:
            return to_snake_case(name).replace("_", "-")
        elif target_case == NamingCase.SCREAMING_SNAKE:
            return to_snake_case(name).upper()
        else:
            return name

    def _resolve_conflicts(self, name: str, suffix: str, unique: bool) -> str:
        """Resolve naming conflicts with reserved words and existing names."""
        if name.lower() in self.reserved_words or name.lower() in self.builtin_types:
            name = f"{name}{suffix}"

        if not unique:
            return name

        original_name = name
        counter = 1
        while name in self._used_names:
            name = f"{original_name}{suffix}{counter}"
            counter += 1

        return name

    def reset_used_names(self):
        """Reset the tracking of used names."""
        self._used_names.clear()


def find_collisions(names: Dict[str, str]) -> Dict[str, list[str]]:
    """Group raw names by the normalized name they map to, keeping clashes.

    Args:
        names: Mapping of raw name to normalized name.

    Returns:
        Normalized names produced by more than one raw name.
    """
    grouped: Dict[str, list[str]] = {}
    for raw, normalized in names.items():
        grouped.setdefault(normalized, []).append(raw)
    return {k: v for k, v in grouped.items() if len(v) > 1}
