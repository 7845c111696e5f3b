"""
Naming utilities for safe code generation.

Handles name sanitization, case conversions, keyword conflicts,
and the XSD-name to class/property/constant name mappings shared by all
language generators.
"""

import re
from typing import Set, Dict
from enum import Enum


class NamingCase(Enum):
    """Different naming case styles."""
    SNAKE_CASE = "snake"      # user_name
    CAMEL_CASE = "camel"      # userName
    PASCAL_CASE = "pascal"    # UserName
    SCREAMING_SNAKE = "screaming_snake"  # USER_NAME
    PRESERVE = "preserve"     # ST_TDFloat


class NameSanitizer:
    """Handles name sanitization and case conversion."""

    def __init__(self, reserved_words: Set[str] = None, builtin_types: Set[str] = None):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
            builtin_types: Set of builtin type names that might conflict
        """
        self.reserved_words = {w.lower() for w in (reserved_words or set())}
        self.builtin_types = {w.lower() for w in (builtin_types or set())}
        self._name_cache: Dict[str, str] = {}
        self._used_names: Set[str] = set()

    def sanitize_name(self, name: str, target_case: NamingCase = NamingCase.SNAKE_CASE,
                      suffix_on_conflict: str = "_") -> str:
        """
        Sanitize a name for safe use in target language.

        The same input always maps to the same output for one sanitizer;
        different inputs that collapse to one name get numbered.

        Args:
            name: Original name to sanitize
            target_case: Desired case style
            suffix_on_conflict: Suffix to add for conflicts

        Returns:
            Sanitized name safe for use
        """
        cache_key = f"{name}_{target_case.value}_{suffix_on_conflict}"
        if cache_key in self._name_cache:
            return self._name_cache[cache_key]

        cleaned = clean_identifier(name)
        converted = convert_case(cleaned, target_case)
        if converted[0].isdigit():
            converted = f"_{converted}"
        final_name = self._resolve_conflicts(converted, suffix_on_conflict)

        self._name_cache[cache_key] = final_name
        self._used_names.add(final_name)

        return final_name

    def _resolve_conflicts(self, name: str, suffix: str) -> str:
        """Resolve naming conflicts with reserved words and existing names."""
        if name.lower() in self.reserved_words or name.lower() in self.builtin_types:
            name = f"{name}{suffix}"
        original_name = name

        counter = 1
        while name in self._used_names:
            if suffix == "_":
                name = f"{original_name}{suffix}{counter}"
            else:
                name = f"{original_name}{counter}"
            counter += 1

        return name


def clean_identifier(name: str) -> str:
    """Basic name cleanup: invalid characters become underscores."""
    cleaned = re.sub(r"[^a-zA-Z0-9_]", "_", name)
    cleaned = cleaned.strip("_")
    return cleaned or "field"


def to_snake_case(name: str) -> str:
    """Convert to snake_case, keeping acronyms together (TDFloat -> td_float)."""
    name = name.replace("-", "_").replace(".", "_")
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    name = name.lower()
    name = re.sub(r"_+", "_", name)
    return name.strip("_")


def to_camel_case(name: str) -> str:
    parts = to_snake_case(name).split("_")
    if not parts:
        return name
    return parts[0].lower() + "".join(part.capitalize() for part in parts[1:])


def to_pascal_case(name: str) -> str:
    return "".join(part.capitalize() for part in to_snake_case(name).split("_") if part)


def convert_case(name: str, target_case: NamingCase) -> str:
    """Convert name to target case style."""
    if target_case == NamingCase.SNAKE_CASE:
        return to_snake_case(name)
    elif target_case == NamingCase.CAMEL_CASE:
        return to_camel_case(name)
    elif target_case == NamingCase.PASCAL_CASE:
        return to_pascal_case(name)
    elif target_case == NamingCase.SCREAMING_SNAKE:
        return to_snake_case(name).upper()
    return name


def ucfirst(name: str) -> str:
    return name[:1].upper() + name[1:]


def classify(name: str) -> str:
    """XSD built-in name to class name: unsignedByte -> UnsignedByte."""
    return "".join(ucfirst(part) for part in re.split(r"[^a-zA-Z0-9]+", name) if part)


def class_name(name: str) -> str:
    """
    Class name for a schema type.

    The schema spelling is kept (ST_TDFloat stays ST_TDFloat); only the
    first letter is upper-cased and characters invalid in identifiers are
    replaced.
    """
    cleaned = ucfirst(clean_identifier(name))
    if cleaned[0].isdigit():
        cleaned = f"T{cleaned}"
    return cleaned


def property_name(name: str) -> str:
    """camelCase member name for an element or attribute name."""
    converted = to_camel_case(clean_identifier(name))
    if not converted:
        return "field"
    if converted[0].isdigit():
        converted = f"_{converted}"
    return converted


def constant_name(value: str) -> str:
    """Enumeration constant name: 'a-b' -> VALUE_A_B."""
    upper = re.sub(r"[^A-Z0-9_]", "_", str(value).upper())
    return f"VALUE_{upper}" if upper else "VALUE_EMPTY"


_IRREGULAR = {
    "child": "children",
    "person": "people",
    "man": "men",
    "woman": "women",
    "foot": "feet",
    "tooth": "teeth",
    "mouse": "mice",
    "datum": "data",
    "criterion": "criteria",
    "index": "indices",
}
_UNCOUNTABLE = {"information", "equipment", "data", "series", "species", "news", "metadata"}


def _match_case(source: str, word: str) -> str:
    return ucfirst(word) if source[:1].isupper() else word


def pluralize(word: str) -> str:
    """English plural of the last word in a camelCase name."""
    head, tail = _split_last_word(word)
    lower = tail.lower()
    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR:
        return head + _match_case(tail, _IRREGULAR[lower])
    if re.search(r"(s|x|z|ch|sh)$", lower):
        return f"{word}es"
    if re.search(r"[^aeiou]y$", lower):
        return f"{word[:-1]}ies"
    if re.search(r"(?<!f)fe?$", lower) and lower not in ("chief", "roof", "belief"):
        return re.sub(r"fe?$", "ves", word)
    return f"{word}s"


def singularize(word: str) -> str:
    """Inverse of :func:`pluralize` for the common cases."""
    head, tail = _split_last_word(word)
    lower = tail.lower()
    if lower in _UNCOUNTABLE:
        return word
    for singular, plural in _IRREGULAR.items():
        if lower == plural:
            return head + _match_case(tail, singular)
    if re.search(r"ies$", lower) and len(lower) > 3:
        return f"{word[:-3]}y"
    if re.search(r"ves$", lower):
        return f"{word[:-3]}f"
    if re.search(r"(s|x|z|ch|sh)es$", lower):
        return word[:-2]
    if lower.endswith("s") and not lower.endswith("ss"):
        return word[:-1]
    return word


def _split_last_word(word: str):
    match = re.search(r"([A-Z]?[a-z0-9]+|[A-Z]+)$", word)
    if not match:
        return "", word
    return word[:match.start()], match.group(1)
