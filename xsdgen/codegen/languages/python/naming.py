"""
Python-specific naming utilities and sanitization.

Handles Python reserved words, builtins, and the snake_case members of
generated classes.
"""

import keyword

from ...core.naming import NameSanitizer, NamingCase, to_snake_case


# Python reserved keywords
PYTHON_RESERVED_WORDS = set(keyword.kwlist) | {"match", "case", "type", "_"}

# Names a generated member must not shadow
PYTHON_BUILTIN_TYPES = {
    # Types
    "int",
    "float",
    "str",
    "bool",
    "list",
    "dict",
    "set",
    "tuple",
    "bytes",
    "object",
    # Names used inside generated methods
    "self",
    "cls",
    "re",
    "stream",
}


def python_class_name(name: str) -> str:
    """Class name safe for a Python declaration and module name."""
    if name in keyword.kwlist:
        return f"{name}Type"
    return name


def python_identifier(name: str) -> str:
    """snake_case name for a method, argument or local variable."""
    converted = to_snake_case(name)
    if keyword.iskeyword(converted):
        converted = f"{converted}_"
    return converted


def getter_name(member: str) -> str:
    return f"get_{member}"


def setter_name(member: str) -> str:
    return f"set_{member}"


class MemberNames:
    """Maps the properties of one class to collision-free snake_case names."""

    def __init__(self):
        self.sanitizer = create_python_sanitizer()
        self._names = {}

    def __getitem__(self, property_name: str) -> str:
        if property_name not in self._names:
            self._names[property_name] = self.sanitizer.sanitize_name(
                property_name, NamingCase.SNAKE_CASE
            )
        return self._names[property_name]


def create_python_sanitizer() -> NameSanitizer:
    """Create a name sanitizer configured for Python."""
    return NameSanitizer(PYTHON_RESERVED_WORDS, PYTHON_BUILTIN_TYPES)
