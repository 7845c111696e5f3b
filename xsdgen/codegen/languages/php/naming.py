"""
PHP-specific naming utilities and sanitization.

Handles PHP reserved words and the names generated classes and members
take in PHP source.
"""

from ...core.naming import ucfirst


# Words PHP 7 refuses as class names
PHP_RESERVED_WORDS = {
    "abstract",
    "and",
    "array",
    "as",
    "bool",
    "break",
    "callable",
    "case",
    "catch",
    "class",
    "clone",
    "const",
    "continue",
    "declare",
    "default",
    "do",
    "echo",
    "else",
    "elseif",
    "empty",
    "enddeclare",
    "endfor",
    "endforeach",
    "endif",
    "endswitch",
    "endwhile",
    "eval",
    "exit",
    "extends",
    "false",
    "final",
    "finally",
    "float",
    "for",
    "foreach",
    "function",
    "global",
    "goto",
    "if",
    "implements",
    "include",
    "instanceof",
    "insteadof",
    "int",
    "interface",
    "isset",
    "iterable",
    "list",
    "mixed",
    "namespace",
    "new",
    "null",
    "numeric",
    "object",
    "or",
    "print",
    "private",
    "protected",
    "public",
    "require",
    "resource",
    "return",
    "static",
    "string",
    "switch",
    "throw",
    "trait",
    "true",
    "try",
    "unset",
    "use",
    "var",
    "void",
    "while",
    "xor",
    "yield",
}


def php_class_name(name: str) -> str:
    """Class name safe for a PHP declaration; reserved words get a ``Type`` suffix."""
    if name.lower() in PHP_RESERVED_WORDS:
        return f"{name}Type"
    return name


def php_variable(name: str) -> str:
    """Variable name without the ``$``; ``$this`` is taken."""
    return "thisValue" if name == "this" else name


def getter_name(property_name: str) -> str:
    return f"get{ucfirst(property_name)}"


def setter_name(property_name: str) -> str:
    return f"set{ucfirst(property_name)}"
