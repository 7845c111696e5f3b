"""
PHP-specific configuration and type mappings.

Maps semantic primitives to PHP type declarations and captures what each
supported PHP version can express.
"""

from typing import Optional

from ...core.config import GeneratorConfig
from ...core.errors import ConfigError


# Semantic primitive -> PHP type declaration (None: no declaration)
PHP_TYPE_MAP = {
    "string": "string",
    "int": "int",
    "decimal": "float",
    "float": "float",
    "bool": "bool",
    "array": "array",
    "mixed": None,
}


class PhpConfig:
    """PHP-specific configuration derived from the generator config."""

    def __init__(self, config: GeneratorConfig):
        """
        Initialize PHP configuration.

        Raises:
            ConfigError: If the language version is not a PHP 7 release.
        """
        self.version = config.language_version or "7.1"
        try:
            self._version_tuple = tuple(int(part) for part in self.version.split("."))
        except ValueError:
            raise ConfigError(f"Invalid PHP version: {self.version}")

        self.strict_types = config.strict_types
        self.namespace_segments = config.prefix_segments

    @property
    def supports_nullable_types(self) -> bool:
        """``?T`` declarations arrived in 7.1."""
        return self._version_tuple >= (7, 1)

    @property
    def constant_keyword(self) -> str:
        """Constant visibility modifiers arrived in 7.1."""
        return "public const" if self._version_tuple >= (7, 1) else "const"

    def namespace_for(self, segments) -> str:
        return "\\".join(list(self.namespace_segments) + list(segments))

    def type_declaration(self, type_name: Optional[str], class_name=None) -> Optional[str]:
        """
        Declaration for a parameter or return type.

        Args:
            type_name: Semantic primitive or class name
            class_name: Maps class names to their PHP spelling

        Returns:
            The declaration, or None where PHP cannot declare the type
        """
        if type_name is None:
            return None
        if type_name in PHP_TYPE_MAP:
            return PHP_TYPE_MAP[type_name]
        return class_name(type_name) if class_name else type_name

    def nullable(self, declaration: Optional[str]) -> Optional[str]:
        """Nullable form of a declaration; dropped before 7.1."""
        if declaration is None or not self.supports_nullable_types:
            return None
        return f"?{declaration}"

    def doc_type(self, type_name: Optional[str], class_name=None) -> str:
        """Type as written in ``@var``/``@param`` docblocks."""
        declaration = self.type_declaration(type_name, class_name)
        return declaration or "mixed"
