"""
Python-specific configuration and type mappings.

Maps semantic primitives to annotations and captures what each supported
Python version renders differently.
"""

from typing import Optional, Set

from ...core.config import GeneratorConfig
from ...core.errors import ConfigError


# Semantic primitive -> annotation
PYTHON_TYPE_MAP = {
    "string": "str",
    "int": "int",
    "decimal": "float",
    "float": "float",
    "bool": "bool",
    "array": "list[Any]",
    "mixed": "Any",
}

# Names in annotations that need a typing import
TYPING_NAMES = ("Any", "Final", "Optional")


class PythonConfig:
    """Python-specific configuration derived from the generator config."""

    def __init__(self, config: GeneratorConfig):
        """
        Initialize Python configuration.

        Raises:
            ConfigError: If the language version is not a Python 3 release.
        """
        self.version = config.language_version or "3.10"
        try:
            self._version_tuple = tuple(int(part) for part in self.version.split("."))
        except ValueError:
            raise ConfigError(f"Invalid Python version: {self.version}")

        self.strict_types = config.strict_types
        self.package_segments = config.prefix_segments

    @property
    def supports_union_operator(self) -> bool:
        """``T | None`` arrived in 3.10."""
        return self._version_tuple >= (3, 10)

    @property
    def annotate_constants(self) -> bool:
        return self._version_tuple >= (3, 10)

    def module_for(self, segments, name: str) -> str:
        return ".".join(list(self.package_segments) + list(segments) + [name])

    def annotation(self, type_name: Optional[str], class_name=None, used: Set[str] = None) -> str:
        """
        Annotation for a semantic type.

        Args:
            type_name: Semantic primitive or class name; None means untyped
            class_name: Maps class names to their Python spelling
            used: Collects typing names the annotation needs

        Returns:
            Annotation source text
        """
        if type_name is None:
            type_name = "mixed"
        if type_name in PYTHON_TYPE_MAP:
            text = PYTHON_TYPE_MAP[type_name]
            if used is not None and "Any" in text:
                used.add("Any")
            return text
        return class_name(type_name) if class_name else type_name

    def optional(self, annotation: str, used: Set[str] = None) -> str:
        """Nullable form of an annotation."""
        if annotation == "Any":
            return annotation
        if self.supports_union_operator:
            return f"{annotation} | None"
        if used is not None:
            used.add("Optional")
        return f"Optional[{annotation}]"
