"""
xsdgen Code Generation Module

Generates classes in various languages from XSD schemas.
"""

from .registry import GeneratorRegistry, get_generator, list_supported_languages
from .core.generator import CodeGenerator, GenerationResult, generate_code
from .core.config import GeneratorConfig, ConfigManager, load_config
from .core.errors import GeneratorError, ConfigError, TypeNotFoundError, FileSystemError
from ..schema.loader import load_definition


def generate_from_schema(location, language="php", config=None, output_directory=None):
    """
    Generate classes for the schema at ``location``.

    Args:
        location: XSD file path or URL
        language: Target language name
        config: Generator configuration dict, GeneratorConfig or path
        output_directory: Overrides the configured output directory

    Returns:
        GenerationResult listing the written files
    """
    definition = load_definition(location)
    generator = get_generator(language, config)
    return generate_code(generator, definition, output_directory)


# Export main interfaces
__all__ = [
    "GeneratorRegistry",
    "CodeGenerator",
    "GenerationResult",
    "GeneratorConfig",
    "ConfigManager",
    "GeneratorError",
    "ConfigError",
    "TypeNotFoundError",
    "FileSystemError",
    "generate_code",
    "generate_from_schema",
    "get_generator",
    "list_supported_languages",
    "load_config",
]
