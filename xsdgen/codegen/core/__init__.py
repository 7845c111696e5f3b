"""
Core code generation components.

Provides the class model, type resolution, processors and base classes
used by all language generators.
"""

from .errors import GeneratorError, ConfigError, TypeNotFoundError, FileSystemError
from .model import (
    ClassModel,
    ClassKind,
    Modifier,
    Visibility,
    Import,
    PropertyDescriptor,
    MethodDescriptor,
    ArgumentDescriptor,
)
from .generator import CodeGenerator, GenerationResult, generate_code
from .processor import SchemaProcessor, ProcessingContext
from .resolver import TypeResolver, ResolvedType
from .facets import FacetMapper
from .output import ClassWriter, OutputStream
from .naming import NameSanitizer, NamingCase
from .config import GeneratorConfig, ConfigManager, load_config
from .templates import TemplateEngine, TemplateError, create_template_engine

__all__ = [
    # Errors
    "GeneratorError",
    "ConfigError",
    "TypeNotFoundError",
    "FileSystemError",
    # Class model
    "ClassModel",
    "ClassKind",
    "Modifier",
    "Visibility",
    "Import",
    "PropertyDescriptor",
    "MethodDescriptor",
    "ArgumentDescriptor",
    # Base generator interface
    "CodeGenerator",
    "GenerationResult",
    "generate_code",
    # Pipeline
    "SchemaProcessor",
    "ProcessingContext",
    "TypeResolver",
    "ResolvedType",
    "FacetMapper",
    "ClassWriter",
    "OutputStream",
    # Naming utilities - language-agnostic
    "NameSanitizer",
    "NamingCase",
    # Configuration system
    "GeneratorConfig",
    "ConfigManager",
    "load_config",
    # Template system - language-agnostic
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
]
