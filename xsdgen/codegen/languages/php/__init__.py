"""
PHP code generator module.

Generates PHP 7 classes from XSD schemas.
"""

from .generator import PhpGenerator, create_php_generator
from .config import PhpConfig, PHP_TYPE_MAP
from .naming import PHP_RESERVED_WORDS, php_class_name
from .renderer import PhpRenderer, php_literal

__all__ = [
    # Generator
    "PhpGenerator",
    "create_php_generator",
    # Configuration
    "PhpConfig",
    "PHP_TYPE_MAP",
    # Naming
    "PHP_RESERVED_WORDS",
    "php_class_name",
    # Rendering
    "PhpRenderer",
    "php_literal",
]
