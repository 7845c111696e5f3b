"""
Language-specific code generators.

This module contains generators for different programming languages.
"""

from .php import PhpGenerator, create_php_generator
from .python import PythonGenerator, create_python_generator

__all__ = [
    "PhpGenerator",
    "create_php_generator",
    "PythonGenerator",
    "create_python_generator",
]
