"""
Python code generator module.

Generates Python classes from XSD schemas.
"""

from .generator import PythonGenerator, create_python_generator
from .naming import create_python_sanitizer, python_class_name, python_identifier
from .config import PythonConfig, PYTHON_TYPE_MAP
from .renderer import PythonRenderer, python_literal

__all__ = [
    # Generator
    "PythonGenerator",
    "create_python_generator",
    # Naming
    "create_python_sanitizer",
    "python_class_name",
    "python_identifier",
    # Configuration
    "PythonConfig",
    "PYTHON_TYPE_MAP",
    # Rendering
    "PythonRenderer",
    "python_literal",
]
