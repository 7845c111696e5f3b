"""Shared fixtures for the xsdgen test suite."""

import importlib
import sys

import pytest

from xsdgen.codegen import generate_code, get_generator
from xsdgen.schema import parse_definition


@pytest.fixture
def generate(tmp_path):
    """Generate classes for an XSD string; returns the GenerationResult."""

    def _generate(xsd_text, language="php", **config):
        config.setdefault("output_directory", str(tmp_path / "generated"))
        generator = get_generator(language, config)
        return generate_code(generator, parse_definition(xsd_text))

    return _generate


@pytest.fixture
def generated_python(tmp_path, generate):
    """
    Generate Python classes and import them.

    Returns a loader taking an XSD string and returning a function that
    imports ``generated.<Namespace>.<Class>`` and hands back the class.
    """
    sys.path.insert(0, str(tmp_path))

    def _load(xsd_text, **config):
        result = generate(xsd_text, "python", **config)
        importlib.invalidate_caches()

        def _import(dotted):
            namespace, _, name = dotted.rpartition(".")
            module = importlib.import_module(f"generated.{namespace}.{name}")
            return getattr(module, name)

        _import.result = result
        return _import

    yield _load

    sys.path.remove(str(tmp_path))
    for name in [m for m in sys.modules if m == "generated" or m.startswith("generated.")]:
        del sys.modules[name]
