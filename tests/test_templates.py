"""Tests for the template engine wrapper."""

import pytest

from xsdgen.codegen.core.errors import FileSystemError
from xsdgen.codegen.core.templates import TemplateEngine, TemplateError
from xsdgen.codegen import get_generator


def test_in_memory_template():
    engine = TemplateEngine()
    engine.add_template("greeting.j2", "class {{ name }}\n")

    assert engine.template_exists("greeting.j2")
    assert engine.render_template("greeting.j2", {"name": "Percent"}) == "class Percent\n"


def test_output_is_not_escaped():
    engine = TemplateEngine()
    engine.add_template("cmp.j2", "{{ expr }}")
    assert engine.render_template("cmp.j2", {"expr": "$a < $b && 'x'"}) == "$a < $b && 'x'"


def test_missing_template():
    engine = TemplateEngine()
    assert not engine.template_exists("nope.j2")
    with pytest.raises(TemplateError, match="Template not found: nope.j2"):
        engine.render_template("nope.j2", {})


def test_undefined_variable_fails():
    engine = TemplateEngine()
    engine.add_template("strict.j2", "{{ missing }}")
    with pytest.raises(TemplateError, match="Failed to render template strict.j2"):
        engine.render_template("strict.j2", {})


def test_template_error_is_filesystem_error():
    assert issubclass(TemplateError, FileSystemError)


def test_language_templates_ship_with_package():
    engine = get_generator("php").template_engine
    assert engine.template_exists("class.php.j2")
    assert engine.template_exists("runtime/OutputStream.j2")
    assert engine.template_exists("builtins/value_type.j2")
