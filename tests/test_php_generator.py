"""Tests for the PHP generator's source output."""

import pytest

from xsdgen.codegen import get_generator
from xsdgen.codegen.core import ClassModel, OutputStream, PropertyDescriptor
from xsdgen.codegen.core.errors import ConfigError
from xsdgen.codegen.core.processor import build_write_xml
from xsdgen.codegen.core.statements import Opaque

SCHEMA_XSD = """<?xml version="1.0"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
  <xs:simpleType name="Percent">
    <xs:annotation><xs:documentation>Whole percentage.</xs:documentation></xs:annotation>
    <xs:restriction base="xs:int">
      <xs:minInclusive value="0"/>
      <xs:maxInclusive value="100"/>
    </xs:restriction>
  </xs:simpleType>

  <xs:simpleType name="ST_TDFloat">
    <xs:restriction base="xs:decimal">
      <xs:fractionDigits value="4"/>
    </xs:restriction>
  </xs:simpleType>

  <xs:simpleType name="Letters">
    <xs:restriction base="xs:string">
      <xs:enumeration value="a"/>
      <xs:enumeration value="b"/>
      <xs:enumeration value="c"/>
    </xs:restriction>
  </xs:simpleType>

  <xs:simpleType name="Code">
    <xs:restriction base="xs:string">
      <xs:pattern value="[A-Z]/[0-9]"/>
    </xs:restriction>
  </xs:simpleType>

  <xs:complexType name="Person">
    <xs:sequence>
      <xs:element name="name" type="xs:string"/>
      <xs:element name="nickname" type="xs:string" minOccurs="0"/>
      <xs:element name="phone" type="xs:string" maxOccurs="unbounded"/>
    </xs:sequence>
    <xs:attribute name="id" type="xs:int" use="required"/>
    <xs:attribute name="kind" type="xs:string" fixed="human"/>
  </xs:complexType>

  <xs:complexType name="List">
    <xs:sequence>
      <xs:element name="year" type="xs:gYear"/>
    </xs:sequence>
  </xs:complexType>
</xs:schema>
"""


@pytest.fixture
def sources(generate):
    """Generate the schema for PHP and return ``{class name: source}``."""

    def _sources(**config):
        result = generate(SCHEMA_XSD, "php", **config)
        return {path.stem: path.read_text() for path in result.files}

    return _sources


# =============================================================================
# File layout
# =============================================================================


class TestFileLayout:
    def test_namespaced_directories(self, generate, tmp_path):
        generate(SCHEMA_XSD, "php")
        root = tmp_path / "generated"
        assert (root / "SimpleType" / "Percent.php").exists()
        assert (root / "ComplexType" / "Person.php").exists()
        assert (root / "ValueObject" / "StringCollection.php").exists()
        assert (root / "Exception" / "ValidationException.php").exists()
        assert (root / "Stream" / "OutputStream.php").exists()
        assert (root / "Xsd" / "GYear.php").exists()
        assert not (root / "__init__.py").exists()

    def test_file_kinds(self, generate):
        result = generate(SCHEMA_XSD, "php")
        kinds = {path.stem: kind for path, kind in result.file_kinds.items()}
        assert kinds["ValidationException"] == "runtime"
        assert kinds["Percent"] == "class"
        assert kinds["StringCollection"] == "collection"
        assert kinds["ValueType"] == "builtin"

    def test_runtime_written_first(self, generate):
        result = generate(SCHEMA_XSD, "php")
        assert [path.stem for path in result.files[:2]] == ["ValidationException", "OutputStream"]

    def test_reserved_class_name(self, sources):
        assert "class ListType" in sources()["ListType"]

    def test_metadata(self, generate, tmp_path):
        result = generate(SCHEMA_XSD, "php")
        assert result.metadata["language"] == "php"
        assert result.metadata["language_version"] == "7.1"
        assert result.metadata["output_directory"] == str(tmp_path / "generated")
        assert result.metadata["class_count"] == len(result.models)


# =============================================================================
# Class source
# =============================================================================


class TestClassSource:
    def test_header(self, sources):
        source = sources()["Percent"]
        assert source.startswith(
            "<?php\ndeclare(strict_types=1);\n\nnamespace Generated\\SimpleType;\n\n"
            "use Generated\\Exception\\ValidationException;\n"
            "use Generated\\Stream\\OutputStream;\n\n"
            "/**\n * Whole percentage.\n */\nclass Percent\n{\n"
        )

    def test_range_guards(self, sources):
        source = sources()["Percent"]
        assert "    public function __construct(int $value)" in source
        assert "        if ($this->value < 0) {\n            throw new ValidationException('value out of bounds');" in source
        assert "        if ($this->value > 100) {" in source
        assert "     * @throws ValidationException" in source

    def test_fraction_digits(self, sources):
        source = sources()["ST_TDFloat"]
        assert "class ST_TDFloat" in source
        assert (
            "if ((((int) $this->value != $this->value) ? "
            "(strlen((string) $this->value) - strpos((string) $this->value, '.')) - 1 : 0) !== 4) {"
        ) in source
        assert "throw new ValidationException('value can only contain 4 decimal digits');" in source

    def test_enumeration(self, sources):
        source = sources()["Letters"]
        assert "    public const VALUE_A = 'a';" in source
        assert (
            "if (!in_array($this->value, [self::VALUE_A, self::VALUE_B, self::VALUE_C], true)) {"
        ) in source
        assert "throw new ValidationException('value must be one of a, b, c');" in source

    def test_pattern_is_anchored_and_escaped(self, sources):
        source = sources()["Code"]
        assert r"if (!preg_match('/^(?:[A-Z]\\/[0-9])$/u', (string) $this->value)) {" in source

    def test_getter_types(self, sources):
        source = sources()["Person"]
        assert "public function getName(): string" in source
        assert "public function getNickname(): ?string" in source
        assert "public function getKind(): string" in source

    def test_constructor_skips_optional_and_fixed(self, sources):
        source = sources()["Person"]
        assert "public function __construct(int $id, string $name)" in source
        assert "$this->kind = 'human';" in source
        assert "$this->phones = new StringCollection();" in source

    def test_write_xml(self, sources):
        source = sources()["Person"]
        assert "$stream->write(' id=\"' . $this->id . '\"');" in source
        assert "if (null !== $this->nickname) {" in source
        assert "$this->phones->writeXML($stream, 'phone');" in source

    def test_no_setter_for_fixed(self, sources):
        source = sources()["Person"]
        assert "setKind" not in source
        assert "setPhones" not in source
        assert "public function setNickname(string $nickname)" in source

    def test_collection(self, sources):
        source = sources()["StringCollection"]
        assert "namespace Generated\\ValueObject;" in source
        assert "public function add(string $item)" in source
        assert "$this->items[] = $item;" in source
        assert "if (count($this->items) < 1) {" in source
        assert "getItems" not in source


# =============================================================================
# Configuration
# =============================================================================


class TestConfiguration:
    def test_php70(self, sources):
        generated = sources(language_version="7.0")
        assert "    const VALUE_A = 'a';" in generated["Letters"]
        assert "public const" not in generated["Letters"]
        assert "public function getNickname()\n" in generated["Person"]

    def test_without_strict_types(self, sources):
        assert "declare(strict_types=1);" not in sources(strict_types=False)["Percent"]

    def test_namespace_prefix(self, sources):
        source = sources(namespace_prefix="Acme\\Schema")["Percent"]
        assert "namespace Acme\\Schema\\SimpleType;" in source
        assert "use Acme\\Schema\\Exception\\ValidationException;" in source

    def test_doc_header(self, sources):
        source = sources(doc_header="Generated file.")["Percent"]
        assert "declare(strict_types=1);\n\n/**\n * Generated file.\n */\n\nnamespace" in source

    def test_without_comments(self, sources):
        assert "Whole percentage." not in sources(add_comments=False)["Percent"]

    def test_crlf(self, generate):
        result = generate(SCHEMA_XSD, "php", line_ending="\r\n")
        data = next(p for p in result.files if p.stem == "Percent").read_bytes()
        assert data.startswith(b"<?php\r\ndeclare(strict_types=1);\r\n")
        assert b"\n" not in data.replace(b"\r\n", b"")

    def test_builtin_uses_namespace(self, sources):
        source = sources()["GYear"]
        assert "namespace Generated\\Xsd;" in source
        assert "class GYear extends AbstractValueType" in source
        assert "use Generated\\Exception\\ValidationException;" in source


# =============================================================================
# Emitting single models
# =============================================================================


class TestEmit:
    def _generator(self):
        return get_generator("php")

    def test_emit_to_memory(self):
        model = ClassModel("Note", ("ComplexType",))
        model.add_property(PropertyDescriptor("text", "string", required=True))
        stream = OutputStream.in_memory()

        self._generator().emit(model, stream)

        source = stream.getvalue()
        assert "namespace Generated\\ComplexType;" in source
        assert "protected $text;" in source
        assert "public function __construct(string $text)" in source
        assert "public function setText(string $text)" in source
        # constructor and setter both assign the parameter
        assert source.count("$this->text = $text;") == 2

    def test_emit_rejects_invalid_model(self):
        model = ClassModel("Broken")
        model.constraints.max_length = 2
        with pytest.raises(ConfigError):
            self._generator().emit(model, OutputStream.in_memory())

    def _checked_model(self, validator):
        model = ClassModel("Tag", ("SimpleType",))
        model.add_property(PropertyDescriptor("value", "string", required=True, immutable=True))
        model.constraints.max_length = 3
        model.constraints.validators.append(validator)
        return model

    def test_validator_after_constraint_guards(self):
        validator = Opaque({"php": "assert($this->value !== '');", "python": "assert self._value != ''"})
        stream = OutputStream.in_memory()

        self._generator().emit(self._checked_model(validator), stream)

        source = stream.getvalue()
        assert "assert($this->value !== '');" in source
        assert source.index("value must be at most 3 characters") < source.index("assert($this->value")

    def test_validator_without_php_code(self):
        model = self._checked_model(Opaque({"python": "assert self._value != ''"}))
        with pytest.raises(ConfigError, match="has no php code"):
            self._generator().emit(model, OutputStream.in_memory())

    def test_collection_element_tag_is_singular(self):
        model = ClassModel("Journal", ("ComplexType",))
        model.add_property(
            PropertyDescriptor("entries", "StringCollection", required=True, is_collection=True)
        )
        model.add_method(build_write_xml(model))
        stream = OutputStream.in_memory()

        self._generator().emit(model, stream)

        assert "$this->entries->writeXML($stream, 'entry');" in stream.getvalue()

    def test_abstract_final_modifiers(self):
        model = ClassModel("Shape", ("ComplexType",)).add_modifier("abstract")
        stream = OutputStream.in_memory()
        self._generator().emit(model, stream)
        assert "abstract class Shape" in stream.getvalue()


def test_generate_from_schema(tmp_path):
    from xsdgen.codegen import generate_from_schema

    path = tmp_path / "schema.xsd"
    path.write_text(SCHEMA_XSD, encoding="utf-8")

    result = generate_from_schema(path, "php", output_directory=tmp_path / "out")

    assert (tmp_path / "out" / "SimpleType" / "Percent.php") in result.files
    assert result.success
