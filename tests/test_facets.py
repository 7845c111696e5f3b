"""Tests for facet mapping and schema processing into class models."""

import pytest

from xsdgen.codegen import load_config
from xsdgen.codegen.core import SchemaProcessor
from xsdgen.codegen.core.errors import ConfigError, TypeNotFoundError
from xsdgen.codegen.core.facets import FacetMapper, value_property
from xsdgen.codegen.core.model import ClassModel
from xsdgen.schema import parse_definition
from xsdgen.schema.definition import Facet, FacetKind

TYPES_XSD = """<?xml version="1.0"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
  <xs:simpleType name="Base">
    <xs:restriction base="xs:string">
      <xs:minLength value="2"/>
      <xs:maxLength value="10"/>
      <xs:pattern value="[a-z]+"/>
    </xs:restriction>
  </xs:simpleType>

  <xs:simpleType name="Narrow">
    <xs:restriction base="Base">
      <xs:maxLength value="5"/>
    </xs:restriction>
  </xs:simpleType>

  <xs:simpleType name="Letters">
    <xs:restriction base="xs:string">
      <xs:enumeration value="a"/>
      <xs:enumeration value="b"/>
      <xs:enumeration value="c"/>
    </xs:restriction>
  </xs:simpleType>

  <xs:simpleType name="FewLetters">
    <xs:restriction base="Letters">
      <xs:enumeration value="a"/>
    </xs:restriction>
  </xs:simpleType>

  <xs:simpleType name="Percent">
    <xs:restriction base="xs:int">
      <xs:minInclusive value="0"/>
      <xs:maxInclusive value="100"/>
    </xs:restriction>
  </xs:simpleType>

  <xs:simpleType name="Open">
    <xs:restriction base="xs:decimal">
      <xs:minExclusive value="0.5"/>
      <xs:maxExclusive value="10"/>
    </xs:restriction>
  </xs:simpleType>

  <xs:simpleType name="TDFloat">
    <xs:restriction base="xs:decimal">
      <xs:fractionDigits value="4"/>
    </xs:restriction>
  </xs:simpleType>

  <xs:simpleType name="Code">
    <xs:restriction base="xs:string">
      <xs:pattern value="[A-Z]{2}"/>
      <xs:pattern value="[0-9]{3}"/>
    </xs:restriction>
  </xs:simpleType>

  <xs:complexType name="Item">
    <xs:sequence>
      <xs:element name="title" type="xs:string"/>
      <xs:element name="note" type="xs:string" minOccurs="0"/>
      <xs:element name="tag" type="xs:string" maxOccurs="3"/>
      <xs:element name="size">
        <xs:simpleType>
          <xs:restriction base="xs:int">
            <xs:maxInclusive value="9"/>
          </xs:restriction>
        </xs:simpleType>
      </xs:element>
    </xs:sequence>
    <xs:attribute name="lang" type="xs:string" default="en"/>
    <xs:attribute name="version" type="xs:int" fixed="2"/>
  </xs:complexType>

  <xs:complexType name="SpecialItem">
    <xs:complexContent>
      <xs:extension base="Item">
        <xs:sequence>
          <xs:element name="extra" type="xs:boolean"/>
        </xs:sequence>
      </xs:extension>
    </xs:complexContent>
  </xs:complexType>
</xs:schema>
"""


@pytest.fixture(scope="module")
def models():
    processor = SchemaProcessor(parse_definition(TYPES_XSD), load_config("php"))
    return {model.class_name: model for model in processor.process()}


# =============================================================================
# Restriction chains
# =============================================================================


class TestRestrictionChains:
    """A restriction flattens its whole base chain, most derived facet wins."""

    def test_chain_flattening(self, models):
        narrow = models["Narrow"].constraints
        assert narrow.min_length == 2
        assert narrow.max_length == 5
        assert narrow.pattern == "[a-z]+"

    def test_base_untouched(self, models):
        assert models["Base"].constraints.max_length == 10

    def test_no_inheritance(self, models):
        assert models["Narrow"].parent is None

    def test_own_enumeration_replaces_base(self, models):
        few = models["FewLetters"]
        assert few.constraints.enumeration == ["a"]
        assert few.constants == {"VALUE_A": "a"}


# =============================================================================
# Individual facets
# =============================================================================


class TestFacets:
    def test_enumeration_constants(self, models):
        letters = models["Letters"]
        assert letters.constants == {"VALUE_A": "a", "VALUE_B": "b", "VALUE_C": "c"}
        assert letters.constraints.enumeration == ["a", "b", "c"]

    def test_inclusive_bounds(self, models):
        percent = models["Percent"]
        assert percent.get_property("value").type == "int"
        assert (percent.constraints.min_value, percent.constraints.max_value) == (0, 100)

    def test_exclusive_bounds_become_integers(self, models):
        open_range = models["Open"]
        assert open_range.get_property("value").type == "int"
        assert (open_range.constraints.min_value, open_range.constraints.max_value) == (1, 9)

    def test_fraction_digits(self, models):
        tdfloat = models["TDFloat"]
        assert tdfloat.get_property("value").type == "decimal"
        assert tdfloat.constraints.fraction_digits == 4

    def test_patterns_are_alternatives(self, models):
        assert models["Code"].constraints.pattern == "(?:[A-Z]{2})|(?:[0-9]{3})"

    def test_value_property_is_required_and_immutable(self, models):
        value = models["Percent"].get_property("value")
        assert value.required
        assert value.immutable

    def test_numeric_enumeration_coerced(self):
        model = ClassModel("Small")
        mapper = FacetMapper()
        mapper.apply(model, [Facet(FacetKind.TOTAL_DIGITS, "1")])
        mapper.apply(model, [Facet(FacetKind.ENUMERATION, "1"), Facet(FacetKind.ENUMERATION, "2")])

        assert model.constraints.enumeration == [1, 2]
        assert model.constants == {"VALUE_1": 1, "VALUE_2": 2}

    def test_non_numeric_bound(self):
        model = ClassModel("Bad")
        value_property(model, "int")
        with pytest.raises(ConfigError, match="not numeric"):
            FacetMapper().apply(model, [Facet(FacetKind.MAX_INCLUSIVE, "ten")])

    def test_duplicate_constant_names(self):
        model = ClassModel("Dashes")
        FacetMapper().apply(
            model, [Facet(FacetKind.ENUMERATION, "a-b"), Facet(FacetKind.ENUMERATION, "a_b")]
        )
        assert model.constants == {"VALUE_A_B": "a-b", "VALUE_A_B_1": "a_b"}


DATES_XSD = """<?xml version="1.0"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
  <xs:simpleType name="Since">
    <xs:restriction base="xs:date">
      <xs:minInclusive value="2000-01-01"/>
      <xs:maxInclusive value="2099-12-31"/>
    </xs:restriction>
  </xs:simpleType>

  <xs:simpleType name="Later">
    <xs:restriction base="Since">
      <xs:maxInclusive value="2050-01-01"/>
    </xs:restriction>
  </xs:simpleType>

  <xs:simpleType name="Era">
    <xs:restriction base="xs:gYear">
      <xs:minInclusive value=" 1900 "/>
    </xs:restriction>
  </xs:simpleType>

  <xs:simpleType name="After">
    <xs:restriction base="xs:date">
      <xs:minExclusive value="2000-01-01"/>
    </xs:restriction>
  </xs:simpleType>
</xs:schema>
"""


class TestLexicalBounds:
    """Range facets on dates and gYear keep their text and the value type."""

    @pytest.fixture(scope="class")
    def dates(self):
        processor = SchemaProcessor(parse_definition(DATES_XSD), load_config("php"))
        return {model.class_name: model for model in processor.process()}

    def test_date_bounds_stay_text(self, dates):
        since = dates["Since"]
        assert since.get_property("value").type == "string"
        assert since.constraints.min_value == "2000-01-01"
        assert since.constraints.max_value == "2099-12-31"
        assert since.constraints.ordering == "lexical"

    def test_gyear_is_not_retyped(self, dates):
        era = dates["Era"]
        assert era.get_property("value").type == "string"
        assert era.constraints.min_value == "1900"

    def test_derived_date_restriction(self, dates):
        later = dates["Later"].constraints
        assert later.min_value == "2000-01-01"
        assert later.max_value == "2050-01-01"

    def test_exclusive_date_bound_skipped(self, dates):
        after = dates["After"]
        assert after.constraints.min_value is None
        assert after.get_property("value").type == "string"


# =============================================================================
# Complex types
# =============================================================================


class TestComplexTypes:
    def test_attributes_before_elements(self, models):
        names = [p.name for p in models["Item"].properties]
        assert names == ["lang", "version", "title", "note", "tags", "size"]

    def test_optional_without_default_is_not_a_parameter(self, models):
        item = models["Item"]
        assert not item.get_property("note").in_constructor
        assert item.get_property("title").in_constructor
        assert item.get_property("lang").in_constructor

    def test_fixed_attribute(self, models):
        version = models["Item"].get_property("version")
        assert version.fixed
        assert version.default == 2

    def test_collection_property(self, models):
        tags = models["Item"].get_property("tags")
        assert tags.type == "StringCollection"
        assert tags.is_collection and tags.fixed and tags.required

    def test_inline_type_class_name(self, models):
        assert models["Item"].get_property("size").type == "ItemSize"
        assert models["ItemSize"].constraints.max_value == 9

    def test_extension_is_flattened(self, models):
        names = [p.name for p in models["SpecialItem"].properties]
        assert names == ["lang", "version", "title", "note", "tags", "size", "extra"]
        assert models["SpecialItem"].parent is None

    def test_write_xml_added(self, models):
        assert models["Item"].get_method("writeXML") is not None


class TestProcessingErrors:
    def test_unknown_base(self):
        definition = parse_definition(
            """<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
              <xs:simpleType name="Orphan">
                <xs:restriction base="Missing"/>
              </xs:simpleType>
            </xs:schema>"""
        )
        with pytest.raises(TypeNotFoundError, match="Missing"):
            SchemaProcessor(definition, load_config("php")).process()

    def test_circular_derivation(self):
        definition = parse_definition(
            """<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
              <xs:simpleType name="A"><xs:restriction base="B"/></xs:simpleType>
              <xs:simpleType name="B"><xs:restriction base="A"/></xs:simpleType>
            </xs:schema>"""
        )
        with pytest.raises(ConfigError, match="Circular type derivation"):
            SchemaProcessor(definition, load_config("php")).process()

    def test_collection_bounds_conflict_warns(self):
        definition = parse_definition(
            """<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
              <xs:complexType name="First">
                <xs:sequence><xs:element name="n" type="xs:int" maxOccurs="3"/></xs:sequence>
              </xs:complexType>
              <xs:complexType name="Second">
                <xs:sequence><xs:element name="n" type="xs:int" maxOccurs="5"/></xs:sequence>
              </xs:complexType>
            </xs:schema>"""
        )
        processor = SchemaProcessor(definition, load_config("php"))
        processor.process()

        assert processor.warnings == [
            "IntCollection already generated with bounds [1:3]; ignoring [1:5]"
        ]
