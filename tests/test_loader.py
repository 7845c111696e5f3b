"""Tests for the XSD loader."""

import pytest

from xsdgen.schema import SchemaLoader, load_definition, parse_definition
from xsdgen.schema.definition import XSD_NAMESPACE, FacetKind
from xsdgen.utils import SchemaLoadError, load_xsd, load_xsd_from_file, load_xsd_from_url

ORDER_XSD = """<?xml version="1.0"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema"
           xmlns:tns="urn:orders" targetNamespace="urn:orders">
  <xs:complexType name="Order">
    <xs:annotation>
      <xs:documentation source="https://example.com/order">An order.</xs:documentation>
    </xs:annotation>
    <xs:sequence minOccurs="1" maxOccurs="2">
      <xs:element name="id" type="xs:string"/>
      <xs:element name="line" type="xs:string" maxOccurs="3"/>
      <xs:choice>
        <xs:element name="email" type="xs:string"/>
        <xs:element name="phone" type="xs:string"/>
      </xs:choice>
      <xs:group ref="tns:Audit"/>
    </xs:sequence>
    <xs:attribute name="currency" type="xs:string" use="required"/>
    <xs:attributeGroup ref="tns:Tracking"/>
  </xs:complexType>

  <xs:group name="Audit">
    <xs:sequence>
      <xs:element name="createdBy" type="xs:string" minOccurs="0"/>
    </xs:sequence>
  </xs:group>

  <xs:attributeGroup name="Tracking">
    <xs:attribute name="trackingId" type="xs:string"/>
  </xs:attributeGroup>

  <xs:simpleType name="Percent">
    <xs:restriction base="xs:int">
      <xs:minInclusive value="0"/>
      <xs:maxInclusive value="100"/>
      <xs:assertion test="$value ne 50"/>
    </xs:restriction>
  </xs:simpleType>

  <xs:simpleType name="Codes">
    <xs:list itemType="xs:token"/>
  </xs:simpleType>

  <xs:simpleType name="Mixed">
    <xs:union memberTypes="xs:int xs:string"/>
  </xs:simpleType>

  <xs:element name="order" type="tns:Order"/>
</xs:schema>
"""


@pytest.fixture
def order_definition():
    return parse_definition(ORDER_XSD)


# =============================================================================
# Content models
# =============================================================================


class TestParticles:
    """Particles flatten into elements with multiplied occurrence bounds."""

    def _elements(self, definition):
        order = definition.find_type("Order", "urn:orders")
        return {element.name: element for element in order.elements}

    def test_sequence_bounds_multiply(self, order_definition):
        elements = self._elements(order_definition)
        assert (elements["id"].min_occurs, elements["id"].max_occurs) == (1, 2)
        assert (elements["line"].min_occurs, elements["line"].max_occurs) == (1, 6)

    def test_choice_members_are_optional(self, order_definition):
        elements = self._elements(order_definition)
        assert elements["email"].min_occurs == 0
        assert elements["phone"].min_occurs == 0
        assert elements["email"].max_occurs == 2

    def test_named_group_is_expanded(self, order_definition):
        elements = self._elements(order_definition)
        assert elements["createdBy"].min_occurs == 0

    def test_element_order_follows_document(self, order_definition):
        assert list(self._elements(order_definition)) == ["id", "line", "email", "phone", "createdBy"]

    def test_unbounded(self):
        definition = parse_definition(
            """<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
              <xs:complexType name="Bag">
                <xs:sequence maxOccurs="unbounded">
                  <xs:element name="item" type="xs:string" maxOccurs="2"/>
                </xs:sequence>
              </xs:complexType>
            </xs:schema>"""
        )
        item = definition.find_type("Bag").elements[0]
        assert item.max_occurs is None
        assert item.is_collection

    def test_circular_group(self):
        text = """<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
          <xs:group name="Loop"><xs:sequence><xs:group ref="Loop"/></xs:sequence></xs:group>
          <xs:complexType name="T"><xs:group ref="Loop"/></xs:complexType>
        </xs:schema>"""
        with pytest.raises(SchemaLoadError, match="Circular model group"):
            parse_definition(text)

    def test_missing_group(self):
        text = """<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
          <xs:complexType name="T"><xs:group ref="Nowhere"/></xs:complexType>
        </xs:schema>"""
        with pytest.raises(SchemaLoadError, match="Model group not found"):
            parse_definition(text)


# =============================================================================
# Declarations
# =============================================================================


class TestDeclarations:
    def test_namespaces_recorded(self, order_definition):
        schema = order_definition.root
        assert schema.target_namespace == "urn:orders"
        assert schema.namespace_for_alias("xs") == XSD_NAMESPACE
        assert schema.namespace_for_alias("tns") == "urn:orders"

    def test_annotation_includes_source(self, order_definition):
        order = order_definition.find_type("Order")
        assert order.annotation == "Source: https://example.com/order\nAn order."

    def test_attributes_and_groups(self, order_definition):
        order = order_definition.find_type("Order")
        assert [a.name for a in order.attributes] == ["currency"]
        assert order.attributes[0].required
        assert order.attribute_groups[0].ref == "tns:Tracking"
        assert order_definition.find_attribute_group("Tracking").attributes[0].name == "trackingId"

    def test_restriction_facets(self, order_definition):
        restriction = order_definition.find_type("Percent").restriction
        assert restriction.base == "xs:int"
        assert [(f.kind, f.value) for f in restriction.facets] == [
            (FacetKind.MIN_INCLUSIVE, "0"),
            (FacetKind.MAX_INCLUSIVE, "100"),
        ]

    def test_list_and_union(self, order_definition):
        assert order_definition.find_type("Codes").list_item_type == "xs:token"
        assert order_definition.find_type("Mixed").union_member_types == ["xs:int", "xs:string"]

    def test_global_element(self, order_definition):
        order = order_definition.find_element("order")
        assert order.type == "tns:Order"
        assert order.schema is order_definition.root

    def test_find_element_by_name_prefers_types(self, order_definition):
        assert order_definition.find_element_by_name("Order") is order_definition.find_type("Order")
        assert order_definition.find_element_by_name("order") is order_definition.find_element("order")
        assert order_definition.find_element_by_name("Tracking").name == "Tracking"
        assert order_definition.find_element_by_name("Nothing") is None

    def test_type_count(self, order_definition):
        assert len(order_definition) == 4

    def test_simple_content_restriction(self):
        definition = parse_definition(
            """<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
              <xs:complexType name="Price">
                <xs:simpleContent>
                  <xs:restriction base="Amount">
                    <xs:maxInclusive value="10"/>
                  </xs:restriction>
                </xs:simpleContent>
              </xs:complexType>
            </xs:schema>"""
        )
        price = definition.find_type("Price")
        assert price.simple_content
        assert price.derivation == "restriction"
        assert price.content_restriction.facets[0].kind == FacetKind.MAX_INCLUSIVE


# =============================================================================
# Documents
# =============================================================================


class TestDocuments:
    def test_malformed(self):
        with pytest.raises(SchemaLoadError, match="Malformed XSD"):
            parse_definition("<xs:schema")

    def test_not_a_schema(self):
        with pytest.raises(SchemaLoadError, match="Not an XML Schema document"):
            parse_definition("<root/>")

    def test_chameleon_include(self, tmp_path):
        (tmp_path / "common.xsd").write_text(
            """<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
              <xs:simpleType name="Code">
                <xs:restriction base="xs:string"/>
              </xs:simpleType>
            </xs:schema>"""
        )
        main = tmp_path / "main.xsd"
        main.write_text(
            """<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema" targetNamespace="urn:main">
              <xs:include schemaLocation="common.xsd"/>
            </xs:schema>"""
        )

        definition = load_definition(main)

        assert len(definition.schemas) == 2
        assert definition.find_type("Code", "urn:main") is not None

    def test_import_keeps_own_namespace(self, tmp_path):
        (tmp_path / "types.xsd").write_text(
            """<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema" targetNamespace="urn:types">
              <xs:simpleType name="Code"><xs:restriction base="xs:string"/></xs:simpleType>
            </xs:schema>"""
        )
        main = tmp_path / "main.xsd"
        main.write_text(
            """<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema" targetNamespace="urn:main">
              <xs:import namespace="urn:types" schemaLocation="types.xsd"/>
            </xs:schema>"""
        )

        definition = load_definition(main)

        assert definition.find_type("Code", "urn:types") is not None
        assert definition.find_type("Code", "urn:main") is None

    def test_document_loaded_once(self, tmp_path):
        (tmp_path / "common.xsd").write_text(
            '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema"/>'
        )
        main = tmp_path / "main.xsd"
        main.write_text(
            """<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
              <xs:include schemaLocation="common.xsd"/>
              <xs:include schemaLocation="./common.xsd"/>
            </xs:schema>"""
        )

        loader = SchemaLoader()
        loader.load(main)

        assert len(loader.definition.schemas) == 2


# =============================================================================
# Sources
# =============================================================================


class TestSources:
    def test_file_not_found(self, tmp_path):
        with pytest.raises(SchemaLoadError, match="File not found"):
            load_xsd_from_file(tmp_path / "missing.xsd")

    def test_file_roundtrip(self, tmp_path):
        path = tmp_path / "schema.xsd"
        path.write_text("<xs:schema/>", encoding="utf-8")
        location, text = load_xsd_from_file(path)
        assert location == str(path.resolve())
        assert text == "<xs:schema/>"

    def test_invalid_url(self):
        with pytest.raises(SchemaLoadError, match="Invalid URL"):
            load_xsd_from_url("not a url")

    def test_url_request(self, monkeypatch):
        class Response:
            text = "<xs:schema/>"

            def raise_for_status(self):
                pass

        calls = []

        def fake_get(url, timeout):
            calls.append((url, timeout))
            return Response()

        monkeypatch.setattr("xsdgen.utils.requests.get", fake_get)

        assert load_xsd_from_url("https://example.com/a.xsd", timeout=5) == (
            "https://example.com/a.xsd",
            "<xs:schema/>",
        )
        assert calls == [("https://example.com/a.xsd", 5)]

    def test_url_connection_error(self, monkeypatch):
        import requests

        def fake_get(url, timeout):
            raise requests.exceptions.ConnectionError("down")

        monkeypatch.setattr("xsdgen.utils.requests.get", fake_get)

        with pytest.raises(SchemaLoadError, match="Connection error"):
            load_xsd_from_url("https://example.com/a.xsd")

    def test_load_xsd_requires_one_source(self):
        with pytest.raises(SchemaLoadError, match="Either file_path or url"):
            load_xsd()
        with pytest.raises(SchemaLoadError, match="Cannot specify both"):
            load_xsd(file_path="a.xsd", url="https://example.com/a.xsd")
