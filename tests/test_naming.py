"""Tests for identifier helpers."""

import pytest

from xsdgen.codegen.core.naming import (
    class_name,
    classify,
    constant_name,
    pluralize,
    property_name,
    singularize,
)
from xsdgen.codegen.languages.php import php_class_name
from xsdgen.codegen.languages.python import python_class_name, python_identifier
from xsdgen.codegen.languages.python.naming import MemberNames


class TestCoreNaming:
    @pytest.mark.parametrize(
        "word,plural",
        [("item", "items"), ("box", "boxes"), ("entry", "entries"), ("day", "days"),
         ("child", "children"), ("orderLine", "orderLines"), ("data", "data")],
    )
    def test_pluralize(self, word, plural):
        assert pluralize(word) == plural

    @pytest.mark.parametrize("plural,word", [("items", "item"), ("entries", "entry"), ("boxes", "box")])
    def test_singularize(self, plural, word):
        assert singularize(plural) == word

    def test_class_name_keeps_spelling(self):
        assert class_name("ST_TDFloat") == "ST_TDFloat"
        assert class_name("order-line") == "Order_line"
        assert class_name("3d") == "T3d"

    def test_classify(self):
        assert classify("unsignedByte") == "UnsignedByte"
        assert classify("gYearMonth") == "GYearMonth"

    def test_property_name(self):
        assert property_name("first-name") == "firstName"
        assert property_name("Title") == "title"

    def test_constant_name(self):
        assert constant_name("a") == "VALUE_A"
        assert constant_name("en-US") == "VALUE_EN_US"
        assert constant_name("") == "VALUE_EMPTY"


class TestLanguageNaming:
    def test_php_reserved_class(self):
        assert php_class_name("List") == "ListType"
        assert php_class_name("Person") == "Person"

    def test_python_reserved_class(self):
        assert python_class_name("None") == "NoneType"
        assert python_class_name("Person") == "Person"

    def test_python_identifier(self):
        assert python_identifier("writeXML") == "write_xml"
        assert python_identifier("tagName") == "tag_name"
        assert python_identifier("class") == "class_"

    def test_member_names_avoid_collisions(self):
        members = MemberNames()
        assert members["firstName"] == "first_name"
        assert members["type"] == "type_"
        assert members["first_name"] != members["firstName"]
        assert members["firstName"] == "first_name"
