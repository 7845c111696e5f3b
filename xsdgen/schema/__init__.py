"""
Schema front end: the XSD definition model and its loader.
"""

from .definition import (
    XSD_NAMESPACE,
    Attribute,
    AttributeGroup,
    ComplexType,
    Definition,
    Element,
    Facet,
    FacetKind,
    Restriction,
    Schema,
    SimpleType,
)
from .loader import SchemaLoader, load_definition, parse_definition

__all__ = [
    "XSD_NAMESPACE",
    "Attribute",
    "AttributeGroup",
    "ComplexType",
    "Definition",
    "Element",
    "Facet",
    "FacetKind",
    "Restriction",
    "Schema",
    "SimpleType",
    "SchemaLoader",
    "load_definition",
    "parse_definition",
]
