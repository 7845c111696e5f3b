"""
In-memory model of one or more parsed XSD documents.

The loader fills these dataclasses; the code generator only reads them.
Names are kept exactly as they appear in the schema (``alias:local``
references included) so the resolver can apply namespace rules itself.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Union

XSD_NAMESPACE = "http://www.w3.org/2001/XMLSchema"

# Sentinel meaning "match a definition in any namespace"
ANY_NAMESPACE = object()


class FacetKind(Enum):
    """Restriction facets understood by the generator."""

    MIN_EXCLUSIVE = "minExclusive"
    MIN_INCLUSIVE = "minInclusive"
    MAX_EXCLUSIVE = "maxExclusive"
    MAX_INCLUSIVE = "maxInclusive"
    TOTAL_DIGITS = "totalDigits"
    FRACTION_DIGITS = "fractionDigits"
    LENGTH = "length"
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    ENUMERATION = "enumeration"
    WHITE_SPACE = "whiteSpace"
    PATTERN = "pattern"

    @classmethod
    def from_tag(cls, tag: str) -> Optional["FacetKind"]:
        """Return the facet kind for an XSD local tag name, or None if unknown."""
        for kind in cls:
            if kind.value == tag:
                return kind
        return None


@dataclass
class Facet:
    """A single restriction rule such as ``<xs:maxLength value="10"/>``."""

    kind: FacetKind
    value: str


@dataclass
class Restriction:
    """``xs:restriction``: a base type, its facets and nested simple types."""

    base: Optional[str] = None
    facets: List[Facet] = field(default_factory=list)
    children: List["SimpleType"] = field(default_factory=list)


@dataclass
class SimpleType:
    name: Optional[str] = None
    namespace: Optional[str] = None
    restriction: Optional[Restriction] = None
    list_item_type: Optional[str] = None
    union_member_types: List[str] = field(default_factory=list)
    annotation: Optional[str] = None
    schema: Optional["Schema"] = field(default=None, repr=False, compare=False)

    @property
    def is_list(self) -> bool:
        return self.list_item_type is not None

    @property
    def is_union(self) -> bool:
        return bool(self.union_member_types)


@dataclass
class Attribute:
    name: Optional[str] = None
    type: Optional[str] = None
    ref: Optional[str] = None
    use: str = "optional"
    default: Optional[str] = None
    fixed: Optional[str] = None
    simple_type: Optional[SimpleType] = None
    annotation: Optional[str] = None
    schema: Optional["Schema"] = field(default=None, repr=False, compare=False)

    @property
    def required(self) -> bool:
        return self.use == "required"


@dataclass
class AttributeGroup:
    name: Optional[str] = None
    ref: Optional[str] = None
    attributes: List[Attribute] = field(default_factory=list)
    attribute_groups: List["AttributeGroup"] = field(default_factory=list)
    annotation: Optional[str] = None
    schema: Optional["Schema"] = field(default=None, repr=False, compare=False)


@dataclass
class Element:
    """Local or global ``xs:element``.

    ``max_occurs`` of None means unbounded.
    """

    name: Optional[str] = None
    type: Optional[str] = None
    ref: Optional[str] = None
    min_occurs: int = 1
    max_occurs: Optional[int] = 1
    default: Optional[str] = None
    fixed: Optional[str] = None
    simple_type: Optional[SimpleType] = None
    complex_type: Optional["ComplexType"] = None
    abstract: bool = False
    annotation: Optional[str] = None
    schema: Optional["Schema"] = field(default=None, repr=False, compare=False)

    @property
    def is_collection(self) -> bool:
        return self.max_occurs != 1


@dataclass
class ComplexType:
    name: Optional[str] = None
    namespace: Optional[str] = None
    elements: List[Element] = field(default_factory=list)
    attributes: List[Attribute] = field(default_factory=list)
    attribute_groups: List[AttributeGroup] = field(default_factory=list)
    base: Optional[str] = None
    derivation: Optional[str] = None  # extension | restriction
    simple_content: bool = False
    content_restriction: Optional[Restriction] = None
    abstract: bool = False
    mixed: bool = False
    annotation: Optional[str] = None
    schema: Optional["Schema"] = field(default=None, repr=False, compare=False)


SchemaType = Union[SimpleType, ComplexType]
SchemaComponent = Union[SimpleType, ComplexType, Element, Attribute, AttributeGroup]


@dataclass
class Schema:
    """One XSD document and its global declarations."""

    target_namespace: Optional[str] = None
    namespaces: Dict[str, str] = field(default_factory=dict)
    location: Optional[str] = None
    simple_types: Dict[str, SimpleType] = field(default_factory=dict)
    complex_types: Dict[str, ComplexType] = field(default_factory=dict)
    elements: Dict[str, Element] = field(default_factory=dict)
    attributes: Dict[str, Attribute] = field(default_factory=dict)
    attribute_groups: Dict[str, AttributeGroup] = field(default_factory=dict)

    @property
    def xmlns(self) -> Optional[str]:
        """Default namespace declared on the schema root, if any."""
        return self.namespaces.get("")

    def namespace_for_alias(self, alias: str) -> Optional[str]:
        if alias == "xml":
            return "http://www.w3.org/XML/1998/namespace"
        return self.namespaces.get(alias)

    def add(self, component: SchemaComponent) -> None:
        """Register a global declaration by name."""
        component.schema = self
        if isinstance(component, SimpleType):
            self.simple_types[component.name] = component
        elif isinstance(component, ComplexType):
            self.complex_types[component.name] = component
        elif isinstance(component, Element):
            self.elements[component.name] = component
        elif isinstance(component, Attribute):
            self.attributes[component.name] = component
        elif isinstance(component, AttributeGroup):
            self.attribute_groups[component.name] = component
        else:
            raise TypeError(f"Unsupported schema component: {type(component).__name__}")


def split_reference(ref: str) -> Tuple[Optional[str], str]:
    """Split ``alias:local`` into ``(alias, local)``; alias is None when absent."""
    if ":" in ref:
        alias, local = ref.split(":", 1)
        return alias, local
    return None, ref


class Definition:
    """Container for every schema reachable from the loaded document."""

    def __init__(self, schemas: Optional[List[Schema]] = None):
        self.schemas: List[Schema] = list(schemas or [])

    def add_schema(self, schema: Schema) -> Schema:
        self.schemas.append(schema)
        return schema

    @property
    def root(self) -> Optional[Schema]:
        return self.schemas[0] if self.schemas else None

    # Namespace handling

    def get_namespace_from_alias(
        self, alias: str, schema: Optional[Schema] = None
    ) -> Optional[str]:
        """
        Translate a prefix into a namespace URI.

        The given schema's declarations win; otherwise the first schema
        declaring the alias is used.

        Args:
            alias: Namespace prefix without the colon
            schema: Schema whose declarations are checked first

        Returns:
            Namespace URI or None if the alias is unknown
        """
        if schema is not None:
            uri = schema.namespace_for_alias(alias)
            if uri is not None:
                return uri
        for candidate in self.schemas:
            uri = candidate.namespace_for_alias(alias)
            if uri is not None:
                return uri
        return None

    def determine_namespace(
        self, ref: str, schema: Optional[Schema]
    ) -> Tuple[Optional[str], str]:
        """
        Work out the namespace a reference points into.

        Prefixed names go through the alias map. Unprefixed names use the
        schema's default namespace and fall back to its target namespace.

        Returns:
            Tuple of (namespace URI, local name); the URI is None for an
            undeclared prefix.
        """
        alias, local = split_reference(ref)
        if alias is not None:
            return self.get_namespace_from_alias(alias, schema), local

        if schema is None:
            return None, local
        if schema.xmlns is not None:
            return schema.xmlns, local
        return schema.target_namespace, local

    # Lookups

    def _schemas_for(self, namespace) -> Iterator[Schema]:
        for schema in self.schemas:
            if namespace is ANY_NAMESPACE or schema.target_namespace == namespace:
                yield schema

    def find_type(self, name: str, namespace=ANY_NAMESPACE) -> Optional[SchemaType]:
        for schema in self._schemas_for(namespace):
            if name in schema.simple_types:
                return schema.simple_types[name]
            if name in schema.complex_types:
                return schema.complex_types[name]
        return None

    def find_element(self, name: str, namespace=ANY_NAMESPACE) -> Optional[Element]:
        for schema in self._schemas_for(namespace):
            if name in schema.elements:
                return schema.elements[name]
        return None

    def find_attribute(self, name: str, namespace=ANY_NAMESPACE) -> Optional[Attribute]:
        for schema in self._schemas_for(namespace):
            if name in schema.attributes:
                return schema.attributes[name]
        return None

    def find_attribute_group(
        self, name: str, namespace=ANY_NAMESPACE
    ) -> Optional[AttributeGroup]:
        for schema in self._schemas_for(namespace):
            if name in schema.attribute_groups:
                return schema.attribute_groups[name]
        return None

    def find_element_by_name(
        self, name: str, namespace=ANY_NAMESPACE
    ) -> Optional[SchemaComponent]:
        """Find any global declaration by name, types first."""
        return (
            self.find_type(name, namespace)
            or self.find_element(name, namespace)
            or self.find_attribute_group(name, namespace)
            or self.find_attribute(name, namespace)
        )

    # Iteration

    def types(self) -> Iterator[SchemaType]:
        """Yield every named type, simple types before complex types per schema."""
        for schema in self.schemas:
            yield from schema.simple_types.values()
            yield from schema.complex_types.values()

    def elements(self) -> Iterator[Element]:
        for schema in self.schemas:
            yield from schema.elements.values()

    def __len__(self) -> int:
        return sum(
            len(schema.simple_types) + len(schema.complex_types) for schema in self.schemas
        )
