"""XSD loader.

Parses XSD documents with ``xml.etree.ElementTree`` into the dataclasses of
:mod:`xsdgen.schema.definition`. ``xs:include`` and ``xs:import`` are
followed when they carry a ``schemaLocation``; every document is loaded
once per run.
"""

from __future__ import annotations

import io
from pathlib import Path
from urllib.parse import urljoin
from xml.etree import ElementTree as ET

from ..logging_config import get_logger
from ..utils import SchemaLoadError, is_url, load_xsd_location
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

logger = get_logger(__name__)

MODEL_GROUPS = ("sequence", "choice", "all")
PARTICLES = MODEL_GROUPS + ("element", "group", "any")

# Restriction children that are not facets and are handled elsewhere
NON_FACET_TAGS = ("annotation", "simpleType", "attribute", "attributeGroup", "anyAttribute")


def _local(node: ET.Element) -> str:
    """Local tag name of an XSD node; non-XSD nodes get an empty name."""
    tag = node.tag
    if not isinstance(tag, str):
        return ""
    if tag.startswith("{"):
        namespace, _, local = tag[1:].partition("}")
        return local if namespace == XSD_NAMESPACE else ""
    return tag


def _occurs(node: ET.Element) -> tuple[int, int | None]:
    """Return (min, max) where max=None means unbounded."""
    min_str = node.get("minOccurs")
    max_str = node.get("maxOccurs")
    min_o = int(min_str) if min_str is not None else 1
    if max_str is None:
        max_o: int | None = 1
    elif max_str == "unbounded":
        max_o = None
    else:
        max_o = int(max_str)
    return min_o, max_o


def _mul_max(a: int | None, b: int | None) -> int | None:
    """Multiply max values (None means unbounded)."""
    if a is None or b is None:
        return None
    return a * b


def _resolve_location(location: str, base: str | None) -> str:
    """Location of an included document relative to the including one."""
    if is_url(location):
        return location
    if base is None:
        return str(Path(location).resolve())
    if is_url(base):
        return urljoin(base, location)
    return str((Path(base).parent / location).resolve())


class SchemaLoader:
    """Build a Definition from one or more XSD documents.

    Usage:
        loader = SchemaLoader()
        definition = loader.load("schema.xsd")
    """

    def __init__(self, timeout: int = 30):
        """Initialize the loader.

        Args:
            timeout: Request timeout in seconds for schemas loaded from URLs
        """
        self.timeout = timeout
        self.definition = Definition()
        self._loaded: dict[tuple[str, str | None], Schema] = {}
        self._groups: dict[tuple[str | None, str], tuple[ET.Element, Schema]] = {}

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load(self, location: str | Path) -> Definition:
        """Load the document at ``location`` and everything it includes.

        Raises:
            SchemaLoadError: If a document cannot be read or is not an XSD.
        """
        location = str(location)
        if not is_url(location):
            location = str(Path(location).resolve())
        self._load_document(location, None)
        logger.info(
            f"Loaded {len(self.definition.schemas)} schema document(s) "
            f"with {len(self.definition)} named types"
        )
        return self.definition

    def load_string(self, text: str, location: str | None = None) -> Definition:
        """Load a document from XSD text.

        Relative includes resolve against ``location``, or the working
        directory when it is None.
        """
        self.parse(text, location)
        return self.definition

    def _load_document(self, location: str, chameleon_namespace: str | None) -> Schema:
        key = (location, chameleon_namespace)
        if key in self._loaded:
            return self._loaded[key]

        resolved, text = load_xsd_location(location, self.timeout)
        logger.debug(f"Parsing schema document {resolved}")
        return self.parse(text, location, chameleon_namespace)

    def parse(
        self, text: str, location: str | None = None, chameleon_namespace: str | None = None
    ) -> Schema:
        """Parse one XSD document into a Schema and register it.

        Args:
            text: XSD source text
            location: Where the text came from, used for relative includes
            chameleon_namespace: Target namespace inherited by an included
                document that declares none

        Returns:
            The parsed Schema

        Raises:
            SchemaLoadError: If the text is not well-formed or not an XSD.
        """
        root, namespaces = self._parse_xml(text, location)
        if root.tag != f"{{{XSD_NAMESPACE}}}schema":
            raise SchemaLoadError(f"Not an XML Schema document: {location or '<string>'}")

        schema = Schema(
            target_namespace=root.get("targetNamespace") or chameleon_namespace,
            namespaces=namespaces,
            location=location,
        )
        if location is not None:
            self._loaded[(location, chameleon_namespace)] = schema
        self.definition.add_schema(schema)

        # Dependencies and named groups first, so references can be expanded
        for child in root:
            tag = _local(child)
            if tag in ("include", "import", "redefine"):
                self._load_dependency(child, tag, schema)
            elif tag == "group" and child.get("name"):
                self._groups[(schema.target_namespace, child.get("name"))] = (child, schema)

        for child in root:
            tag = _local(child)
            if tag == "simpleType":
                schema.add(self._simple_type(child, schema))
            elif tag == "complexType":
                schema.add(self._complex_type(child, schema))
            elif tag == "element":
                schema.add(self._element(child, schema))
            elif tag == "attribute":
                schema.add(self._attribute(child, schema))
            elif tag == "attributeGroup":
                schema.add(self._attribute_group(child, schema))
            elif tag in ("include", "import", "redefine", "group", "annotation", ""):
                continue
            else:
                logger.debug(f"Ignoring top-level xs:{tag}")

        return schema

    def _parse_xml(self, text: str, location: str | None) -> tuple[ET.Element, dict[str, str]]:
        """Parse XML text, keeping every namespace prefix declaration."""
        namespaces: dict[str, str] = {}
        root = None
        try:
            for event, item in ET.iterparse(io.StringIO(text), events=("start", "start-ns")):
                if event == "start-ns":
                    prefix, uri = item
                    namespaces.setdefault(prefix, uri)
                elif root is None:
                    root = item
        except ET.ParseError as e:
            raise SchemaLoadError(f"Malformed XSD {location or '<string>'}: {e}") from e
        if root is None:
            raise SchemaLoadError(f"Empty XSD document: {location or '<string>'}")
        return root, namespaces

    def _load_dependency(self, node: ET.Element, tag: str, schema: Schema) -> None:
        schema_location = node.get("schemaLocation")
        if not schema_location:
            logger.debug(f"xs:{tag} of {node.get('namespace')} has no schemaLocation, skipped")
            return
        if tag == "redefine":
            logger.warning(f"xs:redefine of {schema_location} is loaded as a plain include")

        location = _resolve_location(schema_location, schema.location)
        # an include without its own target namespace takes the includer's
        chameleon = schema.target_namespace if tag != "import" else None
        self._load_document(location, chameleon)

    # -------------------------------------------------------------------------
    # Annotations
    # -------------------------------------------------------------------------

    def _annotation(self, node: ET.Element) -> str | None:
        """Text of xs:documentation and xs:appinfo, with their sources."""
        lines = []
        for child in node:
            if _local(child) not in ("documentation", "appinfo"):
                continue
            source = child.get("source")
            if source:
                lines.append(f"Source: {source}")
            text = "".join(child.itertext()).strip()
            if text:
                lines.append(text)
        return "\n".join(lines) or None

    # -------------------------------------------------------------------------
    # Simple types
    # -------------------------------------------------------------------------

    def _simple_type(self, node: ET.Element, schema: Schema) -> SimpleType:
        simple_type = SimpleType(
            name=node.get("name"), namespace=schema.target_namespace, schema=schema
        )
        for child in node:
            tag = _local(child)
            if tag == "annotation":
                simple_type.annotation = self._annotation(child)
            elif tag == "restriction":
                simple_type.restriction = self._restriction(child, schema)
            elif tag == "list":
                simple_type.list_item_type = child.get("itemType") or self._inline_base(child)
            elif tag == "union":
                members = (child.get("memberTypes") or "").split()
                members.extend(self._inline_base(inline) for inline in child if _local(inline) == "simpleType")
                simple_type.union_member_types = members
        return simple_type

    def _inline_base(self, node: ET.Element) -> str:
        """Base of the first inline simple type under ``node``."""
        for restriction in node.iter(f"{{{XSD_NAMESPACE}}}restriction"):
            if restriction.get("base"):
                return restriction.get("base")
        return "anySimpleType"

    def _restriction(self, node: ET.Element, schema: Schema) -> Restriction:
        restriction = Restriction(base=node.get("base"))
        for child in node:
            tag = _local(child)
            kind = FacetKind.from_tag(tag)
            if kind is not None:
                restriction.facets.append(Facet(kind, child.get("value", "")))
            elif tag == "simpleType":
                restriction.children.append(self._simple_type(child, schema))
            elif tag in NON_FACET_TAGS or tag in PARTICLES or not tag:
                continue
            else:
                logger.debug(f"Ignoring unknown facet xs:{tag}")
        return restriction

    # -------------------------------------------------------------------------
    # Complex types
    # -------------------------------------------------------------------------

    def _complex_type(self, node: ET.Element, schema: Schema) -> ComplexType:
        complex_type = ComplexType(
            name=node.get("name"),
            namespace=schema.target_namespace,
            abstract=node.get("abstract") == "true",
            mixed=node.get("mixed") == "true",
            schema=schema,
        )
        for child in node:
            tag = _local(child)
            if tag == "annotation":
                complex_type.annotation = self._annotation(child)
            elif tag in ("simpleContent", "complexContent"):
                complex_type.simple_content = tag == "simpleContent"
                if child.get("mixed") == "true":
                    complex_type.mixed = True
                self._content(child, complex_type, schema)
            else:
                self._content_child(child, complex_type, schema)
        return complex_type

    def _content(self, node: ET.Element, complex_type: ComplexType, schema: Schema) -> None:
        """simpleContent / complexContent: record the derivation and its members."""
        for derivation in node:
            tag = _local(derivation)
            if tag not in ("extension", "restriction"):
                continue
            complex_type.base = derivation.get("base")
            complex_type.derivation = tag
            if complex_type.simple_content and tag == "restriction":
                complex_type.content_restriction = self._restriction(derivation, schema)
            for child in derivation:
                self._content_child(child, complex_type, schema)

    def _content_child(self, child: ET.Element, complex_type: ComplexType, schema: Schema) -> None:
        tag = _local(child)
        if tag == "attribute":
            complex_type.attributes.append(self._attribute(child, schema))
        elif tag == "attributeGroup":
            complex_type.attribute_groups.append(self._attribute_group(child, schema))
        elif tag in MODEL_GROUPS or tag == "group":
            complex_type.elements.extend(self._particles(child, schema, 1, 1, ()))
        elif tag == "anyAttribute":
            logger.debug(f"xs:anyAttribute of {complex_type.name or 'anonymous type'} is ignored")

    def _particles(
        self,
        node: ET.Element,
        schema: Schema,
        min_factor: int,
        max_factor: int | None,
        groups: tuple,
    ) -> list[Element]:
        """Flatten a particle into elements, multiplying occurrence bounds.

        Members of a choice become optional.
        """
        tag = _local(node)
        min_o, max_o = _occurs(node)
        min_o *= min_factor
        max_o = _mul_max(max_o, max_factor)

        if tag == "element":
            element = self._element(node, schema)
            element.min_occurs = min_o
            element.max_occurs = max_o
            return [element]

        if tag == "group":
            group_node, group_schema, key = self._find_group(node, schema)
            if key in groups:
                raise SchemaLoadError(f"Circular model group reference: {node.get('ref')}")
            elements = []
            for child in group_node:
                if _local(child) in MODEL_GROUPS:
                    elements.extend(
                        self._particles(child, group_schema, min_o, max_o, groups + (key,))
                    )
            return elements

        if tag in MODEL_GROUPS:
            child_min = 0 if tag == "choice" else min_o
            elements = []
            for child in node:
                if _local(child) in PARTICLES:
                    elements.extend(self._particles(child, schema, child_min, max_o, groups))
            return elements

        if tag == "any":
            logger.debug("xs:any wildcard is ignored")
        return []

    def _find_group(self, node: ET.Element, schema: Schema):
        ref = node.get("ref")
        if not ref:
            raise SchemaLoadError("Model group without a ref inside a content model")
        namespace, local = self.definition.determine_namespace(ref, schema)
        key = (namespace, local)
        if key not in self._groups:
            raise SchemaLoadError(f"Model group not found: {ref}")
        group_node, group_schema = self._groups[key]
        return group_node, group_schema, key

    # -------------------------------------------------------------------------
    # Elements and attributes
    # -------------------------------------------------------------------------

    def _element(self, node: ET.Element, schema: Schema) -> Element:
        element = Element(
            name=node.get("name"),
            type=node.get("type"),
            ref=node.get("ref"),
            default=node.get("default"),
            fixed=node.get("fixed"),
            abstract=node.get("abstract") == "true",
            schema=schema,
        )
        for child in node:
            tag = _local(child)
            if tag == "annotation":
                element.annotation = self._annotation(child)
            elif tag == "simpleType":
                element.simple_type = self._simple_type(child, schema)
            elif tag == "complexType":
                element.complex_type = self._complex_type(child, schema)
        return element

    def _attribute(self, node: ET.Element, schema: Schema) -> Attribute:
        attribute = Attribute(
            name=node.get("name"),
            type=node.get("type"),
            ref=node.get("ref"),
            use=node.get("use", "optional"),
            default=node.get("default"),
            fixed=node.get("fixed"),
            schema=schema,
        )
        for child in node:
            tag = _local(child)
            if tag == "annotation":
                attribute.annotation = self._annotation(child)
            elif tag == "simpleType":
                attribute.simple_type = self._simple_type(child, schema)
        return attribute

    def _attribute_group(self, node: ET.Element, schema: Schema) -> AttributeGroup:
        group = AttributeGroup(name=node.get("name"), ref=node.get("ref"), schema=schema)
        for child in node:
            tag = _local(child)
            if tag == "annotation":
                group.annotation = self._annotation(child)
            elif tag == "attribute":
                group.attributes.append(self._attribute(child, schema))
            elif tag == "attributeGroup":
                group.attribute_groups.append(self._attribute_group(child, schema))
        return group


def load_definition(*locations: str | Path, timeout: int = 30) -> Definition:
    """Load every given XSD file or URL into one Definition."""
    loader = SchemaLoader(timeout=timeout)
    for location in locations:
        loader.load(location)
    return loader.definition


def parse_definition(text: str, location: str | None = None) -> Definition:
    """Build a Definition from XSD text."""
    return SchemaLoader().load_string(text, location)

