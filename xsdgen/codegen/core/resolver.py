"""
Type resolution between schema references and generated classes.

The resolver answers "what does ``alias:local`` become in generated code":
a semantic primitive, a generated SimpleType/ComplexType class, or a
built-in XSD type rendered from a template into the ``Xsd`` namespace. It
also synthesises the ``ValueObject`` collection wrappers used for repeated
elements.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ...logging_config import get_logger
from ...schema.definition import (
    XSD_NAMESPACE,
    ComplexType,
    Definition,
    Schema,
    SimpleType,
    split_reference,
)
from .errors import TypeNotFoundError
from .model import (
    ArgumentDescriptor,
    ClassKind,
    ClassModel,
    Import,
    MethodDescriptor,
    PropertyDescriptor,
    is_primitive,
)
from .naming import class_name, classify, ucfirst
from .statements import (
    AppendTo,
    BoolText,
    Compare,
    Count,
    DelegateCall,
    ForEach,
    Literal,
    MethodCall,
    PropertyRef,
    Raise,
    Return,
    Variable,
    guard,
    write,
)

logger = get_logger(__name__)

VALIDATION_EXCEPTION = Import(("Exception",), "ValidationException")
OUTPUT_STREAM = Import(("Stream",), "OutputStream")

SIMPLE_TYPE_NAMESPACE = ("SimpleType",)
COMPLEX_TYPE_NAMESPACE = ("ComplexType",)
VALUE_OBJECT_NAMESPACE = ("ValueObject",)
BUILTIN_NAMESPACE = ("Xsd",)

# XSD built-ins without a template, mapped to semantic primitives
XSD_PRIMITIVES = {
    "string": "string",
    "normalizedString": "string",
    "token": "string",
    "language": "string",
    "Name": "string",
    "NCName": "string",
    "ID": "string",
    "IDREF": "string",
    "IDREFS": "string",
    "ENTITY": "string",
    "ENTITIES": "string",
    "NMTOKEN": "string",
    "NMTOKENS": "string",
    "QName": "string",
    "NOTATION": "string",
    "anyURI": "string",
    "base64Binary": "string",
    "hexBinary": "string",
    "date": "string",
    "dateTime": "string",
    "time": "string",
    "duration": "string",
    "anySimpleType": "string",
    "integer": "int",
    "int": "int",
    "long": "int",
    "short": "int",
    "unsignedLong": "int",
    "unsignedInt": "int",
    "negativeInteger": "int",
    "nonPositiveInteger": "int",
    "decimal": "decimal",
    "float": "float",
    "double": "float",
    "boolean": "bool",
    "anyType": "mixed",
}


@dataclass(frozen=True)
class BuiltinType:
    """A built-in XSD type rendered from ``builtins/<template>.j2``."""

    name: str
    template: str
    kind: ClassKind = ClassKind.CLASS
    extends: Optional[str] = None
    implements: Tuple[str, ...] = ()
    value_type: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    @property
    def dependencies(self) -> Tuple[str, ...]:
        deps = (self.extends,) if self.extends else ()
        return deps + self.implements


_TZ = r"(Z|[+-]\d{2}:\d{2})?"


def _integer(name: str, xsd_name: str, minimum: Optional[int], maximum: Optional[int]) -> BuiltinType:
    return BuiltinType(
        name,
        "integer_type",
        extends="AbstractIntegerType",
        value_type="int",
        params={"xsd_name": xsd_name, "minimum": minimum, "maximum": maximum},
    )


def _lexical(name: str, xsd_name: str, pattern: str, layout: str) -> BuiltinType:
    return BuiltinType(
        name,
        "pattern_type",
        extends="AbstractValueType",
        value_type="string",
        params={"xsd_name": xsd_name, "pattern": pattern, "layout": layout},
    )


BUILTIN_TYPES: Dict[str, BuiltinType] = {
    entry.name: entry
    for entry in (
        BuiltinType("ValueType", "value_type", kind=ClassKind.INTERFACE),
        BuiltinType(
            "AbstractValueType",
            "abstract_value_type",
            implements=("ValueType",),
        ),
        BuiltinType(
            "AbstractIntegerType",
            "abstract_integer_type",
            extends="AbstractValueType",
            value_type="int",
        ),
        _integer("Byte", "byte", -128, 127),
        _integer("UnsignedByte", "unsignedByte", 0, 255),
        _integer("UnsignedShort", "unsignedShort", 0, 65535),
        _integer("PositiveInteger", "positiveInteger", 1, None),
        _integer("NonNegativeInteger", "nonNegativeInteger", 0, None),
        _lexical("GYear", "gYear", rf"-?\d{{4,}}{_TZ}", "YYYY"),
        _lexical("GYearMonth", "gYearMonth", rf"-?\d{{4,}}-\d{{2}}{_TZ}", "YYYY-MM"),
        _lexical("GMonth", "gMonth", rf"--\d{{2}}{_TZ}", "--MM"),
        _lexical("GMonthDay", "gMonthDay", rf"--\d{{2}}-\d{{2}}{_TZ}", "--MM-DD"),
        _lexical("GDay", "gDay", rf"---\d{{2}}{_TZ}", "---DD"),
    )
}


@dataclass(frozen=True)
class ResolvedType:
    """
    Outcome of resolving a type reference.

    ``class_namespace`` is None for semantic primitives. ``value_type`` is
    the primitive a wrapper class is constructed from.
    """

    name: str
    class_namespace: Optional[Tuple[str, ...]] = None
    namespace: Optional[str] = None
    value_type: Optional[str] = None

    @property
    def is_primitive(self) -> bool:
        return self.class_namespace is None

    @property
    def literal_type(self) -> str:
        """Type that literal defaults for this type are coerced to."""
        if self.is_primitive:
            return self.name
        return self.value_type or "string"

    def as_import(self) -> Optional[Import]:
        if self.is_primitive:
            return None
        return Import(self.class_namespace, self.name)


class TypeResolver:
    """
    Resolves references against a Definition for one generation run.

    Built-in materialisation and collection synthesis are memoised per
    resolver, so every run gets its own instance.
    """

    def __init__(self, definition: Definition, writer=None):
        """
        Args:
            definition: Schemas to resolve against (read-only)
            writer: ClassWriter receiving built-ins and collections; None
                resolves without writing anything
        """
        self.definition = definition
        self.writer = writer
        self.warnings: List[str] = []
        self._materialized: Dict[str, bool] = {}
        self._collections: Dict[str, Tuple[ResolvedType, int, Optional[int]]] = {}
        # Overridden by the schema processor so SimpleType wrappers know their value type
        self.value_type_for: Callable[[SimpleType], Optional[str]] = lambda simple_type: None

    @staticmethod
    def split_reference(ref: str) -> Tuple[Optional[str], str]:
        return split_reference(ref)

    def namespace_of(self, ref: str, schema: Optional[Schema]) -> Tuple[Optional[str], str]:
        """
        Namespace URI and local name for a reference.

        Raises:
            TypeNotFoundError: If the reference uses an undeclared prefix.
        """
        alias, _ = split_reference(ref)
        namespace, local = self.definition.determine_namespace(ref, schema)
        if alias is not None and namespace is None:
            raise TypeNotFoundError(ref, f"Unknown namespace prefix in reference: {ref}")
        return namespace, local

    @staticmethod
    def primitive_for(local_name: str) -> str:
        """Semantic primitive for an XSD built-in; unknown names are strings."""
        if local_name in XSD_PRIMITIVES:
            return XSD_PRIMITIVES[local_name]
        entry = BUILTIN_TYPES.get(classify(local_name))
        if entry is not None and entry.value_type:
            return entry.value_type
        return "string"

    def find_type(self, ref: str, schema: Optional[Schema]):
        """
        Look up a user type.

        Raises:
            TypeNotFoundError: If no schema declares it.
        """
        namespace, local = self.namespace_of(ref, schema)
        found = self.definition.find_type(local, namespace)
        if found is None:
            raise TypeNotFoundError(ref)
        return found

    def analyze_type(self, ref: str, schema: Optional[Schema]) -> ResolvedType:
        """
        Decide what a type reference becomes in generated code.

        Args:
            ref: Possibly prefixed type name
            schema: Schema the reference appears in

        Returns:
            ResolvedType for the reference

        Raises:
            TypeNotFoundError: If the reference names an unknown type.
        """
        namespace, local = self.namespace_of(ref, schema)

        if namespace == XSD_NAMESPACE:
            name = classify(local)
            if self.materialize_builtin(name):
                entry = BUILTIN_TYPES[name]
                return ResolvedType(name, BUILTIN_NAMESPACE, namespace, entry.value_type)
            return ResolvedType(self.primitive_for(local), None, namespace)

        found = self.definition.find_type(local, namespace)
        if found is None:
            raise TypeNotFoundError(ref)
        if isinstance(found, SimpleType):
            return ResolvedType(
                class_name(found.name),
                SIMPLE_TYPE_NAMESPACE,
                namespace,
                self.value_type_for(found),
            )
        if isinstance(found, ComplexType):
            return ResolvedType(class_name(found.name), COMPLEX_TYPE_NAMESPACE, namespace)
        raise TypeNotFoundError(ref)

    def resolve_reference(self, ref: str, schema: Optional[Schema], kind: str = "element"):
        """
        Resolve a ``ref=`` attribute to the global declaration it names.

        Args:
            ref: Possibly prefixed name
            schema: Schema the reference appears in
            kind: One of element, attribute, attributeGroup, type

        Raises:
            TypeNotFoundError: If nothing of that kind is declared.
        """
        namespace, local = self.namespace_of(ref, schema)
        finders = {
            "element": self.definition.find_element,
            "attribute": self.definition.find_attribute,
            "attributeGroup": self.definition.find_attribute_group,
            "type": self.definition.find_type,
        }
        found = finders[kind](local, namespace)
        if found is None:
            raise TypeNotFoundError(ref)
        return found

    # Built-in types

    def materialize_builtin(self, name: str) -> bool:
        """
        Write a built-in type and everything it extends or implements.

        Dependencies go first; each name is handled once per run and files
        already present in the output tree are left alone.

        Returns:
            False when no template exists for ``name``
        """
        if name in self._materialized:
            return self._materialized[name]
        entry = BUILTIN_TYPES.get(name)
        self._materialized[name] = entry is not None
        if entry is None:
            return False

        for dependency in entry.dependencies:
            self.materialize_builtin(dependency)
        if self.writer is not None:
            self.writer.write_builtin(name)
        return True

    # Collections

    def build_collection(
        self, item: ResolvedType, min_occurs: int, max_occurs: Optional[int]
    ) -> ResolvedType:
        """
        Collection wrapper for repeated ``item`` elements.

        One wrapper exists per item type per run; a later request with
        different bounds reuses it and records a warning.

        Args:
            item: Resolved item type
            min_occurs: Minimum number of items
            max_occurs: Maximum number of items, None for unbounded

        Returns:
            ResolvedType of the ``ValueObject`` collection class
        """
        if item.name in self._collections:
            resolved, low, high = self._collections[item.name]
            if (low, high) != (min_occurs, max_occurs):
                message = (
                    f"{resolved.name} already generated with bounds "
                    f"[{low}:{_bound(high)}]; ignoring [{min_occurs}:{_bound(max_occurs)}]"
                )
                logger.warning(message)
                self.warnings.append(message)
            return resolved

        model = build_collection_model(item, min_occurs, max_occurs)
        resolved = ResolvedType(model.class_name, VALUE_OBJECT_NAMESPACE)
        self._collections[item.name] = (resolved, min_occurs, max_occurs)
        if self.writer is not None:
            self.writer.write_class(model, "collection")
        return resolved


def _bound(value: Optional[int]) -> str:
    return "*" if value is None else str(value)


def collection_class_name(item: ResolvedType) -> str:
    return f"{ucfirst(split_reference(item.name)[1])}Collection"


def build_collection_model(
    item: ResolvedType, min_occurs: int, max_occurs: Optional[int]
) -> ClassModel:
    """
    Model of a collection wrapper.

    ``add`` refuses an item once ``max_occurs`` are held, so the wrapper
    never retains more than the bound; ``all`` refuses to hand out fewer
    than ``min_occurs``.
    """
    model = ClassModel(collection_class_name(item), VALUE_OBJECT_NAMESPACE)
    model.add_import(VALIDATION_EXCEPTION)
    model.add_import(OUTPUT_STREAM)
    if item.as_import() is not None:
        model.add_import(item.as_import())

    model.add_property(
        PropertyDescriptor(
            "items",
            "array",
            default=[],
            fixed=True,
            immutable=True,
            create_getter=False,
        )
    )

    items = PropertyRef("items")

    add = MethodDescriptor("add").add_argument(ArgumentDescriptor("item", item.name))
    if max_occurs is not None:
        add.add_throws("ValidationException")
        add.body.append(
            guard(
                Compare(Count(items), ">=", Literal(max_occurs)),
                Raise(f"collection can have at most {max_occurs} item(s)"),
            )
        )
    add.body.append(AppendTo(items, Variable("item")))
    model.add_method(add)

    all_items = MethodDescriptor("all", returns="array")
    if min_occurs:
        all_items.add_throws("ValidationException")
        all_items.body.append(
            guard(
                Compare(Count(items), "<", Literal(min_occurs)),
                Raise(f"collection must have at least {min_occurs} item(s)"),
            )
        )
    all_items.body.append(Return(items))
    model.add_method(all_items)

    write_xml = MethodDescriptor("writeXML")
    write_xml.add_argument(ArgumentDescriptor("stream", OUTPUT_STREAM.name))
    write_xml.add_argument(ArgumentDescriptor("tagName", "string"))
    if is_primitive(item.name):
        text = BoolText(Variable("item")) if item.name == "bool" else Variable("item")
        each = write("<", Variable("tagName"), ">", text, "</", Variable("tagName"), ">")
    else:
        each = DelegateCall(
            MethodCall(Variable("item"), "writeXML", (Variable("stream"), Variable("tagName")))
        )
    write_xml.body.append(ForEach("item", items, (each,)))
    model.add_method(write_xml)

    return model
