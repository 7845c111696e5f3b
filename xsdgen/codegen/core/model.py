"""
Language-neutral description of a class to generate.

A ClassModel is built up by the processors, validated, rendered once by a
language generator and then thrown away. Type names used throughout are
either one of the semantic primitives in PRIMITIVE_TYPES or the name of
another generated class.
"""

from dataclasses import dataclass, field, fields, replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import ConfigError

PRIMITIVE_TYPES = frozenset({"string", "int", "decimal", "float", "bool", "array", "mixed"})
NUMERIC_TYPES = frozenset({"int", "decimal", "float"})


def is_primitive(type_name: Optional[str]) -> bool:
    """Untyped (None) counts as primitive: nothing needs constructing."""
    return type_name is None or type_name in PRIMITIVE_TYPES


def var_type(value: Any) -> str:
    """Return the semantic type of a Python literal."""
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, int):
        return "int"
    if isinstance(value, float):
        return "decimal"
    if isinstance(value, (list, tuple)):
        return "array"
    if value is None:
        return "mixed"
    return "string"


def coerce_literal(raw: Any, type_name: Optional[str]) -> Any:
    """
    Convert a lexical schema value into a literal of the given semantic type.

    Values that cannot be converted are returned unchanged so the generated
    code fails loudly instead of the generator guessing.
    """
    if raw is None or not isinstance(raw, str):
        return raw
    try:
        if type_name == "int":
            number = Decimal(raw.strip())
            return int(number) if number == number.to_integral_value() else raw
        if type_name in ("decimal", "float"):
            return float(Decimal(raw.strip()))
    except InvalidOperation:
        return raw
    if type_name == "bool":
        return raw.strip() in ("true", "1")
    return raw


class Modifier(Enum):
    FINAL = "final"
    ABSTRACT = "abstract"


class ClassKind(Enum):
    CLASS = "class"
    INTERFACE = "interface"
    TRAIT = "trait"


class Visibility(Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


@dataclass(frozen=True)
class Import:
    """Reference to another generated class, namespace relative to the prefix."""

    namespace: Tuple[str, ...]
    name: str


@dataclass
class Constraints:
    """Value constraints collected from restriction facets."""

    min_value: Optional[Any] = None
    max_value: Optional[Any] = None
    total_digits: Optional[int] = None
    fraction_digits: Optional[int] = None
    length: Optional[int] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    enumeration: List[Any] = field(default_factory=list)
    white_space: Optional[str] = None
    pattern: Optional[str] = None
    validators: List[Any] = field(default_factory=list)
    # "lexical" when bounds compare as text (dates, gYear); None means numeric
    ordering: Optional[str] = None

    def is_set(self) -> bool:
        """True when any guard-producing constraint is present."""
        return (
            any(
                getattr(self, name) is not None
                for name in (
                    "min_value",
                    "max_value",
                    "total_digits",
                    "fraction_digits",
                    "length",
                    "min_length",
                    "max_length",
                    "pattern",
                )
            )
            or bool(self.enumeration)
            or bool(self.validators)
        )

    def fill_from(self, other: "Constraints") -> None:
        """Copy every field of ``other`` that is still unset here."""
        for f in fields(self):
            if f.name in ("enumeration", "validators"):
                continue
            if getattr(self, f.name) is None:
                setattr(self, f.name, getattr(other, f.name))
        if not self.enumeration:
            self.enumeration = list(other.enumeration)
        self.validators.extend(other.validators)


@dataclass
class PropertyDescriptor:
    name: str
    type: Optional[str] = None
    visibility: Visibility = Visibility.PROTECTED
    required: bool = False
    immutable: bool = False
    fixed: bool = False
    is_attribute: bool = False
    is_collection: bool = False
    include_in_constructor: bool = True
    create_getter: bool = True
    default: Any = None
    xml_name: Optional[str] = None
    annotation: Optional[str] = None

    @property
    def has_default(self) -> bool:
        return self.default is not None

    @property
    def is_primitive(self) -> bool:
        return is_primitive(self.type)

    @property
    def in_constructor(self) -> bool:
        """Whether this property is a constructor parameter."""
        return not self.fixed and self.include_in_constructor

    @property
    def wraps_default(self) -> bool:
        """Non-primitive typed property seeded from a literal default."""
        return not self.is_primitive and self.has_default

    @property
    def never_null(self) -> bool:
        return self.type is not None and (self.required or self.fixed)

    def copy(self) -> "PropertyDescriptor":
        return replace(self)


@dataclass
class ArgumentDescriptor:
    name: str
    type: Optional[str] = None
    default: Any = None


@dataclass
class MethodDescriptor:
    """
    A method other than constructor and accessors.

    ``returns`` of None means no declared return value. ``body`` holds
    statement nodes from :mod:`statements`.
    """

    name: str
    visibility: Visibility = Visibility.PUBLIC
    arguments: List[ArgumentDescriptor] = field(default_factory=list)
    returns: Optional[str] = None
    returns_null: bool = False
    throws: List[str] = field(default_factory=list)
    body: List[Any] = field(default_factory=list)
    annotation: Optional[str] = None

    def add_argument(self, argument: ArgumentDescriptor) -> "MethodDescriptor":
        self.arguments.append(argument)
        return self

    def add_throws(self, kind: str) -> "MethodDescriptor":
        if kind not in self.throws:
            self.throws.append(kind)
        return self


class ClassModel:
    """Mutable description of one generated class."""

    def __init__(self, class_name: str = "", namespace: Tuple[str, ...] = ()):
        self.namespace: Tuple[str, ...] = tuple(namespace)
        self.class_name = class_name
        self.kind = ClassKind.CLASS
        self.modifiers: List[Modifier] = []
        self.parent: Optional[str] = None
        self.implements: List[str] = []
        self.properties: List[PropertyDescriptor] = []
        self.methods: List[MethodDescriptor] = []
        self.constants: Dict[str, Any] = {}
        self.imports: List[Import] = []
        self.doc_header: Optional[str] = None
        self.class_comment: Optional[str] = None
        self.constraints = Constraints()

    def __repr__(self) -> str:
        return f"ClassModel({'/'.join(self.namespace + (self.class_name,))})"

    # Identity

    def set_namespace(self, *segments: str) -> "ClassModel":
        self.namespace = tuple(segments)
        return self

    def set_class_name(self, name: str) -> "ClassModel":
        self.class_name = name
        return self

    def set_kind(self, kind) -> "ClassModel":
        try:
            self.kind = ClassKind(kind.value if isinstance(kind, ClassKind) else kind)
        except ValueError:
            raise ConfigError(f"Invalid class kind: {kind!r}")
        return self

    def add_modifier(self, modifier) -> "ClassModel":
        """Add ``final`` or ``abstract``; anything else is rejected immediately."""
        try:
            value = Modifier(modifier.value if isinstance(modifier, Modifier) else modifier)
        except ValueError:
            valid = ", ".join(m.value for m in Modifier)
            raise ConfigError(f"Invalid class modifier: {modifier!r} (expected one of: {valid})")
        if value not in self.modifiers:
            self.modifiers.append(value)
        return self

    def set_parent(self, parent: Optional[str]) -> "ClassModel":
        self.parent = parent
        return self

    def add_implements(self, name: str) -> "ClassModel":
        if name not in self.implements:
            self.implements.append(name)
        return self

    def set_doc_header(self, text: Optional[str]) -> "ClassModel":
        self.doc_header = text
        return self

    def set_class_comment(self, text: Optional[str]) -> "ClassModel":
        self.class_comment = text
        return self

    @property
    def is_abstract(self) -> bool:
        return Modifier.ABSTRACT in self.modifiers

    @property
    def is_final(self) -> bool:
        return Modifier.FINAL in self.modifiers

    # Members

    def add_property(self, prop: PropertyDescriptor) -> "ClassModel":
        self.properties.append(prop)
        return self

    def get_property(self, name: str) -> Optional[PropertyDescriptor]:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def has_property(self, name: str) -> bool:
        return self.get_property(name) is not None

    def add_method(self, method: MethodDescriptor) -> "ClassModel":
        self.methods.append(method)
        return self

    def get_method(self, name: str) -> Optional[MethodDescriptor]:
        for method in self.methods:
            if method.name == name:
                return method
        return None

    def add_constant(self, name: str, value: Any) -> "ClassModel":
        self.constants[name] = value
        return self

    def constant_for(self, value: Any) -> Optional[str]:
        """Name of the first constant holding ``value``."""
        for name, constant in self.constants.items():
            if constant == value and type(constant) is type(value):
                return name
        return None

    def add_import(self, imported: Import) -> "ClassModel":
        if imported not in self.imports and not (
            imported.namespace == self.namespace and imported.name == self.class_name
        ):
            self.imports.append(imported)
        return self

    def sorted_properties(self) -> List[PropertyDescriptor]:
        """Properties without a default first, then the rest; order kept within each group."""
        without_default = [p for p in self.properties if not p.has_default]
        with_default = [p for p in self.properties if p.has_default]
        return without_default + with_default

    def constructor_properties(self) -> List[PropertyDescriptor]:
        return [p for p in self.sorted_properties() if p.in_constructor]

    # Constraints

    def has_constraints(self) -> bool:
        return self.constraints.is_set()

    def clear_enumeration(self) -> "ClassModel":
        """Drop inherited enumeration values and their constants."""
        for value in self.constraints.enumeration:
            name = self.constant_for(value)
            if name is not None:
                del self.constants[name]
        self.constraints.enumeration = []
        return self

    def absorb(self, other: "ClassModel") -> "ClassModel":
        """
        Flatten another model into this one.

        Members already present by name are kept; constraint fields are only
        filled where still unset, so values set on this model win.
        """
        for prop in other.properties:
            if not self.has_property(prop.name):
                self.add_property(prop.copy())
        for method in other.methods:
            if self.get_method(method.name) is None:
                self.add_method(method)
        for imported in other.imports:
            self.add_import(imported)
        for name, value in other.constants.items():
            self.constants.setdefault(name, value)
        self.constraints.fill_from(other.constraints)
        return self

    def validate(self) -> None:
        """
        Check the model can be rendered.

        Raises:
            ConfigError: If the class name is empty or constraints are set
                without a ``value`` property to guard.
        """
        if not self.class_name:
            raise ConfigError("Class name is required before rendering")
        if self.has_constraints() and not self.has_property("value"):
            raise ConfigError(
                f"Class {self.class_name} has value constraints but no 'value' property"
            )
