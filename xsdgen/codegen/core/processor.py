"""
Schema processors: turn schema types into ClassModels.

SimpleTypeProcessor and ComplexTypeProcessor build one model per schema
type; SchemaProcessor walks a whole Definition and hands every finished
model to the class writer. All state a step needs travels in an explicit
ProcessingContext.
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from ...logging_config import get_logger
from ...schema.definition import (
    XSD_NAMESPACE,
    Attribute,
    AttributeGroup,
    ComplexType,
    Definition,
    Element,
    Schema,
    SimpleType,
)
from .config import GeneratorConfig
from .errors import ConfigError, TypeNotFoundError
from .facets import FacetMapper, value_property
from .model import (
    ArgumentDescriptor,
    ClassModel,
    MethodDescriptor,
    Modifier,
    PropertyDescriptor,
    coerce_literal,
    is_primitive,
)
from .naming import class_name, pluralize, property_name, singularize, ucfirst
from .resolver import (
    COMPLEX_TYPE_NAMESPACE,
    OUTPUT_STREAM,
    SIMPLE_TYPE_NAMESPACE,
    ResolvedType,
    TypeResolver,
)
from .statements import (
    BoolText,
    DelegateCall,
    IsSet,
    Literal,
    MethodCall,
    PropertyRef,
    Variable,
    guard,
    write,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProcessingContext:
    """Everything a processing step needs, passed explicitly."""

    definition: Definition
    schema: Optional[Schema]
    resolver: TypeResolver
    mapper: FacetMapper
    config: GeneratorConfig
    inline_types: Optional["InlineTypes"] = None
    seen: Tuple[int, ...] = ()

    def for_schema(self, schema: Optional[Schema]) -> "ProcessingContext":
        return replace(self, schema=schema or self.schema)

    def entering(self, node, label: Optional[str]) -> "ProcessingContext":
        """
        Context for processing ``node`` as part of the current derivation.

        Raises:
            ConfigError: If ``node`` is already being processed.
        """
        if id(node) in self.seen:
            raise ConfigError(f"Circular type derivation through {label or 'anonymous type'}")
        return replace(self, seen=self.seen + (id(node),))

    def simple_satellite(self, simple_type: SimpleType) -> ClassModel:
        """Model of ``simple_type`` for flattening into another class."""
        context = self.entering(simple_type, simple_type.name).for_schema(simple_type.schema)
        return SimpleTypeProcessor(context).build_class(simple_type)

    def complex_satellite(self, complex_type: ComplexType) -> ClassModel:
        context = self.entering(complex_type, complex_type.name).for_schema(complex_type.schema)
        return ComplexTypeProcessor(context).build_class(complex_type)


def annotation_text(text: Optional[str], config: GeneratorConfig) -> Optional[str]:
    if not config.add_comments or not text:
        return None
    return text.strip() or None


def build_write_xml(model: ClassModel) -> MethodDescriptor:
    """
    ``writeXML(stream, tagName)`` serialising the model's properties.

    Attributes go on the opening tag (optional ones without a default only
    when set), ``value`` becomes text content and every other property is
    written as a child element.
    """
    method = MethodDescriptor("writeXML")
    method.add_argument(ArgumentDescriptor("stream", OUTPUT_STREAM.name))
    method.add_argument(ArgumentDescriptor("tagName", "string"))
    model.add_import(OUTPUT_STREAM)

    tag = Variable("tagName")
    attributes = [p for p in model.properties if p.is_attribute]
    value = model.get_property("value")
    children = [p for p in model.properties if not p.is_attribute and p.name != "value"]
    needs_closing_tag = value is not None or bool(children)
    end = ">" if needs_closing_tag else "/>"

    body = method.body
    if attributes:
        body.append(write("<", tag))
        for prop in attributes:
            statement = write(f' {prop.xml_name or prop.name}="', _text_of(prop), '"')
            if not prop.required and not prop.has_default and not prop.fixed:
                statement = guard(IsSet(PropertyRef(prop.name)), statement)
            body.append(statement)
        body.append(write(end))
    else:
        body.append(write("<", tag, end))

    if value is not None:
        body.append(write(_text_of(value)))

    for prop in children:
        child_tag = prop.xml_name or (singularize(prop.name) if prop.is_collection else prop.name)
        if prop.is_primitive:
            statement = write("<", child_tag, ">", _text_of(prop), "</", child_tag, ">")
        else:
            statement = DelegateCall(
                MethodCall(PropertyRef(prop.name), "writeXML", (Variable("stream"), Literal(child_tag)))
            )
        body.append(guard(IsSet(PropertyRef(prop.name)), statement))

    if needs_closing_tag:
        body.append(write("</", tag, ">"))
    return method


def _text_of(prop: PropertyDescriptor):
    """Expression giving the XML text of a property."""
    ref = PropertyRef(prop.name)
    if not prop.is_primitive:
        return MethodCall(ref, "getValue")
    if prop.type == "bool":
        return BoolText(ref)
    return ref


class SimpleTypeProcessor:
    """Builds the model of one simple type."""

    def __init__(self, context: ProcessingContext):
        self.context = context

    def build_class(self, simple_type: SimpleType, name: Optional[str] = None) -> ClassModel:
        """
        Model with a ``value`` property and the flattened constraints.

        Args:
            simple_type: Named or anonymous simple type
            name: Class name to use (defaults to the type's own name)

        Returns:
            ClassModel in the ``SimpleType`` namespace
        """
        model = ClassModel(name or class_name(simple_type.name or "Value"), SIMPLE_TYPE_NAMESPACE)

        if simple_type.restriction is not None:
            self.context.mapper.map_restriction(model, simple_type.restriction, self.context)
        else:
            # lists and unions keep their lexical form
            kind = "list" if simple_type.is_list else "union" if simple_type.is_union else "empty"
            logger.debug(f"Simple type {model.class_name} is a {kind} type; value kept as string")
            value_property(model, "string")

        model.set_class_comment(annotation_text(simple_type.annotation, self.context.config))
        return model


class ComplexTypeProcessor:
    """Builds the model of one complex type, flattening its base."""

    def __init__(self, context: ProcessingContext):
        self.context = context

    def build_class(self, complex_type: ComplexType, name: Optional[str] = None) -> ClassModel:
        """
        Model for a complex type.

        Base types are flattened in first, so inherited properties come
        before the type's own attributes and elements.

        Args:
            complex_type: Named or anonymous complex type
            name: Class name to use (defaults to the type's own name)

        Returns:
            ClassModel in the ``ComplexType`` namespace
        """
        model = ClassModel(name or class_name(complex_type.name or "Anonymous"), COMPLEX_TYPE_NAMESPACE)
        if complex_type.abstract:
            model.add_modifier(Modifier.ABSTRACT)

        if complex_type.base:
            self._apply_base(model, complex_type)
        elif complex_type.simple_content:
            value_property(model, "string")

        for attribute in self._all_attributes(complex_type):
            self._add_attribute(model, attribute)

        for element in complex_type.elements:
            self._add_element(model, element)

        if complex_type.mixed:
            logger.debug(f"Mixed content of {model.class_name} is not serialised")

        model.set_class_comment(annotation_text(complex_type.annotation, self.context.config))
        return model

    # Base types

    def _apply_base(self, model: ClassModel, complex_type: ComplexType) -> None:
        context = self.context
        namespace, local = context.resolver.namespace_of(complex_type.base, context.schema)

        if namespace == XSD_NAMESPACE:
            if complex_type.simple_content:
                value_property(model, context.resolver.primitive_for(local))
        else:
            base = context.definition.find_type(local, namespace)
            if base is None:
                raise TypeNotFoundError(complex_type.base)
            if isinstance(base, SimpleType):
                model.absorb(context.simple_satellite(base))
            elif complex_type.derivation == "restriction" and not complex_type.simple_content:
                # a restriction restates its content; only attributes carry over
                satellite = context.complex_satellite(base)
                for prop in satellite.properties:
                    if prop.is_attribute and not model.has_property(prop.name):
                        model.add_property(prop.copy())
                for imported in satellite.imports:
                    model.add_import(imported)
            else:
                model.absorb(context.complex_satellite(base))

        if complex_type.simple_content and complex_type.content_restriction is not None:
            context.mapper.apply(model, complex_type.content_restriction.facets)

    # Attributes

    def _all_attributes(self, complex_type: ComplexType) -> List[Attribute]:
        attributes = list(complex_type.attributes)
        for group in complex_type.attribute_groups:
            attributes.extend(self._group_attributes(group, ()))
        return attributes

    def _group_attributes(self, group: AttributeGroup, seen: Tuple[int, ...]) -> List[Attribute]:
        if group.ref:
            group = self.context.resolver.resolve_reference(
                group.ref, group.schema or self.context.schema, "attributeGroup"
            )
        if id(group) in seen:
            raise ConfigError(f"Circular attribute group reference: {group.name}")
        attributes = list(group.attributes)
        for nested in group.attribute_groups:
            attributes.extend(self._group_attributes(nested, seen + (id(group),)))
        return attributes

    def _add_attribute(self, model: ClassModel, attribute: Attribute) -> None:
        if attribute.use == "prohibited":
            return
        source = attribute
        if attribute.ref:
            source = self.context.resolver.resolve_reference(
                attribute.ref, attribute.schema or self.context.schema, "attribute"
            )
        xml_name = source.name
        resolved = self._resolve(model, source, xml_name)

        prop = PropertyDescriptor(
            _unique_name(model, property_name(xml_name)),
            resolved.name,
            required=attribute.required,
            is_attribute=True,
            xml_name=xml_name,
            annotation=annotation_text(source.annotation, self.context.config),
        )
        self._apply_value_constraint(
            prop,
            resolved,
            attribute.fixed if attribute.fixed is not None else source.fixed,
            attribute.default if attribute.default is not None else source.default,
        )
        model.add_property(prop)

    # Elements

    def _add_element(self, model: ClassModel, element: Element) -> None:
        if element.max_occurs == 0:
            return
        source = element
        if element.ref:
            source = self.context.resolver.resolve_reference(
                element.ref, element.schema or self.context.schema, "element"
            )
        xml_name = source.name
        resolved = self._resolve(model, source, xml_name)
        annotation = annotation_text(source.annotation, self.context.config)

        if element.is_collection:
            collection = self.context.resolver.build_collection(
                resolved, element.min_occurs, element.max_occurs
            )
            model.add_import(collection.as_import())
            model.add_property(
                PropertyDescriptor(
                    _unique_name(model, pluralize(property_name(xml_name))),
                    collection.name,
                    required=True,
                    immutable=True,
                    fixed=True,
                    is_collection=True,
                    xml_name=xml_name,
                    annotation=annotation,
                )
            )
            return

        prop = PropertyDescriptor(
            _unique_name(model, property_name(xml_name)),
            resolved.name,
            required=element.min_occurs > 0,
            xml_name=xml_name,
            annotation=annotation,
        )
        self._apply_value_constraint(
            prop,
            resolved,
            element.fixed if element.fixed is not None else source.fixed,
            element.default if element.default is not None else source.default,
        )
        model.add_property(prop)

    # Helpers

    def _resolve(self, model: ClassModel, source, xml_name: str) -> ResolvedType:
        """Resolve the type of an attribute or element declaration."""
        context = self.context
        simple_type = source.simple_type
        complex_type = getattr(source, "complex_type", None)
        inline_types = context.inline_types

        if simple_type is not None or complex_type is not None:
            if inline_types is None:
                resolved = _inline_reference(model, xml_name, simple_type, context)
            elif isinstance(source, Element) and _is_global(source):
                resolved = inline_types.global_element(source)
            else:
                resolved = inline_types.local(model.class_name, xml_name, source, context)
        elif source.type:
            resolved = context.resolver.analyze_type(source.type, source.schema or context.schema)
        elif isinstance(source, Element):
            resolved = ResolvedType("mixed")
        else:
            resolved = ResolvedType("string")

        if resolved.as_import() is not None:
            model.add_import(resolved.as_import())
        return resolved

    @staticmethod
    def _apply_value_constraint(prop: PropertyDescriptor, resolved: ResolvedType, fixed, default) -> None:
        if fixed is not None:
            prop.fixed = True
            prop.immutable = True
            prop.default = coerce_literal(fixed, resolved.literal_type)
        elif default is not None:
            prop.default = coerce_literal(default, resolved.literal_type)
        prop.include_in_constructor = prop.required or prop.has_default


def _unique_name(model: ClassModel, name: str) -> str:
    candidate, counter = name, 1
    while model.has_property(candidate):
        candidate = f"{name}{counter}"
        counter += 1
    return candidate


def _is_global(element: Element) -> bool:
    return element.schema is not None and any(
        candidate is element for candidate in element.schema.elements.values()
    )


def _inline_reference(model: ClassModel, xml_name: str, simple_type, context) -> ResolvedType:
    """Name an anonymous type without building its class."""
    name = class_name(model.class_name + ucfirst(xml_name))
    if simple_type is not None:
        value = context.simple_satellite(simple_type).get_property("value")
        return ResolvedType(name, SIMPLE_TYPE_NAMESPACE, None, value.type)
    return ResolvedType(name, COMPLEX_TYPE_NAMESPACE)


class InlineTypes:
    """Builds and writes classes for anonymous types, once each."""

    def __init__(self, processor: "SchemaProcessor"):
        self.processor = processor
        self._built: Dict[object, ResolvedType] = {}

    def local(self, owner: str, xml_name: str, source, context: ProcessingContext) -> ResolvedType:
        """Class ``<Owner><XmlName>`` for a type declared inside ``source``."""
        name = class_name(owner + ucfirst(xml_name))
        key = (owner, xml_name)
        if key not in self._built:
            self._built[key] = self._write(source, name, context)
        return self._built[key]

    def global_element(self, element: Element) -> ResolvedType:
        """Class for a global element declaring its type inline."""
        key = id(element)
        if key not in self._built:
            context = self.processor.context.for_schema(element.schema)
            name = self.processor.element_class_name(element)
            self._built[key] = self._write(element, name, context)
        return self._built[key]

    def _write(self, source, name: str, context: ProcessingContext) -> ResolvedType:
        complex_type = getattr(source, "complex_type", None)
        if complex_type is not None:
            return self.processor.write_complex(complex_type, name, context)
        return self.processor.write_simple(source.simple_type, name, context)


class SchemaProcessor:
    """Generates every class reachable from a Definition."""

    def __init__(self, definition: Definition, config: GeneratorConfig, writer=None):
        """
        Args:
            definition: Loaded schemas
            config: Generator configuration
            writer: ClassWriter for output; None builds models without writing
        """
        self.definition = definition
        self.config = config
        self.writer = writer
        self.resolver = TypeResolver(definition, writer)
        self.resolver.value_type_for = self.value_type_for
        self.inline_types = InlineTypes(self)
        self.context = ProcessingContext(
            definition, definition.root, self.resolver, FacetMapper(), config, self.inline_types
        )
        self.models: List[ClassModel] = []
        self._value_types: Dict[int, Optional[str]] = {}

    @property
    def warnings(self) -> List[str]:
        return self.resolver.warnings

    def value_type_for(self, simple_type: SimpleType) -> Optional[str]:
        """Primitive held by the class generated for ``simple_type``."""
        key = id(simple_type)
        if key not in self._value_types:
            self._value_types[key] = None  # breaks lookups that loop back here
            satellite = self.context.for_schema(simple_type.schema).simple_satellite(simple_type)
            self._value_types[key] = satellite.get_property("value").type
        return self._value_types[key]

    def process(self) -> List[ClassModel]:
        """
        Build and write every class.

        Raises:
            GeneratorError: Any generator failure, unchanged.
        """
        if self.writer is not None:
            self.writer.write_runtime_support()

        for schema_type in self.definition.types():
            context = self.context.for_schema(schema_type.schema)
            if isinstance(schema_type, SimpleType):
                self.write_simple(schema_type, class_name(schema_type.name), context)
            else:
                self.write_complex(schema_type, class_name(schema_type.name), context)

        for element in self.definition.elements():
            if element.simple_type is not None or element.complex_type is not None:
                self.inline_types.global_element(element)

        logger.info(f"Generated {len(self.models)} classes")
        return self.models

    def element_class_name(self, element: Element) -> str:
        name = class_name(element.name)
        if self.definition.find_type(element.name) is not None:
            name = f"{name}Element"
        return name

    def write_simple(self, simple_type: SimpleType, name: str, context: ProcessingContext) -> ResolvedType:
        model = SimpleTypeProcessor(context).build_class(simple_type, name)
        return self._finish(model)

    def write_complex(self, complex_type: ComplexType, name: str, context: ProcessingContext) -> ResolvedType:
        model = ComplexTypeProcessor(context).build_class(complex_type, name)
        return self._finish(model)

    def _finish(self, model: ClassModel) -> ResolvedType:
        model.add_method(build_write_xml(model))
        if self.config.doc_header:
            model.set_doc_header(self.config.doc_header)
        self.models.append(model)
        if self.writer is not None:
            self.writer.write_class(model)
        value = model.get_property("value")
        value_type = value.type if value is not None and is_primitive(value.type) else None
        return ResolvedType(model.class_name, model.namespace, None, value_type)
