"""
Restriction facets to ClassModel constraints.

Each FacetKind has one handler in FacetMapper. A restriction is mapped in
three steps: its base (a built-in gives the value type, a user simple type
is flattened into the model), its nested simple types (flattened the same
way), then its own facets. Own facets are applied last so the most derived
restriction wins on conflicts.
"""

from decimal import Decimal, InvalidOperation, ROUND_CEILING, ROUND_FLOOR
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from ...logging_config import get_logger
from ...schema.definition import XSD_NAMESPACE, Facet, FacetKind, Restriction, SimpleType
from .errors import ConfigError, TypeNotFoundError
from .model import NUMERIC_TYPES, ClassModel, PropertyDescriptor, coerce_literal
from .naming import constant_name
from .resolver import VALIDATION_EXCEPTION

if TYPE_CHECKING:
    from .processor import ProcessingContext

logger = get_logger(__name__)


def value_property(model: ClassModel, type_name: str = "string") -> PropertyDescriptor:
    """Return the model's ``value`` property, creating it if missing."""
    prop = model.get_property("value")
    if prop is None:
        prop = PropertyDescriptor("value", type_name, required=True, immutable=True)
        model.add_property(prop)
    return prop


# Built-ins whose values are ordered but not numbers; their range bounds stay text
LEXICAL_ORDERED_TYPES = frozenset(
    ("date", "dateTime", "time", "duration", "gYear", "gYearMonth", "gMonth", "gMonthDay", "gDay")
)


def _decimal(value: str) -> Decimal:
    try:
        return Decimal(value.strip())
    except InvalidOperation:
        raise ConfigError(f"Facet value is not numeric: {value!r}")


def _integer(value: str) -> int:
    return int(_decimal(value))


def _number(value: Decimal):
    return int(value) if value == value.to_integral_value() else float(value)


class FacetMapper:
    """Applies restriction facets to a ClassModel."""

    def __init__(self):
        self._handlers: Dict[FacetKind, Callable[[ClassModel, PropertyDescriptor, str], None]] = {
            FacetKind.MIN_EXCLUSIVE: self._min_exclusive,
            FacetKind.MIN_INCLUSIVE: self._min_inclusive,
            FacetKind.MAX_EXCLUSIVE: self._max_exclusive,
            FacetKind.MAX_INCLUSIVE: self._max_inclusive,
            FacetKind.TOTAL_DIGITS: self._total_digits,
            FacetKind.FRACTION_DIGITS: self._fraction_digits,
            FacetKind.LENGTH: self._length,
            FacetKind.MIN_LENGTH: self._min_length,
            FacetKind.MAX_LENGTH: self._max_length,
            FacetKind.ENUMERATION: self._enumeration,
            FacetKind.WHITE_SPACE: self._white_space,
            FacetKind.PATTERN: self._pattern,
        }

    def map_restriction(
        self, model: ClassModel, restriction: Restriction, context: "ProcessingContext"
    ) -> PropertyDescriptor:
        """
        Flatten a restriction and its bases into ``model``.

        Args:
            model: Model receiving the value property and constraints
            restriction: Restriction node to map
            context: Current processing context

        Returns:
            The model's ``value`` property

        Raises:
            TypeNotFoundError: If the base names an unknown type.
            ConfigError: On circular derivation or non-numeric numeric facets.
        """
        base_primitive = "string"
        if restriction.base:
            namespace, local = context.resolver.namespace_of(restriction.base, context.schema)
            if namespace == XSD_NAMESPACE:
                base_primitive = context.resolver.primitive_for(local)
                if local in LEXICAL_ORDERED_TYPES and model.constraints.ordering is None:
                    model.constraints.ordering = "lexical"
            else:
                base = context.definition.find_type(local, namespace)
                if not isinstance(base, SimpleType):
                    raise TypeNotFoundError(restriction.base)
                model.absorb(context.simple_satellite(base))

        for child in restriction.children:
            model.absorb(context.simple_satellite(child))

        value = value_property(model, base_primitive)
        model.add_import(VALIDATION_EXCEPTION)
        self.apply(model, restriction.facets)
        return value

    def apply(self, model: ClassModel, facets: List[Facet]) -> None:
        """Apply facets in document order to the model's ``value`` property."""
        value = value_property(model)
        if facets:
            model.add_import(VALIDATION_EXCEPTION)
        if any(f.kind == FacetKind.ENUMERATION for f in facets):
            # own enumeration replaces the inherited one
            model.clear_enumeration()
        patterns: List[str] = []
        for facet in facets:
            handler = self._handlers.get(facet.kind)
            if handler is None:
                logger.debug(f"No handler for facet {facet.kind}, ignoring")
                continue
            if facet.kind == FacetKind.PATTERN:
                patterns.append(facet.value)
                continue
            handler(model, value, facet.value)
        if patterns:
            # patterns on one restriction step are alternatives
            combined = patterns[0] if len(patterns) == 1 else "|".join(f"(?:{p})" for p in patterns)
            self._pattern(model, value, combined)
        self._coerce_to_value_type(model, value)

    # Handlers

    def _min_exclusive(self, model, value, raw):
        if self._skip_exclusive(model, "minExclusive", raw):
            return
        model.constraints.min_value = int(_decimal(raw).to_integral_value(ROUND_FLOOR)) + 1
        value.type = "int"

    def _min_inclusive(self, model, value, raw):
        model.constraints.min_value = self._inclusive_bound(model, value, raw)

    def _max_exclusive(self, model, value, raw):
        if self._skip_exclusive(model, "maxExclusive", raw):
            return
        model.constraints.max_value = int(_decimal(raw).to_integral_value(ROUND_CEILING)) - 1
        value.type = "int"

    def _max_inclusive(self, model, value, raw):
        model.constraints.max_value = self._inclusive_bound(model, value, raw)

    def _total_digits(self, model, value, raw):
        model.constraints.total_digits = _integer(raw)
        if value.type not in ("decimal", "float"):
            value.type = "int"

    def _fraction_digits(self, model, value, raw):
        digits = _integer(raw)
        model.constraints.fraction_digits = digits
        if digits or value.type != "int":
            value.type = "decimal"

    def _length(self, model, value, raw):
        model.constraints.length = _integer(raw)

    def _min_length(self, model, value, raw):
        model.constraints.min_length = _integer(raw)

    def _max_length(self, model, value, raw):
        model.constraints.max_length = _integer(raw)

    def _enumeration(self, model, value, raw):
        model.constraints.enumeration.append(raw)
        name = constant_name(raw)
        candidate, counter = name, 1
        while candidate in model.constants and model.constants[candidate] != raw:
            candidate = f"{name}_{counter}"
            counter += 1
        model.add_constant(candidate, raw)

    def _white_space(self, model, value, raw):
        model.constraints.white_space = raw

    def _pattern(self, model, value, raw):
        model.constraints.pattern = raw

    # Helpers

    @classmethod
    def _inclusive_bound(cls, model: ClassModel, value: PropertyDescriptor, raw: str):
        """Bound literal; text for lexically ordered bases, else a number."""
        if model.constraints.ordering == "lexical":
            return raw.strip()
        cls._ensure_numeric(value, raw)
        return _number(_decimal(raw))

    @staticmethod
    def _skip_exclusive(model: ClassModel, facet: str, raw: str) -> bool:
        # guards only compare with < and >, which cannot express an open text bound
        if model.constraints.ordering != "lexical":
            return False
        logger.debug(f"Class {model.class_name}: {facet} {raw!r} on a non-numeric base, no guard emitted")
        return True

    @staticmethod
    def _ensure_numeric(value: PropertyDescriptor, raw: str) -> None:
        if value.type not in NUMERIC_TYPES:
            number = _decimal(raw)
            value.type = "int" if number == number.to_integral_value() else "decimal"

    @staticmethod
    def _coerce_to_value_type(model: ClassModel, value: PropertyDescriptor) -> None:
        """Re-type bounds and enumeration literals once the value type is final."""
        constraints = model.constraints
        if value.type in NUMERIC_TYPES:
            for attr in ("min_value", "max_value"):
                bound = getattr(constraints, attr)
                if bound is not None and value.type != "int":
                    setattr(constraints, attr, float(bound))
        if not constraints.enumeration:
            return
        coerced = []
        for raw in constraints.enumeration:
            literal = coerce_literal(raw, value.type) if isinstance(raw, str) else raw
            name = model.constant_for(raw)
            if name is not None:
                model.constants[name] = literal
            coerced.append(literal)
        constraints.enumeration = coerced
