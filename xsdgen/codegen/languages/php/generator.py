"""
PHP code generator implementation.

Generates one PHP 7 class per ClassModel, plus the runtime support classes
and built-in XSD types from templates.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from ...core.config import GeneratorConfig
from ...core.generator import CodeGenerator
from ...core.model import ClassModel, MethodDescriptor, PropertyDescriptor, var_type
from ...core.resolver import OUTPUT_STREAM, VALIDATION_EXCEPTION, BuiltinType
from ...core.statements import Assign, PropertyRef, Variable
from .config import PhpConfig
from .naming import getter_name, php_class_name, php_variable, setter_name
from .renderer import PhpRenderer, php_literal, php_regex


def _docblock(lines: List[str], indent: str = "") -> List[str]:
    body = [f"{indent} * {line}".rstrip() for line in lines]
    return [f"{indent}/**", *body, f"{indent} */"]


def _comment_lines(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return [line.strip().replace("*/", "*\\/") for line in text.strip().splitlines()]


class PhpGenerator(CodeGenerator):
    """Code generator for PHP 7.0 and 7.1 classes."""

    def __init__(self, config: GeneratorConfig):
        """Initialize PHP generator with configuration."""
        super().__init__(config)
        self.php_config = PhpConfig(config)
        self.renderer = PhpRenderer(config.indent)

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "php"

    @property
    def file_extension(self) -> str:
        """Return PHP file extension."""
        return ".php"

    def get_template_directory(self) -> Path:
        """Return the PHP templates directory."""
        return Path(__file__).parent / "templates"

    def class_identifier(self, name: str) -> str:
        return php_class_name(name)

    # Class rendering

    def render_class(self, model: ClassModel) -> str:
        """Render a complete PHP file for ``model``."""
        indent = self.config.indent
        blocks: List[str] = []

        if model.constants:
            keyword = self.php_config.constant_keyword
            blocks.append("\n".join(
                f"{indent}{keyword} {name} = {php_literal(value)};"
                for name, value in model.constants.items()
            ))

        properties = model.sorted_properties()
        for prop in properties:
            blocks.append(self._property_block(prop))

        if properties:
            blocks.append(self._constructor_block(model, properties))
            for prop in properties:
                if prop.create_getter:
                    blocks.append(self._getter_block(prop))
                if not prop.immutable and not prop.fixed:
                    blocks.append(self._setter_block(prop))

        for method in model.methods:
            blocks.append(self._method_block(method))

        context = {
            "strict_types": self.php_config.strict_types,
            "doc_header": self._doc_header(model),
            "namespace": self.php_config.namespace_for(model.namespace),
            "uses": [self._use(imported.namespace, imported.name) for imported in model.imports],
            "class_comment": "\n".join(_docblock(_comment_lines(model.class_comment)))
            if model.class_comment
            else None,
            "declaration": self._declaration(model),
            "blocks": blocks,
        }
        return self.render_template("class.php.j2", context)

    def _doc_header(self, model: ClassModel) -> Optional[str]:
        if not model.doc_header:
            return None
        return "\n".join(_docblock(_comment_lines(model.doc_header)))

    def _use(self, namespace, name: str) -> str:
        return f"{self.php_config.namespace_for(namespace)}\\{self.class_identifier(name)}"

    def _declaration(self, model: ClassModel) -> str:
        parts = [modifier.value for modifier in model.modifiers]
        parts.append(f"{model.kind.value} {self.class_identifier(model.class_name)}")
        if model.parent:
            parts.append(f"extends {self.class_identifier(model.parent)}")
        if model.implements:
            names = ", ".join(self.class_identifier(name) for name in model.implements)
            parts.append(f"implements {names}")
        return " ".join(parts)

    def _type(self, type_name: Optional[str]) -> Optional[str]:
        return self.php_config.type_declaration(type_name, self.class_identifier)

    def _doc_type(self, type_name: Optional[str]) -> str:
        return self.php_config.doc_type(type_name, self.class_identifier)

    def _property_block(self, prop: PropertyDescriptor) -> str:
        indent = self.config.indent
        lines = _comment_lines(prop.annotation)
        if lines:
            lines.append("")
        lines.append(f"@var {self._doc_type(prop.type)}")
        block = _docblock(lines, indent)
        block.append(f"{indent}{prop.visibility.value} ${prop.name};")
        return "\n".join(block)

    def _parameter_type(self, prop: PropertyDescriptor) -> Optional[str]:
        """Constructor parameter type; wrapped defaults take the literal's type."""
        if prop.wraps_default:
            return var_type(prop.default)
        return prop.type

    def _constructor_block(self, model: ClassModel, properties: List[PropertyDescriptor]) -> str:
        indent = self.config.indent
        parameters = [p for p in properties if p.in_constructor]
        guards = self.build_constraint_guards(model)

        doc = [f"{self.class_identifier(model.class_name)} constructor"]
        for prop in parameters:
            doc.append(f"@param {self._doc_type(self._parameter_type(prop))} ${php_variable(prop.name)}")
        if guards:
            doc.append("@throws ValidationException")

        signature = []
        for prop in parameters:
            declaration = self._type(self._parameter_type(prop))
            parameter = f"${php_variable(prop.name)}"
            if declaration:
                parameter = f"{declaration} {parameter}"
            if prop.has_default:
                parameter = f"{parameter} = {php_literal(prop.default)}"
            signature.append(parameter)

        body = []
        for prop in properties:
            target = f"$this->{prop.name}"
            if prop.fixed:
                body.append(f"{target} = {self._fixed_value(prop)};")
            elif prop.in_constructor:
                variable = f"${php_variable(prop.name)}"
                if prop.wraps_default:
                    body.append(f"{target} = new {self.class_identifier(prop.type)}({variable});")
                else:
                    body.extend(self._assign(prop))
        if guards:
            body.append("")
            body.extend(self.renderer.render(guards))

        lines = _docblock(doc, indent)
        lines.append(f"{indent}public function __construct({', '.join(signature)})")
        lines.extend(self._body(body))
        return "\n".join(lines)

    def _assign(self, prop: PropertyDescriptor) -> List[str]:
        """``$this->name = $name;`` for a constructor or setter parameter."""
        return self.renderer.render([Assign(PropertyRef(prop.name), Variable(prop.name))])

    def _fixed_value(self, prop: PropertyDescriptor) -> str:
        if prop.is_primitive:
            return php_literal(prop.default)
        argument = php_literal(prop.default) if prop.has_default else ""
        return f"new {self.class_identifier(prop.type)}({argument})"

    def _getter_block(self, prop: PropertyDescriptor) -> str:
        indent = self.config.indent
        declaration = self._type(prop.type)
        doc_type = self._doc_type(prop.type)
        if not prop.never_null:
            declaration = self.php_config.nullable(declaration)
            doc_type = f"{doc_type}|null" if prop.type else doc_type

        lines = _docblock([f"@return {doc_type}"], indent)
        returns = f": {declaration}" if declaration else ""
        lines.append(f"{indent}public function {getter_name(prop.name)}(){returns}")
        lines.extend(self._body([f"return $this->{prop.name};"]))
        return "\n".join(lines)

    def _setter_block(self, prop: PropertyDescriptor) -> str:
        indent = self.config.indent
        variable = f"${php_variable(prop.name)}"
        declaration = self._type(prop.type)
        parameter = f"{declaration} {variable}" if declaration else variable

        lines = _docblock([f"@param {self._doc_type(prop.type)} {variable}"], indent)
        lines.append(f"{indent}public function {setter_name(prop.name)}({parameter})")
        lines.extend(self._body(self._assign(prop)))
        return "\n".join(lines)

    def _method_block(self, method: MethodDescriptor) -> str:
        indent = self.config.indent
        lines: List[str] = []

        if method.arguments or method.returns or method.throws or method.annotation:
            doc = _comment_lines(method.annotation)
            if doc:
                doc.append("")
            for argument in method.arguments:
                doc.append(f"@param {self._doc_type(argument.type)} ${php_variable(argument.name)}")
            if method.returns:
                suffix = "|null" if method.returns_null else ""
                doc.append(f"@return {self._doc_type(method.returns)}{suffix}")
            for thrown in method.throws:
                doc.append(f"@throws {thrown}")
            lines.extend(_docblock(doc, indent))

        arguments = []
        for argument in method.arguments:
            declaration = self._type(argument.type)
            text = f"${php_variable(argument.name)}"
            if declaration:
                text = f"{declaration} {text}"
            if argument.default is not None:
                text = f"{text} = {php_literal(argument.default)}"
            arguments.append(text)

        returns = ""
        if method.returns:
            declaration = self._type(method.returns)
            if method.returns_null:
                declaration = self.php_config.nullable(declaration)
            if declaration:
                returns = f": {declaration}"

        lines.append(
            f"{indent}{method.visibility.value} function {method.name}({', '.join(arguments)}){returns}"
        )
        lines.extend(self._body(self.renderer.render(method.body)))
        return "\n".join(lines)

    def _body(self, statements: List[str]) -> List[str]:
        indent = self.config.indent
        inner = [f"{indent * 2}{line}" if line else "" for line in statements]
        return [f"{indent}{{", *inner, f"{indent}}}"]

    # Templates

    def runtime_context(self) -> Dict[str, Any]:
        return {
            "strict_types": self.php_config.strict_types,
            "version": self.php_config.version,
            "exception_namespace": self.php_config.namespace_for(VALIDATION_EXCEPTION.namespace),
            "stream_namespace": self.php_config.namespace_for(OUTPUT_STREAM.namespace),
        }

    def builtin_context(self, entry: BuiltinType) -> Dict[str, Any]:
        params = dict(entry.params)
        if "pattern" in params:
            params["pattern_literal"] = php_regex(params["pattern"])
        return {
            **self.runtime_context(),
            "namespace": self.php_config.namespace_for(self.builtin_namespace),
            "class_name": self.class_identifier(entry.name),
            "kind": entry.kind.value,
            "parent": entry.extends,
            "implements": list(entry.implements),
            "constant_keyword": self.php_config.constant_keyword,
            "nullable": self.php_config.supports_nullable_types,
            "params": params,
        }


def create_php_generator(config: Optional[GeneratorConfig] = None) -> PhpGenerator:
    """Create PHP generator with default config."""
    if config is None:
        from ...core.config import load_config

        config = load_config("php")

    return PhpGenerator(config)
