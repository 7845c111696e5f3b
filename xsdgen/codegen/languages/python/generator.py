"""
Python code generator implementation.

Generates one Python module per ClassModel, plus the runtime support
classes and built-in XSD types from templates. Every output directory is a
package, so the tree imports as ``<namespace_prefix>.<Namespace>.<Class>``.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from ...core.config import GeneratorConfig
from ...core.generator import CodeGenerator
from ...core.model import (
    ClassKind,
    ClassModel,
    MethodDescriptor,
    PropertyDescriptor,
    var_type,
)
from ...core.resolver import OUTPUT_STREAM, VALIDATION_EXCEPTION, BuiltinType
from .config import TYPING_NAMES, PythonConfig
from .naming import (
    MemberNames,
    getter_name,
    python_class_name,
    python_identifier,
    setter_name,
)
from .renderer import PythonRenderer, python_literal


def _text_lines(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return [line.strip() for line in text.strip().splitlines()]


def _docstring(lines: List[str], indent: str) -> List[str]:
    lines = [line.replace("\\", "\\\\").replace('"""', '\\"\\"\\"') for line in lines]
    if len(lines) == 1:
        return [f'{indent}"""{lines[0]}"""']
    body = [f"{indent}{line}" if line else "" for line in lines]
    return [f'{indent}"""', *body, f'{indent}"""']


class PythonGenerator(CodeGenerator):
    """Code generator for Python 3.8 and 3.10 classes."""

    package_marker = "__init__.py"

    def __init__(self, config: GeneratorConfig):
        """Initialize Python generator with configuration."""
        super().__init__(config)
        self.python_config = PythonConfig(config)

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "python"

    @property
    def file_extension(self) -> str:
        """Return Python file extension."""
        return ".py"

    def get_template_directory(self) -> Path:
        """Return the Python templates directory."""
        return Path(__file__).parent / "templates"

    def class_identifier(self, name: str) -> str:
        return python_class_name(name)

    # Class rendering

    def render_class(self, model: ClassModel) -> str:
        """Render a complete Python module for ``model``."""
        state = _ClassState(self, model)
        indent = self.config.indent
        blocks: List[List[str]] = []

        if model.constants:
            blocks.append([state.constant(name, value) for name, value in model.constants.items()])

        properties = model.sorted_properties()
        if properties:
            declarations = []
            for prop in properties:
                declarations.extend(f"{indent}#: {line}" for line in _text_lines(prop.annotation))
                declarations.append(f"{indent}_{state.member(prop)}: {state.attribute_annotation(prop)}")
            blocks.append(declarations)

            blocks.append(state.constructor(properties))
            for prop in properties:
                if prop.create_getter:
                    blocks.append(state.getter(prop))
                if not prop.immutable and not prop.fixed:
                    blocks.append(state.setter(prop))

        for method in model.methods:
            blocks.append(state.method(method))

        docstring = _docstring(_text_lines(model.class_comment), indent) if model.class_comment else []
        decorators = state.decorators()
        bases = state.bases()

        context = {
            "strict_types": self.python_config.strict_types,
            "doc_header": _text_lines(model.doc_header),
            "import_sections": state.import_sections(),
            "decorators": decorators,
            "class_name": self.class_identifier(model.class_name),
            "bases": bases,
            "docstring": "\n".join(docstring),
            "blocks": ["\n".join(block) for block in blocks],
        }
        return self.render_template("class.py.j2", context)

    def module_for(self, namespace, name: str) -> str:
        return self.python_config.module_for(namespace, self.class_identifier(name))

    # Templates

    def runtime_context(self) -> Dict[str, Any]:
        return {
            "strict_types": self.python_config.strict_types,
            "version": self.python_config.version,
            "exception_module": self.module_for(VALIDATION_EXCEPTION.namespace, VALIDATION_EXCEPTION.name),
            "stream_module": self.module_for(OUTPUT_STREAM.namespace, OUTPUT_STREAM.name),
        }

    def builtin_context(self, entry: BuiltinType) -> Dict[str, Any]:
        params = dict(entry.params)
        if "pattern" in params:
            params["pattern_literal"] = python_literal(params["pattern"])
        return {
            **self.runtime_context(),
            "class_name": self.class_identifier(entry.name),
            "kind": entry.kind.value,
            "parent": entry.extends,
            "parent_module": self.module_for(self.builtin_namespace, entry.extends)
            if entry.extends
            else None,
            "implements": [
                (self.module_for(self.builtin_namespace, name), self.class_identifier(name))
                for name in entry.implements
            ],
            "params": params,
        }


class _ClassState:
    """Per-class rendering state: member names and the imports they need."""

    def __init__(self, generator: PythonGenerator, model: ClassModel):
        self.generator = generator
        self.config = generator.python_config
        self.indent = generator.config.indent
        self.model = model
        self.members = MemberNames()
        self.renderer = PythonRenderer(self.indent, self.members.__getitem__)
        self.typing: Set[str] = set()
        # generated classes needed when the module runs, not only for annotations
        self.runtime_names: Set[str] = {VALIDATION_EXCEPTION.name}
        if model.parent:
            self.runtime_names.add(model.parent)
        self.runtime_names.update(model.implements)

    # Names and annotations

    def member(self, prop: PropertyDescriptor) -> str:
        return self.members[prop.name]

    def class_name(self, name: str) -> str:
        return self.generator.class_identifier(name)

    def annotation(self, type_name: Optional[str]) -> str:
        return self.config.annotation(type_name, self.class_name, self.typing)

    def optional(self, annotation: str) -> str:
        return self.config.optional(annotation, self.typing)

    def attribute_annotation(self, prop: PropertyDescriptor) -> str:
        annotation = self.annotation(prop.type)
        if not prop.fixed and not prop.in_constructor:
            annotation = self.optional(annotation)
        return annotation

    def _parameter_type(self, prop: PropertyDescriptor) -> Optional[str]:
        if prop.wraps_default:
            return var_type(prop.default)
        return prop.type

    def _instantiate(self, type_name: str, argument: str = "") -> str:
        self.runtime_names.add(type_name)
        return f"{self.class_name(type_name)}({argument})"

    # Members

    def constant(self, name: str, value: Any) -> str:
        if self.config.annotate_constants:
            self.typing.add("Final")
            return f"{self.indent}{name}: Final = {python_literal(value)}"
        return f"{self.indent}{name} = {python_literal(value)}"

    def constructor(self, properties: List[PropertyDescriptor]) -> List[str]:
        parameters = ["self"]
        for prop in properties:
            if not prop.in_constructor:
                continue
            parameter = f"{self.member(prop)}: {self.annotation(self._parameter_type(prop))}"
            if prop.has_default:
                parameter = f"{parameter} = {python_literal(prop.default)}"
            parameters.append(parameter)

        body = []
        for prop in properties:
            target = f"self._{self.member(prop)}"
            if prop.fixed:
                body.append(f"{target} = {self._fixed_value(prop)}")
            elif prop.in_constructor:
                if prop.wraps_default:
                    body.append(f"{target} = {self._instantiate(prop.type, self.member(prop))}")
                else:
                    body.append(f"{target} = {self.member(prop)}")
            else:
                body.append(f"{target} = None")

        guards = self.generator.build_constraint_guards(self.model)
        if guards:
            body.append("")
            body.extend(self.renderer.render(guards))

        return self._function(f"__init__({', '.join(parameters)}) -> None", body)

    def _fixed_value(self, prop: PropertyDescriptor) -> str:
        if prop.is_primitive:
            return python_literal(prop.default)
        argument = python_literal(prop.default) if prop.has_default else ""
        return self._instantiate(prop.type, argument)

    def getter(self, prop: PropertyDescriptor) -> List[str]:
        returns = self.annotation(prop.type)
        if not prop.never_null:
            returns = self.optional(returns)
        name = getter_name(self.member(prop))
        return self._function(f"{name}(self) -> {returns}", [f"return self._{self.member(prop)}"])

    def setter(self, prop: PropertyDescriptor) -> List[str]:
        member = self.member(prop)
        signature = f"{setter_name(member)}(self, {member}: {self.annotation(prop.type)}) -> None"
        return self._function(signature, [f"self._{member} = {member}"])

    def method(self, method: MethodDescriptor) -> List[str]:
        parameters = ["self"]
        for argument in method.arguments:
            parameter = f"{python_identifier(argument.name)}: {self.annotation(argument.type)}"
            if argument.default is not None:
                parameter = f"{parameter} = {python_literal(argument.default)}"
            parameters.append(parameter)

        returns = "None"
        if method.returns:
            returns = self.annotation(method.returns)
            if method.returns_null:
                returns = self.optional(returns)

        doc = _text_lines(method.annotation)
        if method.throws:
            if doc:
                doc.append("")
            doc.append("Raises:")
            doc.extend(f"{self.indent}{thrown}" for thrown in method.throws)

        signature = f"{python_identifier(method.name)}({', '.join(parameters)}) -> {returns}"
        return self._function(signature, self.renderer.render(method.body), doc)

    def _function(self, signature: str, body: List[str], doc: Optional[List[str]] = None) -> List[str]:
        indent = self.indent
        lines = [f"{indent}def {signature}:"]
        if doc:
            lines.extend(_docstring(doc, indent * 2))
        if not body:
            body = ["pass"]
        lines.extend(f"{indent * 2}{line}" if line else "" for line in body)
        return lines

    # Class header

    def decorators(self) -> List[str]:
        if self.model.is_final:
            self.typing.add("final")
            return ["final"]
        return []

    def _needs_abc(self) -> bool:
        return not self.model.parent and (
            self.model.is_abstract or self.model.kind == ClassKind.INTERFACE
        )

    def bases(self) -> List[str]:
        bases = []
        if self.model.parent:
            bases.append(self.class_name(self.model.parent))
        bases.extend(self.class_name(name) for name in self.model.implements)
        if self._needs_abc():
            bases.append("ABC")
        return bases

    def import_sections(self) -> List[List[str]]:
        """
        Import lines grouped as stdlib, runtime project imports and
        annotation-only imports.

        Call after every member has been rendered, so the collected needs
        are complete.
        """
        runtime, type_only = [], []
        for imported in self.model.imports:
            line = (
                f"from {self.generator.module_for(imported.namespace, imported.name)} "
                f"import {self.class_name(imported.name)}"
            )
            (runtime if imported.name in self.runtime_names else type_only).append(line)

        typing_names = sorted(name for name in TYPING_NAMES if name in self.typing)
        if type_only:
            typing_names.insert(0, "TYPE_CHECKING")
        if "final" in self.typing:
            typing_names.append("final")

        stdlib = []
        if "re" in self.renderer.needs:
            stdlib.append("import re")
        if self._needs_abc():
            stdlib.append("from abc import ABC")
        if typing_names:
            stdlib.append(f"from typing import {', '.join(typing_names)}")

        sections = [section for section in (stdlib, runtime) if section]
        if type_only:
            sections.append(["if TYPE_CHECKING:", *(f"{self.indent}{line}" for line in type_only)])
        return sections


def create_python_generator(config: Optional[GeneratorConfig] = None) -> PythonGenerator:
    """Create a Python generator with default config."""
    if config is None:
        from ...core.config import load_config

        config = load_config("python")

    return PythonGenerator(config)
