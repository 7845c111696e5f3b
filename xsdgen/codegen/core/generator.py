"""
Base generator interface for all code generation targets.

Defines the contract that all language generators must implement, the
constraint guards shared by every target, and the generate_code driver.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ...logging_config import get_logger
from ...schema.definition import Definition
from .config import GeneratorConfig, get_config_manager
from .errors import FileSystemError
from .model import ClassModel
from .output import ClassWriter, OutputStream, ensure_directory
from .processor import SchemaProcessor
from .resolver import (
    BUILTIN_NAMESPACE,
    BUILTIN_TYPES,
    OUTPUT_STREAM,
    VALIDATION_EXCEPTION,
    BuiltinType,
)
from .statements import (
    Compare,
    ConstantRef,
    DigitCount,
    FractionDigitCount,
    InSet,
    Length,
    Literal,
    Matches,
    Not,
    PropertyRef,
    Raise,
    Statement,
    guard,
)
from .templates import TemplateEngine, create_template_engine

logger = get_logger(__name__)


class CodeGenerator(ABC):
    """Abstract base class for all code generators."""

    # Directory (relative to the output root) receiving built-in types
    builtin_namespace: Tuple[str, ...] = BUILTIN_NAMESPACE
    # File making a directory a package, if the language needs one
    package_marker: Optional[str] = None

    def __init__(self, config: GeneratorConfig):
        """Initialize generator with configuration."""
        self.config = config
        self._template_engine = None
        self._setup_templates()

    def _setup_templates(self):
        """Setup template engine for this generator."""
        template_dir = self.get_template_directory()
        if template_dir:
            self._template_engine = create_template_engine(template_dir)
        else:
            # Fallback to in-memory templates
            self._template_engine = create_template_engine()

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the name of the target language (e.g., 'php', 'python')."""
        pass

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Return the file extension for generated files (e.g., '.php', '.py')."""
        pass

    def get_template_directory(self) -> Optional[Path]:
        """
        Return the directory containing templates for this generator.

        Subclasses should override this to provide their template directory.
        Return None to use in-memory templates only.

        Returns:
            Path to template directory or None
        """
        return None

    def class_identifier(self, name: str) -> str:
        """Class name as written in source and file names; languages rename reserved words."""
        return name

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this generator."""
        if self._template_engine is None:
            self._setup_templates()
        return self._template_engine

    # Rendering

    @abstractmethod
    def render_class(self, model: ClassModel) -> str:
        """
        Render one class model to source text.

        Args:
            model: Validated class model

        Returns:
            Source code of the file holding the class
        """
        pass

    @abstractmethod
    def builtin_context(self, entry: BuiltinType) -> Dict[str, Any]:
        """Template variables for rendering a built-in type."""
        pass

    @abstractmethod
    def runtime_context(self) -> Dict[str, Any]:
        """Template variables for the runtime support classes."""
        pass

    def emit(self, model: ClassModel, stream: OutputStream) -> None:
        """
        Validate ``model`` and write its source to ``stream``.

        Raises:
            ConfigError: If the model cannot be rendered.
        """
        model.validate()
        stream.write(self.format_code(self.render_class(model)))

    def render_builtin(self, name: str) -> str:
        """
        Render the template of a built-in XSD type.

        Raises:
            FileSystemError: If no template is known for ``name``.
        """
        entry = BUILTIN_TYPES.get(name)
        if entry is None:
            raise FileSystemError(f"No built-in template for type {name}")
        context = self.builtin_context(entry)
        return self.format_code(self.render_template(f"builtins/{entry.template}.j2", context))

    def render_runtime(self) -> Dict[Tuple[Tuple[str, ...], str], str]:
        """Source of the runtime support classes keyed by (namespace, class name)."""
        context = self.runtime_context()
        rendered = {}
        for imported in (VALIDATION_EXCEPTION, OUTPUT_STREAM):
            source = self.render_template(f"runtime/{imported.name}.j2", context)
            rendered[(imported.namespace, imported.name)] = self.format_code(source)
        return rendered

    def build_constraint_guards(self, model: ClassModel) -> List[Statement]:
        """
        Guards enforcing the model's value constraints, in fixed order.

        min, max, total digits, fraction digits, length, min length,
        max length, pattern, enumeration; each raises ValidationException.
        """
        constraints = model.constraints
        value = PropertyRef("value")
        guards: List[Statement] = []

        if constraints.min_value is not None:
            guards.append(guard(
                Compare(value, "<", Literal(constraints.min_value)),
                Raise("value out of bounds"),
            ))
        if constraints.max_value is not None:
            guards.append(guard(
                Compare(value, ">", Literal(constraints.max_value)),
                Raise("value out of bounds"),
            ))
        if constraints.total_digits is not None:
            guards.append(guard(
                Compare(DigitCount(value), "!=", Literal(constraints.total_digits)),
                Raise(f"value must contain {constraints.total_digits} digits"),
            ))
        if constraints.fraction_digits is not None:
            guards.append(guard(
                Compare(FractionDigitCount(value), "!=", Literal(constraints.fraction_digits)),
                Raise(f"value can only contain {constraints.fraction_digits} decimal digits"),
            ))
        if constraints.length is not None:
            guards.append(guard(
                Compare(Length(value), "!=", Literal(constraints.length)),
                Raise(f"value must be {constraints.length} characters"),
            ))
        if constraints.min_length is not None:
            guards.append(guard(
                Compare(Length(value), "<", Literal(constraints.min_length)),
                Raise(f"value must be at least {constraints.min_length} characters"),
            ))
        if constraints.max_length is not None:
            guards.append(guard(
                Compare(Length(value), ">", Literal(constraints.max_length)),
                Raise(f"value must be at most {constraints.max_length} characters"),
            ))
        if constraints.pattern is not None:
            guards.append(guard(
                Not(Matches(value, constraints.pattern)),
                Raise(f'value does not match pattern "{constraints.pattern}"'),
            ))
        if constraints.enumeration:
            candidates = []
            for allowed in constraints.enumeration:
                name = model.constant_for(allowed)
                candidates.append(ConstantRef(name) if name else Literal(allowed))
            listed = ", ".join(str(allowed) for allowed in constraints.enumeration)
            guards.append(guard(
                Not(InSet(value, tuple(candidates))),
                Raise(f"value must be one of {listed}"),
            ))

        guards.extend(constraints.validators)
        return guards

    def format_code(self, code: str) -> str:
        """
        Apply language-specific formatting to generated code.

        Args:
            code: Raw generated code

        Returns:
            Formatted code
        """
        # Basic cleanup - remove excessive blank lines
        lines = code.split("\n")
        formatted_lines = []
        blank_count = 0

        for line in lines:
            stripped = line.rstrip()
            if not stripped:
                blank_count += 1
                if blank_count <= 2:  # Allow max 2 consecutive blank lines
                    formatted_lines.append("")
            else:
                blank_count = 0
                formatted_lines.append(stripped)

        text = "\n".join(formatted_lines).strip("\n") + "\n"
        if self.config.line_ending != "\n":
            text = text.replace("\n", self.config.line_ending)
        return text

    def validate_models(self, models: List[ClassModel]) -> List[str]:
        """
        Check models for issues worth reporting without failing.

        Returns:
            List of warning messages (empty if no issues)
        """
        warnings = []
        for model in models:
            if not model.properties and not model.is_abstract:
                warnings.append(f"Class '{model.class_name}' has no properties")
        return warnings

    # Template helper methods

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with context.

        Args:
            template_name: Template file name
            context: Template variables

        Returns:
            Rendered content
        """
        return self.template_engine.render_template(template_name, context)


class GenerationResult:
    """Container for generation results and metadata."""

    def __init__(
        self,
        files: List[Path],
        warnings: List[str] = None,
        metadata: Dict[str, Any] = None,
        models: List[ClassModel] = None,
        file_kinds: Dict[Path, str] = None,
    ):
        """
        Initialize generation result.

        Args:
            files: Paths written, in write order
            warnings: Any warnings from generation
            metadata: Additional metadata about generation
            models: Class models that were rendered
            file_kinds: Kind of each written file (class, collection, builtin, runtime)
        """
        self.files = files
        self.warnings = warnings or []
        self.metadata = metadata or {}
        self.models = models or []
        self.file_kinds = file_kinds or {}
        self.success = True


def generate_code(
    generator: CodeGenerator,
    definition: Definition,
    output_directory: Optional[Union[str, Path]] = None,
) -> GenerationResult:
    """
    Generate the class tree for a schema definition.

    Generator errors propagate unchanged; nothing is rolled back.

    Args:
        generator: Code generator instance
        definition: Loaded schemas
        output_directory: Overrides the configured output directory

    Returns:
        GenerationResult with written files, warnings, and metadata
    """
    config = generator.config
    root = ensure_directory(Path(output_directory or config.output_directory))
    writer = ClassWriter(root, generator)
    processor = SchemaProcessor(definition, config, writer)

    logger.info(f"Generating {generator.language_name} classes into {root}")
    models = processor.process()

    warnings = get_config_manager().validate_config(config, generator.language_name)
    warnings.extend(processor.warnings)
    warnings.extend(generator.validate_models(models))

    kinds: Dict[str, int] = {}
    for kind in writer.written.values():
        kinds[kind] = kinds.get(kind, 0) + 1

    metadata = {
        "language": generator.language_name,
        "language_version": config.language_version,
        "file_extension": generator.file_extension,
        "output_directory": str(root),
        "namespace_prefix": config.namespace_prefix,
        "class_count": len(models),
        "file_counts": kinds,
    }

    return GenerationResult(
        list(writer.written), warnings, metadata, models, dict(writer.written)
    )
