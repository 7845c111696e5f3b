"""
Generator-side error taxonomy.

Every failure the generator itself can hit derives from GeneratorError so
callers can catch the whole family at once. Failures of the *generated* code
are not represented here; those are raised by the emitted
ValidationException class.
"""


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    pass


class ConfigError(GeneratorError):
    """Invalid configuration or incomplete class model."""

    pass


class TypeNotFoundError(GeneratorError):
    """A referenced type, element or attribute is missing from the schema."""

    def __init__(self, reference: str, message: str | None = None):
        self.reference = reference
        super().__init__(message or f"Type not found: {reference}")


class FileSystemError(GeneratorError):
    """Output tree or template files could not be created or read."""

    pass
