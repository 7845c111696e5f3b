"""
Statement AST for generated method bodies.

Processors describe behaviour with these nodes and each language generator
renders them. ``Opaque`` is the escape hatch for snippets that have no node:
either one string for every language or a mapping keyed by language name.
Method and variable names are written in the neutral camelCase form; a
generator converts them to its own convention.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from .errors import ConfigError


class Expression:
    """Base class for expression nodes."""


class Statement:
    """Base class for statement nodes."""


# Expressions


@dataclass(frozen=True)
class Variable(Expression):
    name: str


@dataclass(frozen=True)
class PropertyRef(Expression):
    """A property of the current instance."""

    name: str


@dataclass(frozen=True)
class ConstantRef(Expression):
    """A constant of the current class."""

    name: str


@dataclass(frozen=True)
class Literal(Expression):
    value: Any


@dataclass(frozen=True)
class Count(Expression):
    """Number of items in a collection."""

    operand: Expression


@dataclass(frozen=True)
class Length(Expression):
    """Character length of the operand's string form."""

    operand: Expression


@dataclass(frozen=True)
class DigitCount(Expression):
    operand: Expression


@dataclass(frozen=True)
class FractionDigitCount(Expression):
    """Digits after the decimal point, 0 for integral values."""

    operand: Expression


@dataclass(frozen=True)
class Matches(Expression):
    """Whole-value regular expression match."""

    operand: Expression
    pattern: str


@dataclass(frozen=True)
class InSet(Expression):
    operand: Expression
    candidates: Tuple[Expression, ...]


@dataclass(frozen=True)
class Not(Expression):
    operand: Expression


@dataclass(frozen=True)
class IsSet(Expression):
    """Operand is not null."""

    operand: Expression


@dataclass(frozen=True)
class Compare(Expression):
    left: Expression
    operator: str  # one of < <= > >= == !=
    right: Expression


@dataclass(frozen=True)
class MethodCall(Expression):
    target: Expression
    method: str
    arguments: Tuple[Expression, ...] = ()


@dataclass(frozen=True)
class BoolText(Expression):
    """``true``/``false`` text for a boolean operand."""

    operand: Expression


@dataclass(frozen=True)
class Concat(Expression):
    """String concatenation; non-string parts are converted to text."""

    parts: Tuple[Expression, ...]


# Statements


@dataclass(frozen=True)
class Assign(Statement):
    target: Expression
    value: Expression


@dataclass(frozen=True)
class AppendTo(Statement):
    target: Expression
    value: Expression


@dataclass(frozen=True)
class Guard(Statement):
    """Run ``body`` only when ``condition`` holds."""

    condition: Expression
    body: Tuple[Statement, ...]


@dataclass(frozen=True)
class Raise(Statement):
    """Raise the generated ValidationException with a message."""

    message: str


@dataclass(frozen=True)
class DelegateCall(Statement):
    call: MethodCall


@dataclass(frozen=True)
class ForEach(Statement):
    item: str
    iterable: Expression
    body: Tuple[Statement, ...]


@dataclass(frozen=True)
class Return(Statement):
    value: Optional[Expression] = None


@dataclass(frozen=True)
class Opaque(Statement):
    code: Union[str, Dict[str, str]]

    def code_for(self, language: str) -> Optional[str]:
        if isinstance(self.code, str):
            return self.code
        return self.code.get(language)


# Small builders used by the processors


def write(*parts: Any) -> DelegateCall:
    """``stream.write(...)`` of the concatenated parts; plain values become literals."""
    nodes = tuple(p if isinstance(p, Expression) else Literal(p) for p in parts)
    if len(nodes) == 1 and isinstance(nodes[0], Literal):
        text = nodes[0]
    else:
        # a lone expression still goes through Concat so it is converted to text
        text = Concat(nodes)
    return DelegateCall(MethodCall(Variable("stream"), "write", (text,)))


def guard(condition: Expression, *body: Statement) -> Guard:
    return Guard(condition, tuple(body))


# Rendering support


class StatementRenderer:
    """
    Base for the per-language renderers.

    Subclasses fill ``_expressions`` and ``_statements`` with one handler
    per node type. Expression handlers return text, which may span lines
    when a list is wrapped; continuation lines carry their indentation
    relative to the first line. Statement handlers return lines relative
    to the current block.
    """

    language = ""
    # candidate lists at least this long are put one per line
    wrap_width = 90

    def __init__(self, indent: str = "    "):
        self.indent = indent
        self._expressions: Dict[type, Callable[[Any], str]] = {}
        self._statements: Dict[type, Callable[[Any], List[str]]] = {}

    def expression(self, node: Expression) -> str:
        handler = self._expressions.get(type(node))
        if handler is None:
            raise ConfigError(f"No {self.language} rendering for expression {type(node).__name__}")
        return handler(node)

    def render(self, statements: Iterable[Statement], depth: int = 0) -> List[str]:
        """Render statements as lines indented ``depth`` levels."""
        lines: List[str] = []
        for statement in statements:
            if isinstance(statement, Opaque):
                code = statement.code_for(self.language)
                if code is None:
                    raise ConfigError(f"Opaque statement has no {self.language} code")
                rendered = code.splitlines()
            else:
                handler = self._statements.get(type(statement))
                if handler is None:
                    raise ConfigError(
                        f"No {self.language} rendering for statement {type(statement).__name__}"
                    )
                rendered = handler(statement)
            lines.extend(self._indented(rendered, depth))
        return lines

    def block(self, statements: Iterable[Statement]) -> List[str]:
        """Body of a nested block, one level deeper."""
        return self.render(statements, 1)

    def _indented(self, lines: Iterable[str], depth: int) -> List[str]:
        prefix = self.indent * depth
        result = []
        for line in lines:
            for part in line.split("\n"):
                result.append(f"{prefix}{part}" if part else "")
        return result

    def candidate_list(self, candidates: Iterable[str], opening: str, closing: str) -> str:
        """Join candidates on one line, or one per line once the list gets long."""
        candidates = list(candidates)
        joined = ", ".join(candidates)
        if len(joined) < self.wrap_width:
            return f"{opening}{joined}{closing}"
        inner = "".join(f"\n{self.indent}{candidate}," for candidate in candidates)
        return f"{opening}{inner}\n{closing}"
