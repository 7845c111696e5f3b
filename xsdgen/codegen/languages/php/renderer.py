"""
Statement AST rendering for PHP.
"""

from typing import Any, List

from ...core.statements import (
    AppendTo,
    Assign,
    BoolText,
    Compare,
    Concat,
    ConstantRef,
    Count,
    DelegateCall,
    DigitCount,
    ForEach,
    FractionDigitCount,
    Guard,
    InSet,
    IsSet,
    Length,
    Literal,
    Matches,
    MethodCall,
    Not,
    PropertyRef,
    Raise,
    Return,
    StatementRenderer,
    Variable,
)
from .naming import php_variable

_OPERATORS = {"==": "===", "!=": "!=="}


def php_literal(value: Any) -> str:
    """PHP source for a Python literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        text = repr(value)
        return text if any(c in text for c in ".eEn") else f"{text}.0"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(php_literal(item) for item in value) + "]"
    escaped = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def php_regex(pattern: str) -> str:
    """Anchored, delimited regular expression as a PHP string literal."""
    return php_literal("/^(?:" + pattern.replace("/", "\\/") + ")$/u")


def _as_text(operand: str) -> str:
    return f"(string) {operand}"


class PhpRenderer(StatementRenderer):
    """Renders statement nodes as PHP."""

    language = "php"

    def __init__(self, indent: str = "    "):
        super().__init__(indent)
        self._expressions = {
            Variable: lambda node: f"${php_variable(node.name)}",
            PropertyRef: lambda node: f"$this->{node.name}",
            ConstantRef: lambda node: f"self::{node.name}",
            Literal: lambda node: php_literal(node.value),
            Count: lambda node: f"count({self.expression(node.operand)})",
            Length: lambda node: f"strlen({_as_text(self.expression(node.operand))})",
            DigitCount: self._digit_count,
            FractionDigitCount: self._fraction_digit_count,
            Matches: self._matches,
            InSet: self._in_set,
            Not: self._not,
            IsSet: lambda node: f"null !== {self.expression(node.operand)}",
            Compare: self._compare,
            MethodCall: self._method_call,
            BoolText: lambda node: f"var_export({self.expression(node.operand)}, true)",
            Concat: self._concat,
        }
        self._statements = {
            Assign: lambda node: [f"{self.expression(node.target)} = {self.expression(node.value)};"],
            AppendTo: lambda node: [f"{self.expression(node.target)}[] = {self.expression(node.value)};"],
            Guard: self._guard,
            Raise: lambda node: [f"throw new ValidationException({php_literal(node.message)});"],
            DelegateCall: lambda node: [f"{self.expression(node.call)};"],
            ForEach: self._for_each,
            Return: self._return,
        }

    # Expressions

    def _digit_count(self, node: DigitCount) -> str:
        return f"preg_match_all('/[0-9]/', {_as_text(self.expression(node.operand))})"

    def _fraction_digit_count(self, node: FractionDigitCount) -> str:
        operand = self.expression(node.operand)
        text = _as_text(operand)
        return f"(((int) {operand} != {operand}) ? (strlen({text}) - strpos({text}, '.')) - 1 : 0)"

    def _matches(self, node: Matches) -> str:
        return f"preg_match({php_regex(node.pattern)}, {_as_text(self.expression(node.operand))})"

    def _in_set(self, node: InSet) -> str:
        candidates = [self.expression(candidate) for candidate in node.candidates]
        return self.candidate_list(candidates, f"in_array({self.expression(node.operand)}, [", "], true)")

    def _not(self, node: Not) -> str:
        operand = node.operand
        if isinstance(operand, IsSet):
            return f"null === {self.expression(operand.operand)}"
        text = self.expression(operand)
        if isinstance(operand, (Matches, InSet, MethodCall)):
            return f"!{text}"
        return f"!({text})"

    def _compare(self, node: Compare) -> str:
        operator = _OPERATORS.get(node.operator, node.operator)
        return f"{self.expression(node.left)} {operator} {self.expression(node.right)}"

    def _method_call(self, node: MethodCall) -> str:
        arguments = ", ".join(self.expression(argument) for argument in node.arguments)
        return f"{self.expression(node.target)}->{node.method}({arguments})"

    def _concat(self, node: Concat) -> str:
        parts = []
        for part in node.parts:
            text = self.expression(part)
            if len(node.parts) == 1 and not isinstance(part, (Literal, BoolText)):
                text = _as_text(text)
            parts.append(text)
        return " . ".join(parts)

    # Statements

    def _guard(self, node: Guard) -> List[str]:
        return [f"if ({self.expression(node.condition)}) {{", *self.block(node.body), "}"]

    def _for_each(self, node: ForEach) -> List[str]:
        header = f"foreach ({self.expression(node.iterable)} as ${php_variable(node.item)}) {{"
        return [header, *self.block(node.body), "}"]

    def _return(self, node: Return) -> List[str]:
        if node.value is None:
            return ["return;"]
        return [f"return {self.expression(node.value)};"]
