"""
Statement AST rendering for Python.
"""

import json
from typing import Any, Callable, List, Set

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
from .naming import python_identifier


def python_literal(value: Any) -> str:
    """Python source for a literal value."""
    if value is None or isinstance(value, (bool, int)):
        return repr(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(python_literal(item) for item in value) + "]"
    return json.dumps(str(value), ensure_ascii=False)


class PythonRenderer(StatementRenderer):
    """
    Renders statement nodes as Python.

    ``members`` maps property names to the snake_case attribute stem used
    by the class being rendered. ``needs`` collects the stdlib modules the
    rendered code uses.
    """

    language = "python"

    def __init__(self, indent: str = "    ", members: Callable[[str], str] = None):
        super().__init__(indent)
        self.members = members or python_identifier
        self.needs: Set[str] = set()
        self._expressions = {
            Variable: lambda node: python_identifier(node.name),
            PropertyRef: lambda node: f"self._{self.members(node.name)}",
            ConstantRef: lambda node: f"self.{node.name}",
            Literal: lambda node: python_literal(node.value),
            Count: lambda node: f"len({self.expression(node.operand)})",
            Length: lambda node: f"len(str({self.expression(node.operand)}))",
            DigitCount: self._digit_count,
            FractionDigitCount: self._fraction_digit_count,
            Matches: lambda node: f"{self._fullmatch(node)} is not None",
            InSet: lambda node: self._in_set(node, "in"),
            Not: self._not,
            IsSet: lambda node: f"{self.expression(node.operand)} is not None",
            Compare: lambda node: (
                f"{self.expression(node.left)} {node.operator} {self.expression(node.right)}"
            ),
            MethodCall: self._method_call,
            BoolText: lambda node: f'("true" if {self.expression(node.operand)} else "false")',
            Concat: self._concat,
        }
        self._statements = {
            Assign: lambda node: [f"{self.expression(node.target)} = {self.expression(node.value)}"],
            AppendTo: lambda node: [
                f"{self.expression(node.target)}.append({self.expression(node.value)})"
            ],
            Guard: self._guard,
            Raise: lambda node: [f"raise ValidationException({python_literal(node.message)})"],
            DelegateCall: lambda node: [self.expression(node.call)],
            ForEach: self._for_each,
            Return: self._return,
        }

    # Expressions

    def _digit_count(self, node: DigitCount) -> str:
        return f"sum(1 for _c in str({self.expression(node.operand)}) if _c.isdigit())"

    def _fraction_digit_count(self, node: FractionDigitCount) -> str:
        operand = self.expression(node.operand)
        return f'(0 if int({operand}) == {operand} else len(str({operand}).partition(".")[2]))'

    def _fullmatch(self, node: Matches) -> str:
        self.needs.add("re")
        return f"re.fullmatch({python_literal(node.pattern)}, str({self.expression(node.operand)}))"

    def _in_set(self, node: InSet, operator: str) -> str:
        candidates = [self.expression(candidate) for candidate in node.candidates]
        if len(candidates) == 1:
            candidates[0] += ","
            return f"{self.expression(node.operand)} {operator} ({candidates[0]})"
        return self.candidate_list(candidates, f"{self.expression(node.operand)} {operator} (", ")")

    def _not(self, node: Not) -> str:
        operand = node.operand
        if isinstance(operand, IsSet):
            return f"{self.expression(operand.operand)} is None"
        if isinstance(operand, Matches):
            return f"{self._fullmatch(operand)} is None"
        if isinstance(operand, InSet):
            return self._in_set(operand, "not in")
        return f"not ({self.expression(operand)})"

    def _method_call(self, node: MethodCall) -> str:
        arguments = ", ".join(self.expression(argument) for argument in node.arguments)
        return f"{self.expression(node.target)}.{python_identifier(node.method)}({arguments})"

    def _concat(self, node: Concat) -> str:
        parts = []
        for part in node.parts:
            text = self.expression(part)
            is_text = isinstance(part, BoolText) or (
                isinstance(part, Literal) and isinstance(part.value, str)
            )
            if not is_text:
                text = f"str({text})"
            parts.append(text)
        return " + ".join(parts)

    # Statements

    def _guard(self, node: Guard) -> List[str]:
        return [f"if {self.expression(node.condition)}:", *self._suite(node.body)]

    def _for_each(self, node: ForEach) -> List[str]:
        header = f"for {python_identifier(node.item)} in {self.expression(node.iterable)}:"
        return [header, *self._suite(node.body)]

    def _return(self, node: Return) -> List[str]:
        if node.value is None:
            return ["return"]
        return [f"return {self.expression(node.value)}"]

    def _suite(self, body) -> List[str]:
        lines = self.block(body)
        return lines or [f"{self.indent}pass"]
