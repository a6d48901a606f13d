"""
Restricted arithmetic evaluation for the ``calculate`` tool.

Expressions are parsed with :mod:`ast` and evaluated by walking a small set
of allowed node types. Nothing is ever executed as code.

Grammar: numbers, ``+ - * / % ^ **``, unary ``+ -``, parentheses, the
functions in ``ALLOWED_FUNCTIONS`` and the constants ``pi`` and ``e``.
``^`` is exponentiation, not XOR.
"""
from __future__ import annotations

import ast
import math
import operator as op
import re
from collections.abc import Callable
from typing import Any, Mapping, Union

from api_tutor.types import ToolResult

from ._coerce import string_arg

__all__ = ["CalculationError", "evaluate", "calculate"]

_Number = Union[int, float]

MAX_EXPRESSION_LENGTH = 200
MAX_EXPONENT = 1000
MAX_RESULT_BITS = 4096

_ALLOWED_BIN: dict[type[ast.operator], Callable[[Any, Any], Any]] = {
    ast.Add: op.add,
    ast.Sub: op.sub,
    ast.Mult: op.mul,
    ast.Div: op.truediv,
    ast.Mod: op.mod,
    ast.Pow: op.pow,
}
_ALLOWED_UNARY: dict[type[ast.unaryop], Callable[[Any], Any]] = {
    ast.UAdd: op.pos,
    ast.USub: op.neg,
}

ALLOWED_FUNCTIONS: dict[str, Callable[..., _Number]] = {
    "sqrt": math.sqrt,
    "abs": abs,
    "pow": math.pow,
    "round": round,
    "floor": math.floor,
    "ceil": math.ceil,
    "min": min,
    "max": max,
    "log": math.log,
    "log10": math.log10,
    "exp": math.exp,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
}
ALLOWED_CONSTANTS: dict[str, float] = {"pi": math.pi, "e": math.e}

# Models often borrow JavaScript's spelling, e.g. "Math.sqrt(16)"
_MATH_PREFIX = re.compile(r"\bMath\.")


class CalculationError(ValueError):
    """The expression is not valid under the restricted grammar."""


def _check_power(base: _Number, exponent: _Number) -> None:
    if abs(exponent) > MAX_EXPONENT:
        raise CalculationError(f"Exponent too large: {exponent}")
    if base == 0 and exponent < 0:
        raise ZeroDivisionError("zero to a negative power")
    if abs(base) > 1 and abs(exponent) * math.log2(abs(base)) > MAX_RESULT_BITS:
        raise CalculationError("Result too large")


def _eval_node(node: ast.AST) -> _Number:
    if isinstance(node, ast.Expression):
        return _eval_node(node.body)

    if isinstance(node, ast.Constant):
        val = node.value
        if isinstance(val, (int, float)) and not isinstance(val, bool):
            return val
        raise CalculationError(f"Only numbers are allowed, got {val!r}")

    if isinstance(node, ast.UnaryOp) and type(node.op) in _ALLOWED_UNARY:
        return _ALLOWED_UNARY[type(node.op)](_eval_node(node.operand))

    if isinstance(node, ast.BinOp) and type(node.op) in _ALLOWED_BIN:
        left = _eval_node(node.left)
        right = _eval_node(node.right)
        if isinstance(node.op, (ast.Div, ast.Mod)) and right == 0:
            raise ZeroDivisionError("division by zero")
        if isinstance(node.op, ast.Pow):
            _check_power(left, right)
        return _ALLOWED_BIN[type(node.op)](left, right)

    if isinstance(node, ast.Name):
        if node.id in ALLOWED_CONSTANTS:
            return ALLOWED_CONSTANTS[node.id]
        raise CalculationError(f"Disallowed name '{node.id}'")

    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name) or node.keywords:
            raise CalculationError("Only plain function calls are allowed")
        func = ALLOWED_FUNCTIONS.get(node.func.id)
        if func is None:
            raise CalculationError(f"Disallowed function '{node.func.id}'")
        args = [_eval_node(arg) for arg in node.args]
        if node.func.id == "pow" and len(args) == 2:
            _check_power(*args)
        return func(*args)

    raise CalculationError(f"Unsupported syntax: {type(node).__name__}")


def evaluate(expression: str) -> _Number:
    """
    Evaluate ``expression`` under the restricted grammar.

    Examples:
        '2 + 2'         -> 4
        '2 ^ 10'        -> 1024
        'Math.sqrt(16)' -> 4

    Raises:
        CalculationError: syntax or disallowed construct
        ZeroDivisionError: division or modulo by zero
    """
    expr = expression.strip()
    if not expr:
        raise CalculationError("Empty expression")
    if len(expr) > MAX_EXPRESSION_LENGTH:
        raise CalculationError(
            f"Expression longer than {MAX_EXPRESSION_LENGTH} characters"
        )

    source = _MATH_PREFIX.sub("", expr).replace("^", "**")
    try:
        tree = ast.parse(source, mode="eval")
    except SyntaxError:
        raise CalculationError(f"Syntax error in expression: {expr}") from None

    try:
        result = _eval_node(tree)
        if isinstance(result, complex):
            raise CalculationError(f"Result is not a real number: {expr}")
        finite = isinstance(result, int) or math.isfinite(result)
    except CalculationError:
        raise
    except (TypeError, ValueError, OverflowError) as exc:
        # math domain errors land here too, e.g. sqrt(-1)
        raise CalculationError(f"Cannot evaluate expression: {exc}") from exc

    if not finite:
        raise CalculationError(f"Result is not a finite number: {expr}")
    if isinstance(result, float) and result.is_integer():
        return int(result)
    return result


def calculate(args: Mapping[str, Any]) -> ToolResult:
    expression = string_arg(args, "expression")
    try:
        result = evaluate(expression)
    except ZeroDivisionError:
        return {"error": f"Division by zero in expression: {expression}"}
    except CalculationError as exc:
        return {"error": str(exc)}
    return {"expression": expression, "result": result, "resultType": "number"}
