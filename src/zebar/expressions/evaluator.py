"""Expression evaluator.

Walks a compiled expression tree against a :class:`BindingsContext`.
Dispatch is by node class name through a table built once per evaluator,
so evaluation of each node is an O(1) lookup rather than an isinstance
chain.

Thread-Safety:
An Evaluator holds only configuration. All per-evaluation state lives on
the call stack, so one instance can serve concurrent renders.

"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from zebar.environment.exceptions import ErrorCode, EvalError, TemplateError
from zebar.nodes.expressions import (
    BinOp,
    BoolOp,
    Compare,
    CondExpr,
    Const,
    Dict,
    Expr,
    FuncCall,
    Getattr,
    Getitem,
    List,
    Name,
    NullCoalesce,
    UnaryOp,
)
from zebar.template.bindings import BindingsContext
from zebar.template.helpers import (
    has_placeholder,
    is_number,
    is_truthy,
    lookup,
    safe_getattr,
    safe_getitem,
    strict_equals,
    stringify,
    stringify_spans,
    type_name,
)
from zebar.template.markup import Placeholder, Spans

# Returned by an optional link (``?.``) whose object is null; the rest of
# the member chain is skipped and the chain evaluates to None.
_SHORT_CIRCUIT = object()

_POSTFIX_NODES = (Getattr, Getitem, FuncCall)


class Evaluator:
    """Evaluate expression trees.

    Args:
        strict: Unknown identifiers raise :class:`UndefinedError` when True,
            evaluate to None when False

    Example:
        >>> Evaluator().evaluate(compile_expression("a + 1"), BindingsContext({"a": 2}))
        3
    """

    __slots__ = ("_dispatch", "strict")

    def __init__(self, *, strict: bool = True) -> None:
        self.strict = strict
        self._dispatch: dict[str, Callable[[Any, BindingsContext], Any]] = {
            "Const": self._eval_const,
            "Name": self._eval_name,
            "List": self._eval_list,
            "Dict": self._eval_dict,
            "Getattr": self._eval_postfix,
            "Getitem": self._eval_postfix,
            "FuncCall": self._eval_postfix,
            "BinOp": self._eval_binop,
            "UnaryOp": self._eval_unaryop,
            "Compare": self._eval_compare,
            "BoolOp": self._eval_boolop,
            "CondExpr": self._eval_condexpr,
            "NullCoalesce": self._eval_null_coalesce,
        }

    def evaluate(self, node: Expr, bindings: BindingsContext, expression: str | None = None) -> Any:
        """Evaluate ``node``.

        Args:
            node: Compiled expression
            bindings: Names visible to the expression
            expression: Source text, attached to any EvalError raised

        Raises:
            EvalError: Undefined name (strict mode), type mismatch, or a
                failing call.
        """
        try:
            return self._eval(node, bindings)
        except EvalError as e:
            if expression is not None:
                e.with_expression(expression)
            raise

    def _eval(self, node: Expr, bindings: BindingsContext) -> Any:
        handler = self._dispatch.get(type(node).__name__)
        if handler is None:
            raise EvalError(f"Cannot evaluate {type(node).__name__} node")
        return handler(node, bindings)

    # ─────────────────────────────────────────────────────────────────────
    # Atoms
    # ─────────────────────────────────────────────────────────────────────

    def _eval_const(self, node: Const, bindings: BindingsContext) -> Any:
        return node.value

    def _eval_name(self, node: Name, bindings: BindingsContext) -> Any:
        return lookup(bindings, node.name, strict=self.strict)

    def _eval_list(self, node: List, bindings: BindingsContext) -> list[Any]:
        return [self._eval(item, bindings) for item in node.items]

    def _eval_dict(self, node: Dict, bindings: BindingsContext) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key_node, value_node in zip(node.keys, node.values, strict=True):
            key = self._eval(key_node, bindings)
            result[key if isinstance(key, str) else stringify(key)] = self._eval(
                value_node, bindings
            )
        return result

    # ─────────────────────────────────────────────────────────────────────
    # Member chains: a.b, a?.b, a[b], a?.[b], f(x)
    # ─────────────────────────────────────────────────────────────────────

    def _eval_postfix(self, node: Getattr | Getitem | FuncCall, bindings: BindingsContext) -> Any:
        value = self._eval_chain(node, bindings)
        return None if value is _SHORT_CIRCUIT else value

    def _eval_chain(self, node: Expr, bindings: BindingsContext) -> Any:
        if not isinstance(node, _POSTFIX_NODES):
            return self._eval(node, bindings)

        if isinstance(node, FuncCall):
            func = self._eval_chain(node.func, bindings)
            if func is _SHORT_CIRCUIT:
                return func
            args = [self._eval(arg, bindings) for arg in node.args]
            return self._call(func, args, node)

        obj = self._eval_chain(node.obj, bindings)
        if obj is _SHORT_CIRCUIT or (obj is None and node.optional):
            return _SHORT_CIRCUIT
        if isinstance(node, Getattr):
            return safe_getattr(obj, node.attr)
        return safe_getitem(obj, self._eval(node.key, bindings))

    def _call(self, func: Any, args: list[Any], node: FuncCall) -> Any:
        if isinstance(func, Placeholder):
            raise EvalError(
                f"'{func.name}' is an opaque binding and cannot be called",
                code=ErrorCode.TYPE_MISMATCH,
            )
        if not callable(func):
            raise EvalError(
                f"{_describe(node.func)} is not a function ({type_name(func)})",
                code=ErrorCode.TYPE_MISMATCH,
            )
        try:
            return func(*args)
        except TemplateError:
            raise
        except Exception as e:
            raise EvalError(
                f"Call to {_describe(node.func)} failed: {type(e).__name__}: {e}",
            ) from e

    # ─────────────────────────────────────────────────────────────────────
    # Operators
    # ─────────────────────────────────────────────────────────────────────

    def _eval_binop(self, node: BinOp, bindings: BindingsContext) -> Any:
        left = self._eval(node.left, bindings)
        right = self._eval(node.right, bindings)
        op = node.op

        if op == "+":
            if has_placeholder(left) or has_placeholder(right):
                return Spans.concat(stringify_spans(left), stringify_spans(right))
            if isinstance(left, str) or isinstance(right, str):
                return stringify(left) + stringify(right)

        if not (is_number(left) and is_number(right)):
            raise EvalError(
                f"Unsupported operand types for '{op}': {type_name(left)} and {type_name(right)}",
                values={"left": left, "right": right},
                code=ErrorCode.TYPE_MISMATCH,
            )

        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if right == 0:
            raise EvalError(
                "Division by zero" if op == "/" else "Modulo by zero",
                values={"left": left, "right": right},
            )
        if op == "/":
            return left / right
        if op == "%":
            # Sign follows the dividend: -7 % 3 == -1
            remainder = abs(left) % abs(right)
            return -remainder if left < 0 else remainder
        raise EvalError(f"Unknown operator '{op}'")

    def _eval_unaryop(self, node: UnaryOp, bindings: BindingsContext) -> Any:
        operand = self._eval(node.operand, bindings)
        if node.op == "!":
            return not is_truthy(operand)
        if not is_number(operand):
            raise EvalError(
                f"Unary '{node.op}' needs a number, got {type_name(operand)}",
                values={"operand": operand},
                code=ErrorCode.TYPE_MISMATCH,
            )
        return -operand if node.op == "-" else +operand

    def _eval_compare(self, node: Compare, bindings: BindingsContext) -> bool:
        left = self._eval(node.left, bindings)
        right = self._eval(node.right, bindings)
        op = node.op

        if op == "===":
            return strict_equals(left, right)
        if op == "!==":
            return not strict_equals(left, right)
        if op == "==":
            return bool(left == right)
        if op == "!=":
            return bool(left != right)

        comparable = (is_number(left) and is_number(right)) or (
            isinstance(left, str) and isinstance(right, str)
        )
        if not comparable:
            raise EvalError(
                f"Cannot compare {type_name(left)} and {type_name(right)} with '{op}'",
                values={"left": left, "right": right},
                code=ErrorCode.TYPE_MISMATCH,
            )
        if op == "<":
            return left < right
        if op == "<=":
            return left <= right
        if op == ">":
            return left > right
        return left >= right

    def _eval_boolop(self, node: BoolOp, bindings: BindingsContext) -> Any:
        # Short-circuit; the result is an operand value, not a bool.
        value: Any = None
        for operand in node.values:
            value = self._eval(operand, bindings)
            if node.op == "&&" and not is_truthy(value):
                return value
            if node.op == "||" and is_truthy(value):
                return value
        return value

    def _eval_condexpr(self, node: CondExpr, bindings: BindingsContext) -> Any:
        if is_truthy(self._eval(node.test, bindings)):
            return self._eval(node.if_true, bindings)
        return self._eval(node.if_false, bindings)

    def _eval_null_coalesce(self, node: NullCoalesce, bindings: BindingsContext) -> Any:
        value = self._eval(node.left, bindings)
        if value is None:
            return self._eval(node.right, bindings)
        return value


def _describe(node: Expr) -> str:
    """Short source-like name of a callee for error messages."""
    if isinstance(node, Name):
        return f"'{node.name}'"
    if isinstance(node, Getattr):
        inner = _describe(node.obj).strip("'")
        return f"'{inner}.{node.attr}'"
    return "expression"
