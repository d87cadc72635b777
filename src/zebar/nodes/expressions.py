"""Expression nodes.

Produced by :mod:`zebar.expressions.parser` from the text of an
``EXPRESSION`` token and walked by the evaluator.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

from zebar.nodes.base import Node


@dataclass(frozen=True, slots=True)
class Expr(Node):
    """Base class for expressions. ``start`` is relative to the expression text."""


@dataclass(frozen=True, slots=True)
class Const(Expr):
    """Constant value: string, number, boolean, null."""

    value: str | int | float | bool | None


@dataclass(frozen=True, slots=True)
class Name(Expr):
    """Binding reference: {{ cpu }}"""

    name: str


@dataclass(frozen=True, slots=True)
class List(Expr):
    """Array literal: [a, b, c]"""

    items: Sequence[Expr]


@dataclass(frozen=True, slots=True)
class Dict(Expr):
    """Object literal: {label: a, 'other': b}"""

    keys: Sequence[Expr]
    values: Sequence[Expr]


@dataclass(frozen=True, slots=True)
class Getattr(Expr):
    """Member access: obj.attr, or obj?.attr when ``optional``"""

    obj: Expr
    attr: str
    optional: bool = False


@dataclass(frozen=True, slots=True)
class Getitem(Expr):
    """Subscript access: obj[key], or obj?.[key] when ``optional``"""

    obj: Expr
    key: Expr
    optional: bool = False


@dataclass(frozen=True, slots=True)
class FuncCall(Expr):
    """Call of a bound callable: func(a, b)"""

    func: Expr
    args: Sequence[Expr] = ()


@dataclass(frozen=True, slots=True)
class BinOp(Expr):
    """Arithmetic: left op right, op in + - * / %"""

    op: str
    left: Expr
    right: Expr


@dataclass(frozen=True, slots=True)
class UnaryOp(Expr):
    """Unary operation: !x, -x, +x"""

    op: str
    operand: Expr


@dataclass(frozen=True, slots=True)
class Compare(Expr):
    """Equality or relational comparison: left op right"""

    op: str
    left: Expr
    right: Expr


@dataclass(frozen=True, slots=True)
class BoolOp(Expr):
    """Logical operation: a && b, a || b (operand values, short-circuit)"""

    op: Literal["&&", "||"]
    values: Sequence[Expr]


@dataclass(frozen=True, slots=True)
class CondExpr(Expr):
    """Conditional expression: test ? if_true : if_false"""

    test: Expr
    if_true: Expr
    if_false: Expr


@dataclass(frozen=True, slots=True)
class NullCoalesce(Expr):
    """Null coalescing: a ?? b"""

    left: Expr
    right: Expr

