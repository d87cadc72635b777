"""Output nodes: literal text and interpolations."""

from __future__ import annotations

from dataclasses import dataclass

from zebar.nodes.base import Node
from zebar.nodes.expressions import Expr


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Literal text between template constructs."""

    value: str


@dataclass(frozen=True, slots=True)
class Interpolation(Node):
    """Interpolation: {{ expression }}"""

    expression: str
    expr: Expr
