"""Control flow nodes: conditional, loop and switch statements."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import NamedTuple

from zebar.nodes.base import Node
from zebar.nodes.expressions import Expr


class Branch(NamedTuple):
    """One @if / @else if branch or one @case.

    ``start`` is the offset of the branch's own statement token, so errors
    in a later branch point at that branch rather than the whole chain.
    """

    expression: str
    expr: Expr
    body: Sequence[Node]
    start: int


@dataclass(frozen=True, slots=True)
class Conditional(Node):
    """Conditional: @if (a) {...} @else if (b) {...} @else {...}

    ``branches[0]`` is the ``@if``; later entries are ``@else if``.
    ``else_`` is None when there is no ``@else`` block.
    """

    branches: Sequence[Branch]
    else_: Sequence[Node] | None = None


@dataclass(frozen=True, slots=True)
class Loop(Node):
    """Loop: @for (item of items) {...} or @for (item, i of items) {...}"""

    expression: str
    targets: Sequence[str]
    iter: Expr
    body: Sequence[Node]


@dataclass(frozen=True, slots=True)
class Switch(Node):
    """Switch: @switch (x) { @case (1) {...} @default {...} }"""

    expression: str
    subject: Expr
    cases: Sequence[Branch]
    default: Sequence[Node] | None = None
