"""Basic output rendering: literal text and interpolations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from zebar.environment.exceptions import EvalError
from zebar.template.helpers import stringify_spans
from zebar.template.markup import Part, Spans

if TYPE_CHECKING:
    from zebar.nodes import Expr, Interpolation, Text
    from zebar.template.bindings import BindingsContext


class BasicStatementMixin:
    """Mixin for rendering output nodes.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.
    """

    if TYPE_CHECKING:
        # From Renderer core
        def _evaluate(
            self, expr: Expr, expression: str, start: int, bindings: BindingsContext
        ) -> Any: ...

    def _render_text(self, node: Text, bindings: BindingsContext, out: list[Part]) -> None:
        out.append(node.value)

    def _render_interpolation(
        self, node: Interpolation, bindings: BindingsContext, out: list[Part]
    ) -> None:
        """Render {{ expression }}.

        Placeholders stay typed so phase 2 can splice the bound object in,
        including those inside a list; everything else is stringified.
        """
        value = self._evaluate(node.expr, node.expression, node.start, bindings)
        try:
            value = stringify_spans(value)
        except EvalError as e:
            raise e.with_expression(node.expression).located(node.start)
        if isinstance(value, Spans):
            out.extend(value.parts)
        else:
            out.append(value)
