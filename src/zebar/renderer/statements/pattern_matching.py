"""Switch rendering."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from zebar.template.helpers import strict_equals

if TYPE_CHECKING:
    from zebar.nodes import Expr, Node, Switch
    from zebar.template.bindings import BindingsContext
    from zebar.template.markup import Part


class PatternMatchingMixin:
    """Mixin for rendering @switch blocks.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks.
    """

    if TYPE_CHECKING:
        # From Renderer core
        def _evaluate(
            self, expr: Expr, expression: str, start: int, bindings: BindingsContext
        ) -> Any: ...

        def _render_body(
            self, body: Sequence[Node], bindings: BindingsContext, out: list[Part]
        ) -> None: ...

    def _render_switch(self, node: Switch, bindings: BindingsContext, out: list[Part]) -> None:
        """Subject evaluated once; cases compared with ``===`` in order.

        Case expressions after the matching one are never evaluated.
        """
        subject = self._evaluate(node.subject, node.expression, node.start, bindings)
        for case in node.cases:
            value = self._evaluate(case.expr, case.expression, case.start, bindings)
            if strict_equals(subject, value):
                self._render_body(case.body, bindings, out)
                return
        if node.default is not None:
            self._render_body(node.default, bindings, out)
