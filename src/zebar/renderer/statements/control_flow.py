"""Control flow rendering: conditionals and loops."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from zebar.environment.exceptions import ErrorCode, EvalError
from zebar.template.helpers import is_truthy, type_name
from zebar.template.loop_context import LoopContext
from zebar.template.markup import Placeholder, Spans

if TYPE_CHECKING:
    from zebar.nodes import Conditional, Expr, Loop, Node
    from zebar.template.bindings import BindingsContext
    from zebar.template.markup import Part


class ControlFlowMixin:
    """Mixin for rendering @if chains and @for loops.

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

    def _render_conditional(
        self, node: Conditional, bindings: BindingsContext, out: list[Part]
    ) -> None:
        """First branch whose condition is truthy wins; else the else body."""
        for branch in node.branches:
            if is_truthy(self._evaluate(branch.expr, branch.expression, branch.start, bindings)):
                self._render_body(branch.body, bindings, out)
                return
        if node.else_ is not None:
            self._render_body(node.else_, bindings, out)

    def _render_loop(self, node: Loop, bindings: BindingsContext, out: list[Part]) -> None:
        """Render the body once per item.

        Each pass sees the loop target(s) and ``loop`` layered over the
        enclosing bindings. The index target is 0-based.
        """
        iterable = self._evaluate(node.iter, node.expression, node.start, bindings)
        items = self._loop_items(iterable, node)
        if not items:
            return

        loop = LoopContext(items)
        item_name = node.targets[0]
        index_name = node.targets[1] if len(node.targets) > 1 else None
        for item in loop:
            scope: dict[str, Any] = {"loop": loop, item_name: item}
            if index_name is not None:
                scope[index_name] = loop.index0
            self._render_body(node.body, bindings.derive(**scope), out)

    def _loop_items(self, iterable: Any, node: Loop) -> Sequence[Any]:
        if isinstance(iterable, (list, tuple)):
            return iterable
        if isinstance(iterable, Mapping):
            return list(iterable.keys())
        if iterable is None or isinstance(iterable, (Placeholder, Spans)) or not isinstance(
            iterable, Iterable
        ):
            raise EvalError(
                f"Cannot iterate over {type_name(iterable)}",
                node.expression,
                position=node.start,
                code=ErrorCode.TYPE_MISMATCH,
            )
        return list(iterable)
