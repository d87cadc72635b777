"""Renderer: walks a template tree against bindings.

Phase 1 of rendering. Output is a flat list of parts, strings interleaved
with typed :class:`~zebar.template.markup.Placeholder` spans; phase 2
(:meth:`RenderedMarkup.resolve`) swaps placeholders for bound objects.

Complexity:
    O(n) in the number of rendered nodes; node dispatch is an O(1) lookup
    by class name.

Thread-Safety:
    A Renderer holds configuration only. Each :meth:`Renderer.render` call
    builds its own output list, so one instance can render concurrently.

"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from zebar._types import DiagnosticHook
from zebar.environment.exceptions import EvalError
from zebar.expressions import Evaluator
from zebar.nodes import Expr, Node, TemplateTree
from zebar.renderer.statements import StatementRenderingMixin
from zebar.template.bindings import BindingsContext
from zebar.template.markup import Part, RenderedMarkup


class Renderer(StatementRenderingMixin):
    """Render parsed templates.

    Args:
        strict: Unknown identifiers raise when True, render empty when False
        on_event: Optional diagnostic hook, called with ``"render"`` once per
            render and ``"node"`` per rendered node

    Example:
        >>> markup = Renderer().render(parse("CPU {{ cpu.usage }}%"), BindingsContext({"cpu": {"usage": 12}}))
        >>> markup.text
        'CPU 12%'
    """

    def __init__(self, *, strict: bool = True, on_event: DiagnosticHook | None = None) -> None:
        self.strict = strict
        self._on_event = on_event
        self._evaluator = Evaluator(strict=strict)
        self._node_dispatch: dict[str, Callable[[Any, BindingsContext, list[Part]], None]] = {
            "Text": self._render_text,
            "Interpolation": self._render_interpolation,
            "Conditional": self._render_conditional,
            "Loop": self._render_loop,
            "Switch": self._render_switch,
        }

    def render(self, tree: TemplateTree, bindings: BindingsContext) -> RenderedMarkup:
        """Render ``tree``.

        Raises:
            EvalError: An expression failed; ``position`` points at the
                node that evaluated it.
        """
        if self._on_event is not None:
            self._on_event("render", {"name": tree.name, "nodes": len(tree.body)})
        out: list[Part] = []
        self._render_body(tree.body, bindings, out)
        return RenderedMarkup(out, bindings.opaque)

    def _render_body(self, body: Sequence[Node], bindings: BindingsContext, out: list[Part]) -> None:
        dispatch = self._node_dispatch
        on_event = self._on_event
        for node in body:
            if on_event is not None:
                on_event("node", {"node": node})
            handler = dispatch.get(type(node).__name__)
            if handler is None:
                raise TypeError(f"Cannot render node of type {type(node).__name__}")
            handler(node, bindings, out)

    def _evaluate(self, expr: Expr, expression: str, start: int, bindings: BindingsContext) -> Any:
        try:
            return self._evaluator.evaluate(expr, bindings, expression)
        except EvalError as e:
            raise e.located(start)
