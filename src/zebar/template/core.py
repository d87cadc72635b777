"""Template: a parsed tree ready for rendering.

Architecture:
    ```
    Template
    ├── _tree: TemplateTree       # Immutable, expressions precompiled
    ├── _renderer: Renderer       # Strictness + diagnostics
    └── _source, _name            # For error snippets
    ```

Thread-Safety:
- Templates are immutable after construction
- ``render()`` creates only local state (the parts list)
- Multiple threads can render one template concurrently

"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from zebar._types import DiagnosticHook
from zebar.environment.exceptions import EvalError
from zebar.nodes import TemplateTree
from zebar.parser import parse
from zebar.renderer import Renderer
from zebar.template.bindings import BindingsContext
from zebar.template.markup import RenderedMarkup


class Template:
    """A compiled template.

    Created by :meth:`Environment.from_string` (cached) or directly with
    :meth:`Template.from_string`.

    Example:
        >>> t = Template.from_string("{{ battery.charge }}%")
        >>> t.render(battery={"charge": 87})
        '87%'
    """

    __slots__ = ("_name", "_renderer", "_source", "_tree")

    def __init__(
        self,
        tree: TemplateTree,
        *,
        source: str,
        name: str | None = None,
        strict: bool = True,
        on_event: DiagnosticHook | None = None,
    ) -> None:
        self._tree = tree
        self._source = source
        self._name = name
        self._renderer = Renderer(strict=strict, on_event=on_event)

    @classmethod
    def from_string(
        cls,
        source: str,
        *,
        name: str | None = None,
        strict: bool = True,
        on_event: DiagnosticHook | None = None,
    ) -> Template:
        """Lex and parse ``source``.

        Raises:
            LexError: Malformed token syntax
            ParseError: Invalid template structure or expression syntax
        """
        tree = parse(source, name=name, on_event=on_event)
        return cls(tree, source=source, name=name, strict=strict, on_event=on_event)

    @property
    def name(self) -> str | None:
        return self._name

    @property
    def source(self) -> str:
        return self._source

    @property
    def tree(self) -> TemplateTree:
        return self._tree

    @property
    def strict(self) -> bool:
        return self._renderer.strict

    def render(
        self,
        bindings: BindingsContext | Mapping[str, Any] | None = None,
        /,
        **variables: Any,
    ) -> str:
        """Render to markup text.

        Opaque bindings appear as their ``{{ name }}`` markers; use
        :meth:`render_markup` to get the bound objects back.

        Args:
            bindings: A BindingsContext, or a plain mapping of variables
            **variables: Extra variables, layered over ``bindings``

        Example:
            >>> t.render({"cpu": {"usage": 12}})
            'CPU 12%'
        """
        return self.render_markup(bindings, **variables).text

    def render_markup(
        self,
        bindings: BindingsContext | Mapping[str, Any] | None = None,
        /,
        **variables: Any,
    ) -> RenderedMarkup:
        """Render and keep placeholders typed.

        ``.parts`` of the result holds each opaque binding as the object
        that was bound (reference-equal).

        Raises:
            EvalError: An expression failed; the error carries this
                template's source for :meth:`EvalError.format_compact`.
        """
        context = _as_context(bindings, variables)
        try:
            return self._renderer.render(self._tree, context)
        except EvalError as e:
            raise e.with_template(self._source, self._name)

    def __repr__(self) -> str:
        return f"<Template {self._name or '(inline)'}>"


def _as_context(
    bindings: BindingsContext | Mapping[str, Any] | None,
    variables: Mapping[str, Any],
) -> BindingsContext:
    if bindings is None:
        return BindingsContext(variables=dict(variables))
    if not isinstance(bindings, BindingsContext):
        return BindingsContext(variables={**bindings, **variables})
    if variables:
        return bindings.derive(**variables)
    return bindings
