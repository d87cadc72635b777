"""Bindings made available to a template during rendering."""

from __future__ import annotations

from collections import ChainMap
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class BindingsContext:
    """Named values a template renders against.

    The caller rebuilds a context whenever a provider updates; the engine
    never mutates one. Loop bodies render against :meth:`derive`-d copies.

    Attributes:
        variables: Provider data and other plain values (scalars, records,
            sequences)
        strings: Literal string substitutions
        opaque: Function/component references that must not be evaluated.
            They render as placeholders and are spliced back as the same
            objects (see :class:`~zebar.template.markup.RenderedMarkup`).

    Example:
        >>> ctx = BindingsContext.from_parts(
        ...     {"battery": {"charge": 87}},
        ...     functions={"toggle": toggle},
        ... )
        >>> sorted(ctx.names())
        ['battery', 'toggle']
    """

    variables: Mapping[str, Any] = field(default_factory=dict)
    strings: Mapping[str, str] = field(default_factory=dict)
    opaque: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_parts(
        cls,
        variables: Mapping[str, Any] | None = None,
        *,
        strings: Mapping[str, str] | None = None,
        functions: Mapping[str, Any] | None = None,
        components: Mapping[str, Any] | None = None,
    ) -> BindingsContext:
        """Build a context from the host's binding groups.

        Functions and components are both opaque; if a name appears in
        both, the component wins.
        """
        opaque: dict[str, Any] = {}
        opaque.update(functions or {})
        opaque.update(components or {})
        return cls(
            variables=dict(variables or {}),
            strings=dict(strings or {}),
            opaque=opaque,
        )

    @property
    def opaque_names(self) -> frozenset[str]:
        return frozenset(self.opaque)

    def names(self) -> frozenset[str]:
        """Every name a template can reference."""
        return frozenset(self.variables) | frozenset(self.strings) | frozenset(self.opaque)

    def derive(self, **variables: Any) -> BindingsContext:
        """Return a context with extra variables layered on top.

        New variables shadow existing ones of the same name, opaque names
        included.
        """
        opaque = self.opaque
        if any(name in opaque for name in variables):
            opaque = {k: v for k, v in opaque.items() if k not in variables}
        return BindingsContext(
            variables=ChainMap(variables, self.variables),  # type: ignore[arg-type]
            strings=self.strings,
            opaque=opaque,
        )
