"""Typed placeholder spans and two-phase render output.

Opaque bindings (functions, embedded components) must come out of a render
as the live objects that were bound, not as text. Evaluating an opaque name
yields a :class:`Placeholder`; string concatenation involving one yields
:class:`Spans`; the renderer's output keeps placeholders as typed parts.

Phase 1 text (``RenderedMarkup.text``) shows each placeholder as its
``{{ name }}`` marker. Phase 2 (``RenderedMarkup.parts``) swaps each
placeholder for the bound object. Because placeholders are typed, a data
string that happens to contain ``{{ name }}`` is never mistaken for one.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Placeholder:
    """Reference to an opaque binding by name."""

    name: str

    @property
    def marker(self) -> str:
        return f"{{{{ {self.name} }}}}"

    def __str__(self) -> str:
        return self.marker


Part = str | Placeholder


def merge_parts(parts: Iterable[Part]) -> tuple[Part, ...]:
    """Join adjacent strings and drop empty ones."""
    merged: list[Part] = []
    for part in parts:
        if isinstance(part, str):
            if not part:
                continue
            if merged and isinstance(merged[-1], str):
                merged[-1] = merged[-1] + part
                continue
        merged.append(part)
    return tuple(merged)


@dataclass(frozen=True, slots=True)
class Spans:
    """Text with embedded placeholders, produced by concatenation.

    Example:
        >>> Spans.concat("<button>", Placeholder("toggle"), "</button>")
        Spans(parts=('<button>', Placeholder(name='toggle'), '</button>'))
    """

    parts: tuple[Part, ...]

    @classmethod
    def concat(cls, *values: str | Placeholder | Spans) -> Spans:
        flat: list[Part] = []
        for value in values:
            if isinstance(value, Spans):
                flat.extend(value.parts)
            else:
                flat.append(value)
        return cls(merge_parts(flat))

    @property
    def text(self) -> str:
        return "".join(str(part) for part in self.parts)

    def __str__(self) -> str:
        return self.text

    def __add__(self, other: object) -> Spans:
        if isinstance(other, (str, Placeholder, Spans)):
            return Spans.concat(self, other)
        return NotImplemented

    def __radd__(self, other: object) -> Spans:
        if isinstance(other, (str, Placeholder, Spans)):
            return Spans.concat(other, self)
        return NotImplemented


class RenderedMarkup:
    """Result of rendering a template.

    Attributes:
        text: Phase 1 markup, placeholders shown as ``{{ name }}`` markers
        parts: Phase 2 parts; strings interleaved with the bound objects,
            each reference-equal to what was supplied in the bindings
        placeholders: Placeholders in document order

    Example:
        >>> markup = template.render_markup(BindingsContext(opaque={"toggle": fn}))
        >>> markup.text
        '<button>{{ toggle }}</button>'
        >>> markup.parts[1] is fn
        True
    """

    __slots__ = ("_opaque", "_raw", "_resolved")

    def __init__(self, parts: Iterable[Part], opaque: Mapping[str, Any]) -> None:
        self._raw = merge_parts(parts)
        self._opaque = opaque
        self._resolved: tuple[Any, ...] | None = None

    @property
    def text(self) -> str:
        return "".join(str(part) for part in self._raw)

    @property
    def raw_parts(self) -> tuple[Part, ...]:
        return self._raw

    @property
    def placeholders(self) -> tuple[Placeholder, ...]:
        return tuple(part for part in self._raw if isinstance(part, Placeholder))

    @property
    def is_plain(self) -> bool:
        """True when nothing needs splicing (the output is just text)."""
        return not any(isinstance(part, Placeholder) for part in self._raw)

    @property
    def parts(self) -> tuple[Any, ...]:
        if self._resolved is None:
            self._resolved = self.resolve()
        return self._resolved

    def resolve(self) -> tuple[Any, ...]:
        """Phase 2: replace every placeholder with its bound object."""
        return tuple(
            self._opaque[part.name] if isinstance(part, Placeholder) else part
            for part in self._raw
        )

    def references(self) -> Sequence[tuple[str, Any]]:
        """``(name, object)`` pairs for the spliced placeholders."""
        return [(p.name, self._opaque[p.name]) for p in self.placeholders]

    def __iter__(self) -> Iterator[Any]:
        return iter(self.parts)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"<RenderedMarkup parts={len(self._raw)} placeholders={len(self.placeholders)}>"
