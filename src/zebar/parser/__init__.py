"""Template parser: tokens to an immutable node tree."""

from __future__ import annotations

from zebar._types import DiagnosticHook
from zebar.lexer import tokenize
from zebar.nodes import TemplateTree
from zebar.parser.core import Parser
from zebar.parser.errors import ParseError


def parse(
    source: str,
    *,
    name: str | None = None,
    on_event: DiagnosticHook | None = None,
) -> TemplateTree:
    """Tokenize and parse ``source`` in one call.

    Raises:
        LexError: Malformed token syntax
        ParseError: Valid tokens, invalid structure
    """
    tokens = tokenize(source, name=name, on_event=on_event)
    return Parser(tokens, source=source, name=name, on_event=on_event).parse()


__all__ = ["ParseError", "Parser", "parse"]
