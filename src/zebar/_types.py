"""Token types shared by the lexer and parser.

Tokens carry character offsets into the original template so every later
stage can point back at the offending substring.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class TokenType(Enum):
    """Kinds of token produced by the template lexer."""

    TEXT = "text"

    IF_STATEMENT = "@if"
    ELSE_IF_STATEMENT = "@else if"
    ELSE_STATEMENT = "@else"
    FOR_STATEMENT = "@for"
    SWITCH_STATEMENT = "@switch"
    SWITCH_CASE_STATEMENT = "@case"
    SWITCH_DEFAULT_STATEMENT = "@default"

    OPEN_STATEMENT_BLOCK = "{"
    CLOSE_STATEMENT_BLOCK = "}"
    OPEN_INTERPOLATION = "{{"
    CLOSE_INTERPOLATION = "}}"

    EXPRESSION = "expression"


STATEMENT_TOKENS: frozenset[TokenType] = frozenset(
    {
        TokenType.IF_STATEMENT,
        TokenType.ELSE_IF_STATEMENT,
        TokenType.ELSE_STATEMENT,
        TokenType.FOR_STATEMENT,
        TokenType.SWITCH_STATEMENT,
        TokenType.SWITCH_CASE_STATEMENT,
        TokenType.SWITCH_DEFAULT_STATEMENT,
    }
)


@dataclass(frozen=True, slots=True)
class Token:
    """A lexed token.

    Attributes:
        type: Token kind
        start: Offset of the first character in the template
        end: Offset one past the last character
        value: The token text (never empty)
    """

    type: TokenType
    start: int
    end: int
    value: str

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.start}:{self.end})"


# Diagnostic hooks receive an event name and a mapping of event details.
# Injected explicitly so lexing, parsing and rendering stay pure.
DiagnosticHook = Callable[[str, Mapping[str, Any]], None]
