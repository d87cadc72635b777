"""Tokenizer for expression text.

Expression text is the body of an ``EXPRESSION`` template token, e.g. the
``cpu.usage > 80`` in ``@if (cpu.usage > 80) {...}``. The syntax is a small
JavaScript-flavoured subset: names, numbers, three kinds of quoted string,
and the operators listed in ``_OPERATORS``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from zebar.environment.exceptions import ExpressionSyntaxError


class ExprTokenType(Enum):
    NAME = "name"
    NUMBER = "number"
    STRING = "string"
    OPERATOR = "operator"
    EOF = "eof"


@dataclass(frozen=True, slots=True)
class ExprToken:
    """Expression token. ``value`` is decoded for strings and numbers."""

    type: ExprTokenType
    value: str | int | float
    start: int


# Longest operators first so "===" wins over "==" and "=".
_OPERATORS = (
    "===", "!==", "==", "!=", "<=", ">=", "&&", "||", "??",
    "<", ">", "+", "-", "*", "/", "%", "!", "?", ":", ".", ",",
    "(", ")", "[", "]", "{", "}",
)

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<number>(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<name>[A-Za-z_$][\w$]*)
  | (?P<string>'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|`(?:[^`\\]|\\.)*`)
  | (?P<optional>\?\.(?!\d))
  | (?P<operator>"""
    + "|".join(re.escape(op) for op in _OPERATORS)
    + r""")
    """,
    re.VERBOSE | re.DOTALL,
)

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

_ESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)


def _decode_escape(match: re.Match[str]) -> str:
    seq = match.group(1)
    if seq.startswith("u") and len(seq) == 5:
        return chr(int(seq[1:], 16))
    # Unknown escapes stand for the character itself (\' -> ', \\ -> \).
    return _ESCAPES.get(seq, seq)


def decode_string(literal: str) -> str:
    """Strip the quotes from a string literal and resolve backslash escapes."""
    return _ESCAPE_RE.sub(_decode_escape, literal[1:-1])


def _number(text: str) -> int | float:
    if any(c in text for c in ".eE"):
        return float(text)
    return int(text)


def tokenize_expression(text: str) -> list[ExprToken]:
    """Split expression text into tokens, ending with an ``EOF`` token.

    Raises:
        ExpressionSyntaxError: On a character that starts no token,
            including an unterminated string literal.
    """
    tokens: list[ExprToken] = []
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            if text[pos] in "'\"`":
                raise ExpressionSyntaxError("Unterminated string literal", pos, text)
            raise ExpressionSyntaxError(f"Unexpected character {text[pos]!r}", pos, text)
        kind = match.lastgroup
        value = match.group()
        if kind == "number":
            tokens.append(ExprToken(ExprTokenType.NUMBER, _number(value), pos))
        elif kind == "name":
            tokens.append(ExprToken(ExprTokenType.NAME, value, pos))
        elif kind == "string":
            tokens.append(ExprToken(ExprTokenType.STRING, decode_string(value), pos))
        elif kind in ("operator", "optional"):
            tokens.append(ExprToken(ExprTokenType.OPERATOR, value, pos))
        pos = match.end()
    tokens.append(ExprToken(ExprTokenType.EOF, "", len(text)))
    return tokens
