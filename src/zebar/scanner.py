"""Regex-driven cursor over a template string.

The scanner knows nothing about template syntax. Callers try patterns in
priority order; a failed attempt never moves the cursor, so the
try-in-order style is always safe:

    >>> scanner = StringScanner("@if (x) {")
    >>> scanner.scan(r"@for")
    False
    >>> scanner.scan(r"@if")
    True
    >>> scanner.latest_match
    Match(start=0, end=3, value='@if')
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

Pattern = str | re.Pattern[str]


@dataclass(frozen=True, slots=True)
class Match:
    """Span and text of the most recent successful scan."""

    start: int
    end: int
    value: str


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.DOTALL)


def _as_regex(pattern: Pattern) -> re.Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    return _compile(pattern)


class StringScanner:
    """Cursor over an immutable string with anchored regex primitives.

    Attributes:
        source: The scanned string
        cursor: Current offset; only ever increases
        latest_match: Result of the last successful ``scan``/``scan_until``
    """

    __slots__ = ("_source", "cursor", "latest_match")

    def __init__(self, source: str) -> None:
        self._source = source
        self.cursor = 0
        self.latest_match: Match | None = None

    @property
    def source(self) -> str:
        return self._source

    @property
    def is_empty(self) -> bool:
        """True once the cursor has reached the end of the input."""
        return self.cursor >= len(self._source)

    @property
    def rest(self) -> str:
        """Unconsumed input (mostly useful for debugging)."""
        return self._source[self.cursor :]

    def scan(self, pattern: Pattern) -> bool:
        """Match ``pattern`` anchored at the cursor and advance past it.

        Returns:
            True on success. On failure the cursor and ``latest_match``
            are left untouched.
        """
        match = _as_regex(pattern).match(self._source, self.cursor)
        if match is None:
            return False
        self._advance(match.start(), match.end())
        return True

    def scan_until(self, pattern: Pattern) -> bool:
        """Consume text up to (not through) the next occurrence of ``pattern``.

        End of input also terminates the run. At least one character is
        always consumed on success, so repeated calls make progress.
        """
        if self.is_empty:
            return False
        regex = _as_regex(pattern)
        match = regex.search(self._source, self.cursor + 1)
        end = match.start() if match is not None else len(self._source)
        self._advance(self.cursor, end)
        return True

    def check(self, pattern: Pattern) -> bool:
        """Report whether ``pattern`` matches at the cursor without consuming."""
        return _as_regex(pattern).match(self._source, self.cursor) is not None

    def _advance(self, start: int, end: int) -> None:
        self.latest_match = Match(start, end, self._source[start:end])
        self.cursor = end

    def __repr__(self) -> str:
        return f"<StringScanner {self.cursor}/{len(self._source)}>"
