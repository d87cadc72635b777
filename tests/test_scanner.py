"""Tests for the StringScanner cursor primitives."""

from __future__ import annotations

import re

from zebar.scanner import Match, StringScanner


class TestScan:
    """Anchored scanning."""

    def test_scan_matches_at_cursor_and_advances(self) -> None:
        scanner = StringScanner("@if (x)")
        assert scanner.scan(r"@if")
        assert scanner.cursor == 3
        assert scanner.latest_match == Match(0, 3, "@if")

    def test_scan_is_anchored(self) -> None:
        """A match later in the input does not count."""
        scanner = StringScanner("text @if")
        assert not scanner.scan(r"@if")
        assert scanner.cursor == 0
        assert scanner.latest_match is None

    def test_failed_scan_keeps_previous_match(self) -> None:
        scanner = StringScanner("ab")
        assert scanner.scan("a")
        assert not scanner.scan("x")
        assert scanner.latest_match == Match(0, 1, "a")
        assert scanner.cursor == 1

    def test_accepts_compiled_patterns(self) -> None:
        scanner = StringScanner("{{ name }}")
        assert scanner.scan(re.compile(r"\{\{"))
        assert scanner.rest == " name }}"

    def test_is_empty(self) -> None:
        scanner = StringScanner("x")
        assert not scanner.is_empty
        scanner.scan("x")
        assert scanner.is_empty

    def test_empty_source_is_empty(self) -> None:
        assert StringScanner("").is_empty


class TestScanUntil:
    """Scanning up to a delimiter."""

    def test_stops_before_delimiter(self) -> None:
        scanner = StringScanner("Hello {{ name }}")
        assert scanner.scan_until(r"\{\{")
        assert scanner.latest_match == Match(0, 6, "Hello ")
        assert scanner.cursor == 6

    def test_end_of_input_terminates(self) -> None:
        scanner = StringScanner("no delimiters here")
        assert scanner.scan_until(r"@")
        assert scanner.latest_match.value == "no delimiters here"
        assert scanner.is_empty

    def test_consumes_at_least_one_character(self) -> None:
        """A delimiter at the cursor itself is skipped so the scan makes progress."""
        scanner = StringScanner("@@x")
        assert scanner.scan_until(r"@")
        assert scanner.latest_match.value == "@"
        assert scanner.cursor == 1

    def test_fails_on_empty_input(self) -> None:
        scanner = StringScanner("")
        assert not scanner.scan_until(r"@")
        assert scanner.latest_match is None


class TestCheck:
    """Lookahead without consuming."""

    def test_check_does_not_advance(self) -> None:
        scanner = StringScanner("}} rest")
        assert scanner.check(r"\}\}")
        assert scanner.cursor == 0
        assert scanner.latest_match is None

    def test_check_is_anchored(self) -> None:
        assert not StringScanner("a }}").check(r"\}\}")

    def test_patterns_match_across_newlines(self) -> None:
        scanner = StringScanner("a\nb")
        assert scanner.scan(r"a.b")
