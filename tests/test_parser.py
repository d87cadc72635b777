"""Tests for the template parser: node trees and structural errors."""

from __future__ import annotations

import pytest

from zebar._types import Token, TokenType
from zebar.environment.exceptions import ErrorCode, ExpressionSyntaxError, LexError
from zebar.lexer import tokenize
from zebar.nodes import (
    BinOp,
    Branch,
    Conditional,
    Const,
    Getattr,
    Interpolation,
    Loop,
    Name,
    Switch,
    TemplateTree,
    Text,
)
from zebar.parser import ParseError, Parser, parse


def tok(token_type: TokenType, value: str, start: int = 0) -> Token:
    return Token(token_type, start, start + len(value), value)


class TestOutputNodes:
    """Text and interpolation."""

    def test_plain_text(self) -> None:
        assert parse("Hello") == TemplateTree(start=0, body=(Text(start=0, value="Hello"),))

    def test_empty_template(self) -> None:
        assert parse("").body == ()

    def test_adjacent_text_tokens_merge(self) -> None:
        assert parse("user@example.com").body == (Text(start=0, value="user@example.com"),)
        assert parse("a}b").body == (Text(start=0, value="a}b"),)

    def test_interpolation_compiles_expression(self) -> None:
        (node,) = parse("{{ cpu.usage }}").body
        assert isinstance(node, Interpolation)
        assert node.start == 0
        assert node.expression == "cpu.usage"
        assert node.expr == Getattr(start=0, obj=Name(start=0, name="cpu"), attr="usage")

    def test_text_around_interpolation(self) -> None:
        body = parse("CPU {{ a + 1 }}%").body
        assert body[0] == Text(start=0, value="CPU ")
        assert isinstance(body[1], Interpolation)
        assert isinstance(body[1].expr, BinOp)
        assert body[2] == Text(start=15, value="%")

    def test_name_is_recorded(self) -> None:
        assert parse("x", name="bar.template").name == "bar.template"


class TestConditionals:
    """@if / @else if / @else chains."""

    def test_if_only(self) -> None:
        assert parse("@if (a) {x}").body == (
            Conditional(
                start=0,
                branches=(Branch("a", Name(start=0, name="a"), (Text(start=9, value="x"),), 0),),
            ),
        )

    def test_if_else_drops_whitespace_between_branches(self) -> None:
        (node,) = parse("@if (hot) {red} @else {white}").body
        assert isinstance(node, Conditional)
        assert len(node.branches) == 1
        assert node.else_ == (Text(start=23, value="white"),)

    def test_full_chain(self) -> None:
        (node,) = parse("@if (a) {1}\n@else if (b) {2}\n@else if (c) {3}\n@else {4}").body
        assert isinstance(node, Conditional)
        assert [branch.expression for branch in node.branches] == ["a", "b", "c"]
        assert [branch.start for branch in node.branches] == [0, 12, 29]
        assert node.else_ is not None

    def test_text_after_if_is_kept(self) -> None:
        body = parse("@if (a) {x} tail").body
        assert isinstance(body[0], Conditional)
        assert body[1] == Text(start=11, value=" tail")

    def test_trailing_whitespace_after_if_is_kept(self) -> None:
        body = parse("@if (a) {x} ").body
        assert isinstance(body[0], Conditional)
        assert body[1] == Text(start=11, value=" ")

    def test_whitespace_before_interpolation_is_kept(self) -> None:
        body = parse("@if (a) {x}\n{{ b }}").body
        assert [type(node) for node in body] == [Conditional, Text, Interpolation]
        assert body[1].value == "\n"

    def test_adjacent_ifs_are_separate(self) -> None:
        body = parse("@if (a) {x}@if (b) {y}").body
        assert [type(node) for node in body] == [Conditional, Conditional]

    def test_nested_if_inside_for_is_closed_with_parent(self) -> None:
        (loop,) = parse("@for (w of ws) {@if (w.on) {x}}").body
        assert isinstance(loop, Loop)
        assert len(loop.body) == 1
        assert isinstance(loop.body[0], Conditional)

    def test_else_binds_to_innermost_if(self) -> None:
        (outer,) = parse("@if (a) {@if (b) {1} @else {2}}").body
        assert outer.else_ is None
        inner = outer.branches[0].body[0]
        assert isinstance(inner, Conditional)
        assert inner.else_ == (Text(start=28, value="2"),)


class TestLoops:
    """@for headers and bodies."""

    def test_item_only(self) -> None:
        (node,) = parse("@for (item of items) { {{ item }} }").body
        assert isinstance(node, Loop)
        assert node.targets == ("item",)
        assert node.iter == Name(start=8, name="items")
        assert node.expression == "item of items"
        assert [type(child) for child in node.body] == [Text, Interpolation, Text]

    def test_item_and_index(self) -> None:
        (node,) = parse("@for (item, i of items) {x}").body
        assert node.targets == ("item", "i")

    def test_in_is_accepted(self) -> None:
        (node,) = parse("@for (x in [1, 2]) {x}").body
        assert node.targets == ("x",)

    def test_missing_of_is_invalid(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("@for (item items) {x}")
        error = exc_info.value
        assert error.code is ErrorCode.INVALID_EXPRESSION
        assert "Expected 'of'" in error.message
        assert error.suggestion is not None


class TestSwitch:
    """@switch / @case / @default."""

    def test_cases_and_default(self) -> None:
        (node,) = parse("@switch (x) {\n  @case (1) {a}\n  @case (2) {b}\n  @default {c}\n}").body
        assert isinstance(node, Switch)
        assert node.expression == "x"
        assert [case.expr for case in node.cases] == [
            Const(start=0, value=1),
            Const(start=0, value=2),
        ]
        assert [case.start for case in node.cases] == [16, 32]
        assert node.default == (Text(start=58, value="c"),)

    def test_no_default(self) -> None:
        (node,) = parse("@switch (x) { @case (1) {a} }").body
        assert node.default is None

    def test_empty_switch(self) -> None:
        (node,) = parse("@switch (x) { }").body
        assert node.cases == ()

    def test_text_in_switch_body_is_rejected(self) -> None:
        with pytest.raises(ParseError, match="Unexpected TEXT in @switch body"):
            parse("@switch (x) { oops @case (1) {a} }")

    def test_case_after_default(self) -> None:
        with pytest.raises(ParseError, match="@case after @default"):
            parse("@switch (x) { @default {a} @case (1) {b} }")

    def test_duplicate_default(self) -> None:
        with pytest.raises(ParseError, match="Duplicate @default"):
            parse("@switch (x) { @default {a} @default {b} }")

    def test_case_outside_switch(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("@case (1) {a}")
        assert exc_info.value.code is ErrorCode.ORPHAN_BRANCH


class TestOrphanBranches:
    """@else / @else if without a pending @if."""

    def test_else_at_start(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("@else {x}")
        error = exc_info.value
        assert error.code is ErrorCode.ORPHAN_BRANCH
        assert error.message == "@else without a preceding @if"
        assert error.token_index == 0
        assert error.position == 0

    def test_else_if_after_text(self) -> None:
        with pytest.raises(ParseError, match="@else if without a preceding @if"):
            parse("@if (a) {x} text @else if (b) {y}")

    def test_else_after_for(self) -> None:
        with pytest.raises(ParseError, match="without a preceding @if"):
            parse("@for (x of xs) {x} @else {y}")

    def test_else_after_completed_chain(self) -> None:
        with pytest.raises(ParseError):
            parse("@if (a) {x} @else {y} @else {z}")


class TestExpressionErrors:
    """Expression syntax is checked at parse time."""

    def test_incomplete_binary(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("@if (a +) {x}")
        error = exc_info.value
        assert error.code is ErrorCode.INVALID_EXPRESSION
        assert "Invalid expression 'a +'" in error.message
        assert error.position == 5
        assert isinstance(error.__cause__, ExpressionSyntaxError)

    def test_arrow_function_lexes_but_is_rejected(self) -> None:
        source = '{{ items.find(x => x.name === "it\'s here") }}'
        assert [token.type for token in tokenize(source)] == [
            TokenType.OPEN_INTERPOLATION,
            TokenType.EXPRESSION,
            TokenType.CLOSE_INTERPOLATION,
        ]
        with pytest.raises(ParseError) as exc_info:
            parse(source)
        error = exc_info.value
        assert error.code is ErrorCode.INVALID_EXPRESSION
        assert "Unexpected character '='" in error.message

    def test_two_expressions_in_interpolation(self) -> None:
        with pytest.raises(ParseError, match="Unexpected token"):
            parse("{{ a b }}")

    def test_empty_interpolation(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("{{ }}")
        assert exc_info.value.message == "Expected expression after '{{'"
        assert exc_info.value.token_index == 1

    def test_lex_errors_pass_through(self) -> None:
        with pytest.raises(LexError):
            parse("{{ a")


class TestTokenStreams:
    """Structural errors only reachable from hand-built token lists."""

    def test_unclosed_block(self) -> None:
        tokens = [
            tok(TokenType.IF_STATEMENT, "@if"),
            tok(TokenType.EXPRESSION, "a", 5),
            tok(TokenType.OPEN_STATEMENT_BLOCK, "{", 8),
            tok(TokenType.TEXT, "x", 9),
        ]
        with pytest.raises(ParseError) as exc_info:
            Parser(tokens).parse()
        error = exc_info.value
        assert error.code is ErrorCode.UNCLOSED_CONSTRUCT
        assert error.token_index == 0
        assert "Unclosed @if block" in error.message

    def test_unmatched_close(self) -> None:
        with pytest.raises(ParseError, match="Unmatched '}'"):
            Parser([tok(TokenType.CLOSE_STATEMENT_BLOCK, "}")]).parse()

    @pytest.mark.parametrize(
        "token_type, value",
        [
            (TokenType.CLOSE_INTERPOLATION, "}}"),
            (TokenType.EXPRESSION, "a"),
            (TokenType.OPEN_STATEMENT_BLOCK, "{"),
        ],
    )
    def test_stray_token(self, token_type: TokenType, value: str) -> None:
        with pytest.raises(ParseError, match=f"Unexpected {token_type.name}"):
            Parser([tok(token_type, value)]).parse()

    def test_missing_statement_expression(self) -> None:
        tokens = [
            tok(TokenType.IF_STATEMENT, "@if"),
            tok(TokenType.OPEN_STATEMENT_BLOCK, "{", 4),
            tok(TokenType.CLOSE_STATEMENT_BLOCK, "}", 5),
        ]
        with pytest.raises(ParseError) as exc_info:
            Parser(tokens).parse()
        assert exc_info.value.code is ErrorCode.MISSING_EXPRESSION

    def test_else_with_expression(self) -> None:
        tokens = [
            tok(TokenType.IF_STATEMENT, "@if"),
            tok(TokenType.EXPRESSION, "a", 5),
            tok(TokenType.OPEN_STATEMENT_BLOCK, "{", 8),
            tok(TokenType.CLOSE_STATEMENT_BLOCK, "}", 9),
            tok(TokenType.ELSE_STATEMENT, "@else", 10),
            tok(TokenType.EXPRESSION, "b", 17),
            tok(TokenType.OPEN_STATEMENT_BLOCK, "{", 20),
            tok(TokenType.CLOSE_STATEMENT_BLOCK, "}", 21),
        ]
        with pytest.raises(ParseError, match="@else does not take an expression"):
            Parser(tokens).parse()

    def test_missing_open_block(self) -> None:
        tokens = [
            tok(TokenType.IF_STATEMENT, "@if"),
            tok(TokenType.EXPRESSION, "a", 5),
            tok(TokenType.TEXT, "x", 7),
        ]
        with pytest.raises(ParseError, match="Expected '{' after @if"):
            Parser(tokens).parse()

    def test_missing_close_interpolation(self) -> None:
        tokens = [
            tok(TokenType.OPEN_INTERPOLATION, "{{"),
            tok(TokenType.EXPRESSION, "a", 3),
        ]
        with pytest.raises(ParseError, match="Expected '}}'") as exc_info:
            Parser(tokens).parse()
        assert exc_info.value.token_index == 2
        assert exc_info.value.token is None


class TestDiagnostics:
    """Error formatting and event hooks."""

    def test_error_message_has_location_and_suggestion(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("text\n@else {x}", name="bar.template")
        text = str(exc_info.value)
        assert "token 1" in text
        assert "bar.template:2:0" in text
        assert "Suggestion:" in text

    def test_format_compact_shows_snippet(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse("@if (a) {x} @else {y} @else {z}")
        compact = exc_info.value.format_compact()
        assert "Z-PAR-005" in compact
        assert "@if (a) {x} @else {y} @else {z}" in compact

    def test_node_events(self) -> None:
        events: list[tuple[str, dict]] = []
        parse("a{{ b }}", on_event=lambda event, details: events.append((event, dict(details))))
        nodes = [details["node"] for event, details in events if event == "node"]
        assert [type(node) for node in nodes] == [Text, Interpolation]
