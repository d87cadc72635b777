"""Template parser.

Consumes the token list from :mod:`zebar.lexer` and builds an immutable
:class:`~zebar.nodes.TemplateTree`. A single left-to-right walk with an
explicit frame stack (see :mod:`zebar.parser.blocks.core`); statement
expressions are compiled here, so a parsed tree is ready to render.

Errors fail fast: the first problem raises :class:`ParseError` carrying the
token index, and the character offset when the source is known.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from zebar._types import DiagnosticHook, Token, TokenType
from zebar.environment.exceptions import ErrorCode, ExpressionSyntaxError
from zebar.expressions import compile_expression, compile_loop_header
from zebar.nodes import Expr, Interpolation, TemplateTree, Text
from zebar.parser.blocks import (
    ControlFlowBlockParsingMixin,
    Frame,
    PatternMatchingBlockParsingMixin,
)
from zebar.parser.errors import ParseError


class Parser(
    ControlFlowBlockParsingMixin,
    PatternMatchingBlockParsingMixin,
):
    """Build a template tree from tokens.

    A Parser is single-use: create one per token list, call :meth:`parse`.

    Args:
        tokens: Tokens in document order
        source: Template text the tokens came from (for error snippets)
        name: Template name for error locations
        on_event: Optional diagnostic hook, called with ``"node"`` events

    Example:
        >>> Parser(tokenize("@if (on) {ok}")).parse().body
        (Conditional(start=0, branches=(Branch(expression='on', ...),), else_=None),)
    """

    def __init__(
        self,
        tokens: Sequence[Token],
        *,
        source: str | None = None,
        name: str | None = None,
        on_event: DiagnosticHook | None = None,
    ) -> None:
        self._tokens = tokens
        self._source = source
        self._name = name
        self._on_event = on_event
        self._pos = 0
        self._frames: list[Frame] = [Frame("root", 0)]
        self._handlers: dict[TokenType, Callable[[], None]] = {
            TokenType.TEXT: self._parse_text,
            TokenType.OPEN_INTERPOLATION: self._parse_interpolation,
            TokenType.IF_STATEMENT: self._parse_if,
            TokenType.ELSE_IF_STATEMENT: self._parse_else_if,
            TokenType.ELSE_STATEMENT: self._parse_else,
            TokenType.FOR_STATEMENT: self._parse_for,
            TokenType.SWITCH_STATEMENT: self._parse_switch,
            TokenType.SWITCH_CASE_STATEMENT: self._parse_case,
            TokenType.SWITCH_DEFAULT_STATEMENT: self._parse_default,
            TokenType.CLOSE_STATEMENT_BLOCK: self._parse_close_block,
        }
        self._closers: dict[str, Callable[[Frame], None]] = {
            "if": self._close_if,
            "else_if": self._close_else_if,
            "else": self._close_else,
            "for": self._close_for,
            "switch": self._close_switch,
            "case": self._close_case,
            "default": self._close_default,
        }

    def parse(self) -> TemplateTree:
        """Parse all tokens.

        Raises:
            ParseError: The tokens do not form a valid template.
        """
        tokens = self._tokens
        while self._pos < len(tokens):
            token = tokens[self._pos]
            frame = self._frame
            if frame.kind == "switch" and self._check_switch_body(token):
                self._pos += 1
                continue
            if frame.chain is not None and token.type not in (
                TokenType.ELSE_IF_STATEMENT,
                TokenType.ELSE_STATEMENT,
                TokenType.TEXT,
            ):
                self._seal_chain(frame)

            handler = self._handlers.get(token.type)
            if handler is None:
                raise self._error(f"Unexpected {token.type.name}", self._pos)
            handler()

        if len(self._frames) > 1:
            raise self._unclosed_error()
        root = self._frames[0]
        self._seal_chain(root)
        return TemplateTree(start=0, body=tuple(root.body), name=self._name)

    # ─────────────────────────────────────────────────────────────────────
    # Token navigation
    # ─────────────────────────────────────────────────────────────────────

    def _peek(self) -> Token | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _expect(self, token_type: TokenType, message: str) -> Token:
        token = self._peek()
        if token is None or token.type is not token_type:
            raise self._error(message, self._pos)
        self._pos += 1
        return token

    def _error(
        self,
        message: str,
        token_index: int | None = None,
        *,
        code: ErrorCode | None = None,
        suggestion: str | None = None,
    ) -> ParseError:
        index = self._pos if token_index is None else token_index
        token = self._tokens[index] if index < len(self._tokens) else None
        return ParseError(
            message,
            index,
            token,
            source=self._source,
            name=self._name,
            code=code,
            suggestion=suggestion,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Statement heads and expressions
    # ─────────────────────────────────────────────────────────────────────

    def _read_statement(self, *, expression: bool) -> tuple[int, Token, Token | None, int]:
        """Consume ``KEYWORD [EXPRESSION] {``.

        Returns ``(statement index, statement token, expression token,
        expression index)``; the expression token is None for ``@else`` and
        ``@default``.
        """
        index = self._pos
        token = self._tokens[index]
        keyword = token.type.value
        self._pos += 1

        expr_token: Token | None = None
        expr_index = self._pos
        following = self._peek()
        if following is not None and following.type is TokenType.EXPRESSION:
            if not expression:
                raise self._error(
                    f"{keyword} does not take an expression",
                    expr_index,
                    code=ErrorCode.UNEXPECTED_TOKEN,
                )
            expr_token = following
            self._pos += 1
        elif expression:
            raise self._error(
                f"{keyword} requires an expression in parentheses",
                index,
                code=ErrorCode.MISSING_EXPRESSION,
                suggestion=f"Write it as {keyword} (expression) {{ ... }}",
            )

        self._expect(TokenType.OPEN_STATEMENT_BLOCK, f"Expected '{{' after {keyword}")
        return index, token, expr_token, expr_index

    def _compile(self, token: Token, token_index: int) -> Expr:
        try:
            return compile_expression(token.value)
        except ExpressionSyntaxError as e:
            raise self._invalid_expression(e, token, token_index) from e

    def _compile_loop(self, token: Token, token_index: int) -> tuple[tuple[str, ...], Expr]:
        try:
            return compile_loop_header(token.value)
        except ExpressionSyntaxError as e:
            raise self._invalid_expression(
                e,
                token,
                token_index,
                suggestion="Loop headers look like 'item of items' or 'item, i of items'",
            ) from e

    def _invalid_expression(
        self,
        error: ExpressionSyntaxError,
        token: Token,
        token_index: int,
        suggestion: str | None = None,
    ) -> ParseError:
        return self._error(
            f"Invalid expression '{token.value}': {error.message} at column {error.position}",
            token_index,
            code=ErrorCode.INVALID_EXPRESSION,
            suggestion=suggestion,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Output
    # ─────────────────────────────────────────────────────────────────────

    def _parse_text(self) -> None:
        token = self._tokens[self._pos]
        self._pos += 1
        chain = self._frame.chain
        if chain is not None:
            if token.value.isspace():
                # Held back until we know whether an @else follows.
                gap = chain.gap
                chain.gap = (
                    token
                    if gap is None
                    else Token(TokenType.TEXT, gap.start, token.end, gap.value + token.value)
                )
                return
            self._seal_chain(self._frame)
        self._append_node(Text(start=token.start, value=token.value))

    def _parse_interpolation(self) -> None:
        opener = self._tokens[self._pos]
        self._pos += 1
        expr_index = self._pos
        expr_token = self._expect(TokenType.EXPRESSION, "Expected expression after '{{'")
        expr = self._compile(expr_token, expr_index)
        self._expect(TokenType.CLOSE_INTERPOLATION, "Expected '}}'")
        self._append_node(Interpolation(start=opener.start, expression=expr_token.value, expr=expr))

    # ─────────────────────────────────────────────────────────────────────
    # Blocks
    # ─────────────────────────────────────────────────────────────────────

    def _parse_close_block(self) -> None:
        if len(self._frames) == 1:
            raise self._error("Unmatched '}'", self._pos)
        self._pos += 1
        frame = self._pop_frame()
        self._closers[frame.kind](frame)
