"""Template lexer: a state machine over an explicit state stack.

Turns template source into an ordered list of :class:`~zebar._types.Token`.
Only the top of the stack is active; statement blocks containing further
statements and interpolations nest by pushing states, never by recursion,
so the full stack is available for diagnostics at any point.

States:
    Default          Literal text, statement keywords, ``{{``
    StatementArgs    Between a keyword and its ``{``: ``(expr)`` and whitespace
    StatementBlock   Inside ``{ ... }`` of a statement; delegates to Default
    Interpolation    Inside ``{{ ... }}``
    Expression       Expression text, until the close delimiter of the parent

Example:
    >>> [t.type.name for t in tokenize("@if (on) {ok}")]
    ['IF_STATEMENT', 'EXPRESSION', 'OPEN_STATEMENT_BLOCK', 'TEXT', 'CLOSE_STATEMENT_BLOCK']

"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from zebar._types import DiagnosticHook, Token, TokenType
from zebar.environment.exceptions import ErrorCode, LexError
from zebar.scanner import StringScanner

# ---------------------------------------------------------------------------
# Lexer states
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class DefaultState:
    opened_at: int = 0


@dataclass(slots=True)
class StatementArgsState:
    opened_at: int


@dataclass(slots=True)
class StatementBlockState:
    opened_at: int


@dataclass(slots=True)
class InterpolationState:
    opened_at: int
    has_expression: bool = False


@dataclass(slots=True)
class ExpressionState:
    """Accumulates one ``EXPRESSION`` token across several scans.

    Attributes:
        opened_at: Offset where the expression state was entered
        close_pattern: Lookahead for the parent's close delimiter
        ignore_symbol: Quote character of the string literal being
            scanned, or None outside strings. The close pattern is never
            tried while this is set.
        string_start: Offset of the opening quote of the current string
        partial: Expression token accumulated so far
        depth: Nesting of ``(``/``[``/``{`` inside the expression
    """

    opened_at: int
    close_pattern: str
    ignore_symbol: str | None = None
    string_start: int | None = None
    partial: Token | None = None
    depth: int = 0


LexerState = (
    DefaultState
    | StatementArgsState
    | StatementBlockState
    | InterpolationState
    | ExpressionState
)

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# Priority order matters: "@else if" must be tried before "@else".
_STATEMENT_PATTERNS: tuple[tuple[re.Pattern[str], TokenType], ...] = (
    (re.compile(r"@if(?!\w)"), TokenType.IF_STATEMENT),
    (re.compile(r"@else\s+if(?!\w)"), TokenType.ELSE_IF_STATEMENT),
    (re.compile(r"@else(?!\w)"), TokenType.ELSE_STATEMENT),
    (re.compile(r"@for(?!\w)"), TokenType.FOR_STATEMENT),
    (re.compile(r"@switch(?!\w)"), TokenType.SWITCH_STATEMENT),
    (re.compile(r"@case(?!\w)"), TokenType.SWITCH_CASE_STATEMENT),
    (re.compile(r"@default(?!\w)"), TokenType.SWITCH_DEFAULT_STATEMENT),
)

_OPEN_INTERPOLATION = re.compile(r"\{\{")
_TEXT_DELIMITERS = re.compile(r"\{\{|@|\}")
_WHITESPACE = re.compile(r"\s+")

_ARGS_SKIP = re.compile(r"\s+|\)")
_ARGS_OPEN = re.compile(r"\(")
_BLOCK_OPEN = re.compile(r"\{")
_BLOCK_CLOSE = re.compile(r"\}")

_INTERPOLATION_CLOSE = re.compile(r"\}\}")

_ARGS_CLOSE_PATTERN = r"\)"
_INTERPOLATION_CLOSE_PATTERN = r"\}\}"

_QUOTE = re.compile(r"['\"`]")
_BRACKET_OPEN = re.compile(r"[(\[{]")
_BRACKET_CLOSE = re.compile(r"[)\]}]")
_EXPRESSION_RUN = re.compile(r"[^\s'\"`()\[\]{}]+")

_STRING_BODY: dict[str, re.Pattern[str]] = {
    quote: re.compile(rf"(?:[^{quote}\\]|\\.)+", re.DOTALL) for quote in ("'", '"', "`")
}


class Lexer:
    """Tokenize one template source.

    A Lexer is single-use: create one per source, call :meth:`tokenize`.

    Args:
        source: Template text
        name: Template name used in error locations
        on_event: Optional diagnostic hook, called with ``"token"``,
            ``"push_state"`` and ``"pop_state"`` events
    """

    __slots__ = ("_handlers", "_name", "_on_event", "_scanner", "_source", "_stack", "_tokens")

    def __init__(
        self,
        source: str,
        *,
        name: str | None = None,
        on_event: DiagnosticHook | None = None,
    ) -> None:
        self._source = source
        self._name = name
        self._on_event = on_event
        self._scanner = StringScanner(source)
        self._stack: list[LexerState] = [DefaultState()]
        self._tokens: list[Token] = []
        self._handlers: dict[type, Callable[..., None]] = {
            DefaultState: self._lex_default,
            StatementArgsState: self._lex_statement_args,
            StatementBlockState: self._lex_statement_block,
            InterpolationState: self._lex_interpolation,
            ExpressionState: self._lex_expression,
        }

    @property
    def state_stack(self) -> tuple[LexerState, ...]:
        """Snapshot of the state stack, bottom first."""
        return tuple(self._stack)

    def tokenize(self) -> list[Token]:
        """Consume the whole source and return its tokens.

        Raises:
            LexError: On malformed input, including input that ends while
                a statement, interpolation, expression or string is open.
        """
        scanner = self._scanner
        while not scanner.is_empty:
            state = self._stack[-1]
            self._handlers[type(state)](state)

        if len(self._stack) > 1:
            raise self._unclosed_error()
        return self._tokens

    # ─────────────────────────────────────────────────────────────────────
    # Stack and token helpers
    # ─────────────────────────────────────────────────────────────────────

    def _push_state(self, state: LexerState) -> None:
        self._stack.append(state)
        if self._on_event is not None:
            self._on_event("push_state", {"state": state, "depth": len(self._stack)})

    def _pop_state(self) -> LexerState:
        if len(self._stack) <= 1:
            raise RuntimeError("Lexer state stack underflow")
        state = self._stack.pop()
        if self._on_event is not None:
            self._on_event("pop_state", {"state": state, "depth": len(self._stack)})
        return state

    def _push_token(self, token_type: TokenType) -> None:
        match = self._scanner.latest_match
        assert match is not None
        self._append(Token(token_type, match.start, match.end, match.value))

    def _append(self, token: Token) -> None:
        if not token.value:
            raise self._error("Cannot push an empty token", token.start, ErrorCode.EMPTY_TOKEN)
        self._tokens.append(token)
        if self._on_event is not None:
            self._on_event("token", {"token": token, "depth": len(self._stack)})

    def _error(self, message: str, position: int, code: ErrorCode) -> LexError:
        return LexError(message, position, source=self._source, name=self._name, code=code)

    # ─────────────────────────────────────────────────────────────────────
    # State handlers
    # ─────────────────────────────────────────────────────────────────────

    def _lex_default(self, state: LexerState) -> None:
        scanner = self._scanner

        for pattern, token_type in _STATEMENT_PATTERNS:
            if scanner.scan(pattern):
                self._push_token(token_type)
                self._push_state(StatementArgsState(opened_at=scanner.latest_match.start))
                return

        if scanner.scan(_OPEN_INTERPOLATION):
            self._push_token(TokenType.OPEN_INTERPOLATION)
            self._push_state(InterpolationState(opened_at=scanner.latest_match.start))
        elif scanner.scan_until(_TEXT_DELIMITERS):
            # Text runs until a close block, a statement or an interpolation.
            self._push_token(TokenType.TEXT)
        else:
            raise self._error("No valid tokens found", scanner.cursor, ErrorCode.NO_VALID_TOKEN)

    def _lex_statement_args(self, state: StatementArgsState) -> None:
        scanner = self._scanner

        if scanner.scan(_ARGS_SKIP):
            # Whitespace, and the ')' left behind by the argument expression.
            return
        if scanner.scan(_ARGS_OPEN):
            self._push_state(
                ExpressionState(
                    opened_at=scanner.latest_match.end,
                    close_pattern=_ARGS_CLOSE_PATTERN,
                )
            )
        elif scanner.scan(_BLOCK_OPEN):
            self._push_token(TokenType.OPEN_STATEMENT_BLOCK)
            self._pop_state()
            self._push_state(StatementBlockState(opened_at=scanner.latest_match.start))
        else:
            raise self._error("Missing closing {", scanner.cursor, ErrorCode.UNCLOSED_STATEMENT_ARGS)

    def _lex_statement_block(self, state: StatementBlockState) -> None:
        if self._scanner.scan(_BLOCK_CLOSE):
            self._push_token(TokenType.CLOSE_STATEMENT_BLOCK)
            self._pop_state()
        else:
            self._lex_default(state)

    def _lex_interpolation(self, state: InterpolationState) -> None:
        scanner = self._scanner

        if scanner.scan(_WHITESPACE):
            return
        if scanner.scan(_INTERPOLATION_CLOSE):
            self._push_token(TokenType.CLOSE_INTERPOLATION)
            self._pop_state()
        elif not state.has_expression:
            state.has_expression = True
            self._push_state(
                ExpressionState(
                    opened_at=scanner.cursor,
                    close_pattern=_INTERPOLATION_CLOSE_PATTERN,
                )
            )
        else:
            raise self._error("Missing closing }}", scanner.cursor, ErrorCode.UNCLOSED_INTERPOLATION)

    def _lex_expression(self, state: ExpressionState) -> None:
        scanner = self._scanner

        if state.ignore_symbol is not None:
            # Inside a string literal: whitespace is kept, the close
            # delimiter is not recognized, only the same quote ends it.
            if scanner.scan(_STRING_BODY[state.ignore_symbol]):
                self._accumulate(state)
            elif scanner.scan(re.escape(state.ignore_symbol)):
                self._accumulate(state)
                state.ignore_symbol = None
                state.string_start = None
            else:
                raise self._error(
                    "Unterminated string literal",
                    state.string_start if state.string_start is not None else scanner.cursor,
                    ErrorCode.UNCLOSED_STRING,
                )
            return

        if scanner.scan(_WHITESPACE):
            # Leading whitespace is dropped; inner whitespace separates words.
            if state.partial is not None:
                self._accumulate(state)
            return

        if state.depth == 0 and scanner.check(state.close_pattern):
            self._finish_expression(state)
        elif scanner.scan(_QUOTE):
            self._accumulate(state)
            state.ignore_symbol = scanner.latest_match.value
            state.string_start = scanner.latest_match.start
        elif scanner.scan(_BRACKET_OPEN):
            self._accumulate(state)
            state.depth += 1
        elif state.depth > 0 and scanner.scan(_BRACKET_CLOSE):
            self._accumulate(state)
            state.depth -= 1
        elif scanner.scan(_EXPRESSION_RUN):
            self._accumulate(state)
        else:
            raise self._error("Missing close symbol", scanner.cursor, ErrorCode.UNCLOSED_EXPRESSION)

    def _accumulate(self, state: ExpressionState) -> None:
        match = self._scanner.latest_match
        assert match is not None
        partial = state.partial
        if partial is None:
            state.partial = Token(TokenType.EXPRESSION, match.start, match.end, match.value)
        else:
            state.partial = Token(
                TokenType.EXPRESSION,
                partial.start,
                match.end,
                partial.value + match.value,
            )

    def _finish_expression(self, state: ExpressionState) -> None:
        if state.partial is None:
            raise self._error("Empty expression", state.opened_at, ErrorCode.EMPTY_TOKEN)
        partial = state.partial
        value = partial.value.rstrip()
        self._append(Token(TokenType.EXPRESSION, partial.start, partial.start + len(value), value))
        self._pop_state()

    # ─────────────────────────────────────────────────────────────────────
    # End of input
    # ─────────────────────────────────────────────────────────────────────

    def _unclosed_error(self) -> LexError:
        """Describe the innermost construct left open at end of input."""
        state = self._stack[-1]
        if isinstance(state, ExpressionState):
            if state.ignore_symbol is not None:
                return self._error(
                    "Unterminated string literal",
                    state.string_start if state.string_start is not None else state.opened_at,
                    ErrorCode.UNCLOSED_STRING,
                )
            # Report the delimiter that owns the expression.
            state = self._stack[-2]

        if isinstance(state, InterpolationState):
            return self._error("Missing closing }}", state.opened_at, ErrorCode.UNCLOSED_INTERPOLATION)
        if isinstance(state, StatementArgsState):
            return self._error("Missing closing {", state.opened_at, ErrorCode.UNCLOSED_STATEMENT_ARGS)
        if isinstance(state, StatementBlockState):
            return self._error("Missing closing }", state.opened_at, ErrorCode.UNCLOSED_BLOCK)
        return self._error("Missing close symbol", state.opened_at, ErrorCode.UNCLOSED_EXPRESSION)


def tokenize(
    source: str,
    *,
    name: str | None = None,
    on_event: DiagnosticHook | None = None,
) -> list[Token]:
    """Tokenize ``source`` in one call.

    Example:
        >>> tokenize("Hi {{ user }}")
        [Token(TEXT, 'Hi ', 0:3), Token(OPEN_INTERPOLATION, '{{', 3:5), ...]
    """
    return Lexer(source, name=name, on_event=on_event).tokenize()
