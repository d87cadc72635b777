"""Pattern matching block parsing: @switch / @case / @default."""

from __future__ import annotations

from typing import TYPE_CHECKING

from zebar._types import TokenType
from zebar.environment.exceptions import ErrorCode
from zebar.nodes import Branch, Switch
from zebar.parser.blocks.core import BlockStackMixin, Frame

if TYPE_CHECKING:
    from zebar._types import Token
    from zebar.nodes import Expr


class PatternMatchingBlockParsingMixin(BlockStackMixin):
    """Mixin for switch statements.

    A ``@switch`` body holds only ``@case``/``@default`` blocks and the
    whitespace between them.

    Required Host Attributes:
        - All from BlockStackMixin
        - _pos: index of the current token
        - _read_statement: method
        - _compile: method
    """

    if TYPE_CHECKING:
        _pos: int

        def _read_statement(
            self, *, expression: bool
        ) -> tuple[int, Token, Token | None, int]: ...

        def _compile(self, token: Token, token_index: int) -> Expr: ...

    def _parse_switch(self) -> None:
        index, token, expr_token, expr_index = self._read_statement(expression=True)
        assert expr_token is not None
        subject = self._compile(expr_token, expr_index)
        self._seal_chain(self._frame)
        self._push_frame(
            Frame("switch", index, token, expression=expr_token.value, expr=subject)
        )

    def _parse_case(self) -> None:
        switch = self._require_switch("@case")
        if switch.default is not None:
            raise self._error(
                "@case after @default",
                self._pos,
                code=ErrorCode.UNEXPECTED_TOKEN,
                suggestion="Move @default to the end of the @switch body",
            )
        index, token, expr_token, expr_index = self._read_statement(expression=True)
        assert expr_token is not None
        expr = self._compile(expr_token, expr_index)
        self._push_frame(Frame("case", index, token, expression=expr_token.value, expr=expr))

    def _parse_default(self) -> None:
        switch = self._require_switch("@default")
        if switch.default is not None:
            raise self._error("Duplicate @default in @switch", self._pos)
        index, token, _, _ = self._read_statement(expression=False)
        self._push_frame(Frame("default", index, token))

    def _require_switch(self, keyword: str) -> Frame:
        frame = self._frame
        if frame.kind != "switch":
            raise self._error(
                f"{keyword} outside of a @switch block",
                self._pos,
                code=ErrorCode.ORPHAN_BRANCH,
            )
        return frame

    def _check_switch_body(self, token: Token) -> bool:
        """Vet a token appearing directly in a switch body.

        Returns True when the token should be skipped (whitespace).
        """
        if token.type is TokenType.TEXT and token.value.isspace():
            return True
        if token.type in (
            TokenType.SWITCH_CASE_STATEMENT,
            TokenType.SWITCH_DEFAULT_STATEMENT,
            TokenType.CLOSE_STATEMENT_BLOCK,
        ):
            return False
        raise self._error(
            f"Unexpected {token.type.name} in @switch body; expected @case or @default",
            self._pos,
        )

    def _close_switch(self, frame: Frame) -> None:
        assert frame.token is not None and frame.expression is not None and frame.expr is not None
        self._append_node(
            Switch(
                start=frame.token.start,
                expression=frame.expression,
                subject=frame.expr,
                cases=tuple(frame.cases),
                default=frame.default,
            )
        )

    def _close_case(self, frame: Frame) -> None:
        assert frame.token is not None
        assert frame.expression is not None and frame.expr is not None
        self._frame.cases.append(
            Branch(frame.expression, frame.expr, tuple(frame.body), frame.token.start)
        )

    def _close_default(self, frame: Frame) -> None:
        self._frame.default = tuple(frame.body)
