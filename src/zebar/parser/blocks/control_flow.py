"""Control flow block parsing: @if / @else if / @else and @for."""

from __future__ import annotations

from typing import TYPE_CHECKING

from zebar.environment.exceptions import ErrorCode
from zebar.nodes import Branch, Conditional, Loop
from zebar.parser.blocks.core import BlockStackMixin, ConditionalChain, Frame

if TYPE_CHECKING:
    from zebar._types import Token
    from zebar.nodes import Expr


class ControlFlowBlockParsingMixin(BlockStackMixin):
    """Mixin for conditional and loop statements.

    Required Host Attributes:
        - All from BlockStackMixin
        - _pos: index of the current token
        - _read_statement: method
        - _compile: method
        - _compile_loop: method
    """

    if TYPE_CHECKING:
        _pos: int

        def _read_statement(
            self, *, expression: bool
        ) -> tuple[int, Token, Token | None, int]: ...

        def _compile(self, token: Token, token_index: int) -> Expr: ...

        def _compile_loop(
            self, token: Token, token_index: int
        ) -> tuple[tuple[str, ...], Expr]: ...

    # ─────────────────────────────────────────────────────────────────────
    # Openers
    # ─────────────────────────────────────────────────────────────────────

    def _parse_if(self) -> None:
        index, token, expr_token, expr_index = self._read_statement(expression=True)
        assert expr_token is not None
        expr = self._compile(expr_token, expr_index)
        self._seal_chain(self._frame)
        self._push_frame(
            Frame("if", index, token, expression=expr_token.value, expr=expr)
        )

    def _parse_else_if(self) -> None:
        chain = self._require_chain("@else if")
        index, token, expr_token, expr_index = self._read_statement(expression=True)
        assert expr_token is not None
        expr = self._compile(expr_token, expr_index)
        chain.gap = None
        self._push_frame(
            Frame("else_if", index, token, expression=expr_token.value, expr=expr)
        )

    def _parse_else(self) -> None:
        chain = self._require_chain("@else")
        index, token, _, _ = self._read_statement(expression=False)
        chain.gap = None
        self._push_frame(Frame("else", index, token))

    def _parse_for(self) -> None:
        index, token, expr_token, expr_index = self._read_statement(expression=True)
        assert expr_token is not None
        targets, iterable = self._compile_loop(expr_token, expr_index)
        self._seal_chain(self._frame)
        self._push_frame(
            Frame(
                "for",
                index,
                token,
                expression=expr_token.value,
                expr=iterable,
                targets=targets,
            )
        )

    def _require_chain(self, keyword: str) -> ConditionalChain:
        chain = self._frame.chain
        if chain is None:
            raise self._error(
                f"{keyword} without a preceding @if",
                self._pos,
                code=ErrorCode.ORPHAN_BRANCH,
                suggestion=f"{keyword} must directly follow the closing '}}' of an @if block",
            )
        return chain

    # ─────────────────────────────────────────────────────────────────────
    # Closers (frame already popped; self._frame is the parent)
    # ─────────────────────────────────────────────────────────────────────

    def _close_if(self, frame: Frame) -> None:
        assert frame.token is not None and frame.expression is not None and frame.expr is not None
        self._frame.chain = ConditionalChain(
            start=frame.token.start,
            branches=[
                Branch(frame.expression, frame.expr, tuple(frame.body), frame.token.start)
            ],
        )

    def _close_else_if(self, frame: Frame) -> None:
        chain = self._frame.chain
        assert chain is not None and frame.token is not None
        assert frame.expression is not None and frame.expr is not None
        chain.branches.append(
            Branch(frame.expression, frame.expr, tuple(frame.body), frame.token.start)
        )

    def _close_else(self, frame: Frame) -> None:
        parent = self._frame
        chain = parent.chain
        assert chain is not None
        parent.chain = None
        self._append_node(
            Conditional(
                start=chain.start,
                branches=tuple(chain.branches),
                else_=tuple(frame.body),
            )
        )

    def _close_for(self, frame: Frame) -> None:
        assert frame.token is not None and frame.expression is not None and frame.expr is not None
        self._append_node(
            Loop(
                start=frame.token.start,
                expression=frame.expression,
                targets=frame.targets,
                iter=frame.expr,
                body=tuple(frame.body),
            )
        )
