"""Open-block bookkeeping for the template parser.

The parser walks the token list once. Every ``{`` that opens a statement
body pushes a :class:`Frame`; the matching ``}`` pops it and hands the
finished body to the statement that owns it. Nesting therefore never uses
the Python call stack, and on an error the full chain of open blocks is
known.

A closed ``@if`` or ``@else if`` branch does not finish its conditional:
it stays pending on the enclosing frame (:class:`ConditionalChain`) until
a token arrives that is not an ``@else if``/``@else``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from zebar._types import DiagnosticHook, Token, TokenType
from zebar.environment.exceptions import ErrorCode
from zebar.nodes import Branch, Conditional, Expr, Node, Text
from zebar.parser.errors import ParseError

# Keyword shown in messages for each frame kind
FRAME_KEYWORDS: dict[str, str] = {
    "if": "@if",
    "else_if": "@else if",
    "else": "@else",
    "for": "@for",
    "switch": "@switch",
    "case": "@case",
    "default": "@default",
}


@dataclass(slots=True)
class ConditionalChain:
    """``@if``/``@else if`` branches waiting for a possible continuation.

    Attributes:
        start: Offset of the ``@if`` token
        branches: Closed branches so far
        gap: Whitespace-only text seen after the last branch. Dropped if an
            ``@else``/``@else if`` follows, emitted otherwise.
    """

    start: int
    branches: list[Branch] = field(default_factory=list)
    gap: Token | None = None


@dataclass(slots=True)
class Frame:
    """A statement body being collected.

    Attributes:
        kind: ``"root"`` or a key of :data:`FRAME_KEYWORDS`
        token_index: Index of the statement token that opened the frame
        token: That statement token (None for the root)
        body: Nodes collected so far
        expression: Statement expression source, if any
        expr: Compiled statement expression
        targets: Loop variable names (``@for`` only)
        cases: Closed ``@case`` branches (``@switch`` only)
        default: ``@default`` body once closed (``@switch`` only)
        chain: Pending conditional inside this body
    """

    kind: str
    token_index: int
    token: Token | None = None
    body: list[Node] = field(default_factory=list)
    expression: str | None = None
    expr: Expr | None = None
    targets: tuple[str, ...] = ()
    cases: list[Branch] = field(default_factory=list)
    default: Sequence[Node] | None = None
    chain: ConditionalChain | None = None

    @property
    def keyword(self) -> str:
        return FRAME_KEYWORDS.get(self.kind, "template")


class BlockStackMixin:
    """Frame stack shared by the statement parsing mixins.

    Required Host Attributes:
        - _tokens: token list
        - _on_event: optional diagnostic hook
        - _error: method building a ParseError
    """

    # ─────────────────────────────────────────────────────────────────────
    # Host attributes (type-check only)
    # ─────────────────────────────────────────────────────────────────────
    if TYPE_CHECKING:
        _tokens: Sequence[Token]
        _frames: list[Frame]
        _on_event: DiagnosticHook | None

        def _error(
            self,
            message: str,
            token_index: int | None = None,
            *,
            code: ErrorCode | None = None,
            suggestion: str | None = None,
        ) -> ParseError: ...

    @property
    def _frame(self) -> Frame:
        return self._frames[-1]

    def _push_frame(self, frame: Frame) -> None:
        self._frames.append(frame)

    def _pop_frame(self) -> Frame:
        if len(self._frames) <= 1:
            raise RuntimeError("Parser frame stack underflow")
        frame = self._frames.pop()
        self._seal_chain(frame)
        return frame

    def _append_node(self, node: Node, frame: Frame | None = None) -> None:
        """Append to a frame body; consecutive text merges into one node."""
        frame = frame or self._frame
        body = frame.body
        if isinstance(node, Text) and body and isinstance(body[-1], Text):
            previous = body[-1]
            body[-1] = Text(start=previous.start, value=previous.value + node.value)
        else:
            body.append(node)
        self._emit("node", node=node, depth=len(self._frames))

    def _seal_chain(self, frame: Frame) -> None:
        """Finish a pending conditional: no further branch can follow."""
        chain = frame.chain
        if chain is None:
            return
        frame.chain = None
        self._append_node(Conditional(start=chain.start, branches=tuple(chain.branches)), frame)
        if chain.gap is not None:
            self._append_node(Text(start=chain.gap.start, value=chain.gap.value), frame)

    def _emit(self, event: str, **details: Any) -> None:
        if self._on_event is not None:
            self._on_event(event, details)

    def _unclosed_error(self) -> ParseError:
        """End of input with a block still open; points at its opener."""
        frame = self._frame
        return self._error(
            f"Unclosed {frame.keyword} block: expected '}}' before end of template",
            frame.token_index,
            code=ErrorCode.UNCLOSED_CONSTRUCT,
        )
