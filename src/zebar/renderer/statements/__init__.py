"""Statement rendering for the zebar renderer.

- basic: literal text and interpolations
- control_flow: @if chains and @for loops
- pattern_matching: @switch

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from zebar.renderer.statements.basic import BasicStatementMixin
from zebar.renderer.statements.control_flow import ControlFlowMixin
from zebar.renderer.statements.pattern_matching import PatternMatchingMixin


class StatementRenderingMixin(
    BasicStatementMixin,
    ControlFlowMixin,
    PatternMatchingMixin,
):
    """Combined mixin for rendering all node types."""


__all__ = [
    "BasicStatementMixin",
    "ControlFlowMixin",
    "PatternMatchingMixin",
    "StatementRenderingMixin",
]
