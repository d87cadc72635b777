"""Block parsing mixins for the template parser.

- core: frame stack, pending conditional chains
- control_flow: @if / @else if / @else, @for
- pattern_matching: @switch / @case / @default
"""

from __future__ import annotations

from zebar.parser.blocks.control_flow import ControlFlowBlockParsingMixin
from zebar.parser.blocks.core import BlockStackMixin, ConditionalChain, Frame
from zebar.parser.blocks.pattern_matching import PatternMatchingBlockParsingMixin

__all__ = [
    "BlockStackMixin",
    "ConditionalChain",
    "ControlFlowBlockParsingMixin",
    "Frame",
    "PatternMatchingBlockParsingMixin",
]
