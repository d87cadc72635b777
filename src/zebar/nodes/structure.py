"""Root node of a parsed template."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from zebar.nodes.base import Node


@dataclass(frozen=True, slots=True)
class TemplateTree(Node):
    """A whole parsed template."""

    body: Sequence[Node]
    name: str | None = None
