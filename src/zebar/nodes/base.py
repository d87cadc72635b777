"""Base node class for the template tree."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all tree nodes.

    ``start`` is the character offset of the token that produced the node,
    used to point errors at the template. Nodes are immutable so a parsed
    tree can be cached and shared between renders.
    """

    start: int
