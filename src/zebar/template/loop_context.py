"""Loop iteration metadata for ``@for`` blocks."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any


class LoopContext:
    """Iteration metadata available as ``loop`` inside ``@for`` bodies.

    The loop's own targets carry the item and its 0-based index; ``loop``
    adds the rest. Properties are computed on access.

    Properties:
        index: 1-based iteration count (1, 2, 3, ...)
        index0: 0-based iteration count (0, 1, 2, ...)
        first: True on the first iteration
        last: True on the final iteration
        length: Total number of items
        revindex: Reverse 1-based index (counts down to 1)
        revindex0: Reverse 0-based index (counts down to 0)
        previtem: Previous item (None on first)
        nextitem: Next item (None on last)

    Methods:
        cycle(*values): Return values[index0 % len(values)]

    Example:
            ```
            @for (ws, i of glazewm.workspaces) {
              <button class="{{ loop.cycle('odd', 'even') }}">
                {{ ws.name }}@if (loop.last) { | }
              </button>
            }
            ```

    """

    __slots__ = ("_index", "_items", "_length")

    def __init__(self, items: Sequence[Any]) -> None:
        self._items = items
        self._length = len(items)
        self._index = 0

    def __iter__(self) -> Iterator[Any]:
        """Iterate through items, updating the index for each."""
        for i, item in enumerate(self._items):
            self._index = i
            yield item

    @property
    def index(self) -> int:
        return self._index + 1

    @property
    def index0(self) -> int:
        return self._index

    @property
    def first(self) -> bool:
        return self._index == 0

    @property
    def last(self) -> bool:
        return self._index == self._length - 1

    @property
    def length(self) -> int:
        return self._length

    @property
    def revindex(self) -> int:
        return self._length - self._index

    @property
    def revindex0(self) -> int:
        return self._length - self._index - 1

    @property
    def previtem(self) -> Any:
        if self._index == 0:
            return None
        return self._items[self._index - 1]

    @property
    def nextitem(self) -> Any:
        if self._index >= self._length - 1:
            return None
        return self._items[self._index + 1]

    def cycle(self, *values: Any) -> Any:
        """Cycle through the given values.

        Example:
            {{ loop.cycle('odd', 'even') }}
        """
        if not values:
            return None
        return values[self._index % len(values)]

    def __repr__(self) -> str:
        return f"<LoopContext {self.index}/{self.length}>"
