"""Environment: configuration and the parsed-template cache.

The host creates one Environment and renders every element template
through it. Parsing happens once per distinct template string; rendering
re-runs whenever a provider pushes new data.

Thread-Safety:
- The template cache is a bounded LRU guarded by a lock
- Cached Template objects are immutable and shared across threads

"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Mapping
from typing import Any

from zebar._types import DiagnosticHook
from zebar.template.bindings import BindingsContext
from zebar.template.core import Template

logger = logging.getLogger(__name__)


class Environment:
    """Central configuration for the template engine.

    Args:
        strict: Unknown identifiers raise ``UndefinedError`` (default);
            when False they evaluate to None and render as empty text
        cache_size: Maximum number of parsed templates kept; 0 disables
            caching
        diagnostics: Optional hook receiving lexer, parser and renderer
            events (see :func:`logging_hook`)

    Example:
        >>> env = Environment()
        >>> env.render("{{ cpu.usage }}%", cpu={"usage": 12})
        '12%'
    """

    def __init__(
        self,
        *,
        strict: bool = True,
        cache_size: int = 400,
        diagnostics: DiagnosticHook | None = None,
    ) -> None:
        if cache_size < 0:
            raise ValueError(f"cache_size must be >= 0, got {cache_size}")
        self.strict = strict
        self.cache_size = cache_size
        self.diagnostics = diagnostics
        self._cache: OrderedDict[tuple[str, str | None], Template] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def from_string(self, source: str, name: str | None = None) -> Template:
        """Return the parsed template for ``source``, parsing on a cache miss.

        Raises:
            LexError: Malformed token syntax
            ParseError: Invalid template structure or expression syntax
        """
        key = (source, name)
        if self.cache_size:
            with self._lock:
                template = self._cache.get(key)
                if template is not None:
                    self._cache.move_to_end(key)
                    self._hits += 1
                    return template
                self._misses += 1

        template = Template.from_string(
            source,
            name=name,
            strict=self.strict,
            on_event=self.diagnostics,
        )

        if self.cache_size:
            with self._lock:
                self._cache[key] = template
                self._cache.move_to_end(key)
                while len(self._cache) > self.cache_size:
                    (evicted, _), _ = self._cache.popitem(last=False)
                    logger.debug("Evicted template from cache: %.40r", evicted)
        return template

    def render(
        self,
        source: str,
        bindings: BindingsContext | Mapping[str, Any] | None = None,
        /,
        **variables: Any,
    ) -> str:
        """Parse (cached) and render ``source`` in one call."""
        return self.from_string(source).render(bindings, **variables)

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0
        logger.debug("Template cache cleared")

    def cache_info(self) -> dict[str, int]:
        """Cache statistics: ``hits``, ``misses``, ``size``, ``max_size``."""
        with self._lock:
            return {
                "hits": self._hits,
                "misses": self._misses,
                "size": len(self._cache),
                "max_size": self.cache_size,
            }

    def __repr__(self) -> str:
        return f"<Environment strict={self.strict} cache_size={self.cache_size}>"


def logging_hook(
    target: logging.Logger | None = None,
    level: int = logging.DEBUG,
) -> DiagnosticHook:
    """Adapt a stdlib logger into a diagnostic hook.

    Example:
        >>> env = Environment(diagnostics=logging_hook(logging.getLogger("zebar.trace")))
    """
    target = target or logging.getLogger("zebar.diagnostics")

    def hook(event: str, details: Mapping[str, Any]) -> None:
        if target.isEnabledFor(level):
            target.log(level, "%s %s", event, dict(details))

    return hook
