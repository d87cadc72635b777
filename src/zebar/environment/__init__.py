"""Environment, configuration and errors for the zebar template engine.

``Environment`` and ``logging_hook`` are loaded on first access: they
import the template layer, which itself depends on
:mod:`zebar.environment.exceptions`.

"""

from zebar.environment.exceptions import (
    ErrorCode,
    EvalError,
    ExpressionSyntaxError,
    LexError,
    SourceSnippet,
    TemplateError,
    TemplatePropertyError,
    TemplateSyntaxError,
    UndefinedError,
    build_source_snippet,
    offset_to_position,
)

_LAZY = frozenset({"Environment", "logging_hook"})


def __getattr__(name: str) -> object:
    if name in _LAZY:
        from zebar.environment.core import Environment, logging_hook

        # Populate globals so subsequent access is direct (no __getattr__)
        globals().update(Environment=Environment, logging_hook=logging_hook)
        return globals()[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "Environment",
    "ErrorCode",
    "EvalError",
    "ExpressionSyntaxError",
    "LexError",
    "SourceSnippet",
    "TemplateError",
    "TemplatePropertyError",
    "TemplateSyntaxError",
    "UndefinedError",
    "build_source_snippet",
    "logging_hook",
    "offset_to_position",
]
