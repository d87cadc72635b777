"""Expression language used inside ``{{ ... }}`` and statement arguments.

Compilation (tokenize + parse) is memoised per expression text; the trees
are immutable so cached entries are shared between templates.

Example:
    >>> from zebar.expressions import evaluate
    >>> from zebar.template import BindingsContext
    >>> evaluate("battery.charge > 20 ? 'ok' : 'low'", BindingsContext({"battery": {"charge": 87}}))
    'ok'

"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from zebar.environment.exceptions import ErrorCode, EvalError, ExpressionSyntaxError
from zebar.expressions.evaluator import Evaluator
from zebar.expressions.parser import LOOP_KEYWORDS, ExpressionParser
from zebar.nodes.expressions import Expr
from zebar.template.bindings import BindingsContext

_STRICT = Evaluator(strict=True)
_LENIENT = Evaluator(strict=False)


@lru_cache(maxsize=1024)
def compile_expression(text: str) -> Expr:
    """Parse expression text into a tree.

    Raises:
        ExpressionSyntaxError: Text is not a valid expression
    """
    return ExpressionParser(text).parse()


@lru_cache(maxsize=256)
def compile_loop_header(text: str) -> tuple[tuple[str, ...], Expr]:
    """Parse a ``@for`` header into ``(targets, iterable)``."""
    return ExpressionParser(text).parse_loop_header()


def evaluate(
    text: str,
    bindings: BindingsContext | None = None,
    *,
    strict: bool = True,
) -> Any:
    """Compile and evaluate ``text`` against ``bindings``.

    Raises:
        EvalError: Invalid syntax or a failing evaluation; both carry the
            expression text.
    """
    try:
        expr = compile_expression(text)
    except ExpressionSyntaxError as e:
        raise EvalError(
            f"Invalid expression: {e.message}",
            text,
            position=e.position,
            code=ErrorCode.INVALID_EXPRESSION,
        ) from e
    evaluator = _STRICT if strict else _LENIENT
    return evaluator.evaluate(expr, bindings or BindingsContext(), text)


__all__ = [
    "LOOP_KEYWORDS",
    "Evaluator",
    "ExpressionParser",
    "compile_expression",
    "compile_loop_header",
    "evaluate",
]
