"""Exceptions for the zebar template engine.

Exception Hierarchy:
TemplateError (base)
├── TemplateSyntaxError        # Template text cannot be tokenized or parsed
│   ├── LexError               # Malformed token syntax (character offset)
│   └── ParseError             # Token sequence breaks the grammar (token index)
├── EvalError                  # Expression failed against the bindings
│   └── UndefinedError         # Unknown identifier in strict mode
└── TemplatePropertyError      # Any of the above, tied to a config property

Every error is fatal for its render pass. The host decides how to degrade
(render nothing, show a fallback, pop a dialog).

Example:
    ```
    Z-LEX-003: Missing closing }}
      --> <template>:1:5
         |
    >  1 | CPU: {{ cpu.usage
         |      ^
    ```

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from zebar.environment import terminal

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------


class ErrorCode(Enum):
    """Searchable error codes, ``Z-{CATEGORY}-{NUMBER}``.

    Categories: LEX (lexer), PAR (parser), EVL (evaluation), CFG (config
    properties).
    """

    # Lexer errors (Z-LEX-xxx)
    NO_VALID_TOKEN = "Z-LEX-001"
    UNCLOSED_STATEMENT_ARGS = "Z-LEX-002"
    UNCLOSED_INTERPOLATION = "Z-LEX-003"
    UNCLOSED_EXPRESSION = "Z-LEX-004"
    UNCLOSED_BLOCK = "Z-LEX-005"
    UNCLOSED_STRING = "Z-LEX-006"
    EMPTY_TOKEN = "Z-LEX-007"

    # Parser errors (Z-PAR-xxx)
    UNEXPECTED_TOKEN = "Z-PAR-001"
    UNCLOSED_CONSTRUCT = "Z-PAR-002"
    MISSING_EXPRESSION = "Z-PAR-003"
    INVALID_EXPRESSION = "Z-PAR-004"
    ORPHAN_BRANCH = "Z-PAR-005"

    # Evaluation errors (Z-EVL-xxx)
    UNDEFINED_VARIABLE = "Z-EVL-001"
    TYPE_MISMATCH = "Z-EVL-002"
    EVAL_ERROR = "Z-EVL-003"

    # Property errors (Z-CFG-xxx)
    PROPERTY_ERROR = "Z-CFG-001"

    @property
    def category(self) -> str:
        """Error category (``lexer``, ``parser``, ``evaluation``, ``config``)."""
        prefix = self.value.split("-")[1]
        return {
            "LEX": "lexer",
            "PAR": "parser",
            "EVL": "evaluation",
            "CFG": "config",
        }.get(prefix, "unknown")


# ---------------------------------------------------------------------------
# Source positions and snippets
# ---------------------------------------------------------------------------


def offset_to_position(source: str, offset: int) -> tuple[int, int]:
    """Convert a character offset to ``(lineno, col_offset)``.

    Line numbers are 1-based, columns 0-based. Offsets past the end are
    clamped to the end of the source.
    """
    offset = max(0, min(offset, len(source)))
    lineno = source.count("\n", 0, offset) + 1
    line_start = source.rfind("\n", 0, offset) + 1
    return lineno, offset - line_start


@dataclass(frozen=True, slots=True)
class SourceSnippet:
    """Template lines surrounding an error, ready for display.

    Attributes:
        lines: ``(line_number, content)`` pairs around the error.
        error_line: 1-based line number of the error.
        column: Optional 0-based column for the caret pointer.
    """

    lines: tuple[tuple[int, str], ...]
    error_line: int
    column: int | None = None

    def format(self) -> str:
        parts: list[str] = [terminal.dim_text("     |")]
        for lineno, content in self.lines:
            is_error = lineno == self.error_line
            parts.append(terminal.format_source_line(lineno, content, is_error=is_error))
            if is_error and self.column is not None:
                caret = " " * self.column + "^"
                parts.append(f"{terminal.dim_text('     |')} {terminal.error_line(caret)}")
        parts.append(terminal.dim_text("     |"))
        return "\n".join(parts)


def build_source_snippet(
    source: str,
    offset: int,
    *,
    context_lines: int = 1,
) -> SourceSnippet:
    """Build a :class:`SourceSnippet` around a character offset."""
    lineno, column = offset_to_position(source, offset)
    all_lines = source.splitlines() or [""]
    start = max(0, lineno - 1 - context_lines)
    end = min(len(all_lines), lineno + context_lines)
    lines = tuple((i + 1, all_lines[i]) for i in range(start, end))
    return SourceSnippet(lines=lines, error_line=lineno, column=column)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TemplateError(Exception):
    """Base exception for all template errors.

        >>> try:
        ...     env.render("{{ cpu.usage }}", cpu=provider)
        ... except TemplateError as e:
        ...     show_dialog(e.format_compact())

    Attributes:
        code: ErrorCode identifying the failure
    """

    code: ErrorCode | None = None

    def format_compact(self) -> str:
        """Human-readable diagnostic without Python traceback noise."""
        header = str(self)
        if self.code and self.code.value not in header:
            header = f"{self.code.value}: {header}"
        return header


class TemplateSyntaxError(TemplateError):
    """Template source could not be turned into a tree.

    Attributes:
        message: Error description
        position: Character offset into ``source`` (if known)
        source: Full template source (for snippets)
        name: Template name for the location line
    """

    code: ErrorCode | None = ErrorCode.UNEXPECTED_TOKEN

    def __init__(
        self,
        message: str,
        position: int | None = None,
        *,
        source: str | None = None,
        name: str | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.position = position
        self.source = source
        self.name = name
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    @property
    def lineno(self) -> int | None:
        if self.source is None or self.position is None:
            return None
        return offset_to_position(self.source, self.position)[0]

    @property
    def col_offset(self) -> int | None:
        if self.source is None or self.position is None:
            return None
        return offset_to_position(self.source, self.position)[1]

    def _location(self) -> str:
        location = self.name or "<template>"
        if self.lineno is not None:
            location += f":{self.lineno}:{self.col_offset}"
        elif self.position is not None:
            location += f"@{self.position}"
        return location

    def _format_message(self) -> str:
        return f"{self.message} ({self._location()})"

    def with_source(self, source: str, name: str | None = None) -> TemplateSyntaxError:
        """Attach template source after the fact (for snippet formatting)."""
        self.source = source
        if name is not None:
            self.name = name
        self.args = (self._format_message(),)
        return self

    def format_compact(self) -> str:
        parts = [
            terminal.format_error_header(self.code.value if self.code else None, self.message),
            f"  --> {terminal.location(self._location())}",
        ]
        if self.source is not None and self.position is not None:
            parts.append(build_source_snippet(self.source, self.position).format())
        return "\n".join(parts)


class LexError(TemplateSyntaxError):
    """Malformed token syntax: unterminated block, interpolation, expression,
    or nothing recognizable at the current position."""

    code: ErrorCode | None = ErrorCode.NO_VALID_TOKEN


class ExpressionSyntaxError(TemplateSyntaxError):
    """Expression text is not valid expression syntax.

    ``position`` is relative to the expression text. The template parser
    rethrows it as a ParseError; :func:`zebar.expressions.evaluate` as an
    EvalError.

    Attributes:
        expression: The offending expression text
    """

    code: ErrorCode | None = ErrorCode.INVALID_EXPRESSION

    def __init__(self, message: str, position: int, expression: str):
        self.expression = expression
        super().__init__(message, position, source=expression, name="<expression>")


class EvalError(TemplateError):
    """An expression failed at render time.

    Attributes:
        message: Error description
        expression: Source text of the failing expression
        position: Offset of the expression in the template (if known)
        source: Template source, attached by the template being rendered
        template_name: Name of that template
        values: Names -> values involved, for context
        suggestion: Optional actionable hint
    """

    code: ErrorCode | None = ErrorCode.EVAL_ERROR

    def __init__(
        self,
        message: str,
        expression: str | None = None,
        *,
        position: int | None = None,
        values: dict[str, Any] | None = None,
        suggestion: str | None = None,
        code: ErrorCode | None = None,
    ):
        self.message = message
        self.expression = expression
        self.position = position
        self.values = values or {}
        self.suggestion = suggestion
        self.source: str | None = None
        self.template_name: str | None = None
        if code is not None:
            self.code = code
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = self.message
        if self.expression:
            msg += f" in expression '{self.expression}'"
        return msg

    def with_expression(self, expression: str) -> EvalError:
        """Record the failing expression text (first expression wins)."""
        if self.expression is None:
            self.expression = expression
            self.args = (self._format_message(),)
        return self

    def located(self, position: int) -> EvalError:
        """Record where the failing expression sits (first location wins)."""
        if self.position is None:
            self.position = position
        return self

    def with_template(self, source: str, name: str | None = None) -> EvalError:
        """Attach the template being rendered (for snippet formatting)."""
        if self.source is None:
            self.source = source
            self.template_name = name
        return self

    def format_compact(self, source: str | None = None) -> str:
        source = source if source is not None else self.source
        parts = [terminal.format_error_header(self.code.value if self.code else None, self.message)]
        if source is not None and self.position is not None:
            lineno, col = offset_to_position(source, self.position)
            location = f"{self.template_name or '<template>'}:{lineno}:{col}"
            parts.append(f"  --> {terminal.location(location)}")
        if self.expression:
            parts.append(f"  Expression: {self.expression}")
        if source is not None and self.position is not None:
            parts.append(build_source_snippet(source, self.position).format())
        for name, value in self.values.items():
            value_repr = repr(value)
            if len(value_repr) > 80:
                value_repr = value_repr[:77] + "..."
            parts.append(f"    {name} = {value_repr} ({type(value).__name__})")
        if self.suggestion:
            parts.append(f"  {terminal.hint('Hint:')} {self.suggestion}")
        return "\n".join(parts)


class UndefinedError(EvalError):
    """Strict-mode lookup of a name that no binding provides.

    If ``available_names`` is given, a "Did you mean?" suggestion is added
    when a close match exists.
    """

    code: ErrorCode | None = ErrorCode.UNDEFINED_VARIABLE

    def __init__(
        self,
        name: str,
        expression: str | None = None,
        *,
        available_names: frozenset[str] | None = None,
        position: int | None = None,
    ):
        self.name = name
        suggestion = None
        if available_names:
            from difflib import get_close_matches

            matches = get_close_matches(name, available_names, n=1, cutoff=0.6)
            if matches:
                suggestion = f"Did you mean '{terminal.suggestion(matches[0])}'?"
        super().__init__(
            f"Undefined variable '{name}'",
            expression,
            position=position,
            suggestion=suggestion,
        )


class TemplatePropertyError(TemplateError):
    """A template error raised while rendering one property of an element config.

    Attributes:
        message: Message of the underlying error
        path: Dotted property path, e.g. ``"template"`` or ``"styles.color"``
        template: The property's template source
        position: Character offset in ``template`` (if known)
    """

    code: ErrorCode | None = ErrorCode.PROPERTY_ERROR

    def __init__(
        self,
        message: str,
        path: str,
        template: str,
        position: int | None = None,
    ):
        self.message = message
        self.path = path
        self.template = template
        self.position = position
        super().__init__(f"Property '{path}': {message}")

    def format_compact(self) -> str:
        parts = [
            terminal.format_error_header(self.code.value if self.code else None, str(self)),
        ]
        if self.position is not None:
            parts.append(build_source_snippet(self.template, self.position).format())
        return "\n".join(parts)
