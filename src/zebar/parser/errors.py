"""Parser error handling.

ParseError points at the offending token both by index in the token
sequence and by character offset in the template, so diagnostics share the
snippet format used by the lexer.
"""

from __future__ import annotations

from zebar._types import Token
from zebar.environment.exceptions import ErrorCode, TemplateSyntaxError


class ParseError(TemplateSyntaxError):
    """Token sequence does not match the template grammar.

    Attributes:
        token_index: Index of the offending token (``len(tokens)`` for
            errors detected at end of input)
        token: The offending token, if there is one
    """

    code: ErrorCode | None = ErrorCode.UNEXPECTED_TOKEN

    def __init__(
        self,
        message: str,
        token_index: int,
        token: Token | None = None,
        *,
        source: str | None = None,
        name: str | None = None,
        code: ErrorCode | None = None,
        suggestion: str | None = None,
    ):
        self.token_index = token_index
        self.token = token
        self.suggestion = suggestion
        super().__init__(
            message,
            token.start if token is not None else None,
            source=source,
            name=name,
            code=code,
        )

    def _format_message(self) -> str:
        msg = f"{self.message} (token {self.token_index}, {self._location()})"
        if self.suggestion:
            msg += f"\n\nSuggestion: {self.suggestion}"
        return msg
