"""Zebar: the template engine behind a desktop status bar.

Bar components describe their text as small templates rendered against
live provider data (CPU, battery, weather, window manager state...).
Templates are parsed once and re-rendered every time a provider updates.

Quickstart:
    >>> from zebar import Environment
    >>> env = Environment()
    >>> env.render("CPU {{ cpu.usage }}%", cpu={"usage": 12})
    'CPU 12%'

Syntax:
    ```
    {{ expression }}
    @if (battery.charge < 20) { low } @else if (battery.isCharging) { charging } @else { ok }
    @for (ws, i of glazewm.workspaces) { <button>{{ ws.name }}</button> }
    @switch (weather.status) { @case ('clear_day') { sunny } @default { ? } }
    ```

Architecture:
Template Source → Lexer → Tokens → Parser → Node Tree → Renderer → Markup

Pipeline stages:
1. **Lexer**: State machine over an explicit state stack, emits tokens
   with character offsets
2. **Parser**: Single pass with an explicit frame stack; compiles every
   expression, so a cached tree is ready to render
3. **Renderer**: Walks the tree against a ``BindingsContext``; opaque
   bindings (functions, components) come out as typed placeholders and
   are spliced back as the bound objects

Thread-Safety:
- Parsed templates are immutable and shared between threads
- Rendering uses only local state
- The Environment template cache is a lock-guarded LRU

Strict Mode (default):
Unknown identifiers raise ``UndefinedError``. ``Environment(strict=False)``
renders them as empty text. ``??`` supplies a fallback either way:

    >>> env.render("{{ weather?.celsiusTemp ?? '--' }}", weather=None)
    '--'

"""

from zebar._types import Token, TokenType
from zebar.environment import (
    Environment,
    ErrorCode,
    EvalError,
    LexError,
    TemplateError,
    TemplatePropertyError,
    TemplateSyntaxError,
    UndefinedError,
    logging_hook,
)
from zebar.expressions import evaluate
from zebar.lexer import Lexer, tokenize
from zebar.parser import ParseError, Parser, parse
from zebar.properties import render_properties
from zebar.renderer import Renderer
from zebar.scanner import StringScanner
from zebar.template import (
    BindingsContext,
    LoopContext,
    Placeholder,
    RenderedMarkup,
    Spans,
    Template,
)

__version__ = "0.1.0"

__all__ = [
    "BindingsContext",
    "Environment",
    "ErrorCode",
    "EvalError",
    "LexError",
    "Lexer",
    "LoopContext",
    "ParseError",
    "Parser",
    "Placeholder",
    "RenderedMarkup",
    "Renderer",
    "Spans",
    "StringScanner",
    "Template",
    "TemplateError",
    "TemplatePropertyError",
    "TemplateSyntaxError",
    "Token",
    "TokenType",
    "UndefinedError",
    "evaluate",
    "logging_hook",
    "parse",
    "render_properties",
    "tokenize",
]
