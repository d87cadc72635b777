"""Template objects, bindings and render output.

Re-exports the public symbols so ``from zebar.template import Template``
works without knowing the module layout.

"""

from zebar.template.bindings import BindingsContext
from zebar.template.loop_context import LoopContext
from zebar.template.markup import Placeholder, RenderedMarkup, Spans

__all__ = [
    "BindingsContext",
    "LoopContext",
    "Placeholder",
    "RenderedMarkup",
    "Spans",
    "Template",
]


# Lazy: Template pulls in the parser and renderer, which themselves import
# zebar.template.bindings.
def __getattr__(name: str) -> object:
    if name == "Template":
        from zebar.template.core import Template

        globals()["Template"] = Template
        return Template
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
