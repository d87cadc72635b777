"""Render the template-valued properties of an element config.

Every string in a raw element config (a window, group or template element
from the user's config file) may contain template syntax. Before the config
is validated, each string is rendered against the element's bindings, and
rendered again whenever those bindings change.

Example:
    >>> render_properties(
    ...     {"template": "{{ cpu.usage }}%", "styles": {"color": "@if (hot) {red} @else {white}"}},
    ...     {"cpu": {"usage": 91}, "hot": True},
    ... )
    {'template': '91%', 'styles': {'color': 'red'}}

"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from zebar.environment.core import Environment
from zebar.environment.exceptions import TemplateError, TemplatePropertyError
from zebar.template.bindings import BindingsContext

logger = logging.getLogger(__name__)

_default_env: Environment | None = None


def _get_default_env() -> Environment:
    global _default_env
    if _default_env is None:
        _default_env = Environment()
    return _default_env


def render_properties(
    config: Mapping[str, Any],
    bindings: BindingsContext | Mapping[str, Any] | None = None,
    env: Environment | None = None,
    *,
    element_id: str | None = None,
) -> dict[str, Any]:
    """Return a copy of ``config`` with every string value rendered.

    Non-string values pass through unchanged; nested mappings are rendered
    recursively. ``id`` is set to ``element_id`` when one is given (before
    rendering, so it is rendered like any other string).

    Args:
        config: Raw element config
        bindings: Provider data and other bindings for the element
        env: Environment to render with (a shared default if omitted)
        element_id: Element id to inject as ``id``

    Raises:
        TemplatePropertyError: A property failed to lex, parse or render.
            Chained from the original TemplateError.
    """
    env = env or _get_default_env()
    raw = dict(config)
    if element_id is not None:
        raw["id"] = element_id

    rendered = _render_mapping(raw, bindings, env, prefix="")
    logger.debug("Rendered %d properties for element %s", len(rendered), element_id or "(anonymous)")
    return rendered


def _render_mapping(
    config: Mapping[str, Any],
    bindings: BindingsContext | Mapping[str, Any] | None,
    env: Environment,
    prefix: str,
) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in config.items():
        path = f"{prefix}{key}"
        if isinstance(value, str):
            result[key] = render_property(path, value, bindings, env)
        elif isinstance(value, Mapping):
            result[key] = _render_mapping(value, bindings, env, prefix=f"{path}.")
        else:
            result[key] = value
    return result


def render_property(
    path: str,
    template: str,
    bindings: BindingsContext | Mapping[str, Any] | None,
    env: Environment,
) -> str:
    """Render one property value, rewrapping template errors with its path."""
    try:
        return env.from_string(template, name=path).render(bindings)
    except TemplateError as e:
        message = getattr(e, "message", str(e))
        position = getattr(e, "position", None)
        logger.error("Property '%s' failed to render: %s", path, message)
        raise TemplatePropertyError(message, path, template, position) from e
