"""Tests for rendering the template-valued properties of element configs."""

from __future__ import annotations

import logging

import pytest

from zebar import BindingsContext, Environment, render_properties
from zebar.environment.exceptions import (
    ErrorCode,
    EvalError,
    LexError,
    TemplatePropertyError,
)
from zebar.properties import render_property


class TestRenderProperties:
    """Every string of a config is a template."""

    def test_strings_are_rendered(self) -> None:
        config = {
            "template": "{{ cpu.usage }}%",
            "styles": {"color": "@if (hot) {red} @else {white}"},
        }
        result = render_properties(config, {"cpu": {"usage": 91}, "hot": True})
        assert result == {"template": "91%", "styles": {"color": "red"}}

    def test_non_strings_pass_through(self) -> None:
        config = {"zOrder": 3, "resizable": False, "providers": ["cpu"], "x": None}
        assert render_properties(config) == config

    def test_config_is_not_mutated(self) -> None:
        config = {"template": "{{ a }}", "nested": {"b": "{{ a }}"}}
        render_properties(config, {"a": 1})
        assert config == {"template": "{{ a }}", "nested": {"b": "{{ a }}"}}

    def test_element_id_is_injected(self) -> None:
        result = render_properties({"class": "bar"}, element_id="window/bar#0")
        assert result["id"] == "window/bar#0"

    def test_element_id_overrides_config(self) -> None:
        result = render_properties({"id": "old"}, element_id="new")
        assert result["id"] == "new"

    def test_with_bindings_context(self, bar_bindings) -> None:
        result = render_properties(
            {"template": "{{ battery.chargePercent }}{{ separator }}{{ toggle }}"},
            bar_bindings,
        )
        assert result["template"] == "87 | {{ toggle }}"

    def test_uses_given_environment(self) -> None:
        env = Environment(strict=False)
        assert render_properties({"t": "[{{ nope }}]"}, env=env) == {"t": "[]"}
        assert env.cache_info()["misses"] == 1

    def test_property_path_names_template(self) -> None:
        env = Environment()
        render_properties({"styles": {"color": "x"}}, env=env)
        assert env.from_string("x", name="styles.color") is env.from_string(
            "x", name="styles.color"
        )
        assert env.cache_info()["hits"] == 2

    def test_debug_log(self, caplog) -> None:
        with caplog.at_level(logging.DEBUG, logger="zebar.properties"):
            render_properties({"a": "b"}, element_id="bar")
        assert "Rendered 2 properties for element bar" in caplog.text


class TestPropertyErrors:
    """Errors carry the property path and its template."""

    def test_lex_error(self) -> None:
        with pytest.raises(TemplatePropertyError) as exc_info:
            render_properties({"template": "CPU {{ cpu"})
        error = exc_info.value
        assert error.path == "template"
        assert error.template == "CPU {{ cpu"
        assert error.position == 4
        assert error.code is ErrorCode.PROPERTY_ERROR
        assert isinstance(error.__cause__, LexError)

    def test_nested_path(self) -> None:
        with pytest.raises(TemplatePropertyError) as exc_info:
            render_properties({"styles": {"color": "{{ nope }}"}})
        assert exc_info.value.path == "styles.color"
        assert str(exc_info.value).startswith("Property 'styles.color': Undefined variable 'nope'")

    def test_eval_error(self) -> None:
        with pytest.raises(TemplatePropertyError) as exc_info:
            render_properties({"t": "ab {{ 1 / 0 }}"})
        assert isinstance(exc_info.value.__cause__, EvalError)
        assert exc_info.value.position == 3

    def test_error_is_logged(self, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="zebar.properties"):
            with pytest.raises(TemplatePropertyError):
                render_properties({"t": "{{ nope }}"})
        assert "Property 't' failed to render" in caplog.text

    def test_render_property(self) -> None:
        env = Environment()
        bindings = BindingsContext({"a": 2})
        assert render_property("t", "{{ a * 2 }}", bindings, env) == "4"
