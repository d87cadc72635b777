"""Tests for Environment: template cache, configuration and diagnostics."""

from __future__ import annotations

import logging
import threading

import pytest

from zebar import Environment, Template, logging_hook
from zebar.environment.exceptions import LexError
from zebar.parser import ParseError


class TestEnvironmentBasics:
    """Rendering through an environment."""

    def test_render(self, env) -> None:
        assert env.render("{{ a }}+{{ b }}", a=1, b=2) == "1+2"

    def test_render_with_mapping(self, env) -> None:
        assert env.render("{{ cpu.usage }}%", {"cpu": {"usage": 7}}) == "7%"

    def test_from_string_returns_template(self, env) -> None:
        template = env.from_string("x", name="label")
        assert isinstance(template, Template)
        assert template.name == "label"
        assert template.strict

    def test_strict_flag_is_passed_down(self, env_lenient) -> None:
        assert not env_lenient.from_string("x").strict
        assert env_lenient.render("[{{ nope }}]") == "[]"

    def test_negative_cache_size(self) -> None:
        with pytest.raises(ValueError, match="cache_size"):
            Environment(cache_size=-1)

    def test_syntax_errors_are_not_cached(self, env) -> None:
        with pytest.raises(LexError):
            env.from_string("{{ a")
        assert env.cache_info()["size"] == 0

    def test_parse_errors_propagate(self, env) -> None:
        with pytest.raises(ParseError):
            env.from_string("@else {x}")

    def test_repr(self, env) -> None:
        assert repr(env) == "<Environment strict=True cache_size=400>"


class TestTemplateCache:
    """Parsed templates are cached per (source, name)."""

    def test_hit_returns_same_template(self, env) -> None:
        first = env.from_string("{{ a }}")
        second = env.from_string("{{ a }}")
        assert first is second
        info = env.cache_info()
        assert (info["hits"], info["misses"], info["size"]) == (1, 1, 1)

    def test_name_is_part_of_key(self, env) -> None:
        assert env.from_string("x", name="a") is not env.from_string("x", name="b")

    def test_lru_eviction(self) -> None:
        env = Environment(cache_size=2)
        a = env.from_string("a")
        env.from_string("b")
        env.from_string("a")  # refresh "a"
        env.from_string("c")  # evicts "b"
        assert env.cache_info()["size"] == 2
        assert env.from_string("a") is a
        misses = env.cache_info()["misses"]
        env.from_string("b")
        assert env.cache_info()["misses"] == misses + 1

    def test_eviction_is_logged(self, caplog) -> None:
        env = Environment(cache_size=1)
        with caplog.at_level(logging.DEBUG, logger="zebar.environment.core"):
            env.from_string("first")
            env.from_string("second")
        assert any("Evicted template" in r.getMessage() for r in caplog.records)

    def test_cache_disabled(self) -> None:
        env = Environment(cache_size=0)
        assert env.from_string("x") is not env.from_string("x")
        assert env.cache_info()["size"] == 0

    def test_clear_cache(self, env) -> None:
        env.from_string("x")
        env.from_string("x")
        env.clear_cache()
        assert env.cache_info() == {"hits": 0, "misses": 0, "size": 0, "max_size": 400}

    def test_concurrent_renders_share_cache(self, env) -> None:
        results: list[str] = []
        errors: list[BaseException] = []

        def worker(n: int) -> None:
            try:
                for _ in range(50):
                    results.append(env.render("{{ n * 2 }}", n=n))
            except BaseException as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert not errors
        assert len(results) == 400
        assert sorted(set(results), key=int) == [str(i * 2) for i in range(8)]
        assert env.cache_info()["size"] == 1


class TestDiagnostics:
    """The diagnostics hook sees lexer, parser and renderer events."""

    def test_hook_receives_all_stages(self) -> None:
        events: list[str] = []
        env = Environment(diagnostics=lambda event, details: events.append(event))
        env.render("a{{ b }}", b=1)
        assert {"token", "push_state", "pop_state", "node", "render"} <= set(events)

    def test_cached_template_skips_parse_events(self) -> None:
        events: list[str] = []
        env = Environment(diagnostics=lambda event, details: events.append(event))
        env.render("{{ b }}", b=1)
        events.clear()
        env.render("{{ b }}", b=2)
        assert "token" not in events
        assert "render" in events

    def test_logging_hook(self, caplog) -> None:
        env = Environment(diagnostics=logging_hook())
        with caplog.at_level(logging.DEBUG, logger="zebar.diagnostics"):
            env.render("{{ b }}", b=1)
        messages = [r.getMessage() for r in caplog.records if r.name == "zebar.diagnostics"]
        assert any(message.startswith("token ") for message in messages)
        assert any(message.startswith("render ") for message in messages)

    def test_logging_hook_custom_logger_and_level(self, caplog) -> None:
        logger = logging.getLogger("bar.trace")
        hook = logging_hook(logger, level=logging.INFO)
        with caplog.at_level(logging.INFO, logger="bar.trace"):
            hook("render", {"name": "x"})
        assert [(r.name, r.levelno) for r in caplog.records] == [("bar.trace", logging.INFO)]

    def test_logging_hook_respects_level(self, caplog) -> None:
        hook = logging_hook(logging.getLogger("bar.quiet"))
        with caplog.at_level(logging.WARNING, logger="bar.quiet"):
            hook("render", {})
        assert not caplog.records
