"""Pytest configuration and fixtures for zebar tests."""

import pytest

from zebar import BindingsContext, Environment
from zebar.environment import terminal


@pytest.fixture(autouse=True)
def _plain_diagnostics(monkeypatch):
    """Render diagnostics without ANSI colours so messages can be compared."""
    monkeypatch.setattr(terminal, "_USE_COLORS", False)


@pytest.fixture
def env():
    """Create a basic (strict) zebar Environment."""
    return Environment()


@pytest.fixture
def env_lenient():
    """Create an Environment where unknown names render as empty text."""
    return Environment(strict=False)


@pytest.fixture
def toggle():
    """A stand-in for a host callback bound as a function."""

    def toggle_tiling_direction() -> None:
        return None

    return toggle_tiling_direction


@pytest.fixture
def bar_bindings(toggle):
    """Bindings resembling what the bar host builds for a template element."""
    return BindingsContext.from_parts(
        {
            "cpu": {"usage": 42.0, "frequency": 3600},
            "battery": {"chargePercent": 87, "isCharging": False},
            "glazewm": {
                "workspaces": [
                    {"name": "1", "hasFocus": True},
                    {"name": "2", "hasFocus": False},
                    {"name": "3", "hasFocus": False},
                ],
                "tilingDirection": "horizontal",
            },
            "weather": None,
        },
        strings={"separator": " | "},
        functions={"toggle": toggle},
    )


def assert_template_equal(template_result: str, expected: str) -> None:
    """Assert template result equals expected, normalizing whitespace.

    Args:
        template_result: The actual template rendering result.
        expected: The expected output.
    """
    actual_normalized = " ".join(template_result.split())
    expected_normalized = " ".join(expected.split())
    assert actual_normalized == expected_normalized, (
        f"Template output mismatch:\n"
        f"  Actual: {actual_normalized!r}\n"
        f"  Expected: {expected_normalized!r}"
    )
