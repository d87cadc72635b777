from __future__ import annotations

import json
import os
import platform
import sys
from pathlib import Path

import pytest

from zebar import BindingsContext, Environment

try:
    import importlib.metadata as importlib_metadata
except ModuleNotFoundError:  # pragma: no cover
    import importlib_metadata  # type: ignore


BASE_DIR = Path(__file__).resolve().parent
BENCHMARK_OUTPUT_DIR = BASE_DIR.parent / ".benchmarks"
BENCHMARK_OUTPUT_DIR.mkdir(exist_ok=True)


def _version(dist: str) -> str:
    try:
        return importlib_metadata.version(dist)
    except importlib_metadata.PackageNotFoundError:
        return "unknown"


def collect_environment_metadata() -> dict[str, object]:
    """Capture reproducibility metadata for each benchmark run."""
    return {
        "python": {
            "version": platform.python_version(),
            "implementation": platform.python_implementation(),
            "executable": sys.executable,
        },
        "os": {
            "system": platform.system(),
            "release": platform.release(),
            "machine": platform.machine(),
        },
        "cpu": {
            "processor": platform.processor(),
            "count": os.cpu_count(),
        },
        "zebar": _version("zebar"),
        "pytest-benchmark": _version("pytest-benchmark"),
    }


@pytest.fixture(scope="session")
def environment_metadata() -> dict[str, object]:
    """Write environment metadata to .benchmarks for ingestion."""
    metadata = collect_environment_metadata()
    (BENCHMARK_OUTPUT_DIR / "environment.json").write_text(json.dumps(metadata, indent=2))
    return metadata


@pytest.fixture(scope="session")
def zebar_env(environment_metadata: dict[str, object]) -> Environment:
    return Environment()


@pytest.fixture(scope="session")
def small_context() -> BindingsContext:
    return BindingsContext.from_parts(
        {"cpu": {"usage": 42.5}, "battery": {"chargePercent": 87, "isCharging": False}},
        strings={"separator": " | "},
    )


@pytest.fixture(scope="session")
def large_context() -> BindingsContext:
    workspaces = [
        {"name": str(i), "hasFocus": i == 3, "isDisplayed": i % 2 == 0} for i in range(50)
    ]
    return BindingsContext.from_parts(
        {
            "glazewm": {"workspaces": workspaces, "tilingDirection": "horizontal"},
            "cpu": {"usage": 42.5},
            "memory": {"usage": 61.0},
            "weather": {"status": "clear_day", "celsiusTemp": 21.4},
        },
        strings={"separator": " | "},
        functions={"focus": lambda name: name},
    )
