"""
Global test configuration.
"""

from collections.abc import Callable
import logging
import os
from pathlib import Path
import tempfile

import pytest

from prisma_engine.config import FrozenConfig
from prisma_engine.platforms import get_platform
from tests.helpers import StubEngine, write_stub_engine


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_engine_env(request, monkeypatch, tmp_path):
    """Ensure a clean PRISMA_ENGINE_* environment for each test.

    Also points pyproject lookup at a file that does not exist, so a
    developer's own pyproject.toml never leaks into resolution.

    Escape hatch: @pytest.mark.allow_env_pollution keeps the environment.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return

    for key in list(os.environ.keys()):
        if key.startswith("PRISMA_ENGINE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("PRISMA_QUERY_ENGINE_BINARY", raising=False)
    monkeypatch.delenv("PRISMA_DML_PATH", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    monkeypatch.setenv(
        "PRISMA_ENGINE_PYPROJECT_PATH", str(tmp_path / "no-such-pyproject.toml")
    )


@pytest.fixture(autouse=True)
def reset_platform_cache():
    get_platform.cache_clear()
    yield
    get_platform.cache_clear()


@pytest.fixture
def staging_dir(tmp_path, monkeypatch) -> Path:
    """Redirect staged temp files into a directory the test can inspect."""
    directory = tmp_path / "staging"
    directory.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(directory))
    return directory


@pytest.fixture
def fast_config() -> FrozenConfig:
    """Default configuration without retry delays."""
    return FrozenConfig(readiness_delay=0.0, busy_delay=0.0)


@pytest.fixture
def stub_engine(tmp_path) -> Callable[[str], StubEngine]:
    """Factory writing a stub engine with the given behaviour snippet."""

    def _make(behaviour: str, name: str = "query-engine-stub") -> StubEngine:
        return write_stub_engine(tmp_path / "engines", behaviour, name=name)

    return _make


# --- Logging Fixtures ---
@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Sets the log level for noisy libraries to WARNING."""
    logging.getLogger("asyncio").setLevel(logging.WARNING)


# --- Test Environment Markers ---
def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "integration: Tests that launch a stub engine subprocess",
        "allow_env_pollution: Keep PRISMA_ENGINE_* variables from the real environment",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)
