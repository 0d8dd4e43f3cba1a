"""
Pytest configuration for the convertcore test suite.
"""

import sys
from pathlib import Path

import pytest

# Add backend to Python path for test imports
backend_path = Path(__file__).parent.parent
sys.path.insert(0, str(backend_path))

# Fakes live next to the tests
sys.path.insert(0, str(Path(__file__).parent))

from convertcore.artifacts import ArtifactStore  # noqa: E402
from convertcore.capabilities import FormatFamily, build_default_graph  # noqa: E402
from convertcore.execution import BatchScheduler, JobResolver  # noqa: E402
from convertcore.providers import ProviderRegistry  # noqa: E402

from fakes import FakeClock, FakeProvider  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: wires the service end to end with fake providers"
    )
    config.addinivalue_line(
        "markers", "security: security gate and circuit breaker behaviour"
    )


@pytest.fixture
def store(tmp_path):
    return ArtifactStore(tmp_path / "work")


@pytest.fixture
def graph():
    return build_default_graph()


@pytest.fixture
def resolver(graph):
    return JobResolver(graph)


@pytest.fixture
def provider_dir(tmp_path):
    out = tmp_path / "provider-out"
    out.mkdir()
    return out


@pytest.fixture
def providers(provider_dir):
    """A lossless fake provider for every family."""
    return ProviderRegistry([FakeProvider(family, provider_dir) for family in FormatFamily])


@pytest.fixture
def scheduler(resolver, providers, store):
    return BatchScheduler(resolver, providers, store)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_source(store):
    """Write a file into uploads/ and register it as a source artifact."""

    def _make(name: str, content: bytes = b"source-bytes", fmt: str = None):
        path = store.uploads_dir / name
        path.write_bytes(content)
        return store.register(path, fmt or name.rsplit(".", 1)[-1])

    return _make
