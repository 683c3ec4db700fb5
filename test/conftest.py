"""
Shared pytest configuration and fixtures for the configuration engine tests.
"""

import pytest

from hproxy.config import EngineSettings
from hproxy.engine import SectionController
from hproxy.schema import build_registry
from hproxy.store import InMemoryConfigStore

# Builtin features of a fully equipped router.
ALL_FEATURES = frozenset({
    'hp_has_tproxy',
    'hp_has_ip_full',
    'hp_has_tun',
    'hp_has_chinadns_ng',
    'hp_has_nginx',
    'with_gvisor',
})


@pytest.fixture(scope="session")
def registry():
    """Registry with every section type. Descriptors are immutable, so one per session."""
    return build_registry()


@pytest.fixture
def settings():
    return EngineSettings(features=ALL_FEATURES)


@pytest.fixture
def store():
    return InMemoryConfigStore()


@pytest.fixture
def controller(registry, store, settings):
    """Loaded controller over an empty store (default routing mode)."""
    controller = SectionController(registry, store, settings)
    controller.load()
    return controller


@pytest.fixture
def custom_controller(controller):
    """Controller with custom routing enabled, so routing and DNS sections are visible."""
    result = controller.write('config', 'config', 'routing_mode', 'custom')
    assert result.accepted
    return controller


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: engine tests on in-memory state")
    config.addinivalue_line("markers", "integration: tests crossing the store or remote boundary")


def pytest_collection_modifyitems(items):
    # Categorize by directory so the runner can select suites with -m.
    for item in items:
        if "test_store" in item.nodeid or "test_remote" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
