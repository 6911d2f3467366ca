"""
Global test configuration and fixtures
"""

import time

import pytest

from asta import Builder
from asta.parsing import RubyParser

# Slow test thresholds (seconds)
SLOW_TEST_THRESHOLD = 5.0
WARNING_TEST_THRESHOLD = 2.0


@pytest.fixture(autouse=True)
def track_test_duration(request):
    """Warn about slow tests"""
    start_time = time.time()

    yield

    duration = time.time() - start_time
    test_name = request.node.nodeid

    if duration > SLOW_TEST_THRESHOLD:
        print(f"\nSLOW TEST ({duration:.2f}s): {test_name}")
    elif duration > WARNING_TEST_THRESHOLD:
        print(f"\nSlow ({duration:.2f}s): {test_name}")


@pytest.fixture(scope="session")
def ruby_parser() -> RubyParser:
    """Shared tree-sitter Ruby parser"""
    return RubyParser()


@pytest.fixture
def parse(ruby_parser):
    """Parse Ruby source and return the root node"""
    return ruby_parser.parse


@pytest.fixture
def builder(ruby_parser) -> Builder:
    """Builder over `1 + 1`, for calling construction helpers"""
    return Builder("1 + 1", parser=ruby_parser)


# Pytest hooks
def pytest_configure(config):
    """pytest configuration"""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests (parse and match real source)")


def pytest_collection_modifyitems(config, items):
    """Add markers by test path"""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
