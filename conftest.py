"""
Root pytest configuration.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest

# Register cwshipper testing fixtures for all tests
pytest_plugins = ("cwshipper.testing.fixtures",)


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "critical: Tests that must never fail - core functionality",
    )
    config.addinivalue_line(
        "markers",
        "standard: Default risk category for typical unit tests",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (may be slow)",
    )
    config.addinivalue_line(
        "markers",
        "asyncio: Async tests",
    )


@pytest.fixture(autouse=True)
def reset_diagnostics_cache() -> Generator[None, None, None]:
    """Reset the diagnostics writer and cached debug flag around each test."""
    import cwshipper.core.diagnostics as diag

    diag._reset_for_tests()
    yield
    diag._reset_for_tests()
