"""Pytest fixtures for cwshipper tests."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

import pytest

from ..core import diagnostics
from .fakes import FakeLogsClient


@pytest.fixture
def fake_logs_client() -> FakeLogsClient:
    return FakeLogsClient()


@pytest.fixture
def capture_diagnostics() -> Generator[list[dict[str, Any]], None, None]:
    """Collect diagnostics payloads emitted during a test."""
    diagnostics._reset_for_tests()
    captured: list[dict[str, Any]] = []
    diagnostics.set_writer_for_tests(captured.append)
    yield captured
    diagnostics._reset_for_tests()
