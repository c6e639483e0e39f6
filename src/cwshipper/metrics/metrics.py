"""
Async-first shipping metrics.

Implements a small set of Prometheus-compatible counters for the append
path. Instances are owned by the ingestor (no global registry); when
metrics are disabled every method is a safe no-op apart from the in-memory
counters kept for quick assertions in tests.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from prometheus_client import CollectorRegistry, Counter


@dataclass
class ShippingMetrics:
    """Captured runtime counters for quick assertions in tests."""

    events_appended: int = 0
    batches_appended: int = 0
    batches_dropped: int = 0
    token_resets: int = 0
    remote_errors: int = 0


class MetricsCollector:
    """Ingestor-scoped async metrics collector."""

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._lock = asyncio.Lock()
        self._state = ShippingMetrics()

        self._c_events: Any | None = None
        self._c_batches: Any | None = None
        self._c_dropped: Any | None = None
        self._c_resets: Any | None = None
        self._c_errors: Any | None = None
        self._registry: CollectorRegistry | None = None

        if self._enabled:
            # Isolated registry to avoid duplicate registration across instances
            self._registry = CollectorRegistry()
            self._c_events = Counter(
                "cwshipper_events_appended_total",
                "Total number of log events accepted by the remote service",
                registry=self._registry,
            )
            self._c_batches = Counter(
                "cwshipper_batches_appended_total",
                "Total number of append requests sent",
                ["outcome"],
                registry=self._registry,
            )
            self._c_dropped = Counter(
                "cwshipper_batches_dropped_total",
                "Destinations skipped because they do not exist",
                registry=self._registry,
            )
            self._c_resets = Counter(
                "cwshipper_sequence_token_resets_total",
                "Sequence tokens cleared after a conflict response",
                ["reason"],
                registry=self._registry,
            )
            self._c_errors = Counter(
                "cwshipper_remote_errors_total",
                "Remote calls that failed and were propagated",
                ["operation"],
                registry=self._registry,
            )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    async def record_batch_appended(
        self, events: int, *, outcome: str = "accepted"
    ) -> None:
        async with self._lock:
            self._state.batches_appended += 1
            if outcome == "accepted":
                self._state.events_appended += events
        if not self._enabled:
            return
        if self._c_batches is not None:
            self._c_batches.labels(outcome=outcome).inc()
        if outcome == "accepted" and self._c_events is not None:
            self._c_events.inc(events)

    async def record_destination_dropped(self) -> None:
        async with self._lock:
            self._state.batches_dropped += 1
        if self._enabled and self._c_dropped is not None:
            self._c_dropped.inc()

    async def record_token_reset(self, *, reason: str) -> None:
        async with self._lock:
            self._state.token_resets += 1
        if self._enabled and self._c_resets is not None:
            self._c_resets.labels(reason=reason).inc()

    async def record_remote_error(self, *, operation: str | None = None) -> None:
        async with self._lock:
            self._state.remote_errors += 1
        if self._enabled and self._c_errors is not None:
            self._c_errors.labels(operation=operation or "unknown").inc()

    async def snapshot(self) -> ShippingMetrics:
        async with self._lock:
            return ShippingMetrics(
                events_appended=self._state.events_appended,
                batches_appended=self._state.batches_appended,
                batches_dropped=self._state.batches_dropped,
                token_resets=self._state.token_resets,
                remote_errors=self._state.remote_errors,
            )
