"""
Chronological batch splitting for append requests.

A batch must satisfy, simultaneously:

- total byte cost (UTF-8 message bytes + 26 per event) <= 1,048,576
- newest minus oldest timestamp < 24 hours
- event count <= ``max_events``

Splitting is a single greedy pass over events already sorted by timestamp:
an event joins the current batch unless doing so would break a limit, in
which case the current batch is sealed and the event opens a new one.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Sequence

from .events import (
    DEFAULT_MAX_EVENTS_PER_BATCH,
    MAX_BATCH_BYTES,
    MAX_BATCH_SPAN_MS,
    LogEvent,
)


class BatchSplitter:
    def __init__(
        self,
        max_events: int = DEFAULT_MAX_EVENTS_PER_BATCH,
        *,
        max_bytes: int = MAX_BATCH_BYTES,
        max_span_ms: int = MAX_BATCH_SPAN_MS,
    ) -> None:
        if max_events < 1:
            raise ValueError("max_events must be positive")
        self.max_events = max_events
        self.max_bytes = max_bytes
        self.max_span_ms = max_span_ms

    def admits(self, batch: Sequence[LogEvent], size: int, event: LogEvent) -> bool:
        """Whether ``event`` can join ``batch`` (whose byte cost is ``size``)."""
        if not batch:
            return True
        if len(batch) >= self.max_events:
            return False
        if event.timestamp - batch[0].timestamp >= self.max_span_ms:
            return False
        return size + event.byte_cost <= self.max_bytes

    def iter_batches(self, events: Iterable[LogEvent]) -> Iterator[list[LogEvent]]:
        batch: list[LogEvent] = []
        size = 0
        for event in events:
            if not self.admits(batch, size, event):
                yield batch
                batch, size = [], 0
            batch.append(event)
            size += event.byte_cost
        if batch:
            yield batch

    def split(self, events: Iterable[LogEvent]) -> list[list[LogEvent]]:
        return list(self.iter_batches(events))


def split_batches(
    events: Iterable[LogEvent],
    max_events: int = DEFAULT_MAX_EVENTS_PER_BATCH,
) -> list[list[LogEvent]]:
    return BatchSplitter(max_events).split(events)
