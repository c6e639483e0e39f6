"""
Per-cycle ingestion: classify, group, split and append.

One ``Ingestor`` owns the destination and sequence token caches for its whole
lifetime. Each call to ``ingest`` processes one cycle of upstream records:

1. classify every record to a ``DestinationKey`` (records whose naming field
   is missing are skipped with a warning)
2. group by destination and sort each group by timestamp (stable)
3. per destination: ensure the group and stream exist (creating them when
   ``auto_create_stream`` is set, otherwise dropping the destination with a
   warning), split into batches, then append the batches in order

Destinations are independent: a failure is recorded and the remaining
destinations are still processed. Failures are raised together at the end
of the cycle as ``IngestCycleError`` so the caller can redeliver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from ..metrics.metrics import MetricsCollector
from ..remote.client import LogsClient
from . import diagnostics
from .batching import BatchSplitter
from .classifier import Classifier
from .destinations import DestinationCache
from .errors import (
    ConflictAction,
    IngestCycleError,
    RemoteServiceError,
    SequenceTokenConflictError,
    conflict_action,
)
from .events import DestinationKey, IncomingRecord, LogEvent, make_event
from .settings import Settings

__all__ = ["AppendOutcome", "CycleReport", "Ingestor"]


class AppendOutcome(str, Enum):
    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"


@dataclass
class CycleReport:
    events_sent: int = 0
    batches_sent: int = 0
    duplicate_batches: int = 0
    destinations_skipped: list[DestinationKey] = field(default_factory=list)
    records_skipped: int = 0


class Ingestor:
    """Ships one cycle of records at a time to the remote log service."""

    def __init__(
        self,
        client: LogsClient,
        settings: Settings | None = None,
        *,
        classifier: Classifier | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        cfg = settings or Settings()
        diagnostics.configure(enabled=cfg.core.internal_logging_enabled)
        # Resolving the classifier validates naming before any record is seen
        self._classifier = classifier or Classifier.from_settings(cfg.naming)
        self._client = client
        self._destinations = DestinationCache(
            client, max_pages=cfg.limits.max_list_pages
        )
        self._tokens = self._destinations.tokens
        self._splitter = BatchSplitter(cfg.limits.max_events_per_batch)
        self._auto_create = cfg.core.auto_create_stream
        self._message_keys = cfg.core.message_key_list
        self._max_message_length = cfg.limits.max_message_length
        self._metrics = metrics

    @property
    def destinations(self) -> DestinationCache:
        return self._destinations

    @property
    def classifier(self) -> Classifier:
        return self._classifier

    def group_records(
        self, records: Iterable[IncomingRecord | tuple[str, Any, Mapping[str, Any]]]
    ) -> tuple[dict[DestinationKey, list[LogEvent]], int]:
        """Classify and format records; return sorted events per destination."""
        groups: dict[DestinationKey, list[LogEvent]] = {}
        skipped = 0
        for tag, time, record in records:
            key, record = self._classifier.classify(tag, record)
            if key is None:
                skipped += 1
                diagnostics.warn(
                    "ingestor",
                    "record has no destination name, skipping",
                    tag=tag,
                )
                continue
            try:
                event = make_event(
                    time,
                    record,
                    message_keys=self._message_keys,
                    max_length=self._max_message_length,
                )
            except (TypeError, ValueError) as exc:
                skipped += 1
                diagnostics.warn(
                    "ingestor",
                    "record could not be formatted, skipping",
                    tag=tag,
                    group=key.group,
                    stream=key.stream,
                    error=type(exc).__name__,
                    detail=str(exc),
                )
                continue
            groups.setdefault(key, []).append(event)
        for events in groups.values():
            events.sort(key=lambda e: e.timestamp)
        return groups, skipped

    async def ingest(
        self, records: Iterable[IncomingRecord | tuple[str, Any, Mapping[str, Any]]]
    ) -> CycleReport:
        groups, skipped = self.group_records(records)
        report = CycleReport(records_skipped=skipped)
        failures: dict[tuple[str, str], BaseException] = {}

        for key, events in groups.items():
            try:
                if not await self.ensure_destination(key):
                    report.destinations_skipped.append(key)
                    if self._metrics is not None:
                        await self._metrics.record_destination_dropped()
                    continue
                await self.ship(key, events, report)
            except Exception as exc:
                failures[(key.group, key.stream)] = exc
                if self._metrics is not None and isinstance(exc, RemoteServiceError):
                    await self._metrics.record_remote_error(operation=exc.operation)
                diagnostics.warn(
                    "ingestor",
                    "destination failed",
                    group=key.group,
                    stream=key.stream,
                    error=type(exc).__name__,
                    detail=str(exc),
                )

        if failures:
            first = next(iter(failures.values()))
            raise IngestCycleError(failures) from first
        return report

    async def ensure_destination(self, key: DestinationKey) -> bool:
        """Make sure ``key`` exists remotely; False means drop its events."""
        dest = self._destinations
        if not await dest.ensure_group_exists(key.group):
            if not self._auto_create:
                diagnostics.warn(
                    "ingestor", "log group does not exist", group=key.group
                )
                return False
            await dest.create_group(key.group)
            diagnostics.info("ingestor", "created log group", group=key.group)

        if not await dest.ensure_stream_exists(key.group, key.stream):
            if not self._auto_create:
                diagnostics.warn(
                    "ingestor",
                    "log stream does not exist",
                    group=key.group,
                    stream=key.stream,
                )
                return False
            await dest.create_stream(key.group, key.stream)
            diagnostics.info(
                "ingestor",
                "created log stream",
                group=key.group,
                stream=key.stream,
            )
        return True

    async def ship(
        self,
        key: DestinationKey,
        events: Sequence[LogEvent],
        report: CycleReport | None = None,
    ) -> None:
        """Split sorted ``events`` and append the batches in order."""
        for batch in self._splitter.iter_batches(events):
            outcome = await self.append(key, batch)
            if report is None:
                continue
            if outcome is AppendOutcome.DUPLICATE:
                report.duplicate_batches += 1
            else:
                report.batches_sent += 1
                report.events_sent += len(batch)

    async def append(
        self, key: DestinationKey, batch: Sequence[LogEvent]
    ) -> AppendOutcome:
        """Append one batch using (and updating) the cached sequence token.

        Raises:
            SequenceTokenConflictError: the cached token was stale; it has been
                cleared and the destination needs redelivery.
            RemoteServiceError: any other remote failure, unchanged.
        """
        group, stream = key
        token = self._tokens.get(group, stream)
        try:
            result = await self._client.put_events(group, stream, batch, token)
        except RemoteServiceError as exc:
            action = conflict_action(exc.code)
            if action is ConflictAction.RAISE:
                raise
            self._tokens.invalidate(group, stream)
            diagnostics.warn(
                "ingestor",
                "sequence token reset",
                group=group,
                stream=stream,
                reason=exc.code.value,
                detail=exc.message,
            )
            if self._metrics is not None:
                await self._metrics.record_token_reset(reason=exc.code.value)
            if action is ConflictAction.RESET_AND_RAISE:
                raise SequenceTokenConflictError(group, stream, cause=exc) from exc
            if self._metrics is not None:
                await self._metrics.record_batch_appended(
                    len(batch), outcome=AppendOutcome.DUPLICATE.value
                )
            return AppendOutcome.DUPLICATE

        self._tokens.store(group, stream, result.next_sequence_token)
        diagnostics.debug(
            "ingestor",
            "batch appended",
            group=group,
            stream=stream,
            events=len(batch),
        )
        if self._metrics is not None:
            await self._metrics.record_batch_appended(len(batch))
        return AppendOutcome.ACCEPTED
