"""
CloudWatch Logs sink.

Lifecycle wrapper around ``Ingestor``: ``start()`` builds the boto3-backed
client from ``AwsSettings`` (unless a client was injected), ``write_records()``
ships one buffered cycle and ``health_check()`` reports the last outcome.

Naming configuration is validated when the sink is constructed, so an
ambiguous setup fails before the host starts feeding records.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ...core import diagnostics
from ...core.classifier import Classifier
from ...core.events import IncomingRecord
from ...core.ingestor import CycleReport, Ingestor
from ...core.settings import Settings
from ...metrics.metrics import MetricsCollector
from ...remote.client import LogsClient

__all__ = ["CloudWatchLogsSink"]


def parse_settings(config: Settings | Mapping[str, Any] | None) -> Settings:
    if config is None:
        return Settings()
    if isinstance(config, Settings):
        return config
    return Settings(**dict(config))


class CloudWatchLogsSink:
    """Ships buffered ``(tag, time, record)`` cycles to CloudWatch Logs."""

    name = "cloudwatch_logs"

    def __init__(
        self,
        config: Settings | Mapping[str, Any] | None = None,
        *,
        client: LogsClient | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._settings = parse_settings(config)
        self._classifier = Classifier.from_settings(self._settings.naming)
        self._client = client
        self._metrics = metrics or MetricsCollector(
            enabled=self._settings.core.enable_metrics
        )
        self._ingestor: Ingestor | None = None
        self._last_error: str | None = None

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    async def start(self) -> None:
        if self._ingestor is not None:
            return
        if self._client is None:
            from ...remote.boto3_client import Boto3LogsClient

            self._client = await Boto3LogsClient.from_settings(self._settings.aws)
        self._ingestor = Ingestor(
            self._client,
            self._settings,
            classifier=self._classifier,
            metrics=self._metrics,
        )

    async def stop(self) -> None:
        # Caches are session-scoped; a restart rediscovers destinations
        self._ingestor = None

    async def write_records(
        self,
        records: Iterable[IncomingRecord | tuple[str, Any, Mapping[str, Any]]],
    ) -> CycleReport:
        """Ship one cycle; exceptions propagate so the caller can redeliver."""
        if self._ingestor is None:
            await self.start()
        assert self._ingestor is not None
        try:
            report = await self._ingestor.ingest(records)
        except Exception as exc:
            self._last_error = str(exc)
            raise
        self._last_error = None
        diagnostics.debug(
            "cloudwatch-sink",
            "cycle complete",
            events=report.events_sent,
            batches=report.batches_sent,
            skipped=len(report.destinations_skipped),
        )
        return report

    async def health_check(self) -> bool:
        return self._ingestor is not None and self._last_error is None


PLUGIN_METADATA = {
    "name": "cloudwatch_logs",
    "version": "0.1.0",
    "plugin_type": "sink",
    "entry_point": "cwshipper.plugins.sinks.cloudwatch:CloudWatchLogsSink",
    "description": "Ships buffered log records to AWS CloudWatch Logs.",
    "author": "cwshipper",
    "api_version": "1.0",
    "dependencies": ["boto3>=1.26.0"],
}
