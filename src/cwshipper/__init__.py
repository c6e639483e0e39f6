"""
cwshipper: ship buffered log records to AWS CloudWatch Logs.

Public entry points:

- ``Ingestor``: per-cycle classification, batching and ordered appends
- ``CloudWatchLogsSink``: lifecycle wrapper that builds the boto3 client
- ``Settings``: configuration (env prefix ``CWSHIPPER_``)
"""

from __future__ import annotations

from ._version import __version__
from .core import (
    AppendOutcome,
    BatchSplitter,
    Classifier,
    ConfigurationError,
    CycleReport,
    DestinationKey,
    IncomingRecord,
    IngestCycleError,
    Ingestor,
    LogEvent,
    SequenceTokenConflictError,
    Settings,
)
from .plugins.sinks.cloudwatch import CloudWatchLogsSink

__all__ = [
    "AppendOutcome",
    "BatchSplitter",
    "Classifier",
    "CloudWatchLogsSink",
    "ConfigurationError",
    "CycleReport",
    "DestinationKey",
    "IncomingRecord",
    "IngestCycleError",
    "Ingestor",
    "LogEvent",
    "SequenceTokenConflictError",
    "Settings",
    "__version__",
]
