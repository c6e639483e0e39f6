from __future__ import annotations

from .batching import BatchSplitter, split_batches
from .classifier import AxisPolicy, Classifier, NamingPolicy
from .destinations import DestinationCache, SequenceTokenCache
from .errors import (
    ConfigurationError,
    CwShipperError,
    IngestCycleError,
    RemoteErrorCode,
    RemoteServiceError,
    SequenceTokenConflictError,
)
from .events import DestinationKey, IncomingRecord, LogEvent
from .ingestor import AppendOutcome, CycleReport, Ingestor
from .settings import Settings

__all__ = [
    "AppendOutcome",
    "AxisPolicy",
    "BatchSplitter",
    "Classifier",
    "ConfigurationError",
    "CwShipperError",
    "CycleReport",
    "DestinationCache",
    "DestinationKey",
    "IncomingRecord",
    "IngestCycleError",
    "Ingestor",
    "LogEvent",
    "NamingPolicy",
    "RemoteErrorCode",
    "RemoteServiceError",
    "SequenceTokenCache",
    "SequenceTokenConflictError",
    "Settings",
    "split_batches",
]
