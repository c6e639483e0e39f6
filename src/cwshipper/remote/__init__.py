from __future__ import annotations

from .client import GroupPage, LogsClient, PutEventsResult, StreamInfo, StreamPage

__all__ = [
    "GroupPage",
    "LogsClient",
    "PutEventsResult",
    "StreamInfo",
    "StreamPage",
]
