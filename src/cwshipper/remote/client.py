"""
Transport-agnostic contract for the remote log service.

Implementations raise ``RemoteServiceError`` with a typed ``RemoteErrorCode``
for every failed call; the core never inspects transport exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence, runtime_checkable

from ..core.events import LogEvent


@dataclass(frozen=True)
class StreamInfo:
    name: str
    upload_sequence_token: str | None = None


@dataclass(frozen=True)
class StreamPage:
    streams: list[StreamInfo] = field(default_factory=list)
    next_cursor: str | None = None


@dataclass(frozen=True)
class GroupPage:
    names: list[str] = field(default_factory=list)
    next_cursor: str | None = None


@dataclass(frozen=True)
class PutEventsResult:
    next_sequence_token: str | None


@runtime_checkable
class LogsClient(Protocol):
    async def list_groups(self, cursor: str | None = None) -> GroupPage: ...

    async def list_streams(
        self, group: str, cursor: str | None = None
    ) -> StreamPage: ...

    async def create_group(self, group: str) -> None: ...

    async def create_stream(self, group: str, stream: str) -> None: ...

    async def put_events(
        self,
        group: str,
        stream: str,
        events: Sequence[LogEvent],
        sequence_token: str | None = None,
    ) -> PutEventsResult: ...
