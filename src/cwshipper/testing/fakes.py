"""
In-memory stand-in for the remote log service.

``FakeLogsClient`` keeps groups, streams and appended events in dicts,
hands out sequence tokens the way the real service does, records every call
and lets tests queue failures per operation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from ..core.errors import RemoteErrorCode, RemoteServiceError
from ..core.events import LogEvent
from ..remote.client import GroupPage, PutEventsResult, StreamInfo, StreamPage


@dataclass
class _Stream:
    token: str | None = None
    events: list[LogEvent] = field(default_factory=list)


class FakeLogsClient:
    """Implements ``LogsClient`` over in-memory state."""

    name = "fake"

    def __init__(self, *, page_size: int = 50) -> None:
        self.page_size = page_size
        self.groups: dict[str, dict[str, _Stream]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self._failures: dict[str, list[BaseException]] = {}
        self._token_counter = 0

    # Test helpers
    def add_group(self, group: str) -> None:
        self.groups.setdefault(group, {})

    def add_stream(self, group: str, stream: str, token: str | None = None) -> None:
        self.add_group(group)
        self.groups[group][stream] = _Stream(token=token)

    def fail_next(
        self,
        operation: str,
        code: RemoteErrorCode | BaseException = RemoteErrorCode.OTHER,
        message: str = "injected failure",
    ) -> None:
        if isinstance(code, BaseException):
            exc = code
        else:
            exc = RemoteServiceError(message, code=code, operation=operation)
        self._failures.setdefault(operation, []).append(exc)

    def events(self, group: str, stream: str) -> list[LogEvent]:
        return list(self.groups[group][stream].events)

    def calls_to(self, operation: str) -> list[dict[str, Any]]:
        return [kwargs for name, kwargs in self.calls if name == operation]

    def _record(self, operation: str, **kwargs: Any) -> None:
        self.calls.append((operation, kwargs))
        pending = self._failures.get(operation)
        if pending:
            raise pending.pop(0)

    def _next_token(self) -> str:
        self._token_counter += 1
        return f"token-{self._token_counter:06d}"

    def _page(self, items: list[Any], cursor: str | None) -> tuple[list[Any], str | None]:
        start = int(cursor) if cursor else 0
        end = start + self.page_size
        return items[start:end], (str(end) if end < len(items) else None)

    # LogsClient
    async def list_groups(self, cursor: str | None = None) -> GroupPage:
        self._record("list_groups", cursor=cursor)
        names, next_cursor = self._page(sorted(self.groups), cursor)
        return GroupPage(names=names, next_cursor=next_cursor)

    async def list_streams(self, group: str, cursor: str | None = None) -> StreamPage:
        self._record("list_streams", group=group, cursor=cursor)
        if group not in self.groups:
            raise RemoteServiceError(
                "The specified log group does not exist.",
                code=RemoteErrorCode.OTHER,
                operation="list_streams",
            )
        streams = [
            StreamInfo(name, s.token) for name, s in sorted(self.groups[group].items())
        ]
        page, next_cursor = self._page(streams, cursor)
        return StreamPage(streams=page, next_cursor=next_cursor)

    async def create_group(self, group: str) -> None:
        self._record("create_group", group=group)
        if group in self.groups:
            raise RemoteServiceError(
                "The specified log group already exists",
                code=RemoteErrorCode.ALREADY_EXISTS,
                operation="create_group",
            )
        self.groups[group] = {}

    async def create_stream(self, group: str, stream: str) -> None:
        self._record("create_stream", group=group, stream=stream)
        if stream in self.groups.get(group, {}):
            raise RemoteServiceError(
                "The specified log stream already exists",
                code=RemoteErrorCode.ALREADY_EXISTS,
                operation="create_stream",
            )
        self.groups.setdefault(group, {})[stream] = _Stream()

    async def put_events(
        self,
        group: str,
        stream: str,
        events: Sequence[LogEvent],
        sequence_token: str | None = None,
    ) -> PutEventsResult:
        self._record(
            "put_events",
            group=group,
            stream=stream,
            events=list(events),
            sequence_token=sequence_token,
        )
        target = self.groups[group][stream]
        if sequence_token != target.token:
            raise RemoteServiceError(
                f"The given sequenceToken is invalid. The next expected "
                f"sequenceToken is: {target.token}",
                code=RemoteErrorCode.INVALID_SEQUENCE_TOKEN,
                operation="put_events",
            )
        target.events.extend(events)
        target.token = self._next_token()
        return PutEventsResult(target.token)
