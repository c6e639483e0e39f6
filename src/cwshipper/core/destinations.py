"""
Destination existence cache and per-stream sequence tokens.

State is a nested mapping ``group -> {stream -> token | None}``:

- a group key present means the group is known to exist
- a stream key present means the stream is known to exist, whether or not a
  token has been learned yet (``None`` = created but never appended, or the
  service reported no token)

``SequenceTokenCache`` is a view over the same mapping. Invalidating a token
drops the stream entry, so the next cycle rediscovers the stream and picks up
its authoritative token from the listing. Group entries are never dropped.

Both caches live for the lifetime of the owning ``Ingestor`` and are safe for
sequential use only; concurrent hosts must serialize access per destination.
"""

from __future__ import annotations

from ..remote.client import LogsClient, StreamInfo
from . import diagnostics
from .errors import ListingExhaustedError, RemoteErrorCode, RemoteServiceError

DEFAULT_MAX_LIST_PAGES = 100


class SequenceTokenCache:
    """Per-(group, stream) append-order tokens."""

    def __init__(self, groups: dict[str, dict[str, str | None]]) -> None:
        self._groups = groups

    def get(self, group: str, stream: str) -> str | None:
        return self._groups.get(group, {}).get(stream)

    def is_known(self, group: str, stream: str) -> bool:
        return stream in self._groups.get(group, {})

    def store(self, group: str, stream: str, token: str | None) -> None:
        self._groups.setdefault(group, {})[stream] = token

    def mark_known(self, group: str, stream: str, token: str | None = None) -> None:
        """Record that the stream exists, with its token when one is known."""
        self.store(group, stream, token)

    def invalidate(self, group: str, stream: str) -> None:
        self._groups.get(group, {}).pop(stream, None)


class DestinationCache:
    """Memoizes which groups and streams exist; creates them on demand."""

    def __init__(
        self, client: LogsClient, *, max_pages: int = DEFAULT_MAX_LIST_PAGES
    ) -> None:
        self._client = client
        self._max_pages = max_pages
        self._groups: dict[str, dict[str, str | None]] = {}
        self.tokens = SequenceTokenCache(self._groups)

    def is_group_known(self, group: str) -> bool:
        return group in self._groups

    async def ensure_group_exists(self, group: str) -> bool:
        if group in self._groups:
            return True
        cursor: str | None = None
        for _ in range(self._max_pages):
            page = await self._client.list_groups(cursor)
            if group in page.names:
                self._groups[group] = {}
                diagnostics.debug("destinations", "log group found", group=group)
                return True
            if page.next_cursor is None:
                return False
            cursor = page.next_cursor
        raise ListingExhaustedError(
            f"log group '{group}'", self._max_pages, group=group
        )

    async def ensure_stream_exists(self, group: str, stream: str) -> bool:
        if group not in self._groups:
            return False
        if self.tokens.is_known(group, stream):
            return True
        found = await self.find_stream(group, stream)
        if found is None:
            return False
        self.tokens.mark_known(group, stream, found.upload_sequence_token)
        diagnostics.debug(
            "destinations",
            "log stream found",
            group=group,
            stream=stream,
            has_token=found.upload_sequence_token is not None,
        )
        return True

    async def find_stream(self, group: str, stream: str) -> StreamInfo | None:
        """Search the paginated stream listing for an exact name match.

        Raises:
            ListingExhaustedError: the page cap was reached while the listing
                still advertised more pages.
        """
        cursor: str | None = None
        for _ in range(self._max_pages):
            page = await self._client.list_streams(group, cursor)
            for info in page.streams:
                if info.name == stream:
                    return info
            if page.next_cursor is None:
                return None
            cursor = page.next_cursor
        raise ListingExhaustedError(
            f"log stream '{stream}' in '{group}'",
            self._max_pages,
            group=group,
            stream=stream,
        )

    async def create_group(self, group: str) -> None:
        try:
            await self._client.create_group(group)
        except RemoteServiceError as exc:
            if exc.code is not RemoteErrorCode.ALREADY_EXISTS:
                raise
            diagnostics.warn("destinations", "log group already exists", group=group)
        self._groups.setdefault(group, {})

    async def create_stream(self, group: str, stream: str) -> None:
        try:
            await self._client.create_stream(group, stream)
        except RemoteServiceError as exc:
            if exc.code is not RemoteErrorCode.ALREADY_EXISTS:
                raise
            diagnostics.warn(
                "destinations",
                "log stream already exists",
                group=group,
                stream=stream,
            )
            # Created by another writer; pick up its token as discovery would
            found = await self.find_stream(group, stream)
            token = found.upload_sequence_token if found is not None else None
            self.tokens.mark_known(group, stream, token)
            return
        self.tokens.mark_known(group, stream, None)
