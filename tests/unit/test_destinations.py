from __future__ import annotations

from typing import Any

import pytest

from cwshipper.core.destinations import DestinationCache, SequenceTokenCache
from cwshipper.core.errors import (
    ListingExhaustedError,
    RemoteErrorCode,
    RemoteServiceError,
)
from cwshipper.remote.client import StreamPage
from cwshipper.testing import FakeLogsClient


@pytest.mark.asyncio
async def test_group_lookup_is_cached(fake_logs_client: FakeLogsClient) -> None:
    fake_logs_client.add_group("g")
    cache = DestinationCache(fake_logs_client)

    assert await cache.ensure_group_exists("g") is True
    assert await cache.ensure_group_exists("g") is True
    assert len(fake_logs_client.calls_to("list_groups")) == 1


@pytest.mark.asyncio
async def test_missing_group_is_not_cached(fake_logs_client: FakeLogsClient) -> None:
    cache = DestinationCache(fake_logs_client)

    assert await cache.ensure_group_exists("nope") is False
    assert await cache.ensure_group_exists("nope") is False
    assert len(fake_logs_client.calls_to("list_groups")) == 2
    assert not cache.is_group_known("nope")


@pytest.mark.asyncio
async def test_group_search_follows_cursor() -> None:
    client = FakeLogsClient(page_size=2)
    for name in ("a", "b", "c", "d", "e"):
        client.add_group(name)
    cache = DestinationCache(client)

    assert await cache.ensure_group_exists("e") is True
    cursors = [c["cursor"] for c in client.calls_to("list_groups")]
    assert cursors == [None, "2", "4"]


@pytest.mark.asyncio
async def test_stream_requires_known_group(fake_logs_client: FakeLogsClient) -> None:
    fake_logs_client.add_stream("g", "s")
    cache = DestinationCache(fake_logs_client)

    assert await cache.ensure_stream_exists("g", "s") is False
    assert fake_logs_client.calls_to("list_streams") == []


@pytest.mark.asyncio
async def test_stream_discovery_records_token() -> None:
    client = FakeLogsClient(page_size=1)
    client.add_stream("g", "a")
    client.add_stream("g", "b")
    client.add_stream("g", "target", token="tok-1")
    cache = DestinationCache(client)
    await cache.ensure_group_exists("g")

    assert await cache.ensure_stream_exists("g", "target") is True
    assert cache.tokens.get("g", "target") == "tok-1"
    assert len(client.calls_to("list_streams")) == 3

    # Cached afterwards
    assert await cache.ensure_stream_exists("g", "target") is True
    assert len(client.calls_to("list_streams")) == 3


@pytest.mark.asyncio
async def test_stream_search_exhausts_listing(fake_logs_client: FakeLogsClient) -> None:
    fake_logs_client.add_stream("g", "other")
    cache = DestinationCache(fake_logs_client)
    await cache.ensure_group_exists("g")

    assert await cache.ensure_stream_exists("g", "missing") is False
    assert not cache.tokens.is_known("g", "missing")


class _EndlessStreams(FakeLogsClient):
    async def list_streams(self, group: str, cursor: str | None = None) -> StreamPage:
        self._record("list_streams", group=group, cursor=cursor)
        return StreamPage(streams=[], next_cursor=f"{cursor or ''}+")


@pytest.mark.asyncio
async def test_stream_search_is_capped() -> None:
    client = _EndlessStreams()
    client.add_group("g")
    cache = DestinationCache(client, max_pages=5)
    await cache.ensure_group_exists("g")

    with pytest.raises(ListingExhaustedError) as exc_info:
        await cache.ensure_stream_exists("g", "s")
    assert exc_info.value.pages == 5
    assert len(client.calls_to("list_streams")) == 5


@pytest.mark.asyncio
async def test_create_group_and_stream(fake_logs_client: FakeLogsClient) -> None:
    cache = DestinationCache(fake_logs_client)

    await cache.create_group("g")
    await cache.create_stream("g", "s")

    assert cache.is_group_known("g")
    assert cache.tokens.is_known("g", "s")
    assert cache.tokens.get("g", "s") is None
    assert "s" in fake_logs_client.groups["g"]


@pytest.mark.asyncio
async def test_create_group_race_is_success(
    fake_logs_client: FakeLogsClient, capture_diagnostics: list[dict[str, Any]]
) -> None:
    fake_logs_client.add_group("g")
    cache = DestinationCache(fake_logs_client)

    await cache.create_group("g")

    assert cache.is_group_known("g")
    assert any(p["message"] == "log group already exists" for p in capture_diagnostics)


@pytest.mark.asyncio
async def test_create_stream_race_picks_up_token(
    fake_logs_client: FakeLogsClient, capture_diagnostics: list[dict[str, Any]]
) -> None:
    fake_logs_client.add_stream("g", "s", token="theirs")
    cache = DestinationCache(fake_logs_client)
    await cache.ensure_group_exists("g")

    await cache.create_stream("g", "s")

    assert cache.tokens.get("g", "s") == "theirs"
    assert any(
        p["level"] == "WARNING" and p["message"] == "log stream already exists"
        for p in capture_diagnostics
    )


@pytest.mark.asyncio
async def test_create_failure_propagates(fake_logs_client: FakeLogsClient) -> None:
    fake_logs_client.fail_next("create_group", RemoteErrorCode.OTHER, "denied")
    cache = DestinationCache(fake_logs_client)

    with pytest.raises(RemoteServiceError) as exc_info:
        await cache.create_group("g")
    assert exc_info.value.code is RemoteErrorCode.OTHER
    assert not cache.is_group_known("g")


def test_token_cache_store_get_invalidate() -> None:
    state: dict[str, dict[str, str | None]] = {"g": {}}
    tokens = SequenceTokenCache(state)

    tokens.store("g", "s", "t1")
    assert tokens.get("g", "s") == "t1"
    tokens.store("g", "s", "t1")
    assert tokens.get("g", "s") == "t1"

    tokens.invalidate("g", "s")
    assert tokens.get("g", "s") is None
    assert not tokens.is_known("g", "s")
    # Group existence survives token invalidation
    assert "g" in state


def test_token_cache_known_without_token() -> None:
    tokens = SequenceTokenCache({})
    tokens.mark_known("g", "s")
    assert tokens.is_known("g", "s")
    assert tokens.get("g", "s") is None
    assert tokens.get("other", "s") is None
