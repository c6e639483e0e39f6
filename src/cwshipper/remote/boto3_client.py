"""
boto3-backed ``LogsClient``.

Every SDK call is blocking, so it runs through ``asyncio.to_thread``.
``botocore`` ``ClientError`` codes are mapped to ``RemoteErrorCode``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Sequence

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..core.errors import RemoteErrorCode, RemoteServiceError
from ..core.events import LogEvent
from ..core.settings import AwsSettings
from .client import GroupPage, PutEventsResult, StreamInfo, StreamPage


def _to_remote_error(operation: str, exc: Exception) -> RemoteServiceError:
    if isinstance(exc, ClientError):
        error = exc.response.get("Error", {})
        code = RemoteErrorCode.from_code(error.get("Code"))
        message = error.get("Message") or str(exc)
    else:
        code = RemoteErrorCode.OTHER
        message = str(exc)
    return RemoteServiceError(message, code=code, operation=operation, cause=exc)


def build_boto3_client(settings: AwsSettings) -> Any:
    """Create the SDK ``logs`` client from credentials, region and proxy."""
    kwargs: dict[str, Any] = {}
    if settings.aws_key_id and settings.aws_sec_key:
        kwargs["aws_access_key_id"] = settings.aws_key_id
        kwargs["aws_secret_access_key"] = settings.aws_sec_key.get_secret_value()
    if settings.region:
        kwargs["region_name"] = settings.region
    if settings.http_proxy:
        kwargs["config"] = Config(
            proxies={"http": settings.http_proxy, "https": settings.http_proxy}
        )
    return boto3.client("logs", **kwargs)


class Boto3LogsClient:
    name = "boto3"

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    async def from_settings(cls, settings: AwsSettings) -> Boto3LogsClient:
        client = await asyncio.to_thread(build_boto3_client, settings)
        return cls(client)

    async def _call(self, operation: str, fn: Callable[..., Any], **kwargs: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, **kwargs)
        except (ClientError, BotoCoreError) as exc:
            raise _to_remote_error(operation, exc) from exc

    async def list_groups(self, cursor: str | None = None) -> GroupPage:
        kwargs: dict[str, Any] = {}
        if cursor:
            kwargs["nextToken"] = cursor
        resp = await self._call(
            "describe_log_groups", self._client.describe_log_groups, **kwargs
        )
        return GroupPage(
            names=[g["logGroupName"] for g in resp.get("logGroups", [])],
            next_cursor=resp.get("nextToken"),
        )

    async def list_streams(self, group: str, cursor: str | None = None) -> StreamPage:
        kwargs: dict[str, Any] = {"logGroupName": group}
        if cursor:
            kwargs["nextToken"] = cursor
        resp = await self._call(
            "describe_log_streams", self._client.describe_log_streams, **kwargs
        )
        return StreamPage(
            streams=[
                StreamInfo(s["logStreamName"], s.get("uploadSequenceToken"))
                for s in resp.get("logStreams", [])
            ],
            next_cursor=resp.get("nextToken"),
        )

    async def create_group(self, group: str) -> None:
        await self._call(
            "create_log_group", self._client.create_log_group, logGroupName=group
        )

    async def create_stream(self, group: str, stream: str) -> None:
        await self._call(
            "create_log_stream",
            self._client.create_log_stream,
            logGroupName=group,
            logStreamName=stream,
        )

    async def put_events(
        self,
        group: str,
        stream: str,
        events: Sequence[LogEvent],
        sequence_token: str | None = None,
    ) -> PutEventsResult:
        kwargs: dict[str, Any] = {
            "logGroupName": group,
            "logStreamName": stream,
            "logEvents": [e.to_dict() for e in events],
        }
        if sequence_token is not None:
            kwargs["sequenceToken"] = sequence_token
        resp = await self._call(
            "put_log_events", self._client.put_log_events, **kwargs
        )
        return PutEventsResult(resp.get("nextSequenceToken"))
