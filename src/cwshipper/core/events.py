"""
Event types shipped to the remote log service.

``LogEvent`` is the unit of an append request; ``DestinationKey`` names the
(group, stream) it is appended to; ``IncomingRecord`` is what the upstream
buffering layer hands over for one cycle.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, NamedTuple, Sequence

import orjson

# Remote append limits
MAX_BATCH_BYTES = 1_048_576
EVENT_OVERHEAD_BYTES = 26
MAX_BATCH_SPAN_MS = 24 * 60 * 60 * 1000
DEFAULT_MAX_EVENTS_PER_BATCH = 10_000


class DestinationKey(NamedTuple):
    group: str
    stream: str

    def __str__(self) -> str:
        return f"{self.group}/{self.stream}"


class IncomingRecord(NamedTuple):
    """Upstream triple; ``time`` is in seconds since the epoch."""

    tag: str
    time: int | float
    record: Mapping[str, Any]


@dataclass(frozen=True)
class LogEvent:
    timestamp: int  # milliseconds since epoch
    message: str

    @property
    def byte_cost(self) -> int:
        """Bytes this event counts against the batch size limit."""
        return len(self.message.encode("utf-8")) + EVENT_OVERHEAD_BYTES

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp, "message": self.message}


def to_millis(time_seconds: int | float) -> int:
    return int(round(time_seconds * 1000))


def _json_default(obj: Any) -> Any:
    if hasattr(obj, "model_dump"):
        return obj.model_dump(exclude_none=True)
    return str(obj)


def format_message(
    record: Mapping[str, Any],
    *,
    message_keys: Sequence[str] = (),
    max_length: int | None = None,
) -> str:
    """Render a record as the event message.

    With ``message_keys`` the listed fields are joined by a single space
    (missing fields render empty); otherwise the record is serialized to JSON.
    Invalid UTF-8 is replaced and the result optionally truncated to
    ``max_length`` characters.
    """
    if message_keys:
        parts = []
        for key in message_keys:
            value = record.get(key)
            parts.append("" if value is None else str(value))
        message = " ".join(parts)
    else:
        try:
            message = orjson.dumps(
                dict(record), default=_json_default, option=orjson.OPT_NON_STR_KEYS
            ).decode("utf-8")
        except orjson.JSONEncodeError:
            # orjson rejects lone surrogates; the replace step below handles them
            message = json.dumps(
                dict(record),
                default=_json_default,
                separators=(",", ":"),
                ensure_ascii=False,
            )

    message = message.encode("utf-8", errors="replace").decode("utf-8")
    if max_length is not None:
        message = message[:max_length]
    return message


def make_event(
    incoming_time: int | float,
    record: Mapping[str, Any],
    *,
    message_keys: Sequence[str] = (),
    max_length: int | None = None,
) -> LogEvent:
    return LogEvent(
        timestamp=to_millis(incoming_time),
        message=format_message(
            record, message_keys=message_keys, max_length=max_length
        ),
    )
