"""
Destination classification.

Each axis (group, stream) is configured with exactly one naming policy:

- ``FIXED``: a configured name
- ``TAG``: the record's routing tag
- ``FIELD``: a named field of the record
- ``FIELD_REMOVE``: a named field of the record, removed after extraction

Policies are resolved once from ``NamingSettings``; classification then just
applies the resolved ``AxisPolicy`` objects to every record.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from .errors import ConfigurationError
from .events import DestinationKey
from .settings import NamingSettings

__all__ = [
    "AxisPolicy",
    "Classifier",
    "NamingPolicy",
    "resolve_axis_policy",
]


class NamingPolicy(str, Enum):
    FIXED = "fixed"
    TAG = "tag"
    FIELD = "field"
    FIELD_REMOVE = "field_remove"


@dataclass(frozen=True)
class AxisPolicy:
    policy: NamingPolicy
    value: str | None = None  # fixed name or field key; unused for TAG

    def resolve(
        self, tag: str, record: Mapping[str, Any]
    ) -> tuple[str | None, Mapping[str, Any]]:
        """Return the axis name and the (possibly copied) record."""
        if self.policy is NamingPolicy.FIXED:
            return self.value, record
        if self.policy is NamingPolicy.TAG:
            return tag, record
        assert self.value is not None
        name = record.get(self.value)
        if self.policy is NamingPolicy.FIELD_REMOVE and self.value in record:
            record = {k: v for k, v in record.items() if k != self.value}
        return (None if name is None else str(name)), record


def resolve_axis_policy(
    axis: str,
    *,
    fixed_name: str | None,
    use_tag: bool,
    field_key: str | None,
    remove_field: bool,
) -> AxisPolicy:
    """Pick the single configured policy for one axis.

    Raises:
        ConfigurationError: when zero or more than one policy is configured.
    """
    selected = [
        name
        for name, chosen in (
            (f"log_{axis}_name", fixed_name is not None),
            (f"use_tag_as_{axis}", use_tag),
            (f"log_{axis}_name_key", field_key is not None),
        )
        if chosen
    ]
    if len(selected) != 1:
        raise ConfigurationError(
            f"Set only one of log_{axis}_name, use_tag_as_{axis} "
            f"and log_{axis}_name_key",
            axis=axis,
            selected=selected,
        )
    if fixed_name is not None:
        return AxisPolicy(NamingPolicy.FIXED, fixed_name)
    if use_tag:
        return AxisPolicy(NamingPolicy.TAG)
    policy = NamingPolicy.FIELD_REMOVE if remove_field else NamingPolicy.FIELD
    return AxisPolicy(policy, field_key)


class Classifier:
    """Maps ``(tag, record)`` to a ``DestinationKey``."""

    def __init__(self, group: AxisPolicy, stream: AxisPolicy) -> None:
        self.group = group
        self.stream = stream

    @classmethod
    def from_settings(cls, naming: NamingSettings) -> Classifier:
        group = resolve_axis_policy(
            "group",
            fixed_name=naming.log_group_name,
            use_tag=naming.use_tag_as_group,
            field_key=naming.log_group_name_key,
            remove_field=naming.remove_log_group_name_key,
        )
        stream = resolve_axis_policy(
            "stream",
            fixed_name=naming.log_stream_name,
            use_tag=naming.use_tag_as_stream,
            field_key=naming.log_stream_name_key,
            remove_field=naming.remove_log_stream_name_key,
        )
        return cls(group, stream)

    def classify(
        self, tag: str, record: Mapping[str, Any]
    ) -> tuple[DestinationKey | None, Mapping[str, Any]]:
        """Return the destination and the record to format.

        The input record is never mutated; removal policies return a copy.
        The key is ``None`` when a field-based policy finds no value.
        """
        group, record = self.group.resolve(tag, record)
        stream, record = self.stream.resolve(tag, record)
        if group is None or stream is None:
            return None, record
        return DestinationKey(group, stream), record
