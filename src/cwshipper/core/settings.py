"""
Configuration models for cwshipper using Pydantic v2 Settings.

Settings are namespaced (``aws``, ``naming``, ``limits``, ``core``) and can be
supplied from the environment with the ``CWSHIPPER_`` prefix and ``__`` as the
nested delimiter, e.g. ``CWSHIPPER_NAMING__LOG_GROUP_NAME=app``.

Per-field constraints are enforced here. The "exactly one naming policy per
axis" rule spans several fields and is enforced when the classifier resolves
its policies (see ``cwshipper.core.classifier.resolve_axis_policy``).
"""

from __future__ import annotations

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import (  # type: ignore[import-not-found]
    BaseSettings,
    SettingsConfigDict,
)

from .events import DEFAULT_MAX_EVENTS_PER_BATCH

LATEST_CONFIG_SCHEMA_VERSION = "1.0"


class AwsSettings(BaseModel):
    """Credentials and transport options for the remote client."""

    aws_key_id: str | None = Field(default=None, description="Access key id")
    aws_sec_key: SecretStr | None = Field(default=None, description="Secret key")
    region: str | None = Field(default=None, description="Service region")
    http_proxy: str | None = Field(
        default=None, description="Proxy URL for outbound requests"
    )


class NamingSettings(BaseModel):
    """Destination naming options; exactly one policy per axis must be chosen."""

    log_group_name: str | None = Field(
        default=None, description="Fixed group name for every record"
    )
    use_tag_as_group: bool = Field(
        default=False, description="Use the record's routing tag as the group name"
    )
    log_group_name_key: str | None = Field(
        default=None, description="Record field holding the group name"
    )
    remove_log_group_name_key: bool = Field(
        default=False,
        description="Delete log_group_name_key from the record after extraction",
    )
    log_stream_name: str | None = Field(
        default=None, description="Fixed stream name for every record"
    )
    use_tag_as_stream: bool = Field(
        default=False, description="Use the record's routing tag as the stream name"
    )
    log_stream_name_key: str | None = Field(
        default=None, description="Record field holding the stream name"
    )
    remove_log_stream_name_key: bool = Field(
        default=False,
        description="Delete log_stream_name_key from the record after extraction",
    )


class LimitSettings(BaseModel):
    """Numeric limits applied while building append batches."""

    max_events_per_batch: int = Field(
        default=DEFAULT_MAX_EVENTS_PER_BATCH,
        ge=1,
        le=DEFAULT_MAX_EVENTS_PER_BATCH,
        description="Maximum number of events in a single append request",
    )
    max_message_length: int | None = Field(
        default=None,
        ge=1,
        description="Truncate messages to this many characters (None = no limit)",
    )
    max_list_pages: int = Field(
        default=100,
        ge=1,
        description="Maximum listing pages fetched while searching a group or stream",
    )


class CoreSettings(BaseModel):
    """Behavioral toggles for the ingestion core."""

    auto_create_stream: bool = Field(
        default=False,
        description="Create missing groups and streams instead of dropping batches",
    )
    message_keys: str | None = Field(
        default=None,
        description=(
            "Comma-separated record fields joined with spaces to form the message; "
            "when unset the whole record is serialized as JSON"
        ),
    )
    enable_metrics: bool = Field(
        default=False, description="Enable Prometheus-compatible metrics"
    )
    internal_logging_enabled: bool = Field(
        default=False, description="Emit DEBUG diagnostics for internal operations"
    )

    @field_validator("message_keys")
    @classmethod
    def _strip_message_keys(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @property
    def message_key_list(self) -> list[str]:
        if not self.message_keys:
            return []
        return [k.strip() for k in self.message_keys.split(",") if k.strip()]


class Settings(BaseSettings):
    """Top-level configuration model."""

    schema_version: str = Field(default=LATEST_CONFIG_SCHEMA_VERSION)

    aws: AwsSettings = Field(default_factory=AwsSettings)
    naming: NamingSettings = Field(default_factory=NamingSettings)
    limits: LimitSettings = Field(default_factory=LimitSettings)
    core: CoreSettings = Field(default_factory=CoreSettings)

    model_config = SettingsConfigDict(
        env_prefix="CWSHIPPER_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    def to_dict(self) -> dict[str, object]:
        from typing import cast

        return cast(
            dict[str, object],
            self.model_dump(by_alias=True, exclude_none=True),
        )
