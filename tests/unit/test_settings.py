from __future__ import annotations

import pytest
from pydantic import ValidationError

from cwshipper.core.settings import Settings


def test_defaults() -> None:
    settings = Settings()
    assert settings.limits.max_events_per_batch == 10_000
    assert settings.limits.max_message_length is None
    assert settings.limits.max_list_pages == 100
    assert settings.core.auto_create_stream is False
    assert settings.core.message_key_list == []


def test_env_nested_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CWSHIPPER_NAMING__LOG_GROUP_NAME", "app")
    monkeypatch.setenv("CWSHIPPER_NAMING__USE_TAG_AS_STREAM", "true")
    monkeypatch.setenv("CWSHIPPER_CORE__AUTO_CREATE_STREAM", "1")
    monkeypatch.setenv("CWSHIPPER_LIMITS__MAX_EVENTS_PER_BATCH", "500")

    settings = Settings()

    assert settings.naming.log_group_name == "app"
    assert settings.naming.use_tag_as_stream is True
    assert settings.core.auto_create_stream is True
    assert settings.limits.max_events_per_batch == 500


def test_message_keys_parsed() -> None:
    settings = Settings(core={"message_keys": " level, message ,,"})
    assert settings.core.message_key_list == ["level", "message"]


def test_blank_message_keys_means_json() -> None:
    settings = Settings(core={"message_keys": "  "})
    assert settings.core.message_keys is None
    assert settings.core.message_key_list == []


@pytest.mark.parametrize("value", [0, 10_001])
def test_max_events_per_batch_bounds(value: int) -> None:
    with pytest.raises(ValidationError):
        Settings(limits={"max_events_per_batch": value})


def test_secret_not_exposed_in_repr() -> None:
    settings = Settings(aws={"aws_key_id": "AKIA", "aws_sec_key": "hunter2"})
    assert "hunter2" not in repr(settings)
    assert settings.aws.aws_sec_key is not None
    assert settings.aws.aws_sec_key.get_secret_value() == "hunter2"
