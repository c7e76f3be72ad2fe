"""Tests for Settings validation."""

import pytest
from pydantic import ValidationError

from operations.core.config import Settings, get_settings


def test_defaults() -> None:
    settings = Settings()
    assert settings.max_processing_attempts == 5
    assert settings.event_claim_batch_size == 10
    assert settings.event_visibility_timeout_seconds == 300
    assert settings.document_resubmission_allowed is False
    assert settings.tenant_header_name == "X-Tenant-ID"
    assert settings.worker_name


@pytest.mark.parametrize(
    "field",
    [
        "max_processing_attempts",
        "event_claim_batch_size",
        "event_visibility_timeout_seconds",
        "event_poll_interval_seconds",
    ],
)
def test_non_positive_queue_settings_rejected(field: str) -> None:
    with pytest.raises(ValidationError):
        Settings(**{field: 0})


def test_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MAX_PROCESSING_ATTEMPTS", "3")
    monkeypatch.setenv("DOCUMENT_RESUBMISSION_ALLOWED", "true")
    get_settings.cache_clear()
    settings = get_settings()
    assert settings.max_processing_attempts == 3
    assert settings.document_resubmission_allowed is True
