"""Tests for runtime settings."""

from datetime import timedelta

import pytest

from orderflow.domain.exceptions import ValidationError
from orderflow.infrastructure.config import (
    DEFAULT_PROCESSING_DELAY,
    PROCESSING_DELAY_ENV,
    Settings,
)


class TestSettings:

    def test_default_delay_is_five_minutes(self):
        assert Settings().processing_delay == timedelta(minutes=5)
        assert DEFAULT_PROCESSING_DELAY == timedelta(minutes=5)

    def test_from_seconds(self):
        assert Settings.from_seconds(0.05).processing_delay == timedelta(milliseconds=50)

    @pytest.mark.parametrize("seconds", [0, -1])
    def test_non_positive_delay_rejected(self, seconds):
        with pytest.raises(ValidationError, match="must be positive"):
            Settings.from_seconds(seconds)


class TestFromEnv:

    def test_missing_variable_uses_default(self):
        assert Settings.from_env({}) == Settings()

    def test_blank_variable_uses_default(self):
        assert Settings.from_env({PROCESSING_DELAY_ENV: "  "}) == Settings()

    def test_reads_seconds(self):
        settings = Settings.from_env({PROCESSING_DELAY_ENV: "1.5"})
        assert settings.processing_delay == timedelta(seconds=1.5)

    def test_non_numeric_rejected(self):
        with pytest.raises(ValidationError, match="number of seconds"):
            Settings.from_env({PROCESSING_DELAY_ENV: "soon"})

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv(PROCESSING_DELAY_ENV, "2")
        assert Settings.from_env().processing_delay == timedelta(seconds=2)
