"""Runtime settings.

Only one knob today: how long a new order waits in PENDING before it is
moved to PROCESSING automatically.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta

from orderflow.domain.exceptions import ValidationError

DEFAULT_PROCESSING_DELAY = timedelta(minutes=5)
PROCESSING_DELAY_ENV = "ORDERFLOW_PROCESSING_DELAY_SECONDS"


@dataclass(frozen=True)
class Settings:

    processing_delay: timedelta = DEFAULT_PROCESSING_DELAY

    def __post_init__(self) -> None:
        if not isinstance(self.processing_delay, timedelta):
            raise ValidationError("processing_delay must be a timedelta")
        if self.processing_delay <= timedelta(0):
            raise ValidationError(
                f"Processing delay must be positive, got {self.processing_delay}"
            )

    @staticmethod
    def from_seconds(seconds: float) -> Settings:
        return Settings(processing_delay=timedelta(seconds=seconds))

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> Settings:
        """Read settings from the environment, falling back to defaults."""
        env = os.environ if environ is None else environ
        raw = env.get(PROCESSING_DELAY_ENV)
        if raw is None or not raw.strip():
            return Settings()
        try:
            seconds = float(raw)
        except ValueError as exc:
            raise ValidationError(
                f"{PROCESSING_DELAY_ENV} must be a number of seconds, got {raw!r}"
            ) from exc
        return Settings.from_seconds(seconds)
