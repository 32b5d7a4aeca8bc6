"""Application configuration using pydantic-settings."""

import re
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

# Highest supported frequencyPerDay; the window must fit this many doses.
MAX_DOSES_PER_DAY = 4


def hhmm_to_minutes(value: str) -> int:
    """Convert an "HH:MM" string to minutes after midnight."""
    match = HHMM_PATTERN.match(value)
    if not match:
        raise ValueError(f"Invalid time of day: {value!r} (expected HH:MM)")
    return int(match.group(1)) * 60 + int(match.group(2))


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Dosing window [start, end)
    dosing_window_start: str = "08:00"
    dosing_window_end: str = "22:00"

    # Scheduling resolution
    time_granularity_minutes: int = 5
    shift_step_minutes: int = 15

    # Extra interaction rules merged into the built-in catalog
    interaction_catalog_file: Path | None = None

    @field_validator("dosing_window_start", "dosing_window_end")
    @classmethod
    def check_time_format(cls, value: str) -> str:
        """Validate HH:MM window bounds."""
        hhmm_to_minutes(value)
        return value

    @field_validator("time_granularity_minutes", "shift_step_minutes")
    @classmethod
    def check_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive number of minutes")
        return value

    @model_validator(mode="after")
    def check_window(self) -> "Settings":
        """Validate that the window can hold every supported dosing frequency."""
        if self.window_end_minutes <= self.window_start_minutes:
            raise ValueError("dosing_window_end must be later than dosing_window_start")
        if self.window_start_minutes % self.time_granularity_minutes:
            raise ValueError(
                "dosing_window_start must fall on a time_granularity_minutes boundary"
            )
        if self.shift_step_minutes % self.time_granularity_minutes:
            raise ValueError("shift_step_minutes must be a multiple of time_granularity_minutes")
        if self.window_width_minutes < MAX_DOSES_PER_DAY * self.time_granularity_minutes:
            raise ValueError(
                f"Dosing window is too narrow for {MAX_DOSES_PER_DAY} doses "
                f"at {self.time_granularity_minutes}-minute granularity"
            )
        return self

    @property
    def window_start_minutes(self) -> int:
        """Start of the dosing window in minutes after midnight."""
        return hhmm_to_minutes(self.dosing_window_start)

    @property
    def window_end_minutes(self) -> int:
        """Exclusive end of the dosing window in minutes after midnight."""
        return hhmm_to_minutes(self.dosing_window_end)

    @property
    def window_width_minutes(self) -> int:
        return self.window_end_minutes - self.window_start_minutes


settings = Settings()
