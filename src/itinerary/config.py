"""Itinerary configuration loaded from environment variables."""

from datetime import date

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class ItineraryConfig(BaseSettings):
    """Itinerary configuration loaded from environment variables.

    Settings are loaded from environment variables with sensible defaults.
    For local development, create a .env file in the project root.
    """

    # Dataset
    dataset_source: str = Field(
        default="data/itinerary_data.json",
        description="Path or http(s) URL of the itinerary dataset JSON",
    )
    fetch_timeout_seconds: float = Field(
        default=30,
        description="Timeout for fetching the dataset over HTTP",
    )

    # Persistence
    state_file: str = Field(
        default="data/state/itinerary_state.json",
        description="JSON file backing the key-value store for user edits",
    )
    assignments_key: str = Field(
        default="ahr-assignments",
        description="Key under which the assignment map is persisted",
    )
    notes_key: str = Field(
        default="ahr-company-notes",
        description="Key under which the company notes map is persisted",
    )

    # Calendar
    event_day_dates: dict[str, date] = Field(
        default_factory=lambda: {
            "monday": date(2026, 2, 2),
            "tuesday": date(2026, 2, 3),
        },
        description="Day label -> calendar date (JSON object in env)",
    )
    calendar_product_id: str = Field(
        default="-//AHR Expo 2026//EN",
        description="PRODID written into exported calendars",
    )
    default_location: str = Field(
        default="Las Vegas Convention Center",
        description="LOCATION used when an event has neither booth nor location",
    )

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @field_validator("event_day_dates")
    @classmethod
    def _normalise_day_labels(cls, value: dict[str, date]) -> dict[str, date]:
        # Event days are matched case-insensitively
        return {day.strip().lower(): when for day, when in value.items()}

    model_config = {
        "env_prefix": "ITINERARY_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# Singleton pattern
_config: ItineraryConfig | None = None


def get_config() -> ItineraryConfig:
    """Get the itinerary configuration singleton.

    Returns:
        ItineraryConfig: Itinerary configuration instance
    """
    global _config
    if _config is None:
        _config = ItineraryConfig()
    return _config
