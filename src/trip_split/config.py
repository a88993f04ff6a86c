"""Configuration management for TripSplit."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TRIP_SPLIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Display
    currency_symbol: str = "₱"

    # Raise on a broken settlement sweep instead of returning a partial plan
    strict_settlement: bool = True

    # Default ledger file for the CLI
    ledger_path: Path = Path("ledger.json")


def load_settings() -> Settings:
    """Load application settings from environment variables."""
    try:
        return Settings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load settings. Check the TRIP_SPLIT_* environment "
            f"variables and your .env file.\n"
            f"Error: {e}"
        ) from e
