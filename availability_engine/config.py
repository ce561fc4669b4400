"""
Configuration management using Pydantic models loaded from YAML.
"""

import os
from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, field_validator

from .domain.summarizer import SummaryStyle

DEFAULT_TIMEZONES = [
    "America/New_York",
    "America/Chicago",
    "America/Denver",
    "America/Los_Angeles",
    "America/Anchorage",
    "Pacific/Honolulu",
    "Europe/London",
    "Europe/Paris",
    "Europe/Berlin",
    "Asia/Tokyo",
    "Asia/Shanghai",
    "Australia/Sydney",
]


class AppConfig(BaseModel):
    """Application configuration."""
    api_base_url: str = "http://localhost:8000"
    api_token: str | None = None
    owner_id: str = "me"
    timezone: str = "America/New_York"
    request_timeout: float = 30
    summary_style: SummaryStyle = SummaryStyle.GROUPED
    timezones: List[str] = Field(default_factory=lambda: list(DEFAULT_TIMEZONES))

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        """Ensure the request timeout is positive."""
        if value <= 0:
            raise ValueError("request_timeout must be greater than zero")
        return value

    @field_validator("owner_id")
    @classmethod
    def validate_owner_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("owner_id must not be blank")
        return value.strip()

    @field_validator("timezones")
    @classmethod
    def validate_timezones(cls, value: List[str]) -> List[str]:
        """Drop duplicate zone names, keeping order."""
        seen: set[str] = set()
        deduped: List[str] = []
        for zone in value:
            if zone not in seen:
                deduped.append(zone)
                seen.add(zone)
        return deduped

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


CONFIG_ENV_VAR = "AVAILABILITY_CONFIG"
CONFIG_FILE_NAME = "config.yaml"


def get_default_config_path() -> Path:
    """
    Config file used when no --config is given.

    $AVAILABILITY_CONFIG wins, then config.yaml in the working directory,
    then ~/.config/availability/config.yaml.
    """
    explicit = os.environ.get(CONFIG_ENV_VAR)
    if explicit:
        return Path(explicit).expanduser()

    local = Path.cwd() / CONFIG_FILE_NAME
    if local.exists():
        return local

    return Path.home() / ".config" / "availability" / CONFIG_FILE_NAME
