"""Runtime settings for the ledger.

Values come from (lowest to highest precedence) the defaults below, an
optional YAML file, a ``.env`` file and ``KUDOS_*`` environment variables.
"""

from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="KUDOS_", env_file=".env", extra="ignore")

    # Storage / identity
    home: Path = Field(default_factory=lambda: Path.home() / ".kudos")
    owner: str = "owner"
    identity: str = ""  # default acting identity for the CLI

    # Supply
    max_supply: int = 1_000_000_000
    compliment_reward: int = 10
    recipient_bonus: int = 5
    like_reward: int = 1
    coupled_rewards: bool = True  # gate giver reward + recipient bonus as one unit

    # Reputation points
    giver_reputation: int = 10
    recipient_reputation: int = 15
    like_reputation: int = 2

    # Limits
    daily_limit: int = 5
    rate_window_seconds: int = 24 * 60 * 60
    max_message_bytes: int = 280
    max_page_size: int = 50

    # App
    log_level: str = "INFO"

    @property
    def rate_window(self) -> timedelta:
        return timedelta(seconds=self.rate_window_seconds)


def load_settings(path: str | Path | None = None) -> Settings:
    """Build settings, reading *path* (YAML) first when given.

    Environment variables still win over values from the file.
    """
    if path is None:
        return Settings()

    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")

    # Init kwargs outrank env in pydantic-settings, so drop keys the env sets.
    env = {k.upper() for k in os.environ}
    overridden = {name for name in Settings.model_fields if f"KUDOS_{name}".upper() in env}
    return Settings(**{k: v for k, v in data.items() if k not in overridden})


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading ``KUDOS_CONFIG`` if set."""
    global _settings
    if _settings is None:
        _settings = load_settings(os.environ.get("KUDOS_CONFIG") or None)
    return _settings


def reset_settings() -> None:
    """Forget the cached settings."""
    global _settings
    _settings = None
