"""
Configuration - environment driven settings

Values come from the process environment; a local .env file is loaded
first when present so scheduled runs and tests can share the same setup.
"""
import os
from dataclasses import dataclass
from typing import Optional, Mapping

from dotenv import load_dotenv


DEFAULT_PACE_SECONDS = 1.0


class ConfigurationError(Exception):
    """Raised when a required setting is missing."""


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings."""
    table_name: str
    region: Optional[str] = None
    secondary_region: Optional[str] = None
    pace_seconds: float = DEFAULT_PACE_SECONDS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Raises:
            ConfigurationError: AMAZON_DYNAMODB_TABLE is not set
        """
        env = os.environ if environ is None else environ

        table_name = (env.get("AMAZON_DYNAMODB_TABLE") or "").strip()
        if not table_name:
            raise ConfigurationError("AMAZON_DYNAMODB_TABLE is required")

        # AMAZON_REGION is the older name, still honoured
        region = env.get("AMAZON_MAIN_REGION") or env.get("AMAZON_REGION") or None
        secondary_region = env.get("AMAZON_SECONDARY_REGION") or None
        if secondary_region and secondary_region == region:
            secondary_region = None

        try:
            pace_seconds = float(env.get("INVITE_LINKS_PACE_SECONDS", DEFAULT_PACE_SECONDS))
        except ValueError:
            raise ConfigurationError("INVITE_LINKS_PACE_SECONDS must be a number")
        if pace_seconds < 0:
            raise ConfigurationError("INVITE_LINKS_PACE_SECONDS must not be negative")

        return cls(
            table_name=table_name,
            region=region,
            secondary_region=secondary_region,
            pace_seconds=pace_seconds,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )


def get_api_key(environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """
    Shared secret expected from callers.

    Read on its own so requests can be authenticated before the rest of
    the configuration is resolved.
    """
    env = os.environ if environ is None else environ
    return env.get("API_KEY") or None


def load_settings(env_path: Optional[str] = None) -> Settings:
    """Load .env (if any) and resolve settings from the environment."""
    load_dotenv(env_path)
    return Settings.from_env()
