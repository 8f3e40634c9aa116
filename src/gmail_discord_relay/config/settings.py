"""Configuration via pydantic-settings with .env support."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gmail_discord_relay.core.exceptions import ConfigurationError


class RelaySettings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Discord
    bot_token: SecretStr | None = None
    channel_id: int | None = None

    # Gmail sender filter
    email_sender: str | None = None

    # OAuth credentials
    credentials_path: Path = Path("credentials.json")
    token_path: Path = Path("token.json")
    oauth_port: int = 0

    # Polling
    poll_interval_seconds: float = Field(default=10.0, gt=0)
    max_results_per_poll: int = Field(default=1, ge=1, le=500)
    mark_read_on_failure: bool = True

    # Embed formatting
    embed_color: str = "#34d399"
    time_format: str = "%Y-%m-%d %H:%M:%S"

    # Rate limiting & retry
    max_retries: int = 3
    initial_backoff_seconds: float = 1.0
    max_backoff_seconds: float = 30.0
    num_retries: int = 2

    # Logging
    log_level: str = "INFO"

    @field_validator("embed_color")
    @classmethod
    def _check_color(cls, value: str) -> str:
        digits = value.removeprefix("#")
        if len(digits) != 6:
            raise ValueError(f"embed_color must be a 6-digit hex colour, got {value!r}")
        int(digits, 16)
        return f"#{digits.lower()}"

    def require(self, *names: str) -> None:
        """Fail fast when settings needed by a command are unset.

        Raises:
            ConfigurationError: Naming every missing environment variable.
        """
        missing = []
        for name in names:
            value = getattr(self, name)
            if isinstance(value, SecretStr):
                value = value.get_secret_value()
            if value is None or value == "":
                missing.append(name.upper())
        if missing:
            raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")

    def ensure_directories(self) -> None:
        """Create the token cache directory if it doesn't exist."""
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
