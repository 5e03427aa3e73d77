"""Hi Tek dashboard configuration management.

Loads configuration from environment variables with sensible defaults.
The only required value is the address of the spreadsheet proxy.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


@dataclass
class ProxyConfig:
    """Remote spreadsheet proxy connection settings."""

    url: str
    timeout_seconds: float = 30.0


@dataclass
class SessionConfig:
    """Session marker (login cookie) settings."""

    cookie_name: str = "hitek_session"
    max_age_seconds: int = 8 * 3600  # one working day
    auth_disabled: bool = False


@dataclass
class DisplayConfig:
    """Presentation defaults (Indian locale, rupee amounts)."""

    currency_symbol: str = "₹"
    recent_expenses_limit: int = 10


@dataclass
class AppConfig:
    """Root application configuration.

    Loads from environment variables with fail-fast on missing required values.
    """

    proxy: ProxyConfig
    log_level: str = "INFO"
    json_logs: bool = False

    # Attribution stored on every expense entered through this app
    recorded_by: str = "User (App)"

    # Reject out-of-order task progress writes
    enforce_task_sequence: bool = True

    session: SessionConfig = field(default_factory=SessionConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    @classmethod
    def from_env(cls) -> AppConfig:
        """Load configuration from environment variables.

        Required environment variables:
        - SHEET_API_URL: spreadsheet proxy endpoint

        Optional (with defaults):
        - SHEET_API_TIMEOUT: request timeout in seconds (default: 30)
        - LOG_LEVEL: logging verbosity (default: "INFO")
        - JSON_LOGS: emit JSON log lines (default: false)
        - RECORDED_BY, ENFORCE_TASK_SEQUENCE, SESSION_*, AUTH_DISABLED,
          CURRENCY_SYMBOL

        Raises:
            KeyError: If required environment variables are missing
        """
        sheet_api_url = os.environ.get("SHEET_API_URL")
        if not sheet_api_url:
            raise KeyError(
                "SHEET_API_URL environment variable is required. "
                "Example: https://dashboard.example.com/api"
            )

        return cls(
            proxy=ProxyConfig(
                url=sheet_api_url,
                timeout_seconds=float(os.getenv("SHEET_API_TIMEOUT", "30")),
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            json_logs=os.getenv("JSON_LOGS", "false").lower() == "true",
            recorded_by=os.getenv("RECORDED_BY", "User (App)"),
            enforce_task_sequence=os.getenv("ENFORCE_TASK_SEQUENCE", "true").lower()
            == "true",
            session=SessionConfig(
                cookie_name=os.getenv("SESSION_COOKIE_NAME", "hitek_session"),
                max_age_seconds=int(os.getenv("SESSION_MAX_AGE", "28800")),
                auth_disabled=os.getenv("AUTH_DISABLED", "false").lower() == "true",
            ),
            display=DisplayConfig(
                currency_symbol=os.getenv("CURRENCY_SYMBOL", "₹"),
            ),
        )


# Singleton instance (lazy-loaded)
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get or create singleton AppConfig instance from environment.

    Returns:
        AppConfig: Application configuration

    Raises:
        KeyError: If required environment variables are missing
    """
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next call re-reads the environment."""
    global _config
    _config = None
