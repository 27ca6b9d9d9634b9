"""Centralised settings for the price feed service.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("PRICEFEED_WORKSPACE", Path.home() / ".pricefeed_data")
        )
    )
    database_path: str = field(
        default_factory=lambda: os.environ.get("DATABASE_PATH", "")
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite database file."""
        if self.database_path:
            return Path(self.database_path)
        return self.workspace_dir / "prices.db"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Scraper
    # ------------------------------------------------------------------
    scrape_url: str = field(default_factory=lambda: os.environ.get("URL", ""))
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "USER_AGENT",
            "Mozilla/5.0 (compatible; PriceFeed-Bot/1.0)",
        )
    )

    # ------------------------------------------------------------------
    # Scheduler
    # ------------------------------------------------------------------
    scrape_cron: str = field(
        default_factory=lambda: os.environ.get("SCRAPE_CRON", "10 3 * * *")
    )
    scrape_timezone: str = field(
        default_factory=lambda: os.environ.get("SCRAPE_TIMEZONE", "Asia/Riyadh")
    )
    scheduler_enabled: bool = field(
        default_factory=lambda: _env_bool("SCHEDULER_ENABLED", "true")
    )

    # ------------------------------------------------------------------
    # HTTP API
    # ------------------------------------------------------------------
    port: int = field(default_factory=lambda: int(os.environ.get("PORT", "8000")))
    cors_origins: list[str] = field(
        default_factory=lambda: [
            origin.strip()
            for origin in os.environ.get("CORS_ORIGINS", "http://localhost:3000").split(",")
            if origin.strip()
        ]
    )
    # Consumed by the external auth layer only.
    jwt_secret: str = field(default_factory=lambda: os.environ.get("JWT_SECRET", ""))

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper()
    )

    def ensure_workspace(self) -> None:
        """Create the directory holding the database if it does not exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str | None = None) -> None:
    """Install the root log handler used by the API server and the CLI."""
    logging.basicConfig(
        level=level or settings.log_level,
        format=_LOG_FORMAT,
    )


# Module-level singleton - import this everywhere:
#   from pricefeed.config import settings
settings = Settings()
