import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./strings.db"


# ------------------------------------------------------------------------------
# SETTINGS
# ------------------------------------------------------------------------------
@dataclass(frozen=True)
class Settings:
    """Process configuration, read once at startup."""

    database_url: str = DEFAULT_DATABASE_URL
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000


def normalize_database_url(url: str) -> str:
    # SQLAlchemy expects "mysql+pymysql://"
    if url.startswith("mysql://"):
        return url.replace("mysql://", "mysql+pymysql://", 1)
    return url


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Load settings from the environment (and a local .env file if present)."""
    load_dotenv(env_file)

    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        # Fallback for local dev
        logger.warning("DATABASE_URL not found in environment, using local SQLite database.")
        database_url = DEFAULT_DATABASE_URL

    origins = os.getenv("CORS_ORIGINS", "*")

    return Settings(
        database_url=normalize_database_url(database_url),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()] or ["*"],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 8000)),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
