"""Application configuration via Pydantic Settings."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

# Resolve .env from the project root regardless of CWD
_ENV_FILE = Path(__file__).resolve().parents[3] / ".env"


class Settings(BaseSettings):
    """Central configuration loaded from environment variables / .env file."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./propmatch.db"

    # CORS / Frontend
    cors_origins: str = "http://localhost:3000"

    # Smart-Match wizard
    transit_question_enabled: bool = True
    results_delay_seconds: float = 1.5

    # Smart-Match search
    search_candidate_limit: int = 50
    match_score_cutoff: int = 30
    max_matches: int = 5
    default_image_url: str = (
        "https://images.unsplash.com/photo-1545324418-cc1a3fa10c00"
        "?auto=format&fit=crop&w=800&q=80"
    )

    # General
    debug: bool = True

    model_config = {"env_file": str(_ENV_FILE), "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list.

        In debug mode, returns ["*"] to allow any origin.
        """
        if self.debug:
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()
