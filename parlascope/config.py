"""Application configuration loaded from environment variables."""

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment."""

    def __init__(self):
        self.environment: str = os.getenv("ENVIRONMENT", "development")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.database_url: str = os.getenv(
            "DATABASE_URL", "sqlite+aiosqlite:///./parlascope.db"
        )

        # Bounds on vote history loaded per scoring run
        self.scoring_vote_limit: int = int(os.getenv("SCORING_VOTE_LIMIT", "5000"))
        self.coherence_vote_limit: int = int(os.getenv("COHERENCE_VOTE_LIMIT", "500"))
        self.verified_threshold: int = int(os.getenv("VERIFIED_THRESHOLD", "20"))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def api_prefix(self) -> str:
        return "/api/v1"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
