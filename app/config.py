"""Environment configuration for the Task Rooms backend."""

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self) -> None:
        self.DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./taskrooms.db")
        self.DATABASE_SSLMODE: str = os.getenv("DATABASE_SSLMODE", "require")
        self.JWT_SECRET: str = os.getenv("JWT_SECRET", "")
        self.FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")
        self.JWT_ALGORITHM: str = "HS256"
        self.JWT_EXPIRATION_HOURS: int = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))
        # Calendar used to decide what "one day" means for completion streaks
        self.STREAK_TIMEZONE: str = os.getenv("STREAK_TIMEZONE", "UTC")
        self.INVITE_CODE_MAX_ATTEMPTS: int = int(os.getenv("INVITE_CODE_MAX_ATTEMPTS", "10"))
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def validate(self) -> None:
        """Validate that required environment variables are set."""
        if not self.DATABASE_URL:
            raise ValueError("DATABASE_URL environment variable is required")
        if not self.JWT_SECRET:
            raise ValueError("JWT_SECRET environment variable is required")
        if self.INVITE_CODE_MAX_ATTEMPTS < 1:
            raise ValueError("INVITE_CODE_MAX_ATTEMPTS must be at least 1")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    return settings
