"""
Application configuration
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Settings from environment variables"""

    # Use /app/data in Docker, current dir otherwise
    DATABASE_PATH: str = os.getenv("DATABASE_PATH", "boundary_live.db")

    # Extra CORS origins (comma-separated)
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Scoring limits
    DEFAULT_OVERS_LIMIT: int = int(os.getenv("DEFAULT_OVERS_LIMIT", "20"))
    MAX_WICKETS: int = int(os.getenv("MAX_WICKETS", "10"))

    @property
    def database_url(self) -> str:
        return f"sqlite:///{self.DATABASE_PATH}"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
