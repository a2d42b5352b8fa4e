"""Application configuration loaded from environment variables."""

from typing import List

from pydantic_settings import BaseSettings

from app.core.domain import SummaryPolicy, UniquenessPolicy


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./foodtrace.db"

    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:5174",
    ]

    API_V1_PREFIX: str = "/api/v1"

    ENVIRONMENT: str = "development"

    # Create tables on start-up (quick dev bootstrap, prefer Alembic in prod)
    AUTO_CREATE_TABLES: bool = True

    # Principals allowed to register users and curate trace summaries
    ADMIN_PRINCIPALS: List[str] = []

    UNIQUENESS_POLICY: UniquenessPolicy = UniquenessPolicy.STRICT
    SUMMARY_POLICY: SummaryPolicy = SummaryPolicy.DERIVED

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
