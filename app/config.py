# app/config.py
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    SECRET_KEY: str = Field("change-me-in-production")
    ALGORITHM: str = Field("HS256")

    DATABASE_URL: str = Field("sqlite+aiosqlite:///./scoring.db")
    SQL_ECHO: bool = Field(False)

    LOG_LEVEL: str = Field("INFO")

    # Local/dev convenience. Production schema is managed by Alembic.
    AUTO_CREATE_TABLES: bool = Field(True)
    RUN_STARTUP_MIGRATIONS: bool = Field(True)

    # Absence deduction = monthly salary / this many days
    DEDUCTION_DAYS_PER_MONTH: int = Field(30, gt=0)

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def async_database_url(self) -> str:
        """
        DATABASE_URL with the async driver filled in.
        Hosting providers hand out plain postgresql:// URLs.
        """
        url = self.DATABASE_URL
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url


settings = Settings()
