from typing import List, Optional, Union
from pydantic import AnyHttpUrl, validator
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Values from .env take precedence over variables already set in the environment.
load_dotenv(override=True)

class Settings(BaseSettings):
    """Base settings for the TaxiTap backend."""

    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "TaxiTap Backend"
    LOG_LEVEL: str = "INFO"

    # CORS settings
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Database settings
    # Default values for local development, override these in .env file
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "taxitap"
    POSTGRES_PORT: int = 5432

    # A full connection string (hosted Postgres, or sqlite for local runs) wins over the components
    DATABASE_URL: Optional[str] = None

    SQLALCHEMY_DATABASE_URI: Optional[str] = None

    @validator("SQLALCHEMY_DATABASE_URI", pre=True, always=True)
    def assemble_db_connection(cls, v: Optional[str], values: dict) -> str:
        if values.get("DATABASE_URL"):
            return values.get("DATABASE_URL")

        if isinstance(v, str):
            return v
        return (
            f"postgresql://{values.get('POSTGRES_USER')}:{values.get('POSTGRES_PASSWORD')}"
            f"@{values.get('POSTGRES_SERVER')}:{values.get('POSTGRES_PORT')}"
            f"/{values.get('POSTGRES_DB') or ''}"
        )

    # JWT Authentication settings
    JWT_SECRET_KEY: str = "your-secret-key"  # Change this in production
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 8  # 8 days

    # Earnings weeks start on Monday 00:00 in this zone
    TIMEZONE: str = "UTC"

    # Device sessions idle longer than this are deactivated by the cleanup sweep
    SESSION_MAX_INACTIVITY_HOURS: int = 24

    model_config = {
        "case_sensitive": True,
        "env_file": ".env"
    }

# Create settings instance
settings = Settings()
