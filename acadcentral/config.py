"""
AcadCentral Department Portal
Application configuration and settings management
"""

import os
from functools import lru_cache
from typing import List, Optional
from urllib.parse import quote_plus

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application Settings
    APP_NAME: str = "AcadCentral Department Portal"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 3001

    # CORS Settings
    ALLOWED_HOSTS: str = Field(
        default="*",
        description="Comma-separated list of allowed origins"
    )

    @field_validator("ALLOWED_HOSTS", mode="before")
    @classmethod
    def parse_allowed_hosts(cls, v):
        if isinstance(v, (list, tuple)):
            return ",".join(str(host).strip() for host in v)
        return v

    @property
    def allowed_origins(self) -> List[str]:
        origins = [host.strip() for host in self.ALLOWED_HOSTS.split(",") if host.strip()]
        return origins or ["*"]

    # Mirror Database Configuration
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_NAME: str = "acportal_db"
    DB_USER: str = "root"
    DB_PASSWORD: str = Field(
        default="",
        validation_alias=AliasChoices("DB_PASSWORD", "DB_PASS")
    )
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 10
    DB_ECHO: bool = False

    # One-time import of the pre-database JSON file
    LEGACY_JSON_PATH: str = "acportal-db.json"

    # Portal client (Local Store + mirror sync)
    MIRROR_URL: str = "http://localhost:3001/api"
    HYDRATION_TIMEOUT_SECONDS: float = 4.0
    LOCAL_STORE_PATH: Optional[str] = None

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @property
    def database_url(self) -> str:
        """Generate database URL from components or use provided URL"""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        # For development, use SQLite
        if self.ENVIRONMENT == "development":
            return "sqlite+aiosqlite:///./acportal.db"

        password = quote_plus(self.DB_PASSWORD)
        credentials = f"{self.DB_USER}:{password}" if password else self.DB_USER
        return f"mysql+aiomysql://{credentials}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"


class DevelopmentSettings(Settings):
    """Development environment specific settings"""
    DEBUG: bool = True
    ENVIRONMENT: str = "development"


class ProductionSettings(Settings):
    """Production environment specific settings"""
    DEBUG: bool = False
    ENVIRONMENT: str = "production"
    DB_ECHO: bool = False


class TestingSettings(Settings):
    """Testing environment specific settings"""
    DEBUG: bool = True
    ENVIRONMENT: str = "testing"
    DATABASE_URL: Optional[str] = "sqlite+aiosqlite:///./test.db"
    HYDRATION_TIMEOUT_SECONDS: float = 0.5
    LOG_LEVEL: str = "WARNING"


@lru_cache()
def get_settings() -> Settings:
    """Get application settings with caching"""
    environment = os.getenv("ENVIRONMENT", "development").lower()

    if environment == "production":
        return ProductionSettings()
    elif environment == "testing":
        return TestingSettings()
    else:
        return DevelopmentSettings()


__all__ = [
    "Settings",
    "DevelopmentSettings",
    "ProductionSettings",
    "TestingSettings",
    "get_settings",
]
