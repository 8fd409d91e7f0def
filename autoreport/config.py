"""Application configuration loaded from the environment."""
from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Process-wide settings. Read once at startup, never mutated."""

    environment: Environment = Environment.DEVELOPMENT
    debug: bool = Field(default=True)
    log_level: str = Field(default="INFO")

    app_name: str = "Auto Report Pro"

    database_url: str = Field(default="sqlite:///./autoreport.db")

    # JWT
    secret_key: str = Field(default="dev-secret-change-in-production")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Password reset
    reset_token_expire_minutes: int = 15
    expose_reset_token: bool = Field(default=False)

    allowed_origins: str = Field(default="*")

    @field_validator("debug", mode="before")
    @classmethod
    def set_debug(cls, v, info):
        """Disable debug in production."""
        if info.data.get("environment") == Environment.PRODUCTION:
            return False
        return v

    @property
    def allowed_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        frozen = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
