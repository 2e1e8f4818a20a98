"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    auth_provider: Literal["mock", "jwt"] = "jwt"
    jwt_secret: str | None = None
    jwt_algorithm: str = "HS256"
    email_domain: str = "smartcampus.com"

    model_config = SettingsConfigDict(env_prefix="CAMPUS_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
