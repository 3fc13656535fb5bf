import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

from .errors import ConfigurationError


class Settings(BaseSettings):
    app_id: str = Field("leaderreps-pd-plan", alias="LEADERREPS_APP_ID")
    database_url: Optional[str] = Field(None, alias="LEADERREPS_DATABASE_URL")
    database_pool_size: int = Field(10, alias="LEADERREPS_DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(10, alias="LEADERREPS_DATABASE_MAX_OVERFLOW")
    database_echo: bool = Field(False, alias="LEADERREPS_DATABASE_ECHO")
    persistence_mode: Literal["database", "legacy", "memory"] = Field(
        "database",
        alias="LEADERREPS_PERSISTENCE_MODE",
    )
    legacy_store_path: Optional[Path] = Field(None, alias="LEADERREPS_LEGACY_STORE_PATH")
    feedback_form_url: str = Field(
        "https://leaderrepspd.netlify.app/feedback_form.html",
        alias="LEADERREPS_FEEDBACK_FORM_URL",
    )

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid backend configuration: {exc}") from exc
