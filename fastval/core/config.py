import os
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# .env beside pyproject.toml unless FASTVAL_ENV_FILE points elsewhere
ENV_FILE = os.getenv("FASTVAL_ENV_FILE", str(Path(__file__).resolve().parents[2] / ".env"))


class Settings(BaseSettings):
    """Service options, read from FASTVAL_* environment variables."""
    model_config = SettingsConfigDict(env_file=ENV_FILE, env_prefix="FASTVAL_", extra="ignore")

    SHOW_STACK: bool = False  # traceback in 400 bodies
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["console", "json"] = "console"
    CORS_ORIGINS: str = "*"  # comma-separated

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
