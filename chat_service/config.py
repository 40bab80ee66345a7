"""Application settings loaded from the environment."""

from typing import Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MESSAGE_LIMIT = 50
MAX_MESSAGE_LIMIT = 1000


class Settings(BaseSettings):
    """Runtime configuration for the chat service.

    Each field is read from the upper-cased environment variable of the
    same name, or from a `.env` file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    database_url: str
    env: Optional[str] = None
    commit_hash: Optional[str] = None
    sql_debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @model_validator(mode="after")
    def require_commit_hash_in_prod(self) -> "Settings":
        if self.is_prod and not self.commit_hash:
            raise ValueError("COMMIT_HASH is required for production environments")
        return self

    @property
    def is_prod(self) -> bool:
        return self.env == "prod"


def load_settings() -> Settings:
    """Read settings from environment variables (and a .env file if present)."""
    return Settings()
