"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables and the .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App Info
    app_name: str = "Reproduction Protocol Engine"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database
    data_save_folder: str = "./data"
    db_file: str = "herd.db"
    database_url_override: str | None = Field(default=None, alias="DATABASE_URL")
    database_echo: bool = False
    # Catalog schema used for reflection (None = connection default, e.g. "public")
    db_schema: str | None = Field(default=None, alias="DB_SCHEMA")

    @property
    def database_url(self) -> str:
        """Database URL; falls back to a local SQLite file."""
        if self.database_url_override:
            return self.database_url_override
        db_path = Path(self.data_save_folder) / self.db_file
        return f"sqlite+aiosqlite:///{db_path}"

    # Physical table names
    protocol_table: str = "repro_protocolo"
    event_table: str = "repro_evento"
    animal_table: str = "animals"

    # Optional shared columns
    owner_column: str = "owner_id"
    created_column: str = "created_at"
    updated_column: str = "updated_at"

    # Stage events
    stage_event_type: str = "PROTOCOLO_ETAPA"
    active_lookback: int = Field(default=5, ge=1)

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        """Loguru level names are upper-case."""
        return str(v).upper()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
