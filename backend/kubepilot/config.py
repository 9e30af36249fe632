from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="KUBEPILOT_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: Literal["development", "production", "test"] = "development"
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    log_json: bool = False
    log_file: str | None = None
    allowed_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    # Server-side apply identity and behaviour
    field_manager: str = Field(default="kubepilot", description="Field manager recorded for server-side apply")
    force_conflicts: bool = Field(default=False, description="Take ownership of conflicting fields on apply")
    default_namespace: str = "default"
    # Per API call timeout handed to the kubernetes client
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    # Whole apply batch; once exceeded no further document is attempted
    apply_timeout_seconds: float = Field(default=300.0, gt=0)
    max_manifest_bytes: int = Field(default=2 * 1024 * 1024, gt=0)

    @computed_field
    @property
    def is_debug(self) -> bool:
        return self.app_env == "development"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]
