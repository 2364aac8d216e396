from typing import Literal, Self

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StrengthThresholds(BaseModel):
    """Minimum available/total ratios for each team-strength label."""

    full: float = Field(default=0.80, ge=0, le=1)
    good: float = Field(default=0.60, ge=0, le=1)
    lean: float = Field(default=0.40, ge=0, le=1)

    @model_validator(mode="after")
    def _validate_order(self) -> Self:
        if not self.full >= self.good >= self.lean:
            msg = "strength thresholds must satisfy full >= good >= lean"
            raise ValueError(msg)
        return self


class CapacityConfig(BaseModel):
    """Canonical capacity configuration injected into the capacity aggregator."""

    team_size: int = Field(gt=0)
    thresholds: StrengthThresholds = Field(default_factory=StrengthThresholds)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Team Leave"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    database_url: str = "postgresql+asyncpg://teamleave:teamleave@db:5432/teamleave"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]
    log_level: str = "INFO"
    timezone: str = "UTC"

    team_size: int = Field(default=10, gt=0)
    strength_thresholds: StrengthThresholds = Field(default_factory=StrengthThresholds)
    backup_note_min_days: int = 4
    max_range_days: int = 366

    password_reset_base_url: str = "http://localhost:5173/reset-password"

    @property
    def capacity(self) -> CapacityConfig:
        return CapacityConfig(team_size=self.team_size, thresholds=self.strength_thresholds)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
