from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    log_level: str = "INFO"

    # When False, an investment in withdrawal_notice is valued as of the notice start.
    accrue_during_withdrawal_notice: bool = True
    withdrawal_notice_days: int = Field(default=90, ge=0)
    series_points: int = Field(default=24, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="YIELDCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
