from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Renewals"
    app_env: str = "local"
    database_url: str = "sqlite+pysqlite:///./renewals.db"
    redis_url: str = "redis://redis:6379/0"
    jwt_secret: str = "replace-me"
    jwt_algorithm: str = "HS256"
    metrics_enabled: bool = False
    otel_enabled: bool = False
    tax_rate: Decimal = Decimal("0")
    reprocessing_interval_days: int | None = 1
    record_checkout_failure_details: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)


@lru_cache
def get_settings() -> Settings:
    return Settings()
