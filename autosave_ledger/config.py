"""Configuration management using Pydantic Settings"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="AUTOSAVE_", extra="ignore"
    )

    # Database
    database_url: str = "sqlite:///./autosave.db"

    # Service
    service_name: str = "autosave-ledger"
    log_level: str = "INFO"

    # Emergency withdrawal
    home_account_id: Optional[int] = None  # account receiving returned funds
    withdrawal_goal_id: Optional[int] = None  # goal funds are reclaimed from
    emergency_penalty_rate: float = 0.015
    withdrawal_delay_months: int = 2
    plan_ttl_seconds: int = 900

    # Concurrency
    lock_timeout_seconds: float = 5.0

    # Bank snapshot API
    bank_api_base: str = "http://localhost:8001"
    http_timeout_seconds: float = 5.0


settings = Settings()
