"""Configuration management using Pydantic Settings"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "receipt-rewards"
    log_level: str = "INFO"

    # Reward tables (JSON file overriding the built-in catalog)
    reward_config_path: Optional[str] = None

    # Economy knobs applied on top of the tables
    base_receipt_cash_cents: int = 50
    min_full_rotations: int = 5
    max_full_rotations: int = 8
    at_risk_threshold_hours: float = 24.0
    spin_reveal_timeout_seconds: float = 30.0

    # Seed for reproducible sessions; unset means system entropy
    rng_seed: Optional[int] = None


settings = Settings()
