from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    LOG_LEVEL: str = "INFO"

    # Supabase Postgres (direct connection string, not the REST URL)
    SUPABASE_DB_URL: str

    # =================================================================
    # DATABASE POOL SETTINGS
    # =================================================================
    DB_POOL_MIN_SIZE: int = 3
    DB_POOL_MAX_SIZE: int = 12
    DB_POOL_TIMEOUT: float = 30.0
    DB_POOL_MAX_IDLE: float = 600.0  # 10 minutes
    DB_POOL_MAX_LIFETIME: float = 3600.0  # 1 hour

    # =================================================================
    # RELIABILITY SCORING
    # =================================================================
    # "weighted" is the 40/30/30 formula; "legacy_completion" is the old
    # 50/50 edge-function formula, kept only for comparison runs.
    RELIABILITY_SCORING_FORMULA: Literal["weighted", "legacy_completion"] = "weighted"
    RELIABILITY_HISTORY_ENABLED: bool = True
    RELIABILITY_HISTORY_LIMIT: int = 20
    RELIABILITY_RECALC_BATCH_SIZE: int = 200

    # =================================================================
    # COMPLIANCE (PP 35/2021)
    # =================================================================
    COMPLIANCE_COUNT_IN_PROGRESS: bool = False
    COMPLIANCE_ALTERNATIVES_LIMIT: int = 20
    COMPLIANCE_AUDIT_LIMIT: int = 100

    # Request context
    TRUST_X_FORWARDED_FOR: bool = False
    TRUSTED_PROXY_IPS: list[str] = []

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def db_host(self) -> str | None:
        """Hostname of the database, safe to log (no credentials)."""
        try:
            return urlparse(self.SUPABASE_DB_URL).hostname
        except Exception:
            return None

    def get_db_pool_config(self) -> dict:
        """
        Get database pool configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "min_size": self.DB_POOL_MIN_SIZE,
            "max_size": self.DB_POOL_MAX_SIZE,
            "timeout": self.DB_POOL_TIMEOUT,
            "max_idle": self.DB_POOL_MAX_IDLE,
            "max_lifetime": self.DB_POOL_MAX_LIFETIME,
        }

        if self.environment == "development":
            config.update(
                {
                    "min_size": min(self.DB_POOL_MIN_SIZE, 2),
                    "max_size": min(self.DB_POOL_MAX_SIZE, 5),
                    "timeout": 15.0,
                }
            )

        return config


settings = Settings()
