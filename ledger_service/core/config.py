"""
Configuration settings for the ledger service.
Loads environment variables and provides application settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """

    # Database
    DATABASE_URL: str = "sqlite:///./ledger.db"
    SQL_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # API
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Ledger Service"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Account balances and atomic deposit, withdrawal and transfer processing"

    # Ledger behaviour
    MAX_CONFLICT_RETRIES: int = 3
    RECORD_FAILED_TRANSACTIONS: bool = True
    DEFAULT_CURRENCY: str = "USD"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json or text

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)


# Create global settings instance
settings = Settings()
