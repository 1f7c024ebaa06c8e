from typing import List, Optional
from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    # App Settings
    APP_NAME: str = "WalletRegistry"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Database Settings (DB_HOST, DB_PORT and DB_NAME are composed into the URL)
    DB_DRIVER: str = "postgresql+asyncpg"
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_NAME: str = "wallet_registry"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "postgres"
    DATABASE_URL: Optional[str] = None  # Full URL override, e.g. sqlite+aiosqlite:///./users.db
    DB_LOGGING_ENABLED: bool = False
    DB_MIN_POOL_SIZE: int = 5
    DB_MAX_POOL_SIZE: int = 20

    # CORS
    ALLOWED_ORIGINS: List[str] = ["*"]

    # Logging
    ERROR_LOG_PATH: str = "logs/error.log"  # Combined-format log of responses >= 400

    # Report validation and signature failures as 500 like earlier clients expect
    LEGACY_ERROR_STATUS: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
