from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    APP_NAME: str = "Walletflow Backend"
    ENV: str = "dev"

    # apps/backend/db.sqlite3 as an absolute path so the CWD does not matter
    _default_db_path = Path(__file__).resolve().parents[2] / "db.sqlite3"
    DATABASE_URL: str = f"sqlite:///{_default_db_path}"
    SQLITE_BUSY_TIMEOUT_MS: int = 5000

    CORS_ORIGINS: list[str] = ["*"]
    TIMEZONE: str = "UTC"
    LOG_LEVEL: str = "INFO"

    # upper bound for unpaginated transaction listings
    TRANSACTION_LIST_LIMIT: int = 100

    model_config = SettingsConfigDict(env_file=(".env",), env_prefix="WALLETFLOW_", case_sensitive=False)


settings = Settings()
