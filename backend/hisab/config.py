from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./hisab.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    FRONTEND_ORIGINS: List[str] = ["http://localhost:8081"]
    LOG_LEVEL: str = "INFO"
    RESET_DB: bool = False

    # product listing default order; callers may override per request
    DEFAULT_SORT_BY: str = "createdAt"
    DEFAULT_SORT_ORDER: str = "DESC"

    # exportAll only carries the most recent N transactions
    EXPORT_TRANSACTION_LIMIT: int = 1000

    SCHEDULER_ENABLED: bool = True
    BACKUP_DIR: str = "./backups"
    BACKUP_INTERVAL_SECONDS: int = 3600
    BACKUP_KEEP: int = 10

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
