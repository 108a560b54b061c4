from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import computed_field
from typing import Optional

class Settings(BaseSettings):
    PROJECT_NAME: str = "VSUET Vedomosti"

    # Source Portal
    SOURCE_BASE_URL: str = "https://rating.vsuet.ru/web/Ved/Default.aspx"
    VERIFY_SSL: bool = False

    # Fetching
    FETCH_TIMEOUT_SECONDS: float = 20.0
    AVAILABILITY_TIMEOUT_SECONDS: float = 10.0
    FETCH_RETRIES: int = 3
    FETCH_BACKOFF_SECONDS: float = 2.0
    MIN_PAGE_LENGTH: int = 100

    # Crawl
    CRAWL_WORKERS: int = 4
    DEFAULT_FACULTY: str = "УИТС"
    DEFAULT_YEARS_COUNT: int = 2
    FIRST_ACADEMIC_YEAR: int = 2023

    # Database (PostgreSQL when POSTGRES_HOST is set, SQLite otherwise)
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_HOST: Optional[str] = None
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "vedomosti"
    SQLITE_PATH: str = "./vedomosti.db"

    LOG_LEVEL: str = "INFO"

    @computed_field
    @property
    def DATABASE_URL(self) -> str:
        if self.POSTGRES_HOST:
            return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        return f"sqlite:///{self.SQLITE_PATH}"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
