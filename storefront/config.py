from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    DATABASE_URL : str
    JWT_SECRET : str
    JWT_ALGORITHM : str = "HS256"
    ACCESS_TOKEN_EXPIRY_DAYS : int = 7

    DB_POOL_SIZE : int = 10
    DB_MAX_OVERFLOW : int = 20
    DB_POOL_TIMEOUT : int = 60

    LOG_LEVEL : str = "INFO"
    CORS_ORIGINS : List[str] = ["http://localhost:3000", "http://localhost:8000", "http://127.0.0.1:8000"]

    model_config = SettingsConfigDict(
        env_file = ".env",
        extra = "ignore"
    )


Config = Settings()
