from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str
    REDIS_URL: Optional[str] = None
    SQL_ECHO: bool = False
    LOG_LEVEL: str = "INFO"
    API_PORT: int = 8000
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    GROQ_API_KEY: Optional[str] = None
    GROQ_MODEL: str = "llama-3.3-70b-versatile"

    RESEND_API_KEY: Optional[str] = None
    MAIL_FROM: str = "The Coast <hello@admin.coastglobal.org>"
    APP_URL: str = "http://localhost:3000"
    CRON_SECRET: Optional[str] = None

    # West Africa Time; day boundaries for KPIs are computed in this offset
    TIMEZONE_OFFSET_HOURS: int = 1

    class Config:
        env_file = ".env"


settings = Settings()
