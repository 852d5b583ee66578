from dotenv import load_dotenv
import os
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()


def _default_database_url() -> str:
    host = os.getenv("MYSQL_HOST", "db")
    user = os.getenv("MYSQL_USER", "user")
    password = os.getenv("MYSQL_PASSWORD", "123456")
    name = os.getenv("MYSQL_DB", "car_rental")
    port = os.getenv("MYSQL_PORT", "3306")
    return f"mysql+pymysql://{user}:{password}@{host}:{port}/{name}"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True, extra="ignore")

    # Database configuration
    DATABASE_URL: str = _default_database_url()

    # JWT configuration
    SECRET_KEY: str = "your_secret_key_here"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    SESSION_COOKIE_NAME: str = "session_token"

    # Tenant routing
    DEV_HOSTS: List[str] = ["localhost", "127.0.0.1"]
    PROTECTED_PREFIXES: List[str] = ["/dashboard"]
    LOGIN_PATH: str = "/auth/login"

    # Return the precise reason of a failed login instead of "Invalid credentials"
    AUTH_VERBOSE_ERRORS: bool = False

    # Application configuration
    DEBUG: bool = False
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
