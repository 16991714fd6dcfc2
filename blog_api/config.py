"""
Environment-aware configuration.
Values come from the process environment (and .env, if present).
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


def _env_list(name: str, default: str = "") -> list[str]:
    return [item.strip().lower() for item in os.getenv(name, default).split(",") if item.strip()]


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    APP_ENV = os.getenv("APP_ENV", "dev")
    API_VERSION = "1.0.0"
    DOCS_URL = os.getenv("DOCS_URL", "/apidocs/")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///blog.db")
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(2 * 1024 * 1024)))

    # Access and refresh tokens are signed with distinct secrets
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET", "dev-access-secret-change-me-0123456789")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET", "dev-refresh-secret-change-me-0123456789")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", "3600")))
    REFRESH_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("REFRESH_TOKEN_EXPIRES_SECONDS", "604800")))
    REFRESH_TOKEN_ROTATION = _env_bool("REFRESH_TOKEN_ROTATION")
    REFRESH_COOKIE_SECURE = _env_bool("REFRESH_COOKIE_SECURE")

    # Only these addresses may register with role=admin
    WHITELIST_ADMINS_MAIL = _env_list("WHITELIST_ADMINS_MAIL")

    DEFAULT_RES_LIMIT = int(os.getenv("DEFAULT_RES_LIMIT", "20"))
    DEFAULT_RES_OFFSET = int(os.getenv("DEFAULT_RES_OFFSET", "0"))

    RATELIMIT_ENABLED = _env_bool("RATELIMIT_ENABLED", "true")
    RATELIMIT_PER_MINUTE = int(os.getenv("RATELIMIT_PER_MINUTE", "60"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite://"
    LOG_LEVEL = "WARNING"
    RATELIMIT_ENABLED = False
    REFRESH_TOKEN_ROTATION = False
    REFRESH_COOKIE_SECURE = False
    WHITELIST_ADMINS_MAIL = ["admin@x.com"]
    JWT_ACCESS_SECRET = "test-access-secret-0123456789abcdef"
    JWT_REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"


class ProductionConfig(BaseConfig):
    DEBUG = False
    REFRESH_COOKIE_SECURE = _env_bool("REFRESH_COOKIE_SECURE", "true")


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
