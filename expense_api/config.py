# expense_api/config.py
import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


def _int_env(name, default):
    raw = os.environ.get(name, "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


class Config:
    """Settings read from the environment (and a local .env file)."""

    APP_ENV = os.environ.get("APP_ENV", "development")
    API_VERSION = os.environ.get("API_VERSION", "1.0.0")

    DB_PATH = os.environ.get("DB_PATH", os.path.join("data", "expenses.db"))

    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-key-change-me-before-deploying-anywhere")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(seconds=_int_env("JWT_ACCESS_TOKEN_EXPIRES", 3600))

    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = _int_env("PORT", 5000)


def cors_origins(value):
    """Split a comma separated origin list; '*' stays a wildcard."""
    if isinstance(value, (list, tuple)):
        return list(value)
    origins = [o.strip() for o in str(value or "").split(",") if o.strip()]
    if not origins or origins == ["*"]:
        return "*"
    return origins
