# config.py
import os

from dotenv import load_dotenv

# Load .env in local/dev; real environment variables still win
load_dotenv()

def _to_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}

def _to_int(val: str | None, default: int) -> int:
    try:
        return int(val) if val is not None else default
    except ValueError:
        return default


class Config:
    # ── Core ─────────────────────────────────────────────────────────────────
    DEBUG = _to_bool(os.environ.get("DEBUG") or os.environ.get("FLASK_DEBUG"), False)
    TESTING = False
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev_secret")  # ← override in prod!

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///fleet.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
    }

    PREFERRED_URL_SCHEME = os.environ.get("PREFERRED_URL_SCHEME", "https")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    APP_NAME = os.environ.get("APP_NAME", "Fleet Status API")
    APP_VERSION = os.environ.get("APP_VERSION", "1.0.0")

    # ── Auth / JWT ──────────────────────────────────────────────────────────
    JWT_TTL_HOURS = _to_int(os.environ.get("JWT_TTL_HOURS"), 24)
    # shared secret that turns a registration (or /auth/promote) into an admin
    ADMIN_KEY = os.environ.get("ADMIN_KEY")

    # ── Routes ──────────────────────────────────────────────────────────────
    DEFAULT_MAX_CAPACITY = _to_int(os.environ.get("DEFAULT_MAX_CAPACITY"), 50)


class ProductionConfig(Config):
    DEBUG = False
    SECRET_KEY = os.environ.get("SECRET_KEY")


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = "DEBUG"


class TestingConfig(Config):
    DEBUG = True
    TESTING = True
    SECRET_KEY = "test-secret-key-with-at-least-32-bytes"
    ADMIN_KEY = "test-admin-key"
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ENGINE_OPTIONS = {}


CONFIGS = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}


def config_from_env():
    """Pick a config class from FLEET_CONFIG (defaults to the base Config)."""
    name = (os.environ.get("FLEET_CONFIG") or "").strip().lower()
    return CONFIGS.get(name, Config)
