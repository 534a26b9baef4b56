import os
from pathlib import Path

from dotenv import load_dotenv


_PACKAGE_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _PACKAGE_DIR.parent

# Root .env is canonical; bandledger/.env remains a fallback for local runs.
load_dotenv(_PROJECT_ROOT / ".env")
load_dotenv(_PACKAGE_DIR / ".env")


def _first_non_empty_env(*names: str, default: str) -> str:
    """Returns the first non-empty env var value from `names`, else `default`."""
    for name in names:
        value = os.getenv(name)
        if value is not None and value != "":
            return value
    return default


def _parse_int_env(*names: str, default: int) -> int:
    """Parses the first non-empty env var in `names` as int, else returns `default`."""
    raw = _first_non_empty_env(*names, default=str(default))
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


# Capacity bounds. The engine only consumes these values; changing them does
# not rewrite existing bands.
DEFAULT_MAX_BAND_MEMBERS = 20
DEFAULT_MAX_USER_BANDS = 50


class BaseConfig:

    # Flask/session secret. Falls back to JWT_SECRET_KEY for compatibility.
    SECRET_KEY: str = _first_non_empty_env(
        "SECRET_KEY",
        "JWT_SECRET_KEY",
        default="change-me-in-production",
    )

    # Secret used to verify the bearer tokens that carry the caller identity.
    JWT_SECRET_KEY: str = _first_non_empty_env(
        "JWT_SECRET_KEY",
        "SECRET_KEY",
        default="change-me-in-production",
    )
    JWT_ALGORITHM: str = "HS256"

    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    JSON_SORT_KEYS: bool = False

    MAX_BAND_MEMBERS: int = _parse_int_env(
        "MAX_BAND_MEMBERS", default=DEFAULT_MAX_BAND_MEMBERS
    )
    MAX_USER_BANDS: int = _parse_int_env(
        "MAX_USER_BANDS", default=DEFAULT_MAX_USER_BANDS
    )

    LOG_LEVEL: str = _first_non_empty_env("LOG_LEVEL", default="INFO")

    # create_all() at startup. Production schemas come from bandledger/migrations.
    AUTO_CREATE_TABLES: bool = True


class DevelopmentConfig(BaseConfig):
    DEBUG:   bool = True
    TESTING: bool = False

    SQLALCHEMY_DATABASE_URI: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///bandledger.db",
    )
    SQLALCHEMY_ECHO: bool = False
    LOG_LEVEL: str = _first_non_empty_env("LOG_LEVEL", default="DEBUG")


class TestingConfig(BaseConfig):

    DEBUG:   bool = True
    TESTING: bool = True

    # In-memory SQLite: every app instance is an independent ledger.
    SQLALCHEMY_DATABASE_URI: str = os.getenv("TEST_DATABASE_URL", "sqlite://")
    SQLALCHEMY_ECHO: bool = False

    JWT_SECRET_KEY: str = "bandledger-testing-secret-not-for-production"

    # Tests exercise the default bounds regardless of the local environment.
    MAX_BAND_MEMBERS: int = DEFAULT_MAX_BAND_MEMBERS
    MAX_USER_BANDS: int = DEFAULT_MAX_USER_BANDS


class ProductionConfig(BaseConfig):

    DEBUG:   bool = False
    TESTING: bool = False
    SQLALCHEMY_ECHO: bool = False
    AUTO_CREATE_TABLES: bool = False

    # Heroku / Render return 'postgres://' which SQLAlchemy 1.4+ rejects;
    # normalise to 'postgresql://'.
    _raw_db_url: str = os.getenv("DATABASE_URL", "")
    SQLALCHEMY_DATABASE_URI: str = (
        _raw_db_url.replace("postgres://", "postgresql://", 1)
        if _raw_db_url.startswith("postgres://")
        else _raw_db_url
    )


def validate_production_config(app) -> None:
    """
    Fail-fast guard for production configuration.

    Called by the app factory right after loading ProductionConfig.
    Raises ValueError if any required production value is missing or insecure.
    """
    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        raise ValueError(
            "DATABASE_URL environment variable is required in production. "
            "Set it to a valid database connection string."
        )
    if app.config.get("SECRET_KEY") == "change-me-in-production":
        raise ValueError(
            "SECRET_KEY must be set to a strong random value in production. "
            "Do not use the default placeholder."
        )
    if app.config.get("JWT_SECRET_KEY") == "change-me-in-production":
        raise ValueError(
            "JWT_SECRET_KEY must be set to a strong random value in production. "
            "Do not use the default placeholder."
        )
    if app.config.get("MAX_BAND_MEMBERS", 0) < 1:
        raise ValueError("MAX_BAND_MEMBERS must be at least 1.")


# ── Config selector ────────────────────────────────────────────────────────
#
# Used by the app factory:
#   app.config.from_object(config_by_name[config_name])
# ──────────────────────────────────────────────────────────────────────────

config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing":     TestingConfig,
    "production":  ProductionConfig,
}
