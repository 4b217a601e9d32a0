"""
Configuration loading for the gallery app.

The database URL is picked by the APP_ENV mode, falling back to a URL built
from DB_* credentials and finally to a local SQLite file.
"""
import os
from dotenv import load_dotenv
from sqlalchemy.engine import URL
from .errors import GalleryError, ErrorKind

DEFAULT_DATABASE_URL = "sqlite:///gallery.db"
CREDENTIAL_VARS = ("DB_USERNAME", "DB_PASSWORD", "DB_HOST")
MODES = ("production", "development", "test")

PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def resolve_database_url(env):
    mode = env.get("APP_ENV") or "development"
    if mode not in MODES:
        raise GalleryError(ErrorKind.CONFIG_FAILURE, f"Unknown APP_ENV: {mode}")

    if mode == "test" and env.get("DATABASE_URL_TEST"):
        return env["DATABASE_URL_TEST"]
    if mode == "production" and env.get("DATABASE_URL_PROD"):
        return env["DATABASE_URL_PROD"]
    if env.get("DATABASE_URL"):
        return env["DATABASE_URL"]

    present = [name for name in CREDENTIAL_VARS if env.get(name)]
    missing = [name for name in CREDENTIAL_VARS if not env.get(name)]
    if present and missing:
        raise GalleryError(
            ErrorKind.CONFIG_FAILURE,
            f"Missing required environment variables: {', '.join(missing)}",
        )
    if present:
        return URL.create(
            env.get("DB_DRIVER", "postgresql"),
            username=env["DB_USERNAME"],
            password=env["DB_PASSWORD"],
            host=env["DB_HOST"],
            database=env.get("DB_NAME", "gallery"),
        ).render_as_string(hide_password=False)
    if mode == "production":
        raise GalleryError(
            ErrorKind.CONFIG_FAILURE,
            f"Missing required environment variables: {', '.join(CREDENTIAL_VARS)}",
        )
    return DEFAULT_DATABASE_URL


def _number(env, name, default, cast):
    raw = env.get(name)
    if raw in (None, ""):
        return default
    try:
        return cast(raw)
    except ValueError:
        raise GalleryError(ErrorKind.CONFIG_FAILURE, f"{name} must be a number, got {raw!r}")


def load_config(env=None):
    """Build the Flask config mapping from the environment (defaults to os.environ)."""
    if env is None:
        load_dotenv()
        env = os.environ

    return {
        "APP_ENV": env.get("APP_ENV") or "development",
        "DATABASE_URL": resolve_database_url(env),
        "DATABASE_TIMEOUT": _number(env, "DATABASE_TIMEOUT", 10.0, float),
        "CONTENT_DIR": env.get("CONTENT_DIR") or os.path.join(PACKAGE_DIR, "static", "images"),
        "UPLOAD_MAX_BYTES": _number(env, "UPLOAD_MAX_BYTES", 1_000_000, int),
        "UPLOAD_WRITE_TIMEOUT": _number(env, "UPLOAD_WRITE_TIMEOUT", 30.0, float),
        "PORT": _number(env, "PORT", 5000, int),
    }
