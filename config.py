import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "astronomy-quiz-secret-key")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///astroquiz.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Pool options only make sense for a server database such as PostgreSQL
    DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 5))
    DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", 10))
    if SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS = {}
    else:
        SQLALCHEMY_ENGINE_OPTIONS = {
            "pool_pre_ping": True,
            "pool_size": DB_POOL_SIZE,
            "max_overflow": DB_MAX_OVERFLOW,
        }

    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin")
    ADMIN_TOKEN_SECRET = os.getenv("ADMIN_TOKEN_SECRET", SECRET_KEY)
    ADMIN_TOKEN_TTL = int(os.getenv("ADMIN_TOKEN_TTL", 24 * 60 * 60))

    PASSCODE_LENGTH = 6
    CODE_MAX_ATTEMPTS = int(os.getenv("CODE_MAX_ATTEMPTS", 50))

    SEED_SAMPLE_QUESTIONS = _env_flag("SEED_SAMPLE_QUESTIONS", True)
    LOG_RETENTION = int(os.getenv("LOG_RETENTION", 1000))

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
