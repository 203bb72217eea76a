import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


def _database_uri():
    uri = os.getenv("DATABASE_URL", "sqlite:///virtual_museum.db")
    root_cert = os.getenv("DB_SSLROOTCERT")
    if root_cert:
        sep = "&" if "?" in uri else "?"
        uri = f"{uri}{sep}sslmode=verify-full&sslrootcert={root_cert}"
    return uri


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = _database_uri()
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    ACCESS_EXPIRES = int(os.getenv("ACCESS_EXPIRES", 86400))
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(seconds=ACCESS_EXPIRES)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # roles handed out by the identity service
    SCOPED_ROLES = ("museum_admin", "staff")
    ELEVATED_ROLES = ("super_admin", "reviewer")

    DEFAULT_PAGE_SIZE = 10
    PUBLIC_PAGE_SIZE = 12
    MAX_PAGE_SIZE = 100

    AVAILABLE_ARTIFACT_STATUSES = ("on_display", "in_storage")

    # When True, "resubmitted" passes every guard that accepts "pending".
    TREAT_RESUBMITTED_AS_PENDING = os.getenv("TREAT_RESUBMITTED_AS_PENDING", "false").lower() == "true"


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-secret-key-that-is-long-enough-for-hs256"


CONFIGS = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
