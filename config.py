import os
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _flag(name, default="false"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.getenv("SECRET_KEY", "ussd-manager-secret-key")

# Catalog + ledger database (SQLite for now, can switch to PostgreSQL)
DATABASE_URI = os.getenv("DATABASE_URL") or f"sqlite:///{os.path.join(BASE_DIR, 'ussd_manager.db')}"

class Config:
    SQLALCHEMY_DATABASE_URI = DATABASE_URI
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = SECRET_KEY

    # Write gate for the admin data endpoints
    ENABLE_WRITE_OPERATIONS = _flag("ENABLE_WRITE_OPERATIONS")
    API_KEY = os.getenv("API_KEY") or None

    # Login passwords (one shared password for all network reps)
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "password12345!")
    REP_PASSWORD = os.getenv("REP_PASSWORD", "password54321!")
    TOKEN_TTL_HOURS = int(os.getenv("TOKEN_TTL_HOURS", "12"))

    MAX_VERSIONS = int(os.getenv("MAX_VERSIONS", "5"))
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    SEED_SAMPLE_DATA = _flag("SEED_SAMPLE_DATA", "true")

class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    ENABLE_WRITE_OPERATIONS = True
    API_KEY = None
    ADMIN_PASSWORD = "admin-pass"
    REP_PASSWORD = "rep-pass"
    SEED_SAMPLE_DATA = False
