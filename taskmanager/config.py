from pathlib import Path
import os

from dotenv import load_dotenv

# Load environment variables from repo root and package-level .env (if present).
REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(REPO_ROOT / ".env")
load_dotenv(Path(__file__).resolve().parent / ".env")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./task_manager.db")

SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
JWT_EXPIRATION_MINUTES = int(os.getenv("JWT_EXPIRATION_MINUTES", "60"))
REFRESH_TOKEN_EXPIRATION_MINUTES = int(
    os.getenv("REFRESH_TOKEN_EXPIRATION_MINUTES", str(7 * 24 * 60))
)
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

_cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")
CORS_ORIGINS = [origin.strip() for origin in _cors_origins.split(",") if origin.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_JSON = _env_flag("LOG_JSON", "true")

SEED_ON_STARTUP = _env_flag("SEED_ON_STARTUP", "false")
