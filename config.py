import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))

# Shared by the cookie parser and the session manager
SECRET = os.getenv("SECRET", "change-me")

# Files served as-is before any other stage runs
STATIC_DIR = os.getenv("STATIC_DIR", "./public")

# Where uploaded files are stored
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "./uploads")
UPLOAD_MAX_BYTES = int(os.getenv("UPLOAD_MAX_BYTES", str(5 * 1024 * 1024)))
os.makedirs(UPLOAD_DIR, exist_ok=True)

# Ceiling for JSON / urlencoded / raw / text bodies
BODY_LIMIT_BYTES = int(os.getenv("BODY_LIMIT_BYTES", str(100 * 1024)))

SESSION_COOKIE_NAME = "session-cookie"
SESSION_MAX_AGE = int(os.getenv("SESSION_MAX_AGE", str(24 * 60 * 60)))
SESSION_RESAVE = _env_bool("SESSION_RESAVE", False)
SESSION_SAVE_UNINITIALIZED = _env_bool("SESSION_SAVE_UNINITIALIZED", False)
SESSION_SECURE = _env_bool("SESSION_SECURE", False)

# In-memory SQLite keeps sessions for the lifetime of the process only
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite://")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "console").strip().lower()
