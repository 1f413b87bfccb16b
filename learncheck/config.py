"""Application configuration and constants."""
import os
from pathlib import Path


def _parse_int_env(name: str, default: int) -> int:
    """Parse integer from environment variable."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# Database
DB_DIR = Path(os.environ.get("DB_DIR", Path.cwd() / "data"))
DB_DIR.mkdir(parents=True, exist_ok=True)
DATABASE_URL = os.environ.get(
    "DATABASE_URL", f"sqlite:///{DB_DIR / 'learncheck.db'}"
)

# Remote quiz backend (question bank, hints, regeneration)
BACKEND_URL = os.environ.get("LEARNCHECK_BACKEND_URL", "http://127.0.0.1:9000")
BACKEND_TIMEOUT_SECONDS = _parse_int_env("LEARNCHECK_BACKEND_TIMEOUT_SECONDS", 60)

# Minimum busy duration per action kind, in milliseconds
LOAD_DELAY_MS = _parse_int_env("LOAD_DELAY_MS", 0)
NAVIGATION_DELAY_MS = _parse_int_env("NAVIGATION_DELAY_MS", 300)
CHECK_DELAY_MS = _parse_int_env("CHECK_DELAY_MS", 300)
START_DELAY_MS = _parse_int_env("START_DELAY_MS", 800)
REGENERATE_DELAY_MS = _parse_int_env("REGENERATE_DELAY_MS", 700)
RESET_DELAY_MS = _parse_int_env("RESET_DELAY_MS", 1000)
SCORE_DELAY_MS = _parse_int_env("SCORE_DELAY_MS", 1000)

# Sessions
SESSION_SCHEMA_VERSION = 1
SESSION_RETENTION_DAYS = _parse_int_env("SESSION_RETENTION_DAYS", 90)
SESSION_CLEANUP_INTERVAL_SECONDS = _parse_int_env(
    "SESSION_CLEANUP_INTERVAL_SECONDS", 24 * 60 * 60
)

# Controllers kept in memory at once; least recently used idle ones are evicted
MAX_CONTROLLERS = _parse_int_env("MAX_CONTROLLERS", 1000)

# Text defaults
DEFAULT_MODULE_TITLE = "Learning Submodule"
HINT_UNAVAILABLE_TEXT = "Hint not available."

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
