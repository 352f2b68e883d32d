# tracksurvey/config.py
"""
Runtime settings, read once from the environment.
"""
import os
from pathlib import Path

PACKAGE_DIR = Path(__file__).parent


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


SUBMISSIONS_DIR = os.getenv("SUBMISSIONS_DIR", "submissions")

# When enabled, every submission gets its own file instead of overwriting the
# previous one from the same address.
SUBMISSION_TIMESTAMPS = _flag("SUBMISSION_TIMESTAMPS")

CATALOG_PATH = os.getenv("CATALOG_PATH", str(PACKAGE_DIR / "data" / "survey_music.json"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
