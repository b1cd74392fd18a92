# Smart Bed Server Configuration
# Values are read once from the environment when the server starts.

import logging
import os

logger = logging.getLogger("Config")

_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _int_from_env(name, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer, using {default}")
        return default
    if value < 0:
        logger.warning(f"{name}={raw!r} is negative, using {default}")
        return default
    return value


# --- Presence ---
DEFAULT_STALE_TIMEOUT_MS = 10 * 60 * 1000  # 10 Minutes
STALE_TIMEOUT_MS = _int_from_env("PRESENCE_STALE_TIMEOUT_MS", DEFAULT_STALE_TIMEOUT_MS)

# Timestamps in API responses are rendered in this zone
TIMEZONE = os.getenv("BED_TIMEZONE", "America/New_York")

# --- HTTP Server ---
HOST = os.getenv("BED_HOST", "0.0.0.0")  # LAN accessible
PORT = _int_from_env("BED_PORT", 5000)
PRODUCTION = os.getenv("BED_ENV", "development") == "production"

# Bundled single-page UI
PUBLIC_DIR = os.getenv("BED_PUBLIC_DIR", os.path.join(_PACKAGE_DIR, "public"))

# --- Logging ---
LOG_DIR = os.getenv("BED_LOG_DIR", os.path.join(_PACKAGE_DIR, "logs"))

# --- CLI ---
API_URL = os.getenv("BED_API_URL", "http://127.0.0.1:5000")
