"""
Logging setup for the bed server: rotating file + console.
- Rotation deletes old logs on its own, nothing to clean up by hand.
- Max disk use: 1 MB x 4 files = ~4 MB. When the current file hits 1 MB it
  rotates and the oldest backup (.log.3) is removed.
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from . import server_config as config

LOG_FILE_NAME = "smart-bed.log"
LOG_MAX_BYTES = 1 * 1024 * 1024   # 1 MB per file
LOG_BACKUP_COUNT = 3               # .log + .log.1, .log.2, .log.3


def setup_logging(log_dir=None):
    """Add rotating file + console handlers to the root logger. Call once at startup."""
    log_dir = log_dir or config.LOG_DIR
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, LOG_FILE_NAME)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Calling twice must not duplicate handlers
    if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.DEBUG)
        root.addHandler(file_handler)

    # RotatingFileHandler is a StreamHandler subclass too
    has_console = any(
        type(h) is logging.StreamHandler for h in root.handlers
    )
    if not has_console:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(formatter)
        console.setLevel(logging.INFO)
        root.addHandler(console)

    root.info("Logging to %s (rotating, max 4 MB total)", log_file)
    return log_file
