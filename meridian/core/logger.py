"""Shared ``meridian`` logger: rotating log file plus console on stderr.

Environment overrides (read once, at import):
  MERIDIAN_LOG_LEVEL  DEBUG | INFO | WARNING | ERROR   (default INFO)
  MERIDIAN_LOG_FILE   path of the log file             (default output/meridian.log)

The ``logging`` section of config.yaml can raise or lower the level later
through :func:`configure_logging`.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

LOG_LEVEL_ENV = "MERIDIAN_LOG_LEVEL"
LOG_FILE_ENV = "MERIDIAN_LOG_FILE"
DEFAULT_LOG_FILE = "output/meridian.log"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(module)s.%(funcName)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_LOG_BYTES = 1_000_000
LOG_BACKUPS = 3


def resolve_level(value: Optional[str], default: int = logging.INFO) -> int:
    """Map a level name such as ``"debug"`` to its ``logging`` constant; unknown names give ``default``."""
    if not value:
        return default
    level = logging.getLevelName(str(value).strip().upper())
    return level if isinstance(level, int) else default


def setup_logger(name: str = "meridian", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure and return a logger that writes to a size-capped file and to stderr.

    Args:
        name (str): The name of the logger.
        log_file (str): The path to the log file. ``MERIDIAN_LOG_FILE`` or
                        ``output/meridian.log`` when omitted.

    Returns:
        logging.Logger: The configured logger instance.
    """
    logger = logging.getLogger(name)

    # Repeated setup calls must not stack handlers
    if logger.handlers:
        return logger

    log_path = Path(log_file or os.getenv(LOG_FILE_ENV) or DEFAULT_LOG_FILE)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger.setLevel(resolve_level(os.getenv(LOG_LEVEL_ENV)))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    file_handler = RotatingFileHandler(
        log_path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    # stdout is reserved for dashboard output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def configure_logging(config: Dict[str, Any], target: Optional[logging.Logger] = None) -> None:
    """Apply ``logging.level`` from config.yaml unless ``MERIDIAN_LOG_LEVEL`` is set."""
    if os.getenv(LOG_LEVEL_ENV):
        return
    level_name = (config.get("logging") or {}).get("level")
    if level_name:
        (target or logger).setLevel(resolve_level(level_name))


logger = setup_logger()
