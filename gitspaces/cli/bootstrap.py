"""Logging setup for the gitspaces CLI.

Log records of every `gitspaces.*` module go to a rotating file under the
storage directory and, at a higher threshold, to stderr.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from gitspaces.core.secure_io import secure_mkdir

ROOT_LOGGER_NAME = "gitspaces"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _as_level(level: int | str) -> int:
    if isinstance(level, str):
        return logging.getLevelNamesMapping()[level.upper()]
    return level


def configure_logging(
    log_dir: Path | None,
    level: int | str = logging.INFO,
    console_level: int | str = logging.WARNING,
) -> Path | None:
    """Configure the gitspaces logger (replaces handlers from earlier calls).

    Logs are written to `{log_dir}/gitspaces.log` with automatic rotation
    (max 5MB per file, 3 backup files).

    Args:
        log_dir: Directory for the log file, created if missing. None
            disables file logging.
        level: Level for the log file.
        console_level: Level for stderr output.

    Returns:
        Path to the log file, or None without file logging.
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.propagate = False

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root_logger.addHandler(console_handler)

    levels = [_as_level(console_level)]
    log_file: Path | None = None

    if log_dir is not None:
        secure_mkdir(log_dir)
        log_file = log_dir / "gitspaces.log"
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(file_handler)
        levels.append(_as_level(level))

    # Let the most verbose handler see its records
    root_logger.setLevel(min(levels))
    return log_file
