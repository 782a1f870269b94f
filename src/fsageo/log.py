"""
Logging configuration for fsageo.

The spatial core never logs; only the outer layer (CLI, preprocessing, LDU extraction) does,
and it all goes through one named logger so a run leaves a single readable trail.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "fsageo"
DEFAULT_LOG_FILE = "fsageo.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _file_handlers(logger: logging.Logger) -> list[logging.FileHandler]:
    return [h for h in logger.handlers if isinstance(h, logging.FileHandler)]


def configure_logging(log_dir: Path, level: str = "INFO", filename: str = DEFAULT_LOG_FILE) -> logging.Logger:
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = (log_dir / filename).resolve()
    level = level.upper()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    current = _file_handlers(logger)
    if current and all(Path(h.baseFilename).resolve() == log_path for h in current):
        for h in logger.handlers:
            h.setLevel(level)
        return logger

    # A different log file (another project root or `project.log_file`): replace, never stack.
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    for handler in (logging.StreamHandler(), logging.FileHandler(log_path, encoding="utf-8")):
        handler.setFormatter(fmt)
        handler.setLevel(level)
        logger.addHandler(handler)
    return logger
