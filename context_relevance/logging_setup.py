from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from . import config


def configure_logging(
    level: Optional[str] = None,
    log_dir: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Route loguru to stderr plus a rotating file under ``log_dir``.

    Safe to call more than once; existing sinks are replaced.
    Returns the log file path.
    """
    level = (level or config.LOG_LEVEL).upper()
    directory = Path(log_dir) if log_dir is not None else config.LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / config.LOG_FILE_NAME

    logger.remove()
    logger.add(sys.stderr, level=level)
    logger.add(
        log_path,
        level="DEBUG",
        rotation=config.LOG_ROTATION,
        retention=config.LOG_RETENTION,
        encoding="utf-8",
    )
    logger.info("Logging to {} (level {})", log_path, level)
    return log_path
