from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from releasehub.core.config import AppSettings


def configure_logging(app_settings: AppSettings) -> None:
    """Configure app-wide logging handlers."""
    root_logger = logging.getLogger()
    if getattr(root_logger, "_releasehub_configured", False):
        return

    log_file = Path(app_settings.LOG_FILE_PATH)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        "%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(
        filename=log_file,
        maxBytes=app_settings.LOG_MAX_BYTES,
        backupCount=app_settings.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    root_logger.setLevel(app_settings.LOG_LEVEL)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(stream_handler)
    setattr(root_logger, "_releasehub_configured", True)
