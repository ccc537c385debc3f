# identity_app/utils/logging_config.py

"""
Application logging setup.

Configures ``app.logger`` from the monitoring config: level, text or JSON
format, console output and a size-rotated log file.
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

from flask import has_request_context, request

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Marks handlers installed here so repeated setup replaces them
_HANDLER_FLAG = "_identity_app_handler"


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with request details when available"""

    def __init__(self, app_name=None, app_version=None):
        super().__init__()
        self.app_name = app_name
        self.app_version = app_version

    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        if self.app_name:
            entry["app"] = self.app_name
        if self.app_version:
            entry["version"] = self.app_version
        if has_request_context():
            entry["method"] = request.method
            entry["path"] = request.path
            entry["remote_addr"] = request.remote_addr
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _build_formatter(app):
    if str(app.config.get("LOG_FORMAT", "text")).lower() == "json":
        return JSONFormatter(
            app_name=app.config.get("APP_NAME"),
            app_version=app.config.get("APP_VERSION"),
        )
    return logging.Formatter(TEXT_FORMAT)


def _resolve_level(value):
    level = logging.getLevelName(str(value or "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(app):
    """Configure app.logger handlers from app.config; safe to call more than once"""
    logger = app.logger
    level = _resolve_level(app.config.get("LOG_LEVEL"))
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = _build_formatter(app)

    if app.config.get("ENABLE_CONSOLE_LOGGING", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        setattr(console_handler, _HANDLER_FLAG, True)
        logger.addHandler(console_handler)

    if app.config.get("ENABLE_FILE_LOGGING", False):
        log_dir = app.config.get("LOG_DIR", "logs")
        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(log_dir, "identity.log"),
                maxBytes=int(app.config.get("LOG_FILE_MAX_BYTES", 10485760)),
                backupCount=int(app.config.get("LOG_FILE_BACKUP_COUNT", 10)),
            )
        except OSError as e:
            logger.warning(f"File logging disabled, cannot open {log_dir}: {str(e)}")
        else:
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            setattr(file_handler, _HANDLER_FLAG, True)
            logger.addHandler(file_handler)

    logger.debug(f"Logging configured at level {logging.getLevelName(level)}")
    return logger
