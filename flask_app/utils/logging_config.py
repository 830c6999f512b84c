# flask_app/utils/logging_config.py
"""
Logging setup driven by the monitoring configuration (LOG_LEVEL, LOG_FORMAT,
LOG_DIR, ENABLE_FILE_LOGGING, ENABLE_CONSOLE_LOGGING).
"""

import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

from flask import has_request_context, request

_HANDLER_MARKER = "_voluntariado_handler"


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with request details when available"""

    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        if has_request_context():
            entry["method"] = request.method
            entry["path"] = request.path
            entry["remote_addr"] = request.remote_addr
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class RequestFormatter(logging.Formatter):
    """Plain-text formatter that appends the request path when available"""

    def format(self, record):
        record.request_path = request.path if has_request_context() else "-"
        return super().format(record)


def _build_formatter(log_format):
    if log_format == "json":
        return JSONFormatter()
    return RequestFormatter("%(asctime)s %(levelname)s [%(name)s] %(message)s (%(request_path)s)")


def setup_logging(app):
    """
    Configure ``app.logger`` from config. Safe to call more than once: handlers
    installed by a previous call are replaced.
    """
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    formatter = _build_formatter(app.config.get("LOG_FORMAT", "text"))

    for handler in list(app.logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            app.logger.removeHandler(handler)
            handler.close()

    if app.config.get("ENABLE_FILE_LOGGING", False):
        log_dir = app.config.get("LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "app.log"),
            maxBytes=app.config.get("LOG_FILE_MAX_BYTES", 10485760),
            backupCount=app.config.get("LOG_FILE_BACKUP_COUNT", 10),
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        setattr(file_handler, _HANDLER_MARKER, True)
        app.logger.addHandler(file_handler)

    if app.config.get("ENABLE_CONSOLE_LOGGING", False):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.setLevel(level)
        setattr(console_handler, _HANDLER_MARKER, True)
        app.logger.addHandler(console_handler)

    app.logger.setLevel(level)
    app.logger.debug(f"Logging configured at level {logging.getLevelName(level)}")
