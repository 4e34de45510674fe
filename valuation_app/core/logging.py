"""Logging configuration"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from valuation_app.core.config import settings

# Attributes passed through ``extra=`` that are copied into JSON records
CONTEXT_FIELDS = ("correlation_id", "render_attempt", "draft_id", "template")

QUIET_LOGGERS = ("uvicorn.access", "azure", "httpx", "google_genai")


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log aggregation"""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": settings.APP_NAME,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging():
    """Configure the root logger from LOG_LEVEL and LOG_FORMAT"""
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if settings.LOG_FORMAT == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-7s [%(name)s] %(message)s"))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    # One handler only, even when the app module is imported again by a reloader
    root_logger.handlers = [handler]

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.info(f"Logging configured: level={settings.LOG_LEVEL}, format={settings.LOG_FORMAT}")
