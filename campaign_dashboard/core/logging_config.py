"""Structured JSON logging configuration."""

import logging
import sys

from pythonjsonlogger import jsonlogger

from campaign_dashboard.core.config import settings
from campaign_dashboard.core.middleware import request_id_ctx

NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "sqlalchemy.engine")


class RequestIdFilter(logging.Filter):
    """Stamp records emitted while handling a request with that request's id."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_ctx.get()
        return True


def setup_logging() -> None:
    """Send JSON lines to stdout at ``APP_LOG_LEVEL``."""
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(request_id)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(settings.log_level.upper())

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
