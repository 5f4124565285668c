from __future__ import annotations

import logging
import os
from contextvars import ContextVar
from typing import IO, Optional

from pythonjsonlogger import jsonlogger

from svc_teammate.config import settings

# Set by RequestIdMiddleware for the lifetime of one request.
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(service)s %(environment)s %(request_id)s %(message)s"


class RequestContextFilter(logging.Filter):
    """Stamps every record with the service identity and the current request id."""

    def __init__(self, service: str, environment: str):
        super().__init__()
        self.service = service
        self.environment = environment

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service
        record.environment = self.environment
        # An explicit extra={"request_id": ...} wins over the context.
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get()
        return True


def build_handler(stream: Optional[IO[str]] = None) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT))
    handler.addFilter(RequestContextFilter(settings.SERVICE_NAME, settings.ENVIRONMENT))
    return handler


def configure_logging() -> None:
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    # Avoid duplicate handlers on reload
    if root.handlers:
        return

    root.addHandler(build_handler())

    # Quiet noisy libs
    logging.getLogger("httpx").setLevel(os.getenv("HTTPX_LOG_LEVEL", "WARNING"))
    logging.getLogger("uvicorn.access").setLevel(os.getenv("UVICORN_ACCESS_LOG_LEVEL", "WARNING"))
