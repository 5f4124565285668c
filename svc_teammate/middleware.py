from __future__ import annotations

import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from svc_teammate.logging import request_id_var

logger = logging.getLogger("api.access")


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        request.state.request_id = rid
        token = request_id_var.set(rid)
        started = time.monotonic()
        try:
            resp = await call_next(request)
            resp.headers["X-Request-Id"] = rid
            logger.info(
                "request",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": resp.status_code,
                    "duration_ms": round((time.monotonic() - started) * 1000, 1),
                },
            )
            return resp
        finally:
            request_id_var.reset(token)
