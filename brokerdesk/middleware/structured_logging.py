# brokerdesk/middleware/structured_logging.py
from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..logging_config import request_id_ctx

log = logging.getLogger("brokerdesk.request")

REQUEST_ID_HEADER = "X-Request-ID"

# inbound ids end up verbatim in every log line for the request
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def resolve_request_id(inbound: str | None) -> str:
    if inbound and _SAFE_REQUEST_ID.match(inbound):
        return inbound
    return str(uuid.uuid4())


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    Binds a request id and emits one log line per request.

    The id is taken from X-Request-ID when it is a plain token, otherwise a
    uuid4 is generated. It is visible to every log record emitted while the
    request runs (see logging_config.JsonFormatter) and echoed on the
    response. The bearer token is never logged, only whether one was sent.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = request_id_ctx.set(rid)
        t0 = time.time()

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            log.info(
                "http_request",
                extra={
                    "event": "http_request",
                    "request_id": rid,
                    "method": request.method,
                    "path": request.url.path,
                    "query": str(request.url.query) if request.url.query else "",
                    "status_code": status_code,
                    "latency_ms": int((time.time() - t0) * 1000),
                    "authenticated": bool(request.headers.get("Authorization")),
                },
            )
            request_id_ctx.reset(token)
