from __future__ import annotations

import logging
import re
import time
from typing import Callable, Optional
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

log = logging.getLogger("openwith.api")

_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a correlation id to every request and response (X-Request-ID).

    Security notes:
    - A client-supplied id is reused only when it is short and made of
      [A-Za-z0-9._-]; otherwise a fresh id is generated (no log injection).

    """

    def __init__(self, app, *, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self._header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable):
        rid = request.headers.get(self._header_name) or ""
        if not _REQUEST_ID_RE.match(rid):
            rid = uuid4().hex
        request.state.request_id = rid
        response: Response = await call_next(request)
        response.headers[self._header_name] = rid
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """One structured log line per request.

    Endpoints may set request.state.item_count; it is logged alongside the
    status so "no document" outcomes are visible without logging payloads.

    Security notes:
    - Never logs request bodies, shared text or URIs.

    """

    async def dispatch(self, request: Request, call_next: Callable):
        start = time.monotonic()
        response: Optional[Response] = None
        try:
            response = await call_next(request)
            return response
        finally:
            log.info(
                "api_request",
                extra={
                    "request_id": getattr(request.state, "request_id", None),
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": getattr(response, "status_code", 500),
                    "item_count": getattr(request.state, "item_count", None),
                    "duration_ms": int((time.monotonic() - start) * 1000),
                },
            )
