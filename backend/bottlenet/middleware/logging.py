"""
BottleNet Backend: Request Logging Middleware
===============================================

What:  One access-log line per request: method, path, status, duration,
       request ID and, for message routes, the message id and action.
Why:   uvicorn's access log has no request ID and no duration; this one
       replaces it (uvicorn.access is lowered to WARNING in main.py).
       Tagging the message id lets one bottle be followed through its
       respond / drop / keep calls with a single grep.

Level by status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Message bodies are never logged; they are user content.
"""

import logging
import re
import time
from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from bottlenet.middleware.request_id import request_id_var

logger = logging.getLogger("bottlenet.access")

# Probes hit these every few seconds
QUIET_PATHS = {"/health"}

_MESSAGE_ROUTE = re.compile(r"^/api/messages/(?P<message_id>[^/]+)/(?P<action>respond|drop|keep)$")


def message_route_fields(path: str) -> Dict[str, str]:
    """Extract message_id and action from a /api/messages/{id}/{action} path."""
    match = _MESSAGE_ROUTE.match(path)
    if match is None:
        return {}
    return match.groupdict()


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        rid = request_id_var.get("")
        status = response.status_code
        route_fields = message_route_fields(path)
        suffix = f" message={route_fields['message_id']}" if route_fields else ""

        logger.log(
            _level_for(status),
            "%s %s %d %.1fms [%s]%s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            suffix,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": request.client.host if request.client else "unknown",
                **route_fields,
            },
        )
        return response
