"""
BottleNet Backend: Request ID Middleware
==========================================

What:  Assigns a correlation ID to each request and echoes it back in the
       X-Request-ID response header.
Why:   Every log line and every error body of one request carries the same
       ID, so a client report ("drop failed, request a1b2c3d4") maps straight
       to the server log.

Client-supplied IDs are only trusted when they look like IDs (letters,
digits, dash, underscore, dot; at most 64 characters). Anything else is
replaced, so a header cannot inject text into the log lines.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def resolve_request_id(header_value: Optional[str]) -> str:
    """Return the client's ID if well-formed, else a fresh short one."""
    if header_value and _VALID_REQUEST_ID.match(header_value):
        return header_value
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id_var.set(rid)
        request.state.request_id = rid
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
