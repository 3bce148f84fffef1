"""
BottleNet Backend: Health Check Route
=======================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings the document store (SELECT 1) and reports uptime.

Status levels:
    - healthy:   Store reachable (HTTP 200)
    - unhealthy: Store unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from bottlenet import __version__
from bottlenet.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Store unreachable", "model": HealthResponse}},
)
async def health_check(request: Request):
    store = getattr(request.app.state, "store", None)
    connected = store is not None and await store.ping()
    if not connected:
        logger.warning("Health check: store unreachable")

    body = HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if not connected:
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
