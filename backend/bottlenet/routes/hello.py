"""
BottleNet Backend: Hello Route
================================

GET /api/hello: smoke-test endpoint returning a fixed greeting.
"""

from fastapi import APIRouter

from bottlenet.schemas.common import HelloResponse

router = APIRouter(prefix="/api", tags=["Hello"])


@router.get("/hello", response_model=HelloResponse, summary="Say hello")
async def hello() -> HelloResponse:
    return HelloResponse(message="Hello from BottleNet!")
