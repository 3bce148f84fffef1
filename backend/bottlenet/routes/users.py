"""
BottleNet Backend: User Route Handlers
========================================

What:  POST /api/users (register) and GET /api/users (list all).
How:   Thin handlers: parse body, call UserService, serialize as camelCase.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from bottlenet.dependencies import get_user_service
from bottlenet.schemas.common import ErrorResponse
from bottlenet.schemas.user import UserCreate, UserResponse
from bottlenet.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Users"])


@router.post(
    "/users",
    status_code=201,
    response_model=UserResponse,
    responses={
        400: {"description": "Invalid request payload", "model": ErrorResponse},
        500: {"description": "Error inserting user", "model": ErrorResponse},
    },
    summary="Create user",
    description="Creates a new user in the database.",
)
async def create_user(
    payload: UserCreate,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await service.create_user(name=payload.name, email=payload.email)
    return UserResponse.model_validate(user)


@router.get(
    "/users",
    response_model=List[UserResponse],
    responses={500: {"description": "Error fetching users", "model": ErrorResponse}},
    summary="Get users",
    description="Retrieves all users from the database.",
)
async def list_users(
    service: UserService = Depends(get_user_service),
) -> List[UserResponse]:
    users = await service.list_users()
    return [UserResponse.model_validate(user) for user in users]
