"""
BottleNet Backend: Message Route Handlers
===========================================

What:  HTTP surface of the message lifecycle.
How:   Validate ids at the boundary (400 on malformed), delegate to
       MessageService, serialize the resulting message. Typed service errors
       are turned into responses by the global handlers in main.py.

Route Inventory:
    POST /api/messages/new            → 201 created message
    POST /api/messages/{id}/respond   → 200 response message
    POST /api/messages/{id}/drop      → 200 re-routed message
    GET  /api/messages/{id}/keep      → 200 "Message successfully kept"
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from bottlenet.dependencies import get_message_service
from bottlenet.identifiers import validate_object_id
from bottlenet.schemas.common import ErrorResponse
from bottlenet.schemas.message import MessageCreate, MessageReply, MessageResponse
from bottlenet.services.message_service import MessageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/messages", tags=["Messages"])

_ERRORS = {
    400: {"description": "Invalid id or payload", "model": ErrorResponse},
    404: {"description": "Message or sender not found", "model": ErrorResponse},
    500: {"description": "Routing or persistence failure", "model": ErrorResponse},
}


@router.post(
    "/new",
    status_code=201,
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Create a new bottle message",
    description="Sends a bottle message to a random user other than the sender.",
)
async def create_message(
    payload: MessageCreate,
    service: MessageService = Depends(get_message_service),
) -> MessageResponse:
    sender_id = validate_object_id(payload.sender_id, "senderId")
    message = await service.create_message(sender_id=sender_id, content=payload.content)
    return MessageResponse.model_validate(message)


@router.post(
    "/{message_id}/respond",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Respond to a bottle message",
    description=(
        "Replies to the sender of an existing message. The first response "
        "opens a thread between the two users."
    ),
)
async def respond_to_message(
    message_id: str,
    payload: MessageReply,
    service: MessageService = Depends(get_message_service),
) -> MessageResponse:
    message_id = validate_object_id(message_id, "message id")
    response = await service.respond_to_message(message_id, content=payload.content)
    return MessageResponse.model_validate(response)


@router.post(
    "/{message_id}/drop",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Drop the message into the sea",
    description="Re-routes the message to another random user.",
)
async def drop_message(
    message_id: str,
    service: MessageService = Depends(get_message_service),
) -> MessageResponse:
    message_id = validate_object_id(message_id, "message id")
    message = await service.drop_message(message_id)
    return MessageResponse.model_validate(message)


@router.get(
    "/{message_id}/keep",
    response_class=PlainTextResponse,
    responses=_ERRORS,
    summary="Keep a message",
    description="Saves the message in the user's account.",
)
async def keep_message(
    message_id: str,
    user_id: Optional[str] = Query(default=None, alias="userId", description="Keeping user"),
    service: MessageService = Depends(get_message_service),
) -> PlainTextResponse:
    message_id = validate_object_id(message_id, "message id")
    user_id = validate_object_id(user_id, "userId")
    await service.keep_message(message_id, user_id)
    return PlainTextResponse("Message successfully kept")
