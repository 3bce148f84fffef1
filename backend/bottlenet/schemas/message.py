"""
BottleNet Backend: Message Schemas
====================================

What:  Request bodies for creating and answering bottle messages, and the
       message representation returned by every /api/messages endpoint.

Request shapes:
    POST /api/messages/new            {"senderId": "...", "content": "..."}
    POST /api/messages/{id}/respond   {"content": "..."}

    Any other fields a client sends (recipientId, timestamp, threadId) are
    ignored: the server always assigns routing and time itself.
"""

from typing import Optional

from pydantic import Field

from bottlenet.schemas.common import CamelModel


class MessageCreate(CamelModel):
    sender_id: str = Field(description="Id of the sending user")
    content: str = Field(
        min_length=1,
        description="Message text",
        examples=["A message in a bottle"],
    )


class MessageReply(CamelModel):
    content: str = Field(min_length=1, description="Response text")


class MessageResponse(CamelModel):
    """
    A bottle message.

    Why thread_id is nullable:
        It stays null until the message's first response creates a thread.
        Response messages themselves are never linked back (null as well).
    """
    id: str = Field(description="Message id (hex)")
    sender_id: str
    recipient_id: Optional[str] = None
    content: str
    timestamp: int = Field(description="Creation time, seconds since epoch")
    thread_id: Optional[str] = None
