"""
BottleNet Backend: Message Model
==================================

What:  ORM model for the `messages` collection ("bottle messages").

State per message:
    Created (unrouted) → Routed (recipient_id set) → Responded / Dropped / Kept

    - Dropped re-routes the SAME row (recipient_id changes, nothing else)
    - Responded inserts a NEW message with sender and recipient swapped
    - Kept lives on the user row, not here

Invariant: sender_id != recipient_id once a recipient is assigned.
thread_id stays NULL until the message is first responded to.
"""

from typing import Optional

from sqlalchemy import BigInteger, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from bottlenet.database import Base
from bottlenet.identifiers import OBJECT_ID_LENGTH, new_object_id


class Message(Base):
    __tablename__ = "messages"

    id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH),
        primary_key=True,
        default=new_object_id,
    )
    sender_id: Mapped[str] = mapped_column(String(OBJECT_ID_LENGTH), nullable=False)
    recipient_id: Mapped[Optional[str]] = mapped_column(
        String(OBJECT_ID_LENGTH),
        nullable=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Seconds since epoch
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    thread_id: Mapped[Optional[str]] = mapped_column(
        String(OBJECT_ID_LENGTH),
        nullable=True,
        default=None,
    )

    __table_args__ = (
        Index("idx_messages_recipient_id", "recipient_id"),
        Index("idx_messages_thread_id", "thread_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Message(id={self.id}, sender_id={self.sender_id}, "
            f"recipient_id={self.recipient_id}, thread_id={self.thread_id})>"
        )
