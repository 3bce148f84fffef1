"""
BottleNet Backend: Thread Model
=================================

What:  ORM model for the `threads` collection.

A thread is created lazily the first time a message in a chain receives a
response. participants holds exactly two ids (original sender, original
recipient) and is compared order-independently. messages is the
conversation in insertion order and only ever grows by appending.
"""

from typing import List

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from bottlenet.database import Base
from bottlenet.identifiers import OBJECT_ID_LENGTH, new_object_id


class Thread(Base):
    __tablename__ = "threads"

    id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH),
        primary_key=True,
        default=new_object_id,
    )
    participants: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    messages: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<Thread(id={self.id}, messages={len(self.messages or [])})>"
