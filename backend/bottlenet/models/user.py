"""
BottleNet Backend: User Model
===============================

What:  ORM model for the `users` collection.
Why:   A user is both a possible bottle recipient and the owner of a set of
       kept (bookmarked) message ids.

Table Design Rationale:
    - id: 32-char hex string generated in Python (see identifiers.py), so the
      store can return the id from insert_one without a round trip
    - kept_messages: JSON array with add-to-set semantics. Mutated only by
      appending ids; never shrinks.
"""

from typing import List

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from bottlenet.database import Base
from bottlenet.identifiers import OBJECT_ID_LENGTH, new_object_id


class User(Base):
    """
    A registered user.

    Lifecycle:
        1. Created on registration (kept_messages empty)
        2. kept_messages grows on every first keep of a message
        3. Never deleted
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(OBJECT_ID_LENGTH),
        primary_key=True,
        default=new_object_id,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    kept_messages: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Ids of messages this user kept (set semantics)",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name='{self.name}')>"
