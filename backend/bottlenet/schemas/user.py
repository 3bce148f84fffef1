"""
BottleNet Backend: User Schemas
=================================

Request and response models for /api/users. Only presence is checked:
name and email must be present, nothing validates their format.
"""

from typing import List

from pydantic import Field

from bottlenet.schemas.common import CamelModel


class UserCreate(CamelModel):
    name: str = Field(description="Display name", examples=["RandomUser123"])
    email: str = Field(description="Contact email", examples=["user@example.com"])


class UserResponse(CamelModel):
    """A user as returned by the API; keptMessages is a set rendered as a list."""
    id: str = Field(description="User id (hex)")
    name: str
    email: str
    kept_messages: List[str] = Field(
        default_factory=list,
        description="Ids of messages this user kept",
    )
