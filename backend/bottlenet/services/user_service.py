"""
BottleNet Backend: User Service
=================================

What:  Registration and listing of users. Plain CRUD over the users
       collection; users are the pool the recipient selector draws from.
"""

import logging
from typing import List

from bottlenet.models.user import User
from bottlenet.store import DocumentStore

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_user(self, name: str, email: str) -> User:
        """Insert a user with no kept messages and return it with its new id."""
        document = {"name": name, "email": email, "kept_messages": []}
        user_id = await self.store.users.insert_one(document)
        logger.info("User %s registered", user_id)
        return User(id=user_id, **document)

    async def list_users(self) -> List[User]:
        return await self.store.users.find()
