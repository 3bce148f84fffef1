"""
BottleNet Backend: Random Recipient Selector
==============================================

What:  Picks a uniformly random user, optionally excluding one id.
Who:   Used by MessageService when a bottle is created or dropped.

Algorithm (count, random offset, fetch by offset):
    1. count = number of users matching the exclusion filter
    2. count == 0 → NoUsersAvailableError
    3. skip = uniform integer in [0, count)
    4. fetch the user at offset `skip` in primary-key order

    Read-only; no side effects. Two calls on an unchanged dataset can only
    differ through the random offset, never through reordering.
"""

import logging
import random
from typing import Optional

from bottlenet.exceptions import NoUsersAvailableError
from bottlenet.models.user import User
from bottlenet.store import DocumentStore

logger = logging.getLogger(__name__)


class RecipientSelector:
    """
    Random user picker over the users collection.

    Args:
        store: The document store
        rng:   Random source; inject a seeded random.Random in tests
    """

    def __init__(self, store: DocumentStore, rng: Optional[random.Random] = None):
        self.store = store
        self._rng = rng or random.Random()

    async def pick_random_user(self, exclude_id: Optional[str] = None) -> User:
        """
        Return a random user whose id differs from `exclude_id`.

        An empty or None exclude_id excludes nobody.

        Raises:
            NoUsersAvailableError: No eligible user exists
            DatabaseError: Store failure (including timeout)
        """
        criteria = [User.id != exclude_id] if exclude_id else []

        count = await self.store.users.count_documents(*criteria)
        if count == 0:
            logger.warning("No users available for selection (excluding %s)", exclude_id)
            raise NoUsersAvailableError(exclude_id=exclude_id)

        skip = self._rng.randrange(count)
        user = await self.store.users.find_one(*criteria, skip=skip)
        if user is None:
            # Users vanished between count and fetch
            logger.warning("Random offset %d of %d no longer exists", skip, count)
            raise NoUsersAvailableError(
                exclude_id=exclude_id,
                context={"skip": skip, "count": count},
            )

        logger.debug("Selected user %s (offset %d of %d)", user.id, skip, count)
        return user
