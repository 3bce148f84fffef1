"""
BottleNet Backend: Message Service (Message Lifecycle Engine)
===============================================================

What:  Creates bottle messages, threads responses, re-routes (drops) messages
       and records kept messages per user.
Why:   All routing and threading rules live here, independent of HTTP.
How:   Composes the DocumentStore and the RecipientSelector, both passed in
       through the constructor.
Who:   Called by the /api/messages route handlers.

Lifecycle of a message:
    Created (unrouted) ──▶ Routed (recipient set) ──┬──▶ Responded (new message)
                                                    ├──▶ Dropped (same message, new recipient)
                                                    └──▶ Kept (bookmark on the user)

Threading (on respond):
    original.thread_id set?  ── yes ──▶ load thread
                             └─ no ───▶ insert thread {participants: [sender, recipient],
                                                        messages: [original.id]}
                                        then $set original.thread_id
    insert response message, then $push response.id onto thread.messages

Known gaps (kept as-is, not repaired):
    - Thread creation is check-then-act with no lock; two concurrent first
      responses to the same message can each create a thread.
    - Every store operation commits on its own. If inserting the response
      or appending it fails after the thread was created, the thread stays.
    - The response message never gets its own thread_id; it is only
      reachable through thread.messages.
    - keep_message does not check that the message exists.
"""

import logging
import time
from typing import Callable, Optional

from bottlenet.exceptions import (
    DatabaseError,
    MessageNotFoundError,
    SenderNotFoundError,
    ThreadUpdateFailedError,
    UpdateFailedError,
)
from bottlenet.models.message import Message
from bottlenet.models.thread import Thread
from bottlenet.models.user import User
from bottlenet.services.recipient_selector import RecipientSelector
from bottlenet.store import DocumentStore

logger = logging.getLogger(__name__)


class MessageService:
    """
    Business logic for bottle messages.

    Error Handling Strategy:
        Missing documents become NotFoundError subclasses. Store failures in
        the threading steps are wrapped in ThreadUpdateFailedError, failures
        of in-place updates in UpdateFailedError. NoUsersAvailableError from
        the selector propagates unchanged.
    """

    def __init__(
        self,
        store: DocumentStore,
        selector: Optional[RecipientSelector] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.selector = selector or RecipientSelector(store)
        self._clock = clock

    def _now(self) -> int:
        return int(self._clock())

    async def _get_message(self, message_id: str) -> Message:
        message = await self.store.messages.find_one(Message.id == message_id)
        if message is None:
            raise MessageNotFoundError(message_id)
        return message

    async def create_message(self, sender_id: str, content: str) -> Message:
        """
        Send a new bottle message from `sender_id` to a random other user.

        Steps:
            1. Resolve the sender
            2. Pick a random recipient, excluding the sender
            3. Stamp the current time and insert

        Returns:
            The stored message, with its id; thread_id is None.

        Raises:
            SenderNotFoundError: Sender is not a registered user (→ 404)
            NoUsersAvailableError: Nobody else to send to (→ 500)
            DatabaseError: Store failure (→ 500)
        """
        sender = await self.store.users.find_one(User.id == sender_id)
        if sender is None:
            logger.warning("Sender %s not found", sender_id)
            raise SenderNotFoundError(sender_id)

        recipient = await self.selector.pick_random_user(exclude_id=sender.id)

        document = {
            "sender_id": sender.id,
            "recipient_id": recipient.id,
            "content": content,
            "timestamp": self._now(),
        }
        message_id = await self.store.messages.insert_one(document)
        logger.info("Message %s sent from %s to %s", message_id, sender.id, recipient.id)

        return Message(id=message_id, thread_id=None, **document)

    async def respond_to_message(self, message_id: str, content: str) -> Message:
        """
        Reply to a message; the reply goes back to the original sender.

        The respondent (original recipient) becomes the sender of the reply.
        The first reply in a chain creates the thread and back-fills the
        original message's thread_id; later replies append to it.

        Returns:
            The stored response message (thread_id left None).

        Raises:
            MessageNotFoundError: Original message does not exist (→ 404)
            ThreadUpdateFailedError: Any store failure while threading (→ 500)
        """
        original = await self._get_message(message_id)

        response = {
            "sender_id": original.recipient_id,
            "recipient_id": original.sender_id,
            "content": content,
            "timestamp": self._now(),
        }

        try:
            thread_id = await self._resolve_thread(original)
            response_id = await self.store.messages.insert_one(response)
            appended = await self.store.threads.update_one(
                thread_id,
                push={"messages": response_id},
            )
        except ThreadUpdateFailedError:
            raise
        except DatabaseError as e:
            logger.error(
                "Threading response to %s failed: %s | Context: %s",
                original.id,
                e.message,
                e.context,
            )
            raise ThreadUpdateFailedError(
                context={"message_id": original.id, **e.context},
            ) from e

        if not appended:
            logger.error("Thread %s disappeared before response %s was appended",
                         thread_id, response_id)
            raise ThreadUpdateFailedError(
                context={"message_id": original.id, "thread_id": thread_id},
            )

        logger.info(
            "Response %s to message %s appended to thread %s",
            response_id,
            original.id,
            thread_id,
        )
        return Message(id=response_id, thread_id=None, **response)

    async def _resolve_thread(self, original: Message) -> str:
        """Return the id of the original message's thread, creating it if needed."""
        if original.thread_id is not None:
            thread = await self.store.threads.find_one(Thread.id == original.thread_id)
            if thread is None:
                raise ThreadUpdateFailedError(
                    context={"message_id": original.id, "thread_id": original.thread_id},
                )
            return thread.id

        # Not atomic: a concurrent first response can also reach this point.
        thread_id = await self.store.threads.insert_one(
            {
                "participants": [original.sender_id, original.recipient_id],
                "messages": [original.id],
            }
        )
        await self.store.messages.update_one(
            original.id,
            set_fields={"thread_id": thread_id},
        )
        logger.info("Thread %s created for message %s", thread_id, original.id)
        return thread_id

    async def drop_message(self, message_id: str) -> Message:
        """
        Throw a message back into the sea: re-route it to a new random user.

        The new recipient is drawn excluding the SENDER only, so it may be
        the same user that just dropped it. Identity, sender, content,
        timestamp and thread_id are unchanged; no new document is created.

        Raises:
            MessageNotFoundError: Message does not exist (→ 404)
            NoUsersAvailableError: Nobody but the sender exists (→ 500)
            UpdateFailedError: The re-route write failed (→ 500)
        """
        message = await self._get_message(message_id)
        recipient = await self.selector.pick_random_user(exclude_id=message.sender_id)

        try:
            matched = await self.store.messages.update_one(
                message.id,
                set_fields={"recipient_id": recipient.id},
            )
        except DatabaseError as e:
            logger.error("Re-routing message %s failed: %s", message.id, e.message)
            raise UpdateFailedError(
                message="Failed to drop the message to a new user",
                context={"message_id": message.id, **e.context},
            ) from e

        if not matched:
            raise MessageNotFoundError(message.id)

        logger.info(
            "Message %s dropped: %s -> %s",
            message.id,
            message.recipient_id,
            recipient.id,
        )
        message.recipient_id = recipient.id
        return message

    async def keep_message(self, message_id: str, user_id: str) -> None:
        """
        Bookmark a message for a user (idempotent, set semantics).

        Neither the message nor the user is checked for existence; keeping
        on behalf of an unknown user matches nothing and is a no-op.

        Raises:
            UpdateFailedError: The store write failed (→ 500)
        """
        try:
            matched = await self.store.users.update_one(
                user_id,
                add_to_set={"kept_messages": message_id},
            )
        except DatabaseError as e:
            logger.error("Keeping message %s for %s failed: %s", message_id, user_id, e.message)
            raise UpdateFailedError(
                message="Failed to keep the message",
                context={"message_id": message_id, "user_id": user_id, **e.context},
            ) from e

        if matched:
            logger.info("User %s kept message %s", user_id, message_id)
        else:
            logger.warning("Keep for unknown user %s matched nothing", user_id)
