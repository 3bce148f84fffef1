"""
BottleNet Backend: Document Store (Persistence Gateway)
=========================================================

What:  Collection-style CRUD over the users, messages and threads tables.
Why:   The message lifecycle is written against a small document-store
       contract (insert, find-one with skip, find, count, update with
       $set / $push / $addToSet) instead of against SQL. Services never see
       a session.
How:   Every operation opens its own short-lived session, runs inside
       asyncio.wait_for() bounded by the per-operation timeout, and commits
       on its own. There is no transaction spanning operations: a failure in
       step N leaves the writes of steps 1..N-1 in place.

Error translation:
    asyncio timeout      → StoreTimeoutError
    SQLAlchemyError      → DatabaseError (driver message kept in context only)

Enumeration order:
    find(), find_one(skip=...) always order by primary key so that
    "skip N, take one" is well defined on every backend.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from bottlenet.config import settings
from bottlenet.database import create_engine, create_session_factory, dispose_engine
from bottlenet.exceptions import DatabaseError, StoreTimeoutError
from bottlenet.identifiers import new_object_id
from bottlenet.models.message import Message
from bottlenet.models.thread import Thread
from bottlenet.models.user import User

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", User, Message, Thread)
ResultT = TypeVar("ResultT")


class Collection(Generic[ModelT]):
    """
    One document collection backed by one ORM model.

    Criteria passed to find_one / find / count_documents are SQLAlchemy
    column expressions, e.g. ``users.count_documents(User.id != sender_id)``.
    """

    def __init__(
        self,
        name: str,
        model: Type[ModelT],
        session_factory: async_sessionmaker[AsyncSession],
        timeout: float,
    ):
        self.name = name
        self.model = model
        self._session_factory = session_factory
        self.timeout = timeout

    async def _run(
        self,
        operation: str,
        work: Callable[[], Awaitable[ResultT]],
    ) -> ResultT:
        try:
            return await asyncio.wait_for(work(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(
                "Store %s on '%s' exceeded %.1fs timeout",
                operation,
                self.name,
                self.timeout,
            )
            raise StoreTimeoutError(
                operation=f"{self.name}.{operation}",
                timeout=self.timeout,
            )
        except SQLAlchemyError as e:
            logger.error("Store %s on '%s' failed: %s", operation, self.name, str(e))
            raise DatabaseError(
                context={
                    "collection": self.name,
                    "operation": operation,
                    "original_error": type(e).__name__,
                },
            ) from e

    async def insert_one(self, document: Dict[str, Any]) -> str:
        """
        Insert one document and return its id.

        The id is generated here unless the document already carries one.
        """
        values = dict(document)
        values.setdefault("id", new_object_id())

        async def work() -> str:
            async with self._session_factory() as session:
                session.add(self.model(**values))
                await session.commit()
            return values["id"]

        return await self._run("insert_one", work)

    async def find_one(self, *criteria: Any, skip: int = 0) -> Optional[ModelT]:
        """Return the document at offset `skip` among those matching, or None."""

        async def work() -> Optional[ModelT]:
            stmt = (
                select(self.model)
                .where(*criteria)
                .order_by(self.model.id)
                .offset(skip)
                .limit(1)
            )
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return result.scalar_one_or_none()

        return await self._run("find_one", work)

    async def find(self, *criteria: Any) -> List[ModelT]:
        async def work() -> List[ModelT]:
            stmt = select(self.model).where(*criteria).order_by(self.model.id)
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())

        return await self._run("find", work)

    async def count_documents(self, *criteria: Any) -> int:
        async def work() -> int:
            stmt = select(func.count()).select_from(self.model).where(*criteria)
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return int(result.scalar() or 0)

        return await self._run("count_documents", work)

    async def update_one(
        self,
        doc_id: str,
        set_fields: Optional[Dict[str, Any]] = None,
        push: Optional[Dict[str, Any]] = None,
        add_to_set: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Apply update operators to the document with the given id.

        Operators:
            set_fields:  field → value, overwrite ($set)
            push:        field → value, append to array ($push)
            add_to_set:  field → value, append unless already present ($addToSet)

        Returns:
            True if a document matched, False otherwise (no error for a miss).
        """

        async def work() -> bool:
            async with self._session_factory() as session:
                async with session.begin():
                    # Row lock on PostgreSQL, BEGIN IMMEDIATE on SQLite (database.py):
                    # either way no other writer reads this row until commit
                    doc = await session.get(self.model, doc_id, with_for_update=True)
                    if doc is None:
                        return False
                    for field, value in (set_fields or {}).items():
                        setattr(doc, field, value)
                    # JSON columns only detect reassignment, so build new lists
                    for field, value in (push or {}).items():
                        setattr(doc, field, [*(getattr(doc, field) or []), value])
                    for field, value in (add_to_set or {}).items():
                        current = list(getattr(doc, field) or [])
                        if value not in current:
                            setattr(doc, field, [*current, value])
            return True

        return await self._run("update_one", work)


class DocumentStore:
    """
    Process-wide handle over the three collections.

    Created once in the FastAPI lifespan (or by a test fixture) and passed
    explicitly to the services; nothing reads it from a module global.
    """

    def __init__(self, engine: AsyncEngine, timeout: Optional[float] = None):
        self.engine = engine
        self.timeout = timeout if timeout is not None else settings.db_operation_timeout
        session_factory = create_session_factory(engine)
        self.users: Collection[User] = Collection("users", User, session_factory, self.timeout)
        self.messages: Collection[Message] = Collection(
            "messages", Message, session_factory, self.timeout
        )
        self.threads: Collection[Thread] = Collection(
            "threads", Thread, session_factory, self.timeout
        )

    @classmethod
    def from_url(
        cls,
        database_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> "DocumentStore":
        return cls(create_engine(database_url), timeout=timeout)

    async def ping(self) -> bool:
        """Lightweight connectivity check for /health."""
        try:
            async with self.engine.connect() as conn:
                await asyncio.wait_for(conn.execute(text("SELECT 1")), timeout=self.timeout)
            return True
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            logger.warning("Store ping failed: %s", str(e))
            return False

    async def close(self) -> None:
        await dispose_engine(self.engine)
