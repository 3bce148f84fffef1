"""
BottleNet Backend: FastAPI Dependencies
=========================================

What:  Resolves the process-wide DocumentStore from app.state and builds the
       services around it for each request.
Why:   The store is an explicit dependency of the services (constructor
       argument), not a module global. Routes receive ready services through
       Depends(); tests swap the store by building the app with their own.
"""

from fastapi import Depends, Request

from bottlenet.exceptions import DatabaseError
from bottlenet.services.message_service import MessageService
from bottlenet.services.recipient_selector import RecipientSelector
from bottlenet.services.user_service import UserService
from bottlenet.store import DocumentStore


def get_store(request: Request) -> DocumentStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise DatabaseError(context={"reason": "store not initialized"})
    return store


def get_message_service(store: DocumentStore = Depends(get_store)) -> MessageService:
    return MessageService(store=store, selector=RecipientSelector(store))


def get_user_service(store: DocumentStore = Depends(get_store)) -> UserService:
    return UserService(store=store)
