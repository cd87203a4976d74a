from fastapi import Depends
from adapters.base import BaseMessagingClient
from adapters.line import LineMessagingClient
from services.event_dispatcher import EventDispatcher
from services.user_store import NullUserStore, UserStore

def get_messaging_client() -> BaseMessagingClient:
    return LineMessagingClient()

def get_user_store() -> UserStore:
    return NullUserStore()

def get_event_dispatcher(
    messaging_client: BaseMessagingClient = Depends(get_messaging_client),
    user_store: UserStore = Depends(get_user_store),
) -> EventDispatcher:
    return EventDispatcher(
        messaging_client=messaging_client,
        user_store=user_store,
    )
