"""Shared request dependencies and the live app state."""

import asyncio

from fastapi import Depends, HTTPException, Request

from character_chat.models import AppState
from character_chat.state import delete_state, is_error_state, reload_state, save_app_state
from character_chat.storage import Storage


class LiveState:
    """The AppState of the running app, loaded once and shared by all requests.

    Loading (and so migrating) and every write happen under `lock`. Routes
    that call a provider release the lock while awaiting it and apply their
    result to the live state afterwards, so concurrent chats with different
    contacts never overwrite each other.
    """

    def __init__(self, storage: Storage) -> None:
        self.storage = storage
        self.state: AppState | None = None
        self.lock = asyncio.Lock()

    async def load(self) -> AppState:
        """Return the live state, loading it from storage on first use."""
        async with self.lock:
            if self.state is None:
                self.state = reload_state(self.storage)
            return self.state

    async def reload(self) -> AppState:
        async with self.lock:
            self.state = reload_state(self.storage)
            return self.state

    async def reset(self) -> AppState:
        async with self.lock:
            self.state = delete_state(self.storage)
            return self.state

    def save(self) -> None:
        """Persist the live state. Call with `lock` held."""
        save_app_state(self.storage, self.state)


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_live(request: Request) -> LiveState:
    return request.app.state.live


async def get_state(live: LiveState = Depends(get_live)) -> AppState:
    """Current state. Refuses to work on a failed migration."""
    state = await live.load()
    if is_error_state(state):
        raise HTTPException(409, state.volatile_state.error_message)
    return state
