"""State reload, recovery and avatar endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from character_chat.storage import Storage

from .deps import LiveState, get_live, get_storage

router = APIRouter()


@router.get("/state")
async def get_state_endpoint(live: LiveState = Depends(get_live)):
    """Reload the app state from storage, running pending migrations.

    A failed migration is not an HTTP error: the returned state shows the
    error_with_delete screen with the failure details.
    """
    return await live.reload()


@router.delete("/state")
async def delete_state_endpoint(live: LiveState = Depends(get_live)):
    """Wipe all stored state and start fresh."""
    return await live.reset()


@router.get("/avatars/{avatar_id}")
async def get_avatar(avatar_id: str, storage: Storage = Depends(get_storage)):
    """Get a base64-encoded avatar image."""
    b64 = storage.get_avatar(avatar_id)
    if b64 is None:
        raise HTTPException(404, "Avatar not found")
    return {"id": avatar_id, "b64": b64}
