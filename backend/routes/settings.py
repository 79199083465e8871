"""Health check and settings endpoints."""

from fastapi import APIRouter, Depends

from character_chat.models import AppState
from character_chat.state import update_settings

from .deps import LiveState, get_live, get_state
from .models import UpdateSettings

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings(state: AppState = Depends(get_state)):
    """Get the user settings (providers, keys, prompt templates)."""
    return state.settings


@router.patch("/settings", dependencies=[Depends(get_state)])
async def patch_settings(
    body: UpdateSettings,
    live: LiveState = Depends(get_live),
):
    """Update settings (partial merge)."""
    async with live.lock:
        update_settings(live.state, body.model_dump(exclude_none=True))
        live.save()
        return live.state.settings
