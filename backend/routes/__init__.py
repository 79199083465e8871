"""FastAPI API endpoints under /api.

Endpoint groups: state (reload with migrations, recovery delete), settings,
contacts (profile generation, chat), group chats, avatars. Every request
reads and writes the current-version state snapshot through Storage.
"""

from fastapi import APIRouter

from .contacts import router as contacts_router
from .groups import router as groups_router
from .settings import router as settings_router
from .state import router as state_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(state_router)
router.include_router(contacts_router)
router.include_router(groups_router)
