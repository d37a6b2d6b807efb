"""FastAPI API endpoints under /api.

Endpoint groups: roster (state, characters, feuds, surprise, speak),
matches, championships, ppv. Handlers are thin; all engine logic lives on
the Promotion held in ``app.state.show``.
"""

from fastapi import APIRouter

from .championships import router as championships_router
from .matches import router as matches_router
from .ppv import router as ppv_router
from .roster import router as roster_router

router = APIRouter()
router.include_router(roster_router)
router.include_router(matches_router)
router.include_router(championships_router)
router.include_router(ppv_router)
