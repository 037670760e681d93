"""
Main API router. Mounts all sub-routers.
"""

from fastapi import APIRouter

router = APIRouter()


# ── Health ───────────────────────────────────────────────────────────

@router.get("/health")
async def health():
    return {"status": "ok", "service": "lookstudio"}


# ── V1 routes ────────────────────────────────────────────────────────

from .models import models_router
from .runs import runs_router
from .looks import looks_router
from .lookboards import lookboards_router, public_boards_router

router.include_router(models_router, prefix="/v1")
router.include_router(runs_router, prefix="/v1")
router.include_router(looks_router, prefix="/v1")
router.include_router(lookboards_router, prefix="/v1")
router.include_router(public_boards_router, prefix="/v1")
