"""
Looks API.

GET    /v1/looks                       — List looks, newest first
GET    /v1/looks/export                — Export every look (oldest first)
POST   /v1/looks/import                — Import an exported batch (all or nothing)
GET    /v1/looks/{look_id}             — Get one look
DELETE /v1/looks/{look_id}             — Delete a look and drop it from every board
POST   /v1/looks/{look_id}/variations  — Add a variation image
POST   /v1/looks/{look_id}/promote     — Make a variation the main image
POST   /v1/looks/{look_id}/edit        — Conversational edit; result becomes a variation
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, status

from ..core.dependencies import (
    get_manager,
    require_conversational_edit,
    require_look_import,
)
from ..lookbook import LookbookManager
from ..schemas import CamelModel, Look

logger = logging.getLogger(__name__)

looks_router = APIRouter(prefix="/looks", tags=["looks"])


class ImageRequest(CamelModel):
    image: str


class EditRequest(CamelModel):
    instruction: str = ""
    source_image: Optional[str] = None
    guide_image: Optional[str] = None


class EditResponse(CamelModel):
    look: Look
    image: str


class ImportResponse(CamelModel):
    imported: int


@looks_router.get("", response_model=list[Look])
async def list_looks(manager: LookbookManager = Depends(get_manager)):
    return await manager.list_looks()


# Registered before /{look_id} so "export" is not read as an id
@looks_router.get("/export")
async def export_looks(manager: LookbookManager = Depends(get_manager)) -> list[dict]:
    return await manager.export_looks()


@looks_router.post(
    "/import",
    response_model=ImportResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_look_import)],
)
async def import_looks(
    records: list[Any],
    manager: LookbookManager = Depends(get_manager),
):
    """Insert exported looks. Incoming ids are ignored; the store assigns new ones."""
    return ImportResponse(imported=await manager.import_looks(records))


@looks_router.get("/{look_id}", response_model=Look)
async def get_look(look_id: int, manager: LookbookManager = Depends(get_manager)):
    return await manager.get_look(look_id)


@looks_router.delete("/{look_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_look(look_id: int, manager: LookbookManager = Depends(get_manager)):
    await manager.delete_look(look_id)


@looks_router.post("/{look_id}/variations", response_model=Look)
async def add_variation(
    look_id: int,
    request: ImageRequest,
    manager: LookbookManager = Depends(get_manager),
):
    return await manager.add_variation(look_id, request.image)


@looks_router.post("/{look_id}/promote", response_model=Look)
async def promote_variation(
    look_id: int,
    request: ImageRequest,
    manager: LookbookManager = Depends(get_manager),
):
    return await manager.promote_variation(look_id, request.image)


@looks_router.post(
    "/{look_id}/edit",
    response_model=EditResponse,
    dependencies=[Depends(require_conversational_edit)],
)
async def edit_look(
    look_id: int,
    request: EditRequest,
    manager: LookbookManager = Depends(get_manager),
):
    look, image = await manager.edit_look(
        look_id,
        request.instruction,
        source_image=request.source_image,
        guide_image=request.guide_image,
    )
    return EditResponse(look=look, image=image)
