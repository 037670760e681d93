"""
Lookboards API.

GET    /v1/lookboards                 — List boards, newest first
POST   /v1/lookboards                 — Create a board from selected looks
DELETE /v1/lookboards/{board_id}      — Delete a board (looks untouched)
GET    /v1/boards/public/{public_id}  — Shared view of a public board
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import Field

from ..core.dependencies import get_manager
from ..lookbook import LookbookManager
from ..schemas import CamelModel, Look, Lookboard, Visibility

logger = logging.getLogger(__name__)

lookboards_router = APIRouter(prefix="/lookboards", tags=["lookboards"])
public_boards_router = APIRouter(prefix="/boards/public", tags=["lookboards"])


class CreateLookboardRequest(CamelModel):
    title: str
    look_ids: list[int] = Field(default_factory=list)
    note: Optional[str] = None
    visibility: Visibility = Visibility.PRIVATE


class PublicBoardView(CamelModel):
    public_id: str
    title: str
    note: Optional[str] = None
    looks: list[Look]
    updated_at: int


@lookboards_router.get("", response_model=list[Lookboard])
async def list_lookboards(manager: LookbookManager = Depends(get_manager)):
    return await manager.list_lookboards()


@lookboards_router.post("", response_model=Lookboard, status_code=status.HTTP_201_CREATED)
async def create_lookboard(
    request: CreateLookboardRequest,
    manager: LookbookManager = Depends(get_manager),
):
    return await manager.create_lookboard(
        request.title,
        request.look_ids,
        note=request.note,
        visibility=request.visibility,
    )


@lookboards_router.delete("/{board_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lookboard(board_id: int, manager: LookbookManager = Depends(get_manager)):
    await manager.delete_lookboard(board_id)


@public_boards_router.get("/{public_id}", response_model=PublicBoardView)
async def get_public_board(public_id: str, manager: LookbookManager = Depends(get_manager)):
    """No auth: anyone with the link can view a public board."""
    board, looks = await manager.get_public_board(public_id)
    return PublicBoardView(
        public_id=board.public_id,
        title=board.title,
        note=board.note,
        looks=looks,
        updated_at=board.updated_at,
    )
