"""
FastAPI dependencies. Injected into route handlers.

Long-lived objects are built once in the factory's startup hook and parked on
app.state; these accessors hand them to the routes.
"""

from fastapi import Depends, HTTPException, Request, status

from ..lookbook import LookbookManager
from ..pipeline import RunRegistry, StepOrchestrator
from ..store import EntityStore
from .flags import FeatureFlags, get_flags


def get_store(request: Request) -> EntityStore:
    return request.app.state.store


def get_orchestrator(request: Request) -> StepOrchestrator:
    return request.app.state.orchestrator


def get_runs(request: Request) -> RunRegistry:
    return request.app.state.runs


def get_manager(request: Request) -> LookbookManager:
    return request.app.state.manager


def require_conversational_edit(flags: FeatureFlags = Depends(get_flags)) -> None:
    """404 when FF_ENABLE_CONVERSATIONAL_EDIT is off."""
    if not flags.enable_conversational_edit:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")


def require_look_import(flags: FeatureFlags = Depends(get_flags)) -> None:
    """404 when FF_ENABLE_LOOK_IMPORT is off."""
    if not flags.enable_look_import:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
