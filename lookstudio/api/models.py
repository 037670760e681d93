"""
Models API.

GET    /v1/models            — List models
GET    /v1/models/{model_id} — Get one model
POST   /v1/models            — Register a model
DELETE /v1/models/{model_id} — Delete a model (existing looks keep their snapshot)
"""

import logging

from fastapi import APIRouter, Depends, status

from ..core.dependencies import get_store
from ..schemas import Model, ModelDraft
from ..store import EntityKind, EntityStore

logger = logging.getLogger(__name__)

models_router = APIRouter(prefix="/models", tags=["models"])


@models_router.get("", response_model=list[Model])
async def list_models(store: EntityStore = Depends(get_store)):
    models = await store.get_all(EntityKind.MODEL)
    return sorted(models, key=lambda m: m.id)


@models_router.get("/{model_id}", response_model=Model)
async def get_model(model_id: int, store: EntityStore = Depends(get_store)):
    return await store.get(EntityKind.MODEL, model_id)


@models_router.post("", response_model=Model, status_code=status.HTTP_201_CREATED)
async def create_model(draft: ModelDraft, store: EntityStore = Depends(get_store)):
    model = await store.add(EntityKind.MODEL, draft)
    logger.info("Registered model #%d (%s)", model.id, model.name)
    return model


@models_router.delete("/{model_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_model(model_id: int, store: EntityStore = Depends(get_store)):
    await store.remove(EntityKind.MODEL, model_id)
