"""
Assembly runs API.

POST   /v1/runs                       — Start a run (model id + ordered SKUs)
GET    /v1/runs/{run_id}              — Current state of a run
POST   /v1/runs/{run_id}/regenerate   — Re-run from a step index
POST   /v1/runs/{run_id}/save         — Persist a completed run as a Look
DELETE /v1/runs/{run_id}              — Discard a run
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import Field

from ..core.dependencies import get_orchestrator, get_runs, get_store
from ..pipeline import RunRegistry, StepOrchestrator, TryOnRun
from ..schemas import CamelModel, Look, Model, ProductReference
from ..store import EntityKind, EntityStore

logger = logging.getLogger(__name__)

runs_router = APIRouter(prefix="/runs", tags=["runs"])


# ── Request / response models ────────────────────────────────────────

class StartRunRequest(CamelModel):
    model_id: int
    skus: list[str] = Field(min_length=1)


class RegenerateRequest(CamelModel):
    start_index: int


class StepView(CamelModel):
    index: int
    product: ProductReference
    status: str
    input_image: Optional[str] = None
    output_image: Optional[str] = None
    error: Optional[str] = None


class RunView(CamelModel):
    run_id: str
    status: str
    model: Model
    starting_image: str
    steps: list[StepView]
    final_image: Optional[str] = None
    error: Optional[str] = None
    created_at: int


def _view(run: TryOnRun) -> RunView:
    return RunView(
        run_id=run.run_id,
        status=run.status,
        model=run.model,
        starting_image=run.starting_image,
        steps=[
            StepView(
                index=i,
                product=step.product,
                status=step.status.value,
                input_image=step.input_image,
                output_image=step.output_image,
                error=step.error,
            )
            for i, step in enumerate(run.steps)
        ],
        final_image=run.final_image,
        error=run.error,
        created_at=run.created_at,
    )


# ── Routes ───────────────────────────────────────────────────────────

@runs_router.post("", response_model=RunView, status_code=status.HTTP_201_CREATED)
async def start_run(
    request: StartRunRequest,
    store: EntityStore = Depends(get_store),
    orchestrator: StepOrchestrator = Depends(get_orchestrator),
    runs: RunRegistry = Depends(get_runs),
):
    """
    Resolve the SKUs and generate every step in order.

    The run is returned even when a step failed; its status says so and the
    failed step carries the reason. Missing SKUs fail the request before any
    generation. The run is registered before generating, so it stays reachable
    for GET and regenerate even if generation raises.
    """
    model = await store.get(EntityKind.MODEL, request.model_id)
    run = runs.put(await orchestrator.prepare(model, request.skus))
    await orchestrator.execute(run)
    return _view(run)


@runs_router.get("/{run_id}", response_model=RunView)
async def get_run(run_id: str, runs: RunRegistry = Depends(get_runs)):
    return _view(runs.get(run_id))


@runs_router.post("/{run_id}/regenerate", response_model=RunView)
async def regenerate_run(
    run_id: str,
    request: RegenerateRequest,
    orchestrator: StepOrchestrator = Depends(get_orchestrator),
    runs: RunRegistry = Depends(get_runs),
):
    run = await orchestrator.regenerate(runs.get(run_id), request.start_index)
    return _view(run)


@runs_router.post("/{run_id}/save", response_model=Look, status_code=status.HTTP_201_CREATED)
async def save_run(
    run_id: str,
    orchestrator: StepOrchestrator = Depends(get_orchestrator),
    runs: RunRegistry = Depends(get_runs),
):
    run = runs.get(run_id)
    # Taken out before the write so a second save of the same run gets a 404
    runs.discard(run_id)
    try:
        look = await orchestrator.save(run)
    except Exception:
        runs.put(run)
        raise
    return look


@runs_router.delete("/{run_id}", status_code=status.HTTP_204_NO_CONTENT)
async def discard_run(run_id: str, runs: RunRegistry = Depends(get_runs)):
    runs.discard(run_id)
