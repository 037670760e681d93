"""
Step orchestrator — turns a model plus an ordered SKU list into a chain of
generated images, one product at a time.

Flow:
  1. Resolve every SKU (concurrently). Any miss aborts before generation.
  2. Create one pending step per product.
  3. Run steps strictly in order; step i's input is step i-1's output.
  4. Stop at the first failure. Later steps stay pending.
  5. A run where every step completed can be saved as a Look.

Regeneration resets steps k..N-1 and re-runs them from step k-1's output.
Nothing is written to the store until save().
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Optional, Protocol, Sequence

from ..core.errors import GenerationFailure, InvalidInputError, InvalidStateError, NotFoundError
from ..models import now_ms
from ..schemas import Look, LookDraft, Model, ProductReference
from ..services.image_synthesis import ImageSynthesisGateway
from ..services.images import ImageRef
from ..store import EntityKind, EntityStore
from . import steps as transitions
from .steps import TryOnStep

logger = logging.getLogger(__name__)


class ProductCatalog(Protocol):
    async def fetch_product(self, sku: str) -> Optional[ProductReference]: ...


@dataclass
class TryOnRun:
    """In-memory state of one assembly run."""

    model: Model
    # Snapshot of the model image at run start; later model edits don't affect the run
    starting_image: ImageRef
    steps: list[TryOnStep]
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: int = field(default_factory=now_ms)
    error: Optional[str] = None
    in_progress: bool = False

    @property
    def products(self) -> list[ProductReference]:
        return [s.product for s in self.steps]

    @property
    def is_savable(self) -> bool:
        return not self.in_progress and transitions.is_savable(self.steps)

    @property
    def final_image(self) -> Optional[ImageRef]:
        return self.steps[-1].output_image if self.is_savable else None

    @property
    def status(self) -> str:
        if self.in_progress:
            return "generating"
        if self.is_savable:
            return "completed"
        if transitions.failed_index(self.steps) is not None:
            return "failed"
        return "pending"


def parse_skus(skus: Sequence[str]) -> list[str]:
    """Trim SKU codes and drop blanks. Accepts comma-separated entries too."""
    parsed = []
    for entry in skus:
        parsed.extend(code.strip() for code in entry.split(","))
    return [code for code in parsed if code]


class StepOrchestrator:
    """Drives assembly runs. Catalog, gateway and store are injected."""

    def __init__(
        self,
        catalog: ProductCatalog,
        gateway: ImageSynthesisGateway,
        store: EntityStore,
    ):
        self.catalog = catalog
        self.gateway = gateway
        self.store = store

    async def resolve_products(self, skus: Sequence[str]) -> list[ProductReference]:
        """Look up every SKU concurrently. Raises NotFoundError naming all misses."""
        codes = parse_skus(skus)
        if not codes:
            raise InvalidInputError("At least one SKU is required")

        results = await asyncio.gather(*(self.catalog.fetch_product(code) for code in codes))
        missing = [code for code, product in zip(codes, results) if product is None]
        if missing:
            raise NotFoundError(
                f"Could not find data for SKU(s): {', '.join(missing)}",
                missing=missing,
            )
        return list(results)

    async def prepare(self, model: Model, skus: Sequence[str]) -> TryOnRun:
        """Resolve SKUs and build a run with every step pending. Nothing is generated yet."""
        products = await self.resolve_products(skus)
        run = TryOnRun(
            model=model,
            starting_image=model.image_url,
            steps=transitions.new_steps(products),
        )
        logger.info(
            "Run %s prepared: model=%s skus=%s",
            run.run_id, model.id, [p.sku for p in products],
        )
        return run

    async def execute(self, run: TryOnRun) -> TryOnRun:
        """Run every step of a prepared run from the starting image."""
        if run.in_progress:
            raise InvalidStateError("The run is still generating")
        await self._execute(run, 0)
        return run

    async def start(self, model: Model, skus: Sequence[str]) -> TryOnRun:
        """prepare() then execute()."""
        return await self.execute(await self.prepare(model, skus))

    async def regenerate(self, run: TryOnRun, start_index: int) -> TryOnRun:
        """Re-run steps start_index..N-1, keeping earlier steps as they are."""
        if run.in_progress:
            raise InvalidStateError("The run is still generating")
        # Validate before touching any step
        if not 0 <= start_index < len(run.steps):
            raise InvalidStateError(
                f"Step index {start_index} is out of range (0..{len(run.steps) - 1})"
            )
        transitions.input_for(run.steps, start_index, run.starting_image)

        transitions.reset_from(run.steps, start_index)
        run.error = None
        logger.info("Run %s regenerating from step %d", run.run_id, start_index)
        await self._execute(run, start_index)
        return run

    async def _execute(self, run: TryOnRun, start_index: int) -> None:
        """The sequential loop. Each await must finish before the next step starts."""
        run.in_progress = True
        try:
            for i in range(start_index, len(run.steps)):
                step = run.steps[i]
                transitions.begin(step, transitions.input_for(run.steps, i, run.starting_image))
                context = transitions.completed_context(run.steps, i)
                try:
                    output = await self.gateway.synthesize(
                        step.input_image, run.model, step.product, context,
                    )
                except GenerationFailure as e:
                    transitions.fail(step, str(e))
                    run.error = str(e)
                    logger.warning("Run %s step %d (%s) failed: %s", run.run_id, i, step.product.sku, e)
                    return
                except Exception as e:
                    transitions.fail(step, str(e))
                    run.error = str(e)
                    raise

                if not output:
                    reason = f"No image was generated for {step.product.sku}"
                    transitions.fail(step, reason)
                    run.error = reason
                    logger.warning("Run %s step %d returned no image", run.run_id, i)
                    return

                transitions.complete(step, output)
                logger.info("Run %s step %d (%s) completed", run.run_id, i, step.product.sku)
        finally:
            run.in_progress = False

    def assemble_look(self, run: TryOnRun) -> LookDraft:
        """Condense a fully completed run into a Look draft."""
        if not run.is_savable:
            raise InvalidStateError("Only a run where every step completed can be saved")
        return LookDraft(
            model=run.model,
            base_image=run.starting_image,
            products=run.products,
            final_image=run.steps[-1].output_image,
            variations=[],
            created_at=now_ms(),
        )

    async def save(self, run: TryOnRun) -> Look:
        """Persist the run's result. The pipeline's only store write."""
        look = await self.store.add(EntityKind.LOOK, self.assemble_look(run))
        logger.info("Run %s saved as look #%d", run.run_id, look.id)
        return look
