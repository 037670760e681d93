"""
Try-on step state machine. Pure: no I/O, no store, no gateway.

    pending → generating → completed
                        ↘ failed
    reset: any → pending (output cleared)

The orchestrator drives these transitions; everything here can be tested on
plain lists of steps.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from ..core.errors import InvalidStateError
from ..schemas import ProductReference
from ..services.images import ImageRef


class TryOnStatus(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class TryOnStep:
    """One product application in a run. Never persisted."""

    product: ProductReference
    input_image: Optional[ImageRef] = None
    output_image: Optional[ImageRef] = None
    status: TryOnStatus = TryOnStatus.PENDING
    error: Optional[str] = None


def new_steps(products: Sequence[ProductReference]) -> list[TryOnStep]:
    """One pending step per product, in application order."""
    return [TryOnStep(product=p) for p in products]


def input_for(steps: Sequence[TryOnStep], index: int, starting_image: ImageRef) -> ImageRef:
    """The image step `index` consumes: the previous step's output, or the run's start."""
    if index == 0:
        return starting_image
    previous = steps[index - 1]
    if previous.status is not TryOnStatus.COMPLETED or not previous.output_image:
        raise InvalidStateError(
            f"Step {index} cannot start: the previous step's image is missing"
        )
    return previous.output_image


def begin(step: TryOnStep, input_image: ImageRef) -> None:
    if step.status is not TryOnStatus.PENDING:
        raise InvalidStateError(f"Cannot start a step that is {step.status.value}")
    step.status = TryOnStatus.GENERATING
    step.input_image = input_image
    step.output_image = None
    step.error = None


def complete(step: TryOnStep, output_image: ImageRef) -> None:
    if step.status is not TryOnStatus.GENERATING:
        raise InvalidStateError(f"Cannot complete a step that is {step.status.value}")
    if not output_image:
        raise InvalidStateError("A completed step needs an output image")
    step.status = TryOnStatus.COMPLETED
    step.output_image = output_image


def fail(step: TryOnStep, reason: str) -> None:
    if step.status is not TryOnStatus.GENERATING:
        raise InvalidStateError(f"Cannot fail a step that is {step.status.value}")
    step.status = TryOnStatus.FAILED
    step.error = reason


def reset_from(steps: list[TryOnStep], index: int) -> None:
    """Return steps[index:] to pending and clear their images. Earlier steps are untouched."""
    if not 0 <= index < len(steps):
        raise InvalidStateError(f"Step index {index} is out of range (0..{len(steps) - 1})")
    if any(s.status is TryOnStatus.GENERATING for s in steps):
        raise InvalidStateError("Cannot reset steps while a step is generating")
    for step in steps[index:]:
        step.status = TryOnStatus.PENDING
        step.input_image = None
        step.output_image = None
        step.error = None


def completed_context(steps: Sequence[TryOnStep], index: int) -> list[ProductReference]:
    """Products of the completed steps before `index`, in order."""
    return [s.product for s in steps[:index] if s.status is TryOnStatus.COMPLETED]


def is_savable(steps: Sequence[TryOnStep]) -> bool:
    return bool(steps) and all(s.status is TryOnStatus.COMPLETED for s in steps)


def failed_index(steps: Sequence[TryOnStep]) -> Optional[int]:
    return next((i for i, s in enumerate(steps) if s.status is TryOnStatus.FAILED), None)
