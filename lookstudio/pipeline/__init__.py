"""Look assembly pipeline: step state machine, orchestrator and run registry."""

from .orchestrator import StepOrchestrator, TryOnRun, parse_skus
from .registry import RunRegistry
from .steps import TryOnStatus, TryOnStep

__all__ = [
    "StepOrchestrator",
    "TryOnRun",
    "parse_skus",
    "RunRegistry",
    "TryOnStatus",
    "TryOnStep",
]
