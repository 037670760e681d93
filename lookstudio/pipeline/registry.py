"""
In-memory registry of assembly runs, keyed by run id.

Runs are transient: they live in this process only and vanish on restart or
once saved. Abandoned runs are simply never looked up again.
"""

import logging
from typing import Iterator, Optional

from ..core.errors import NotFoundError
from .orchestrator import TryOnRun

logger = logging.getLogger(__name__)


class RunRegistry:

    def __init__(self, max_runs: int = 200):
        self.max_runs = max_runs
        self._runs: dict[str, TryOnRun] = {}

    def put(self, run: TryOnRun) -> TryOnRun:
        self._runs[run.run_id] = run
        # Oldest first (dicts keep insertion order); drop idle runs past the cap
        while len(self._runs) > self.max_runs:
            oldest = next((rid for rid, r in self._runs.items() if not r.in_progress), None)
            if oldest is None:
                break
            self._runs.pop(oldest)
            logger.debug("Evicted run %s", oldest)
        return run

    def get(self, run_id: str) -> TryOnRun:
        run = self._runs.get(run_id)
        if run is None:
            raise NotFoundError(f"Run {run_id} not found")
        return run

    def find(self, run_id: str) -> Optional[TryOnRun]:
        return self._runs.get(run_id)

    def discard(self, run_id: str) -> None:
        self._runs.pop(run_id, None)

    def __iter__(self) -> Iterator[TryOnRun]:
        return iter(list(self._runs.values()))

    def __len__(self) -> int:
        return len(self._runs)
