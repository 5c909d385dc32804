"""Process-local holder for the current analysis run."""

import asyncio
import copy
import logging
import uuid
from typing import Any

from swing_mcp.models import AnalysisResult

logger = logging.getLogger(__name__)


class AnalysisStore:
    """
    Holds the single current AnalysisResult while enrichment fills it in.

    Each publish() starts a new run and supersedes the previous one; there is
    no history. Writes carry the run_id they belong to, so late results from
    a superseded run are dropped instead of leaking into the new one.

    Movements are allocated before enrichment starts and each slot's context
    is written at most once, so out-of-order merges need no locking.
    """

    def __init__(self) -> None:
        self._result: AnalysisResult | None = None
        self._run_id: str | None = None
        self._outstanding: int = 0
        self._task: asyncio.Task[Any] | None = None
        self._extras: dict[str, Any] = {}

    @property
    def current_run_id(self) -> str | None:
        return self._run_id

    @property
    def outstanding(self) -> int:
        return self._outstanding

    def publish(
        self, result: AnalysisResult, outstanding: int = 0, **extras: Any
    ) -> str:
        """
        Make `result` the current run.

        Args:
            result: Freshly segmented result (contexts not yet filled)
            outstanding: Number of enrichment requests about to be issued
            **extras: JSON-friendly fields echoed in every snapshot (e.g. summary)

        Returns:
            The new run_id
        """
        if self._task is not None and not self._task.done():
            logger.info(f"Superseding run {self._run_id}; cancelling its enrichment")
            self._task.cancel()

        self._result = result
        self._run_id = uuid.uuid4().hex
        self._outstanding = outstanding
        self._task = None
        self._extras = dict(extras)
        return self._run_id

    def attach_task(self, run_id: str, task: "asyncio.Task[Any]") -> None:
        """Keep a strong reference to the run's background enrichment task."""
        if run_id != self._run_id:
            task.cancel()
            return
        self._task = task

    def task(self, run_id: str | None = None) -> "asyncio.Task[Any] | None":
        if run_id is not None and run_id != self._run_id:
            return None
        return self._task

    def is_current(self, run_id: str) -> bool:
        return run_id == self._run_id

    def apply_context(self, run_id: str, index: int, context: str) -> bool:
        """
        Set movements[index].context for the given run.

        Returns:
            True if written; False for a stale run, an out-of-range index, or
            a slot that already has a context
        """
        if run_id != self._run_id or self._result is None:
            logger.debug(f"Dropping stale context for run {run_id} (current {self._run_id})")
            return False

        movements = self._result.movements
        if not 0 <= index < len(movements):
            logger.warning(f"Context index {index} out of range for run {run_id}")
            return False
        if movements[index].context is not None:
            return False

        movements[index].context = context
        return True

    def set_outstanding(self, run_id: str, outstanding: int) -> bool:
        if run_id != self._run_id:
            return False
        self._outstanding = max(0, outstanding)
        return True

    def result(self, run_id: str | None = None) -> AnalysisResult | None:
        """Live result object (not a copy). None if run_id is not current."""
        if run_id is not None and run_id != self._run_id:
            return None
        return self._result

    def snapshot(self, run_id: str | None = None, include_data: bool = True) -> dict[str, Any] | None:
        """
        JSON-friendly copy of the current run.

        Args:
            run_id: Only return the snapshot if this run is still current
            include_data: Include the full price series

        Returns:
            Snapshot dict, or None if there is no (matching) run
        """
        if self._result is None or self._run_id is None:
            return None
        if run_id is not None and run_id != self._run_id:
            return None

        return {
            "run_id": self._run_id,
            "outstanding": self._outstanding,
            "enrichment_complete": self._complete(),
            **copy.deepcopy(self._extras),
            "result": self._result.to_dict(include_data=include_data),
        }

    def _complete(self) -> bool:
        """No request in flight and every swing holds its final context."""
        if self._outstanding or self._result is None:
            return False
        return all(m.context is not None for m in self._result.movements)

    def clear(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._result = None
        self._run_id = None
        self._outstanding = 0
        self._task = None
        self._extras = {}


# Global instance
analysis_store = AnalysisStore()
