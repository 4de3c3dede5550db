"""Transition trigger for applicant records.

Fires a synchronization when a bound applicant field goes from empty to
populated. Runs inline with the save (sync mode) or detached as a task
(async mode); in async mode the previous snapshot is not consulted, which
is safe because synchronization re-derives its eligibility from current
record state.
"""

import asyncio
import logging
from collections.abc import Mapping
from functools import partial
from typing import Literal

from .models import PERSON_HANDLE_FIELD, ApplicantRecord, SyncResult
from .ports import SynchronizePort

logger = logging.getLogger(__name__)

TriggerMode = Literal["sync", "async"]


class TransitionTrigger:
    """Invokes the synchronizer on empty → populated transitions."""

    def __init__(
        self,
        synchronizer: SynchronizePort,
        field: str = "hhs_id",
        mode: TriggerMode = "sync",
    ):
        """Initialize the trigger.

        Args:
            synchronizer: Port invoked when the trigger fires.
            field: Applicant field whose transition is observed.
            mode: "sync" awaits synchronization inside the save,
                "async" schedules it as a background task.
        """
        if mode not in ("sync", "async"):
            raise ValueError(f"Unknown trigger mode: {mode}")
        self.synchronizer = synchronizer
        self.field = field
        self.mode = mode
        self._pending: set[asyncio.Task[SyncResult]] = set()

    def should_fire(
        self,
        current: Mapping[str, str],
        previous: Mapping[str, str] | None,
    ) -> bool:
        """Decide whether a saved applicant represents a genuine transition.

        Args:
            current: Field values after the save.
            previous: Field values before the save, or None when unknown.
        """
        if not current.get(self.field):
            return False
        if previous is not None and previous.get(self.field):
            return False
        # Already has a person handle, so it was created externally before
        if current.get(PERSON_HANDLE_FIELD):
            return False
        return True

    async def on_applicant_saved(
        self,
        current: ApplicantRecord,
        previous: ApplicantRecord | None,
    ) -> None:
        """Update listener registered with the record store."""
        if self.mode == "async":
            if self.should_fire(current.snapshot(), None):
                task = asyncio.create_task(self.invoke(current.id))
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)
                task.add_done_callback(partial(self._log_failure, current.id))
            return

        before = previous.snapshot() if previous is not None else None
        if self.should_fire(current.snapshot(), before):
            await self.invoke(current.id)

    async def invoke(self, applicant_id: str) -> SyncResult:
        """Invoke synchronization by applicant identifier alone."""
        logger.info(
            f"Transition trigger fired for applicant {applicant_id}",
            extra={"applicant_id": applicant_id, "field": self.field},
        )
        result = await self.synchronizer.synchronize(applicant_id)
        if not result.ok:
            logger.info(
                f"Synchronization for applicant {applicant_id} ended as "
                f"{result.outcome.value}; nothing further will be done",
                extra={"applicant_id": applicant_id, "case_id": result.case_id},
            )
        return result

    @staticmethod
    def _log_failure(applicant_id: str, task: "asyncio.Task[SyncResult]") -> None:
        """Log a background synchronization that raised instead of returning."""
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"Background synchronization failed for applicant {applicant_id}: {error}",
                exc_info=error,
                extra={"applicant_id": applicant_id},
            )

    async def drain(self) -> None:
        """Wait for every scheduled background synchronization to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
