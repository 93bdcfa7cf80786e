"""Decide once, before any write, whether a staged batch may be committed."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from .action_log import Severity

if TYPE_CHECKING:
    from .action_log import ActionLog
    from .batch import StagedBatch


class PlanOutcome(StrEnum):
    PROCEED = "proceed"
    NOTHING_TO_IMPORT = "nothing_to_import"
    ABORTED = "aborted"


class PlanImport(Protocol):
    def __call__(self, staged: StagedBatch, *, action_log: ActionLog) -> PlanOutcome: ...


def plan_import(staged: StagedBatch, *, action_log: ActionLog) -> PlanOutcome:
    """Return whether the commit phase may run.

    An empty staging result is a no-op rather than an error. Any error recorded so
    far vetoes the whole batch; this is the only global abort condition.
    """

    if staged.is_empty:
        action_log.record(
            Severity.WARNING,
            None,
            "Found neither a service group nor a business card to import."
            if staged.directory_integration
            else "Found no service group to import.",
        )
        return PlanOutcome.NOTHING_TO_IMPORT

    if action_log.has_error():
        action_log.record(
            Severity.ERROR,
            None,
            "Nothing will be imported because of the previous errors.",
        )
        return PlanOutcome.ABORTED

    action_log.record(Severity.INFO, None, "Import is performed!")
    return PlanOutcome.PROCEED
