"""Import orchestration: read, plan, commit.

The engine composes stage interfaces so tests and alternative workflows can swap
any of them. Whatever happens inside the stages, a caller always gets back the
complete action log; the absence of error records is the only success signal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .action_log import ActionLog
from .commit import commit_import
from .errors import require
from .planner import PlanOutcome, plan_import
from .reader import ImportRequest, read_batch

if TYPE_CHECKING:
    from collections.abc import Set

    from smpexchange.domain.model import User
    from smpexchange.domain.ports import ElementTranslator, Registry

    from .batch import ParsedBatch
    from .commit import CommitImport
    from .planner import PlanImport
    from .reader import ReadBatch

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ImportEngine:
    """Run one import from parsed batch to registry mutations."""

    read: ReadBatch = read_batch
    plan: PlanImport = plan_import
    commit: CommitImport = commit_import

    def run(
        self,
        batch: ParsedBatch,
        request: ImportRequest,
        *,
        registry: Registry,
        translator: ElementTranslator,
        action_log: ActionLog,
    ) -> ActionLog:
        log.info(
            "Starting import of service groups, overwrite is %s",
            "enabled" if request.overwrite_existing else "disabled",
        )
        staged = self.read(
            batch,
            request,
            registry=registry,
            translator=translator,
            action_log=action_log,
        )
        outcome = self.plan(staged, action_log=action_log)
        if outcome is PlanOutcome.PROCEED:
            self.commit(staged, registry=registry, action_log=action_log)
        log.info(
            "Finished import (%s): %s records, errors=%s",
            outcome,
            len(action_log),
            action_log.has_error(),
        )
        return action_log


def import_service_groups(  # noqa: PLR0913
    batch: ParsedBatch,
    *,
    overwrite_existing: bool,
    default_owner: User,
    existing_group_keys: Set[str],
    existing_business_card_keys: Set[str],
    registry: Registry,
    translator: ElementTranslator,
    correlation_id: str | None = None,
    engine: ImportEngine | None = None,
) -> ActionLog:
    """Reconcile ``batch`` against the registry and return the action log.

    Per-record and storage problems end up in the log. Only a missing required
    argument raises, as ``PreconditionError``.
    """

    require(batch, "batch")
    require(overwrite_existing, "overwrite_existing")
    require(default_owner, "default_owner")
    require(existing_group_keys, "existing_group_keys")
    require(existing_business_card_keys, "existing_business_card_keys")
    require(registry, "registry")
    require(translator, "translator")

    request = ImportRequest(
        default_owner=default_owner,
        overwrite_existing=overwrite_existing,
        existing_group_keys=frozenset(existing_group_keys),
        existing_business_card_keys=frozenset(existing_business_card_keys),
    )
    return (engine or ImportEngine()).run(
        batch,
        request,
        registry=registry,
        translator=translator,
        action_log=ActionLog(correlation_id=correlation_id),
    )
