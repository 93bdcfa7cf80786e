"""Bulk import and export of service groups.

Import flow:
1) read and deduplicate the parsed batch (``reader``)
2) decide once whether anything may be written (``planner``)
3) commit in five ordered phases (``commit``)

Every decision and failure is appended to one ``ActionLog`` per run. Export
(``export``) is an independent, read-only path.
"""

from __future__ import annotations

from .action_log import ActionLog, ActionRecord, Severity
from .batch import (
    EXCHANGE_FORMAT_VERSION,
    ParsedBatch,
    StagedBatch,
    StagedGroup,
    StagingDecision,
)
from .commit import CommitReport, commit_import
from .engine import ImportEngine, import_service_groups
from .errors import PreconditionError
from .export import ExportDocument, ExportedServiceGroup, export_service_groups
from .planner import PlanOutcome, plan_import
from .reader import ImportRequest, read_batch

__all__ = [
    "EXCHANGE_FORMAT_VERSION",
    "ActionLog",
    "ActionRecord",
    "CommitReport",
    "ExportDocument",
    "ExportedServiceGroup",
    "ImportEngine",
    "ImportRequest",
    "ParsedBatch",
    "PlanOutcome",
    "PreconditionError",
    "Severity",
    "StagedBatch",
    "StagedGroup",
    "StagingDecision",
    "commit_import",
    "export_service_groups",
    "import_service_groups",
    "plan_import",
    "read_batch",
]
