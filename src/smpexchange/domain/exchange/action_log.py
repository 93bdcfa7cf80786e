"""Append-only audit trail of one import run."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Final
from uuid import uuid4

if TYPE_CHECKING:
    from collections.abc import Iterator

log = logging.getLogger(__name__)


class Severity(StrEnum):
    """Outcome severity, ordered by increasing attention required."""

    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @property
    def is_error(self) -> bool:
        return self.rank >= _RANKS[Severity.ERROR]

    @property
    def logging_level(self) -> int:
        return _LOGGING_LEVELS[self]


_RANKS: Final[dict[Severity, int]] = {severity: rank for rank, severity in enumerate(Severity)}

_LOGGING_LEVELS: Final[dict[Severity, int]] = {
    Severity.SUCCESS: logging.INFO,
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.FATAL: logging.CRITICAL,
}


@dataclass(frozen=True, slots=True, kw_only=True)
class ActionRecord:
    severity: Severity
    message: str
    key: str | None = None
    cause: BaseException | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.message:
            raise ValueError("Action record message must not be empty")

    @property
    def is_error(self) -> bool:
        return self.severity.is_error

    @property
    def has_key(self) -> bool:
        return bool(self.key)

    @property
    def has_cause(self) -> bool:
        return self.cause is not None


class ActionLog:
    """Ordered record of every decision and failure of one import run.

    Records are appended in call order and never reordered, merged or changed.
    Each record is mirrored to the module logger, prefixed with the run's
    correlation id. A log belongs to exactly one run and is not thread-safe.
    """

    def __init__(self, *, correlation_id: str | None = None) -> None:
        self.correlation_id = correlation_id or uuid4().hex[:8]
        self._records: list[ActionRecord] = []

    def record(
        self,
        severity: Severity,
        key: str | None,
        message: str,
        cause: BaseException | None = None,
    ) -> ActionRecord:
        entry = ActionRecord(severity=severity, key=key, message=message, cause=cause)
        self._records.append(entry)
        self._emit(entry)
        return entry

    def has_error(self) -> bool:
        return any(entry.is_error for entry in self._records)

    def by_severity(self, severity: Severity) -> list[ActionRecord]:
        return [entry for entry in self._records if entry.severity is severity]

    def for_key(self, key: str) -> list[ActionRecord]:
        return [entry for entry in self._records if entry.key == key]

    @property
    def records(self) -> tuple[ActionRecord, ...]:
        return tuple(self._records)

    def __iter__(self) -> Iterator[ActionRecord]:
        return iter(tuple(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, index: int) -> ActionRecord:
        return self._records[index]

    def _emit(self, entry: ActionRecord) -> None:
        prefix = f"[SG-IMPORT-{self.correlation_id}] "
        if entry.key:
            prefix += f"[{entry.key}] "
        log.log(
            entry.severity.logging_level,
            "%s%s",
            prefix,
            entry.message,
            exc_info=entry.cause,
        )
