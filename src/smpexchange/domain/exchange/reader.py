"""Read a parsed batch into staged imports and deletions.

Responsibilities of this stage:
- convert raw elements through the element translator, one at a time
- resolve group owners, falling back to the default owner
- apply the overwrite policy against the keys already in the registry
- flag duplicate keys within the batch as errors (the later element is staged)

No registry mutation happens here; the only registry reads are user lookups
and the directory-integration switch.
"""

from __future__ import annotations

import logging
from collections.abc import Set
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from smpexchange.domain.ports.exchange import RecordError

from .action_log import Severity
from .batch import StagedBatch, StagedGroup, StagingDecision

if TYPE_CHECKING:
    from smpexchange.domain.model import User
    from smpexchange.domain.ports import ElementTranslator, GroupRecord, Registry

    from .action_log import ActionLog
    from .batch import ParsedBatch

log = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True, kw_only=True)
class ImportRequest:
    """Caller-supplied policy and registry snapshot for one import run."""

    default_owner: User
    overwrite_existing: bool = False
    existing_group_keys: Set[str] = field(default_factory=frozenset[str])
    existing_business_card_keys: Set[str] = field(default_factory=frozenset[str])


class ReadBatch(Protocol):
    """Stage the elements of a parsed batch."""

    def __call__(
        self,
        batch: ParsedBatch,
        request: ImportRequest,
        *,
        registry: Registry,
        translator: ElementTranslator,
        action_log: ActionLog,
    ) -> StagedBatch: ...


def read_batch(
    batch: ParsedBatch,
    request: ImportRequest,
    *,
    registry: Registry,
    translator: ElementTranslator,
    action_log: ActionLog,
) -> StagedBatch:
    """Stage all service groups and, if enabled, all business cards of ``batch``."""

    staged = StagedBatch(directory_integration=registry.directory_integration_enabled())

    # Groups first: business cards depend on them.
    for index, element in enumerate(batch.service_groups):
        _read_service_group(
            index,
            element,
            request=request,
            staged=staged,
            registry=registry,
            translator=translator,
            action_log=action_log,
        )

    if staged.directory_integration:
        for index, element in enumerate(batch.business_cards):
            _read_business_card(
                index,
                element,
                request=request,
                staged=staged,
                translator=translator,
                action_log=action_log,
            )

    log.debug(
        "Staged %s service groups (%s deletions) and %s business cards (%s deletions)",
        len(staged.groups),
        len(staged.group_deletions),
        len(staged.business_cards),
        len(staged.business_card_deletions),
    )
    return staged


def _read_service_group(
    index: int,
    element: object,
    *,
    request: ImportRequest,
    staged: StagedBatch,
    registry: Registry,
    translator: ElementTranslator,
    action_log: ActionLog,
) -> None:
    unresolved_owners: list[str] = []

    def resolve_owner(owner_id: str) -> User:
        owner = registry.lookup_user(owner_id)
        if owner is None:
            unresolved_owners.append(owner_id)
            return request.default_owner
        return owner

    try:
        record = translator.read_service_group(element, resolve_owner=resolve_owner)
    except RecordError as exc:
        action_log.record(
            Severity.ERROR,
            None,
            f"Error parsing the service group at index {index}. Ignoring this service group.",
            exc,
        )
        return

    key = record.group.key
    for owner_id in unresolved_owners:
        action_log.record(
            Severity.WARNING,
            key,
            f"Failed to resolve stored owner '{owner_id}' - "
            f"using default owner '{request.default_owner.id}'",
        )

    already_exists = key in request.existing_group_keys
    if already_exists and not request.overwrite_existing:
        action_log.record(Severity.WARNING, key, "Ignoring already existing service group")
        return

    entry = _staged_group(record, overwrite=already_exists)
    if staged.stage_group(entry):
        action_log.record(
            Severity.ERROR,
            key,
            f"The service group at index {index} is already contained in the batch. "
            "Will overwrite the previous definition.",
        )
    if already_exists:
        staged.group_deletions[key] = record.group
    action_log.record(
        Severity.INFO,
        key,
        f"Will {'overwrite' if already_exists else 'import'} service group",
    )
    action_log.record(
        Severity.INFO,
        key,
        f"Read {len(entry.endpoints)} endpoints of service group",
    )
    action_log.record(
        Severity.INFO,
        key,
        f"Read {len(entry.redirects)} redirects of service group",
    )


def _staged_group(record: GroupRecord, *, overwrite: bool) -> StagedGroup:
    entry = StagedGroup(
        group=record.group,
        decision=StagingDecision.OVERWRITE if overwrite else StagingDecision.IMPORT,
    )
    entry.endpoints.extend(record.endpoints)
    entry.redirects.extend(record.redirects)
    return entry


def _read_business_card(
    index: int,
    element: object,
    *,
    request: ImportRequest,
    staged: StagedBatch,
    translator: ElementTranslator,
    action_log: ActionLog,
) -> None:
    try:
        card = translator.read_business_card(element)
    except RecordError as exc:
        action_log.record(
            Severity.ERROR,
            None,
            f"Failed to read business card at index {index}",
            exc,
        )
        return

    key = card.key
    if key not in request.existing_group_keys and key not in staged.groups:
        action_log.record(
            Severity.ERROR,
            key,
            f"Business card at index {index} belongs to an unknown service group",
        )
        return

    already_exists = key in request.existing_business_card_keys
    if already_exists and not request.overwrite_existing:
        action_log.record(Severity.WARNING, key, "Ignoring already existing business card")
        return

    if staged.stage_business_card(card):
        action_log.record(
            Severity.ERROR,
            key,
            "The business card is already contained in the batch. "
            "Will overwrite the previous definition.",
        )
    if already_exists:
        staged.business_card_deletions[key] = card
    action_log.record(
        Severity.INFO,
        key,
        f"Will {'overwrite' if already_exists else 'import'} business card",
    )
