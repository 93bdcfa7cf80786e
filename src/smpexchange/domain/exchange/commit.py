"""Apply a staged batch to the registry.

The phases run in a fixed order:

1. delete service groups that are about to be overwritten
2. create (or re-create) service groups
3. merge endpoints and redirects of the groups created in phase 2
4. delete business cards that are about to be overwritten
5. create business cards

Failure containment is per entity: a failed entity is logged and its siblings,
as well as all later phases, still run. Between phases 2 and 5 the business
cards of groups that could not be created are filtered out.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from smpexchange.domain.ports.registry import StorageError

from .action_log import Severity

if TYPE_CHECKING:
    from collections.abc import Set

    from smpexchange.domain.model import BusinessCard, ServiceGroup
    from smpexchange.domain.ports import Registry

    from .action_log import ActionLog
    from .batch import StagedBatch, StagedGroup

log = logging.getLogger(__name__)


@dataclass(slots=True)
class CommitReport:
    """Summary of registry mutations performed by one commit."""

    deleted_groups: set[str] = field(default_factory=set[str])
    created_groups: dict[str, ServiceGroup] = field(default_factory=dict["str", "ServiceGroup"])
    failed_groups: set[str] = field(default_factory=set[str])
    merged_endpoints: int = 0
    upserted_redirects: int = 0
    deleted_business_cards: int = 0
    created_business_cards: int = 0
    retracted_business_cards: tuple[str, ...] = ()


class CommitImport(Protocol):
    def __call__(
        self,
        staged: StagedBatch,
        *,
        registry: Registry,
        action_log: ActionLog,
    ) -> CommitReport: ...


def commit_import(
    staged: StagedBatch,
    *,
    registry: Registry,
    action_log: ActionLog,
) -> CommitReport:
    """Run all five commit phases for ``staged``."""

    report = CommitReport()
    report.deleted_groups = delete_superseded_groups(
        staged.group_deletions,
        registry=registry,
        action_log=action_log,
    )
    report.created_groups, report.failed_groups = create_service_groups(
        staged.groups,
        registry=registry,
        action_log=action_log,
    )
    report.merged_endpoints, report.upserted_redirects = create_children(
        staged.groups,
        created=report.created_groups,
        registry=registry,
        action_log=action_log,
    )

    business_cards = retract_business_cards(staged.business_cards, report.failed_groups)
    report.retracted_business_cards = tuple(
        key for key in staged.business_cards if key not in business_cards
    )
    for key in report.retracted_business_cards:
        action_log.record(
            Severity.INFO,
            key,
            "Business card is not created because its service group could not be created",
        )

    report.deleted_business_cards = delete_superseded_business_cards(
        staged.business_card_deletions,
        deleted_groups=report.deleted_groups,
        registry=registry,
        action_log=action_log,
    )
    report.created_business_cards = create_business_cards(
        business_cards,
        registry=registry,
        action_log=action_log,
    )
    log.info(
        "Commit finished: deleted=%s, created=%s, failed=%s, endpoints=%s, redirects=%s, "
        "business_cards=%s",
        len(report.deleted_groups),
        len(report.created_groups),
        len(report.failed_groups),
        report.merged_endpoints,
        report.upserted_redirects,
        report.created_business_cards,
    )
    return report


def delete_superseded_groups(
    deletions: Mapping[str, ServiceGroup],
    *,
    registry: Registry,
    action_log: ActionLog,
) -> set[str]:
    """Delete groups that will be re-created; return the keys actually deleted.

    Deletion is local only: the external registration stays in place because the
    group is re-created right away.
    """

    deleted: set[str] = set()
    for key in deletions:
        try:
            changed = registry.delete_group(key, deprovision=False)
        except StorageError as exc:
            action_log.record(Severity.ERROR, key, "Failed to delete service group", exc)
            continue
        if changed:
            action_log.record(Severity.SUCCESS, key, "Successfully deleted service group")
            deleted.add(key)
        else:
            action_log.record(Severity.ERROR, key, "Failed to delete service group")
    return deleted


def create_service_groups(
    staged_groups: Mapping[str, StagedGroup],
    *,
    registry: Registry,
    action_log: ActionLog,
) -> tuple[dict[str, ServiceGroup], set[str]]:
    """Create every staged group; return created groups and failed keys.

    Only genuinely new groups trigger the external registration; overwritten
    groups were registered before.
    """

    created: dict[str, ServiceGroup] = {}
    failed: set[str] = set()
    for key, entry in staged_groups.items():
        try:
            group = registry.create_group(
                entry.group.owner_id,
                key,
                entry.group.extension,
                register=not entry.is_overwrite,
            )
        except StorageError as exc:
            action_log.record(Severity.ERROR, key, "Error creating the new service group", exc)
            failed.add(key)
            continue
        action_log.record(Severity.SUCCESS, key, "Successfully created service group")
        created[key] = group
    return created, failed


def create_children(
    staged_groups: Mapping[str, StagedGroup],
    *,
    created: Mapping[str, ServiceGroup],
    registry: Registry,
    action_log: ActionLog,
) -> tuple[int, int]:
    """Merge endpoints and redirects of created groups; return the success counts."""

    endpoints = 0
    redirects = 0
    for key, entry in staged_groups.items():
        if key not in created:
            continue
        for endpoint in entry.endpoints:
            try:
                merged = registry.merge_endpoint(endpoint)
            except StorageError as exc:
                action_log.record(Severity.ERROR, key, "Error creating the new endpoint", exc)
                continue
            if merged:
                action_log.record(Severity.SUCCESS, key, "Successfully created endpoint")
                endpoints += 1
            else:
                action_log.record(Severity.ERROR, key, "Error creating the new endpoint")

        for redirect in entry.redirects:
            try:
                result = registry.upsert_redirect(redirect)
            except StorageError as exc:
                action_log.record(Severity.ERROR, key, "Error creating the new redirect", exc)
                continue
            if result is not None:
                action_log.record(Severity.SUCCESS, key, "Successfully created redirect")
                redirects += 1
            else:
                action_log.record(Severity.ERROR, key, "Error creating the new redirect")
    return endpoints, redirects


def retract_business_cards(
    business_cards: Mapping[str, BusinessCard],
    failed_groups: Set[str],
) -> dict[str, BusinessCard]:
    """Drop business cards whose service group could not be created."""

    return {key: card for key, card in business_cards.items() if key not in failed_groups}


def delete_superseded_business_cards(
    deletions: Mapping[str, BusinessCard],
    *,
    deleted_groups: Set[str],
    registry: Registry,
    action_log: ActionLog,
) -> int:
    """Delete business cards that will be re-created; return how many were deleted.

    A card that is already gone because its group was deleted in phase 1 is not a
    failure. A card that could not be deleted while its group is still there is.
    """

    deleted = 0
    for key, card in deletions.items():
        try:
            changed = registry.delete_business_card(card)
        except StorageError as exc:
            action_log.record(Severity.ERROR, key, "Failed to delete business card", exc)
            continue
        if changed:
            action_log.record(Severity.SUCCESS, key, "Successfully deleted business card")
            deleted += 1
        elif key in deleted_groups:
            action_log.record(
                Severity.SUCCESS,
                key,
                "Business card was already deleted together with its service group",
            )
        else:
            action_log.record(Severity.ERROR, key, "Failed to delete business card")
    return deleted


def create_business_cards(
    business_cards: Mapping[str, BusinessCard],
    *,
    registry: Registry,
    action_log: ActionLog,
) -> int:
    created = 0
    for key, card in business_cards.items():
        try:
            result = registry.upsert_business_card(key, card.entities)
        except StorageError as exc:
            action_log.record(Severity.ERROR, key, "Failed to create business card", exc)
            continue
        if result is not None:
            action_log.record(Severity.SUCCESS, key, "Successfully created business card")
            created += 1
        else:
            action_log.record(Severity.ERROR, key, "Failed to create business card")
    return created
