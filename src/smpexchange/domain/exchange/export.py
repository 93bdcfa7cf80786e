"""Assemble a deterministic export document from service groups."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from smpexchange.domain.ports.registry import StorageError

from .batch import EXCHANGE_FORMAT_VERSION
from .errors import require

if TYPE_CHECKING:
    from collections.abc import Iterable

    from smpexchange.domain.model import BusinessCard, Endpoint, Redirect, ServiceGroup
    from smpexchange.domain.ports import Registry

log = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ExportedServiceGroup:
    group: ServiceGroup
    endpoints: tuple[Endpoint, ...] = ()
    redirects: tuple[Redirect, ...] = ()


@dataclass(slots=True, frozen=True)
class ExportDocument:
    """Hierarchical export: groups with their children, then business cards."""

    service_groups: tuple[ExportedServiceGroup, ...] = ()
    business_cards: tuple[BusinessCard, ...] = ()
    version: str = EXCHANGE_FORMAT_VERSION


def export_service_groups(
    groups: Iterable[ServiceGroup],
    *,
    include_business_cards: bool,
    registry: Registry,
) -> ExportDocument:
    """Export ``groups`` in canonical order.

    The output does not depend on the input order. A failing child lookup is
    logged and exported as empty; it never stops the export of other groups.
    """

    require(groups, "groups")
    require(registry, "registry")

    sorted_groups = sorted(groups, key=lambda group: group.sort_key)
    log.info(
        "Start creating service group export data for %s entries - %s business cards",
        len(sorted_groups),
        "incl." if include_business_cards else "excl.",
    )

    exported = tuple(_export_group(group, registry=registry) for group in sorted_groups)

    business_cards: list[BusinessCard] = []
    if include_business_cards:
        for group in sorted_groups:
            card = _lookup_business_card(group.key, registry=registry)
            if card is not None:
                business_cards.append(card)

    log.debug("Finished creating service group export data")
    return ExportDocument(service_groups=exported, business_cards=tuple(business_cards))


def _export_group(group: ServiceGroup, *, registry: Registry) -> ExportedServiceGroup:
    key = group.key
    try:
        endpoints = registry.list_endpoints(key)
    except StorageError:
        log.warning("[%s] Failed to read endpoints, exporting none", key, exc_info=True)
        endpoints = []
    try:
        redirects = registry.list_redirects(key)
    except StorageError:
        log.warning("[%s] Failed to read redirects, exporting none", key, exc_info=True)
        redirects = []
    return ExportedServiceGroup(
        group=group,
        endpoints=tuple(sorted(endpoints, key=lambda endpoint: endpoint.sort_key)),
        redirects=tuple(sorted(redirects, key=lambda redirect: redirect.sort_key)),
    )


def _lookup_business_card(key: str, *, registry: Registry) -> BusinessCard | None:
    try:
        return registry.get_business_card(key)
    except StorageError:
        log.warning("[%s] Failed to read business card, skipping it", key, exc_info=True)
        return None
