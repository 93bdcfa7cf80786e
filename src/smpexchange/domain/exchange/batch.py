"""Parsed input batches and the transient staging state of one import run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Sequence

    from smpexchange.domain.model import BusinessCard, Endpoint, Redirect, ServiceGroup

EXCHANGE_FORMAT_VERSION: Final[str] = "1.0"


@dataclass(slots=True, frozen=True)
class ParsedBatch:
    """Raw elements handed over by the document parser, in document order."""

    service_groups: Sequence[object] = ()
    business_cards: Sequence[object] = ()


class StagingDecision(StrEnum):
    IMPORT = "import"
    OVERWRITE = "overwrite"


@dataclass(slots=True, kw_only=True)
class StagedGroup:
    group: ServiceGroup
    decision: StagingDecision
    endpoints: list[Endpoint] = field(default_factory=list["Endpoint"])
    redirects: list[Redirect] = field(default_factory=list["Redirect"])

    @property
    def key(self) -> str:
        return self.group.key

    @property
    def is_overwrite(self) -> bool:
        return self.decision is StagingDecision.OVERWRITE


@dataclass(slots=True)
class StagedBatch:
    """Everything the reader decided to create, overwrite or delete.

    All mappings are keyed by participant identifier and keep staging order.
    """

    directory_integration: bool = True
    groups: dict[str, StagedGroup] = field(default_factory=dict["str", "StagedGroup"])
    group_deletions: dict[str, ServiceGroup] = field(default_factory=dict["str", "ServiceGroup"])
    business_cards: dict[str, BusinessCard] = field(default_factory=dict["str", "BusinessCard"])
    business_card_deletions: dict[str, BusinessCard] = field(
        default_factory=dict["str", "BusinessCard"]
    )

    def stage_group(self, staged: StagedGroup) -> bool:
        """Stage ``staged`` in place of an earlier entry for its key; return whether one existed."""

        replaced = staged.key in self.groups
        self.groups[staged.key] = staged
        return replaced

    def stage_business_card(self, card: BusinessCard) -> bool:
        """Stage ``card`` after the current tail; return whether an earlier one was removed."""

        replaced = self.business_cards.pop(card.key, None) is not None
        self.business_cards[card.key] = card
        return replaced

    @property
    def is_empty(self) -> bool:
        return not self.groups and not self.business_cards
