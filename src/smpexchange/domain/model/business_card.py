"""Business cards: descriptive metadata published for a service group."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date


@dataclass(frozen=True, slots=True, kw_only=True)
class BusinessIdentifier:
    scheme: str
    value: str


@dataclass(frozen=True, slots=True, kw_only=True)
class BusinessEntity:
    name: str
    country_code: str
    geographical_information: str | None = None
    identifiers: tuple[BusinessIdentifier, ...] = ()
    websites: tuple[str, ...] = ()
    additional_information: str | None = None
    registration_date: date | None = None


@dataclass(eq=False, kw_only=True)
class BusinessCard:
    """Business card keyed by the participant identifier of its service group.

    The entity order is significant and preserved through import and export.
    """

    participant_id: str
    entities: list[BusinessEntity] = field(default_factory=list["BusinessEntity"])

    def __post_init__(self) -> None:
        if not self.participant_id or not self.participant_id.strip():
            raise ValueError("participant_id must not be blank")

    @property
    def key(self) -> str:
        return self.participant_id
