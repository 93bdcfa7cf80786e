"""Ports for turning parsed exchange elements into domain records."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from smpexchange.domain.model import BusinessCard, Endpoint, Redirect, ServiceGroup, User

type RawElement = Mapping[str, Any]
type OwnerResolver = Callable[[str], User]


class RecordError(ValueError):
    """Raised when one parsed element is structurally invalid."""


@dataclass(slots=True, frozen=True)
class GroupRecord:
    """A converted service group element together with its children."""

    group: ServiceGroup
    endpoints: tuple[Endpoint, ...] = ()
    redirects: tuple[Redirect, ...] = ()


@runtime_checkable
class ElementTranslator(Protocol):
    """Convert raw elements of a parsed batch into domain objects.

    Implementations raise ``RecordError`` for any structural problem so that the
    caller can discard the single offending element.
    """

    def read_service_group(
        self,
        element: object,
        *,
        resolve_owner: OwnerResolver,
    ) -> GroupRecord: ...

    def read_business_card(self, element: object) -> BusinessCard: ...
