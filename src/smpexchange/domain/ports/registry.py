"""Registry port consumed by the import and export paths."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from smpexchange.domain.model import (
        BusinessCard,
        BusinessEntity,
        Endpoint,
        Redirect,
        ServiceGroup,
        User,
    )


class StorageError(RuntimeError):
    """Raised when a registry operation could not be carried out."""


class RegistrationError(StorageError):
    """Raised when the external participant registration side effect fails."""


@runtime_checkable
class ParticipantRegistrar(Protocol):
    """One-time external registration of participants (e.g. a central locator)."""

    def register(self, participant_id: str) -> None: ...

    def deregister(self, participant_id: str) -> None: ...


@runtime_checkable
class Registry(Protocol):
    """Read/write contract of the routing metadata registry.

    Every mutating call is atomic on its own; callers get no transaction spanning
    several calls.
    """

    def lookup_user(self, user_id: str) -> User | None: ...

    def group_exists(self, participant_id: str) -> bool: ...

    def delete_group(self, participant_id: str, *, deprovision: bool) -> bool: ...

    def create_group(
        self,
        owner_id: str,
        participant_id: str,
        extension: str | None,
        *,
        register: bool,
    ) -> ServiceGroup: ...

    def merge_endpoint(self, endpoint: Endpoint) -> bool: ...

    def upsert_redirect(self, redirect: Redirect) -> Redirect | None: ...

    def get_business_card(self, participant_id: str) -> BusinessCard | None: ...

    def delete_business_card(self, card: BusinessCard) -> bool: ...

    def upsert_business_card(
        self,
        participant_id: str,
        entities: Sequence[BusinessEntity],
    ) -> BusinessCard | None: ...

    def directory_integration_enabled(self) -> bool: ...

    def list_service_groups(self) -> list[ServiceGroup]: ...

    def list_endpoints(self, participant_id: str) -> list[Endpoint]: ...

    def list_redirects(self, participant_id: str) -> list[Redirect]: ...

    def service_group_keys(self) -> set[str]: ...

    def business_card_keys(self) -> set[str]: ...
