"""Registry and repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import replace
from typing import TYPE_CHECKING, Final

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from smpexchange.adapters.sqlalchemy.mappings import (
    business_card_table,
    endpoint_table,
    redirect_table,
    service_group_table,
)
from smpexchange.domain.model import (
    BusinessCard,
    Endpoint,
    Redirect,
    ServiceGroup,
    User,
)
from smpexchange.domain.ports.registry import StorageError

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from sqlalchemy.orm import Session

    from smpexchange.domain.model import BusinessEntity
    from smpexchange.domain.ports.registry import ParticipantRegistrar

log = logging.getLogger(__name__)

_ENDPOINT_FIELDS: Final[tuple[str, ...]] = (
    "endpoint_url",
    "certificate",
    "service_description",
    "technical_contact_url",
    "extension",
)
_REDIRECT_FIELDS: Final[tuple[str, ...]] = (
    "target_href",
    "subject_unique_identifier",
    "certificate",
    "extension",
)
_SYNC_FETCH: Final[dict[str, str]] = {"synchronize_session": "fetch"}


class SqlAlchemyUserRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: User) -> None:
        self.session.add(entity)

    def get(self, user_id: str) -> User | None:
        return self.session.get(User, user_id)


class SqlAlchemyRegistry:
    """Registry port on top of one SQLAlchemy session.

    Each mutating call commits on success and rolls back on failure, so every
    call is atomic on its own. Database errors surface as ``StorageError``.
    Deleting a service group removes its endpoints, redirects and business card.
    """

    def __init__(
        self,
        session: Session,
        *,
        directory_integration: bool = True,
        registrar: ParticipantRegistrar | None = None,
    ) -> None:
        self.session = session
        self._directory_integration = directory_integration
        self._registrar = registrar

    # Reads ---------------------------------------------------------------------

    def lookup_user(self, user_id: str) -> User | None:
        return self.session.get(User, user_id)

    def group_exists(self, participant_id: str) -> bool:
        return self.session.get(ServiceGroup, participant_id) is not None

    def get_business_card(self, participant_id: str) -> BusinessCard | None:
        return self.session.get(BusinessCard, participant_id)

    def directory_integration_enabled(self) -> bool:
        return self._directory_integration

    def list_service_groups(self) -> list[ServiceGroup]:
        stmt = select(ServiceGroup).order_by(service_group_table.c.participant_id)
        return list(self.session.scalars(stmt))

    def list_endpoints(self, participant_id: str) -> list[Endpoint]:
        stmt = select(Endpoint).where(endpoint_table.c.participant_id == participant_id)
        return list(self.session.scalars(stmt))

    def list_redirects(self, participant_id: str) -> list[Redirect]:
        stmt = select(Redirect).where(redirect_table.c.participant_id == participant_id)
        return list(self.session.scalars(stmt))

    def service_group_keys(self) -> set[str]:
        return set(self.session.scalars(select(service_group_table.c.participant_id)))

    def business_card_keys(self) -> set[str]:
        return set(self.session.scalars(select(business_card_table.c.participant_id)))

    # Writes --------------------------------------------------------------------

    def delete_group(self, participant_id: str, *, deprovision: bool) -> bool:
        with self._atomic(f"Deleting service group {participant_id}"):
            group = self.session.get(ServiceGroup, participant_id)
            if group is None:
                return False
            self.session.execute(
                delete(Endpoint).where(endpoint_table.c.participant_id == participant_id),
                execution_options=_SYNC_FETCH,
            )
            self.session.execute(
                delete(Redirect).where(redirect_table.c.participant_id == participant_id),
                execution_options=_SYNC_FETCH,
            )
            self.session.execute(
                delete(BusinessCard).where(
                    business_card_table.c.participant_id == participant_id
                ),
                execution_options=_SYNC_FETCH,
            )
            self.session.delete(group)
            self.session.flush()
            if deprovision and self._registrar is not None:
                self._registrar.deregister(participant_id)
        return True

    def create_group(
        self,
        owner_id: str,
        participant_id: str,
        extension: str | None,
        *,
        register: bool,
    ) -> ServiceGroup:
        with self._atomic(f"Creating service group {participant_id}"):
            if self.session.get(User, owner_id) is None:
                raise StorageError(f"Unknown owner {owner_id!r}")
            if self.session.get(ServiceGroup, participant_id) is not None:
                raise StorageError(f"Service group {participant_id!r} already exists")
            group = ServiceGroup(
                participant_id=participant_id,
                owner_id=owner_id,
                extension=extension,
            )
            self.session.add(group)
            self.session.flush()
            if register and self._registrar is not None:
                self._registrar.register(participant_id)
        return group

    def merge_endpoint(self, endpoint: Endpoint) -> bool:
        with self._atomic(f"Merging endpoint {endpoint.key}"):
            if self.session.get(ServiceGroup, endpoint.participant_id) is None:
                return False
            existing = self.session.get(Endpoint, endpoint.key)
            if existing is None:
                self.session.add(replace(endpoint))
            else:
                for name in _ENDPOINT_FIELDS:
                    setattr(existing, name, getattr(endpoint, name))
        return True

    def upsert_redirect(self, redirect: Redirect) -> Redirect | None:
        with self._atomic(f"Storing redirect {redirect.key}"):
            if self.session.get(ServiceGroup, redirect.participant_id) is None:
                return None
            stored = self.session.get(Redirect, redirect.key)
            if stored is None:
                stored = replace(redirect)
                self.session.add(stored)
            else:
                for name in _REDIRECT_FIELDS:
                    setattr(stored, name, getattr(redirect, name))
        return stored

    def delete_business_card(self, card: BusinessCard) -> bool:
        with self._atomic(f"Deleting business card {card.key}"):
            stored = self.session.get(BusinessCard, card.key)
            if stored is None:
                return False
            self.session.delete(stored)
        return True

    def upsert_business_card(
        self,
        participant_id: str,
        entities: Sequence[BusinessEntity],
    ) -> BusinessCard | None:
        with self._atomic(f"Storing business card {participant_id}"):
            if self.session.get(ServiceGroup, participant_id) is None:
                return None
            stored = self.session.get(BusinessCard, participant_id)
            if stored is None:
                stored = BusinessCard(participant_id=participant_id, entities=list(entities))
                self.session.add(stored)
            else:
                stored.entities = list(entities)
        return stored

    @contextmanager
    def _atomic(self, action: str) -> Iterator[None]:
        try:
            yield
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            log.debug("%s failed", action, exc_info=True)
            raise StorageError(f"{action} failed: {exc}") from exc
        except StorageError:
            self.session.rollback()
            raise


if TYPE_CHECKING:
    from typing import cast

    from smpexchange.domain.ports import Registry, UserRepository

    _session_stub = cast("Session", object())
    _registry_check: Registry = SqlAlchemyRegistry(_session_stub)
    _user_repo_check: UserRepository = SqlAlchemyUserRepository(_session_stub)
