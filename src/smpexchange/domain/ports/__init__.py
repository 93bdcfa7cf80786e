"""Domain port definitions for adapters."""

from __future__ import annotations

from .exchange import ElementTranslator, GroupRecord, OwnerResolver, RawElement, RecordError
from .registry import ParticipantRegistrar, RegistrationError, Registry, StorageError
from .unit_of_work import (
    RegistryRepositories,
    RegistryUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
    UserRepository,
)

__all__ = [
    "ElementTranslator",
    "GroupRecord",
    "OwnerResolver",
    "ParticipantRegistrar",
    "RawElement",
    "RecordError",
    "RegistrationError",
    "Registry",
    "RegistryRepositories",
    "RegistryUnitOfWork",
    "RepositoryCollection",
    "StorageError",
    "UnitOfWork",
    "UserRepository",
]
