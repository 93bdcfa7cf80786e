"""SQLAlchemy adapter package for smpexchange."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import SqlAlchemyRegistry, SqlAlchemyUserRepository
from .unit_of_work import SqlAlchemyUnitOfWork, StartupError, startup

__all__ = [
    "SqlAlchemyRegistry",
    "SqlAlchemyUnitOfWork",
    "SqlAlchemyUserRepository",
    "StartupError",
    "create_all_tables",
    "mapper_registry",
    "start_mappers",
    "startup",
]
