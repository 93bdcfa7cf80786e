"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from smpexchange.adapters.exchange import PydanticElementTranslator, dump_document, load_document
from smpexchange.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from smpexchange.config import ConfigurationError, get_exchange_config
from smpexchange.domain.exchange import export_service_groups, import_service_groups
from smpexchange.domain.model import User
from smpexchange.domain.ports.unit_of_work import RegistryUnitOfWork

if TYPE_CHECKING:
    from smpexchange.config import ExchangeConfig
    from smpexchange.domain.exchange import ActionLog, ExportDocument
    from smpexchange.domain.ports import ElementTranslator

UnitOfWorkFactory = Callable[[], RegistryUnitOfWork]


log = getLogger(__name__)


def _resolve_unit_of_work_factory(
    unit_of_work_factory: UnitOfWorkFactory | None,
    config: ExchangeConfig,
) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return partial(SqlAlchemyUnitOfWork, directory_integration=config.directory_integration)


def import_file(
    path: str | Path,
    *,
    overwrite_existing: bool | None = None,
    default_owner_id: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    translator: ElementTranslator | None = None,
    config: ExchangeConfig | None = None,
) -> ActionLog:
    """Import an exchange document into the registry and return the action log."""

    effective_config = config or get_exchange_config()
    overwrite = (
        effective_config.overwrite_existing if overwrite_existing is None else overwrite_existing
    )
    owner_id = default_owner_id or effective_config.default_owner_id
    if owner_id is None:
        raise ConfigurationError(
            "No default owner given. Pass --default-owner or set SMPEXCHANGE_DEFAULT_OWNER."
        )

    batch = load_document(Path(path))
    effective_uow = _resolve_unit_of_work_factory(unit_of_work_factory, effective_config)
    with effective_uow() as uow:
        registry = uow.repositories.registry
        default_owner = registry.lookup_user(owner_id)
        if default_owner is None:
            raise ConfigurationError(f"Unknown default owner {owner_id!r}")

        action_log = import_service_groups(
            batch,
            overwrite_existing=overwrite,
            default_owner=default_owner,
            existing_group_keys=registry.service_group_keys(),
            existing_business_card_keys=registry.business_card_keys(),
            registry=registry,
            translator=translator or PydanticElementTranslator(),
        )

    log.info(
        "Finished import of %s: records=%s, errors=%s",
        path,
        len(action_log),
        action_log.has_error(),
    )
    return action_log


def export_file(
    path: str | Path,
    *,
    include_business_cards: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: ExchangeConfig | None = None,
) -> ExportDocument:
    """Export every service group of the registry into an exchange document."""

    effective_config = config or get_exchange_config()
    effective_uow = _resolve_unit_of_work_factory(unit_of_work_factory, effective_config)
    with effective_uow() as uow:
        registry = uow.repositories.registry
        include = include_business_cards and registry.directory_integration_enabled()
        if include_business_cards and not include:
            log.warning("Directory integration is disabled, exporting no business cards")
        document = export_service_groups(
            registry.list_service_groups(),
            include_business_cards=include,
            registry=registry,
        )

    dump_document(document, Path(path))
    return document


def create_user(
    *,
    user_id: str,
    display_name: str,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> User:
    """Persist a user that can own imported service groups."""

    effective_uow = _resolve_unit_of_work_factory(unit_of_work_factory, get_exchange_config())
    with effective_uow() as uow:
        if uow.repositories.users.get(user_id) is not None:
            raise ValueError(f"User {user_id!r} already exists")
        user = User(id=user_id, display_name=display_name)
        uow.repositories.users.add(user)
        uow.commit()
    log.info("Created user %s", user.id)
    return user
