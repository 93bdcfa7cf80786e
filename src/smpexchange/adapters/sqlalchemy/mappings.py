"""SQLAlchemy mapping metadata for the smpexchange domain model."""

from __future__ import annotations

import json
import logging
from datetime import date
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    Column,
    Dialect,
    ForeignKey,
    String,
    Table,
    Text,
    TypeDecorator,
    orm,
)
from sqlalchemy.orm import configure_mappers

from smpexchange.domain.model import (
    BusinessCard,
    BusinessEntity,
    BusinessIdentifier,
    Endpoint,
    Redirect,
    ServiceGroup,
    User,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class BusinessEntityListType(TypeDecorator[list[BusinessEntity]]):
    """Store the ordered entities of a business card as one JSON document."""

    impl = Text
    cache_ok = True

    def process_bind_param(
        self, value: list[BusinessEntity] | None, dialect: Dialect
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        payload = [_entity_to_json(entity) for entity in value]
        return json.dumps(payload, ensure_ascii=False)

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[BusinessEntity]:
        _ = dialect
        if value is None:
            return []
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return []
        items = cast(list[Any], loaded)
        return [_entity_from_json(item) for item in items if isinstance(item, dict)]


def _entity_to_json(entity: BusinessEntity) -> dict[str, object]:
    return {
        "name": entity.name,
        "country_code": entity.country_code,
        "geographical_information": entity.geographical_information,
        "identifiers": [[item.scheme, item.value] for item in entity.identifiers],
        "websites": list(entity.websites),
        "additional_information": entity.additional_information,
        "registration_date": (
            entity.registration_date.isoformat() if entity.registration_date else None
        ),
    }


def _entity_from_json(item: dict[str, Any]) -> BusinessEntity:
    registration_date = item.get("registration_date")
    return BusinessEntity(
        name=str(item["name"]),
        country_code=str(item["country_code"]),
        geographical_information=item.get("geographical_information"),
        identifiers=tuple(
            BusinessIdentifier(scheme=str(scheme), value=str(value))
            for scheme, value in item.get("identifiers", [])
        ),
        websites=tuple(str(site) for site in item.get("websites", [])),
        additional_information=item.get("additional_information"),
        registration_date=date.fromisoformat(registration_date) if registration_date else None,
    )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

user_table = Table(
    "user_account",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("display_name", String, nullable=False),
)

service_group_table = Table(
    "service_group",
    mapper_registry.metadata,
    Column("participant_id", String, primary_key=True),
    Column("owner_id", String, ForeignKey("user_account.id"), nullable=False),
    Column("extension", Text, nullable=True),
)

endpoint_table = Table(
    "endpoint",
    mapper_registry.metadata,
    Column(
        "participant_id",
        String,
        ForeignKey("service_group.participant_id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("document_type", String, primary_key=True),
    Column("process", String, primary_key=True),
    Column("transport_profile", String, primary_key=True),
    Column("endpoint_url", String, nullable=False),
    Column("certificate", Text, nullable=True),
    Column("service_description", Text, nullable=True),
    Column("technical_contact_url", String, nullable=True),
    Column("extension", Text, nullable=True),
)

redirect_table = Table(
    "redirect",
    mapper_registry.metadata,
    Column(
        "participant_id",
        String,
        ForeignKey("service_group.participant_id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("document_type", String, primary_key=True),
    Column("target_href", String, nullable=False),
    Column("subject_unique_identifier", String, nullable=True),
    Column("certificate", Text, nullable=True),
    Column("extension", Text, nullable=True),
)

business_card_table = Table(
    "business_card",
    mapper_registry.metadata,
    Column("participant_id", String, primary_key=True),
    Column("entities", BusinessEntityListType(), nullable=False, default=list),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(User, user_table)
    mapper_registry.map_imperatively(ServiceGroup, service_group_table)
    mapper_registry.map_imperatively(Endpoint, endpoint_table)
    mapper_registry.map_imperatively(Redirect, redirect_table)
    mapper_registry.map_imperatively(BusinessCard, business_card_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
