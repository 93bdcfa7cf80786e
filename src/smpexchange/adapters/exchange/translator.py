"""Translate exchange elements to domain objects and back."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from smpexchange.domain.model import (
    BusinessCard,
    BusinessEntity,
    BusinessIdentifier,
    Endpoint,
    Redirect,
    ServiceGroup,
)
from smpexchange.domain.ports.exchange import GroupRecord, RecordError

from .schema import (
    BusinessCardElement,
    BusinessEntityElement,
    BusinessIdentifierElement,
    EndpointElement,
    RedirectElement,
    ServiceGroupElement,
)

if TYPE_CHECKING:
    from smpexchange.domain.exchange import ExportedServiceGroup
    from smpexchange.domain.ports import OwnerResolver


class PydanticElementTranslator:
    """Element translator backed by the pydantic exchange schema."""

    def read_service_group(
        self,
        element: object,
        *,
        resolve_owner: OwnerResolver,
    ) -> GroupRecord:
        parsed = _validate(ServiceGroupElement, element)
        try:
            owner = resolve_owner(parsed.owner_id)
            group = ServiceGroup(
                participant_id=parsed.participant_id,
                owner_id=owner.id,
                extension=parsed.extension,
            )
            endpoints = tuple(_build_endpoint(group, item) for item in parsed.endpoints)
            redirects = tuple(_build_redirect(group, item) for item in parsed.redirects)
        except ValueError as exc:
            raise RecordError(str(exc)) from exc
        return GroupRecord(group=group, endpoints=endpoints, redirects=redirects)

    def read_business_card(self, element: object) -> BusinessCard:
        parsed = _validate(BusinessCardElement, element)
        try:
            return BusinessCard(
                participant_id=parsed.participant_id,
                entities=[_build_business_entity(item) for item in parsed.entities],
            )
        except ValueError as exc:
            raise RecordError(str(exc)) from exc


def _validate[TElement: ServiceGroupElement | BusinessCardElement](
    model: type[TElement],
    element: object,
) -> TElement:
    try:
        return model.model_validate(element)
    except ValidationError as exc:
        raise RecordError(
            f"Invalid {model.__name__}: {exc.error_count()} validation error(s)"
        ) from exc


def _build_endpoint(group: ServiceGroup, item: EndpointElement) -> Endpoint:
    return Endpoint(
        participant_id=group.participant_id,
        document_type=item.document_type,
        process=item.process,
        transport_profile=item.transport_profile,
        endpoint_url=item.endpoint_url,
        certificate=item.certificate,
        service_description=item.service_description,
        technical_contact_url=item.technical_contact_url,
        extension=item.extension,
    )


def _build_redirect(group: ServiceGroup, item: RedirectElement) -> Redirect:
    return Redirect(
        participant_id=group.participant_id,
        document_type=item.document_type,
        target_href=item.target_href,
        subject_unique_identifier=item.subject_unique_identifier,
        certificate=item.certificate,
        extension=item.extension,
    )


def _build_business_entity(item: BusinessEntityElement) -> BusinessEntity:
    return BusinessEntity(
        name=item.name,
        country_code=item.country_code,
        geographical_information=item.geographical_information,
        identifiers=tuple(
            BusinessIdentifier(scheme=identifier.scheme, value=identifier.value)
            for identifier in item.identifiers
        ),
        websites=tuple(item.websites),
        additional_information=item.additional_information,
        registration_date=item.registration_date,
    )


def service_group_element(exported: ExportedServiceGroup) -> ServiceGroupElement:
    group = exported.group
    return ServiceGroupElement(
        participant_id=group.participant_id,
        owner_id=group.owner_id,
        extension=group.extension,
        endpoints=[
            EndpointElement(
                document_type=endpoint.document_type,
                process=endpoint.process,
                transport_profile=endpoint.transport_profile,
                endpoint_url=endpoint.endpoint_url,
                certificate=endpoint.certificate,
                service_description=endpoint.service_description,
                technical_contact_url=endpoint.technical_contact_url,
                extension=endpoint.extension,
            )
            for endpoint in exported.endpoints
        ],
        redirects=[
            RedirectElement(
                document_type=redirect.document_type,
                target_href=redirect.target_href,
                subject_unique_identifier=redirect.subject_unique_identifier,
                certificate=redirect.certificate,
                extension=redirect.extension,
            )
            for redirect in exported.redirects
        ],
    )


def business_card_element(card: BusinessCard) -> BusinessCardElement:
    return BusinessCardElement(
        participant_id=card.participant_id,
        entities=[business_entity_element(entity) for entity in card.entities],
    )


def business_entity_element(entity: BusinessEntity) -> BusinessEntityElement:
    return BusinessEntityElement(
        name=entity.name,
        country_code=entity.country_code,
        geographical_information=entity.geographical_information,
        identifiers=[
            BusinessIdentifierElement(scheme=identifier.scheme, value=identifier.value)
            for identifier in entity.identifiers
        ],
        websites=list(entity.websites),
        additional_information=entity.additional_information,
        registration_date=entity.registration_date,
    )
