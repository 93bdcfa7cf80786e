"""Pydantic models of the JSON exchange document, format version 1.0."""

from __future__ import annotations

import logging
from datetime import date  # noqa: TC003
from typing import Annotated, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

log = logging.getLogger(__name__)

NonBlank = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
CountryCode = Annotated[
    str, StringConstraints(strip_whitespace=True, to_upper=True, min_length=2, max_length=2)
]


class ExchangeBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.warning(
            "Exchange %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class EndpointElement(ExchangeBaseModel):
    document_type: NonBlank
    process: NonBlank
    transport_profile: NonBlank
    endpoint_url: NonBlank
    certificate: str | None = None
    service_description: str | None = None
    technical_contact_url: str | None = None
    extension: str | None = None


class RedirectElement(ExchangeBaseModel):
    document_type: NonBlank
    target_href: NonBlank
    subject_unique_identifier: str | None = None
    certificate: str | None = None
    extension: str | None = None


class ServiceGroupElement(ExchangeBaseModel):
    participant_id: NonBlank
    owner_id: NonBlank
    extension: str | None = None
    endpoints: list[EndpointElement] = Field(default_factory=list)
    redirects: list[RedirectElement] = Field(default_factory=list)


class BusinessIdentifierElement(ExchangeBaseModel):
    scheme: NonBlank
    value: NonBlank


class BusinessEntityElement(ExchangeBaseModel):
    name: NonBlank
    country_code: CountryCode
    geographical_information: str | None = None
    identifiers: list[BusinessIdentifierElement] = Field(default_factory=list)
    websites: list[str] = Field(default_factory=list)
    additional_information: str | None = None
    registration_date: date | None = None


class BusinessCardElement(ExchangeBaseModel):
    participant_id: NonBlank
    entities: list[BusinessEntityElement] = Field(default_factory=list)


class DocumentEnvelope(ExchangeBaseModel):
    """Root of an incoming document; elements stay raw until the reader converts them."""

    version: Literal["1.0"]
    service_groups: list[Any] = Field(default_factory=list)
    business_cards: list[Any] = Field(default_factory=list)


class ExchangeDocumentModel(ExchangeBaseModel):
    """Root of an outgoing document."""

    version: Literal["1.0"] = "1.0"
    service_groups: list[ServiceGroupElement] = Field(default_factory=list)
    business_cards: list[BusinessCardElement] = Field(default_factory=list)
