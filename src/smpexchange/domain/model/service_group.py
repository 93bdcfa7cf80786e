"""Service groups and the routing records they own.

A service group is keyed by its participant identifier. Endpoints and redirects
exist only while their group exists; the storage layer removes them together
with the group.
"""

from __future__ import annotations

from dataclasses import dataclass

type EndpointKey = tuple[str, str, str, str]
type RedirectKey = tuple[str, str]


def _require_text(value: str, name: str) -> None:
    if not value or not value.strip():
        raise ValueError(f"{name} must not be blank")


@dataclass(eq=False, kw_only=True)
class ServiceGroup:
    participant_id: str
    owner_id: str
    extension: str | None = None

    def __post_init__(self) -> None:
        _require_text(self.participant_id, "participant_id")
        _require_text(self.owner_id, "owner_id")

    @property
    def key(self) -> str:
        return self.participant_id

    @property
    def sort_key(self) -> str:
        return self.participant_id


@dataclass(eq=False, kw_only=True)
class Endpoint:
    """One declared document/process capability of a service group.

    Endpoints are replaced wholesale per key by the storage layer, so imports
    merge them instead of deleting first.
    """

    participant_id: str
    document_type: str
    process: str
    transport_profile: str
    endpoint_url: str
    certificate: str | None = None
    service_description: str | None = None
    technical_contact_url: str | None = None
    extension: str | None = None

    def __post_init__(self) -> None:
        _require_text(self.participant_id, "participant_id")
        _require_text(self.document_type, "document_type")
        _require_text(self.process, "process")
        _require_text(self.transport_profile, "transport_profile")
        _require_text(self.endpoint_url, "endpoint_url")

    @property
    def key(self) -> EndpointKey:
        return (self.participant_id, self.document_type, self.process, self.transport_profile)

    @property
    def sort_key(self) -> tuple[str, str, str]:
        return (self.document_type, self.process, self.transport_profile)


@dataclass(eq=False, kw_only=True)
class Redirect:
    """Delegates lookups of one document type to another registry."""

    participant_id: str
    document_type: str
    target_href: str
    subject_unique_identifier: str | None = None
    certificate: str | None = None
    extension: str | None = None

    def __post_init__(self) -> None:
        _require_text(self.participant_id, "participant_id")
        _require_text(self.document_type, "document_type")
        _require_text(self.target_href, "target_href")

    @property
    def key(self) -> RedirectKey:
        return (self.participant_id, self.document_type)

    @property
    def sort_key(self) -> str:
        return self.document_type
