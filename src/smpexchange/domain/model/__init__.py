"""Public domain model surface."""

from __future__ import annotations

from smpexchange.domain.model.business_card import (
    BusinessCard,
    BusinessEntity,
    BusinessIdentifier,
)
from smpexchange.domain.model.service_group import (
    Endpoint,
    EndpointKey,
    Redirect,
    RedirectKey,
    ServiceGroup,
)
from smpexchange.domain.model.user import User

__all__ = [  # noqa: RUF022
    # service groups
    "ServiceGroup",
    "Endpoint",
    "EndpointKey",
    "Redirect",
    "RedirectKey",
    # business cards
    "BusinessCard",
    "BusinessEntity",
    "BusinessIdentifier",
    # users
    "User",
]
