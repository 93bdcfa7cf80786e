"""Import/export policy configuration."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_flag, optional_env_var

DEFAULT_DIRECTORY_INTEGRATION = True
DEFAULT_OVERWRITE_EXISTING = False


@dataclass(frozen=True, slots=True)
class ExchangeConfig:
    """Defaults applied when an import or export does not override them.

    ``directory_integration`` mirrors the registry-wide switch that enables business
    cards; with it disabled business cards are neither imported nor exported.
    """

    directory_integration: bool = DEFAULT_DIRECTORY_INTEGRATION
    overwrite_existing: bool = DEFAULT_OVERWRITE_EXISTING
    default_owner_id: str | None = None


def get_exchange_config() -> ExchangeConfig:
    return ExchangeConfig(
        directory_integration=env_flag(
            "SMPEXCHANGE_DIRECTORY_INTEGRATION",
            default=DEFAULT_DIRECTORY_INTEGRATION,
        ),
        overwrite_existing=env_flag(
            "SMPEXCHANGE_OVERWRITE_EXISTING",
            default=DEFAULT_OVERWRITE_EXISTING,
        ),
        default_owner_id=optional_env_var("SMPEXCHANGE_DEFAULT_OWNER"),
    )
