"""Registry users owning service groups."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(eq=False, kw_only=True)
class User:
    id: str
    display_name: str
