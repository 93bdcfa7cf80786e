"""Errors raised by the exchange entry points themselves."""

from __future__ import annotations


class PreconditionError(ValueError):
    """Raised when an entry point is called without a required argument.

    This signals a programming error. Problems with the imported data or with
    the registry are reported through the action log instead.
    """


def require(value: object, name: str) -> None:
    if value is None:
        raise PreconditionError(f"{name} must not be None")
