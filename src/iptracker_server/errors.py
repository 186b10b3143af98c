"""Exception types raised across the core/transport boundary."""

from __future__ import annotations

MISSING_HOSTNAME = "missing_hostname"
NO_ADDRESS = "no_address"

REJECTION_MESSAGE = "Missing required fields: hostname and at least one IP"


class UpdateRejected(ValueError):
    """A report failed validation and was not applied.

    ``reason`` is a stable machine-readable code (``missing_hostname`` or
    ``no_address``); ``str(exc)`` is the human-readable message.
    """

    def __init__(self, reason: str, message: str = REJECTION_MESSAGE) -> None:
        super().__init__(message)
        self.reason = reason
