"""Exceptions raised by the Panasonic Viera protocol client."""

from __future__ import annotations

from typing import Optional


class VieraError(Exception):
    """Base class for all errors raised talking to a Viera TV."""


class InvalidArgument(VieraError, ValueError):
    """Caller input was rejected before anything was sent to the TV."""


class TransportError(VieraError):
    """The TV could not be reached (refused, reset, DNS failure)."""


class TransportTimeout(TransportError):
    """The TV did not answer within the request timeout."""


class ProtocolError(VieraError):
    """The TV answered, but with an error status or an unusable body."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        error_code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.error_code = error_code


class AuthenticationFailed(VieraError):
    """The encrypted session handshake or PIN pairing was rejected."""
