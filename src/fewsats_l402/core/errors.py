"""
Exception hierarchy shared by the L402 client.
"""

from __future__ import annotations

from typing import Any, Optional

__all__ = [
    "ConfigError",
    "HTTPStatusError",
    "L402Error",
    "MalformedInputError",
    "OfferRejectedError",
    "ProtocolError",
    "TransportError",
    "TransportTimeoutError",
]


class L402Error(Exception):
    """Base class for every error raised by this package."""


class ConfigError(L402Error):
    """Raised when the supplied configuration is invalid."""


class MalformedInputError(L402Error, ValueError):
    """Raised when an entity fails local validation or cannot be decoded."""


class TransportError(L402Error):
    """The request never produced a usable response."""


class TransportTimeoutError(TransportError):
    """The request exceeded its deadline."""


class HTTPStatusError(TransportError):
    """The server answered with a non-2xx status."""

    def __init__(
        self,
        status_code: int,
        url: str,
        body: Any = None,
        server_message: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.url = url
        self.body = body
        self.server_message = server_message
        detail = server_message or "no error message"
        super().__init__(f"{url} responded with {status_code}: {detail}")


class ProtocolError(L402Error):
    """The server responded, but not with what the protocol expects."""


class OfferRejectedError(ProtocolError):
    """The server refused to register an offer bundle."""

    def __init__(self, server_message: str, status_code: Optional[int] = None) -> None:
        self.server_message = server_message
        self.status_code = status_code
        super().__init__(f"Offers rejected by server: {server_message}")
