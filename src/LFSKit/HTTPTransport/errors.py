# === NAVMAP v1 ===
# {
#   "module": "LFSKit.HTTPTransport.errors",
#   "purpose": "Define the exception hierarchy raised by the per-host HTTP transport",
#   "sections": [
#     {"id": "base", "name": "Base Exceptions", "anchor": "BAS", "kind": "api"},
#     {"id": "configuration", "name": "Configuration Errors", "anchor": "CFG", "kind": "api"},
#     {"id": "decode", "name": "Response Decoding Errors", "anchor": "DEC", "kind": "api"},
#     {"id": "status", "name": "HTTP Status Errors", "anchor": "STA", "kind": "api"}
#   ]
# }
# === /NAVMAP ===

"""Exception hierarchy shared by client construction and request dispatch.

Transport failures (DNS, dial, TLS handshake, timeouts) are raised by httpx
itself and reach callers untouched.  Everything this package raises on its own
derives from :class:`LFSAPIError`, so callers can tell configuration problems
apart from server responses that could not be parsed or that reported an
error status.
"""

from __future__ import annotations

from typing import Optional

import httpx

__all__ = [
    "LFSAPIError",
    "ConfigurationError",
    "DecodeError",
    "ResponseError",
    "ClientError",
    "AuthError",
    "FatalError",
]


class LFSAPIError(RuntimeError):
    """Base exception for transport configuration and response handling failures."""


class ConfigurationError(LFSAPIError):
    """Raised when netrc files or git configuration cannot be read."""


class DecodeError(LFSAPIError):
    """Raised when a JSON response body cannot be parsed.

    The already received response is kept on the exception so callers can
    still inspect status and headers.
    """

    def __init__(
        self,
        message: str,
        *,
        request: Optional[httpx.Request] = None,
        response: Optional[httpx.Response] = None,
    ) -> None:
        super().__init__(message)
        self.request = request
        self.response = response


class ResponseError(LFSAPIError):
    """Raised when the server answers with a 4xx or 5xx status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        response: Optional[httpx.Response] = None,
        documentation_url: str = "",
        request_id: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response
        self.documentation_url = documentation_url
        self.request_id = request_id

    def __str__(self) -> str:
        text = self.message
        if self.documentation_url:
            text += f"\nDocs: {self.documentation_url}"
        if self.request_id:
            text += f"\nRequest ID: {self.request_id}"
        return text


class ClientError(ResponseError):
    """Error status that the caller may act on (bad request, not found, ...)."""


class AuthError(ResponseError):
    """Raised for ``401 Unauthorized`` so callers can refresh credentials."""


class FatalError(ResponseError):
    """Server-side failure that retrying the same request will not fix."""
