"""JSON response decoding and error-status handling.

Only bodies declared as ``application/vnd.git-lfs+json`` or
``application/json`` (optionally with parameters) are parsed; any other
content type passes through untouched.
"""

from __future__ import annotations

import json
import logging
from collections.abc import MutableMapping
from typing import Any, Dict

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import AuthError, ClientError, DecodeError, FatalError, ResponseError
from .policy import JSON_MEDIA_TYPE_RE, LFS_MEDIA_TYPE_RE

logger = logging.getLogger(__name__)

__all__ = [
    "ClientErrorPayload",
    "is_json_media_type",
    "decode_response",
    "handle_response",
    "default_error_message",
]

_DEFAULT_ERRORS: Dict[int, str] = {
    400: "Client error: {url}",
    401: "Authorization error: {url}\nCheck that you have proper access to the repository",
    403: "Authorization error: {url}\nCheck that you have proper access to the repository",
    404: "Repository or object not found: {url}\nCheck that it exists and that you have proper access to it",
    429: "Rate limit exceeded: {url}",
    500: "Server error: {url}",
    501: "Not Implemented: {url}",
    507: "Insufficient server storage: {url}",
    509: "Bandwidth limit exceeded: {url}",
}

# 5xx statuses that describe a server limitation rather than a server failure.
_NON_FATAL_SERVER_STATUSES = frozenset({501, 507, 509})


class ClientErrorPayload(BaseModel):
    """Error document returned by the LFS API for 4xx/5xx responses."""

    model_config = ConfigDict(extra="ignore")

    message: str = ""
    documentation_url: str = ""
    request_id: str = ""


def is_json_media_type(content_type: str) -> bool:
    """Return ``True`` for the LFS vendor media type or plain JSON.

    Examples:
        >>> is_json_media_type("application/json; charset=utf-8")
        True
        >>> is_json_media_type("application/jsonp")
        False
    """
    return bool(LFS_MEDIA_TYPE_RE.match(content_type) or JSON_MEDIA_TYPE_RE.match(content_type))


def _assign(payload: Any, into: Any) -> None:
    if isinstance(into, BaseModel):
        parsed = type(into).model_validate(payload)
        for name in parsed.model_fields_set:
            setattr(into, name, getattr(parsed, name))
        return
    if not isinstance(payload, dict):
        raise TypeError(f"expected a JSON object, got {type(payload).__name__}")
    if isinstance(into, MutableMapping):
        into.update(payload)
        return
    for key, value in payload.items():
        setattr(into, key, value)


def decode_response(response: httpx.Response, into: Any) -> None:
    """Deserialize a JSON response body into ``into``.

    ``into`` may be a mutable mapping (updated in place), a pydantic model
    instance (validated fields assigned) or any object accepting attributes.
    The response is closed once the body has been read, whatever the outcome.

    Raises:
        DecodeError: If the body is not valid JSON or does not fit ``into``.
    """
    content_type = response.headers.get("Content-Type", "")
    if not is_json_media_type(content_type):
        return

    request = response.request
    try:
        payload = json.loads(response.read())
        _assign(payload, into)
    except (ValueError, TypeError, ValidationError) as exc:
        raise DecodeError(
            f"Unable to parse HTTP response for {request.method} {request.url}",
            request=request,
            response=response,
        ) from exc
    finally:
        response.close()


def default_error_message(status_code: int, url: str) -> str:
    template = _DEFAULT_ERRORS.get(status_code)
    if template is not None:
        return template.format(url=url)
    if status_code < 500:
        return f"Client error {url} from HTTP {status_code}"
    return f"Server error {url} from HTTP {status_code}"


def handle_response(response: httpx.Response) -> None:
    """Raise a :class:`ResponseError` subclass when ``response`` has an error status.

    The error document is decoded when the server sent one; otherwise a
    status-specific default message is used.

    Raises:
        DecodeError: If the error document is malformed.
        AuthError: For ``401`` responses.
        FatalError: For 5xx responses other than 501, 507 and 509.
        ClientError: For every other error status.
    """
    status = response.status_code
    if status < 400:
        return

    payload = ClientErrorPayload()
    decode_response(response, payload)

    message = payload.message or default_error_message(status, str(response.request.url))
    if status == 401:
        error_cls: type[ResponseError] = AuthError
    elif status > 499 and status not in _NON_FATAL_SERVER_STATUSES:
        error_cls = FatalError
    else:
        error_cls = ClientError

    logger.debug(
        "HTTP error response",
        extra={"status": status, "url": str(response.request.url), "error": error_cls.__name__},
    )
    raise error_cls(
        message,
        status_code=status,
        response=response,
        documentation_url=payload.documentation_url,
        request_id=payload.request_id,
    )
