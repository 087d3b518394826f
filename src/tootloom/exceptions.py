"""Custom exception classes for the tootloom library.

The hierarchy separates the three ways a single request execution can fail:
no response at all (`TransportFailure`), a response the server marked as an
error (`HttpError`), and a response we could not understand (`DecodeError`).
"""

import json
from enum import Enum
from typing import Any

import httpx
from pydantic import ValidationError


class MastodonError(Exception):
    """Base exception class for all tootloom errors."""

    def __init__(
        self,
        message: str,
        *,
        response: httpx.Response | None = None,
        request: httpx.Request | None = None,
    ):
        """Initializes the base exception.

        Args:
            message: The error message.
            response: Optional httpx.Response object associated with the error.
            request: Optional httpx.Request object associated with the error.
        """
        super().__init__(message)
        self.message = message
        self.response = response
        self.request = request

    def __str__(self) -> str:
        if self.response is not None:
            # Prefer response info if available
            url_info = getattr(getattr(self.response, "request", None), "url", "N/A")
            return (
                f"{self.message} (Status: {self.response.status_code}, URL: {url_info})"
            )
        if isinstance(self.request, httpx.Request):
            return f"{self.message} (URL: {self.request.url})"
        return self.message


class TransportFailureKind(Enum):
    """Why no response was received."""

    CONNECT = "connect"
    TIMEOUT = "timeout"
    TLS = "tls"
    NETWORK = "network"
    PROTOCOL = "protocol"


class TransportFailure(MastodonError):
    """Raised when the request never produced an HTTP response.

    Covers DNS resolution failures, refused connections, TLS handshake errors
    and timeouts. Never retried by the library itself.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: TransportFailureKind = TransportFailureKind.NETWORK,
        request: httpx.Request | None = None,
    ):
        super().__init__(message, request=request, response=None)
        self.kind = kind

    def __str__(self) -> str:
        if self.request is not None:
            return f"{self.message} [{self.kind.value}] (URL: {self.request.url})"
        return f"{self.message} [{self.kind.value}]"


class HttpError(MastodonError):
    """Represents a response received with a non-success (4xx/5xx) status.

    Attributes:
        status_code: The HTTP status code returned by the server.
        body: The raw response body text, possibly empty.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        body: str = "",
        response: httpx.Response | None = None,
        request: httpx.Request | None = None,
    ):
        super().__init__(message, response=response, request=request)
        self.status_code = status_code
        self.body = body

    @property
    def error(self) -> Any | None:
        """The body parsed as a Mastodon `Error` entity, if it is one."""
        # Imported here, entities depend on codecs which depend on this module
        from .entities import Error

        if not self.body:
            return None
        try:
            payload = json.loads(self.body)
        except ValueError:
            return None
        if not isinstance(payload, dict) or "error" not in payload:
            return None
        try:
            return Error.model_validate(payload)
        except ValidationError:
            return None


class RateLimitError(HttpError):
    """Represents hitting the API rate limit (429 Too Many Requests)."""


class DecodeError(MastodonError):
    """Raised when a response body was received but could not be decoded.

    Attributes:
        target: Name of the type the body was being decoded into.
        body: The text that failed to decode.
    """

    def __init__(self, message: str, *, target: str = "", body: str | None = None):
        super().__init__(message)
        self.target = target
        self.body = body

    def __str__(self) -> str:
        if self.target:
            return f"{self.message} (target: {self.target})"
        return self.message


class CodecFormatError(DecodeError):
    """Raised when a scalar value does not match its wire grammar.

    Attributes:
        codec: Name of the codec that rejected the value.
        value: The rejected wire value.
    """

    def __init__(self, message: str, *, codec: str, value: str):
        super().__init__(message, target=codec, body=value)
        self.codec = codec
        self.value = value


class ConfigurationError(MastodonError):
    """Represents an error in the library's configuration."""

    def __init__(self, message: str):
        super().__init__(message, response=None)
