from typing import Protocol

import httpx

from .exceptions import ConfigurationError
from .log_config import logger


class AuthStrategy(Protocol):
    """Protocol defining the interface for authentication strategies.

    Strategies add credentials to an outgoing request. They perform no I/O,
    so the same strategy serves both the sync and the async transport.
    """

    def authenticate(self, request: httpx.Request) -> None:
        """
        Modifies the request to add authentication information.

        Args:
            request: The httpx.Request object to modify.
        """
        ...


class NoAuth:
    """Implements the AuthStrategy protocol for public endpoints.

    This strategy makes no modifications to the outgoing request.
    """

    def authenticate(self, request: httpx.Request) -> None:
        """Does nothing as no authentication is needed."""
        logger.trace("Using NoAuth strategy, no authentication applied.")


class StaticTokenAuth:
    """Implements AuthStrategy using an OAuth bearer token.

    The token is obtained elsewhere (app registration and the OAuth flow are
    not handled by this library) and sent as `Authorization: Bearer <token>`.

    Attributes:
        _token: The access token.
    """

    def __init__(self, token: str | None):
        """Initializes StaticTokenAuth with the provided access token.

        Args:
            token: The access token to use for authentication.

        Raises:
            ConfigurationError: If the token is None or empty.
        """
        if not token:
            raise ConfigurationError("StaticTokenAuth requires a non-empty 'token'.")
        self._token: str = token
        logger.debug("StaticTokenAuth initialized.")

    def authenticate(self, request: httpx.Request) -> None:
        """Adds the 'Authorization: Bearer <token>' header to the request."""
        logger.trace("Authenticating request using StaticTokenAuth.")
        request.headers["Authorization"] = f"Bearer {self._token}"

    def __repr__(self) -> str:
        return "StaticTokenAuth(token=***)"
