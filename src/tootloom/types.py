# tootloom/types.py
"""Core type definitions shared by the transport and request layers.

This module defines the HTTP verbs the client speaks, the ordered parameter
multi-map handed to the transport, and type aliases for request hooks.
"""

from collections.abc import Callable, Iterable, Iterator
from enum import Enum

import httpx


class Method(str, Enum):
    """HTTP verbs used against the Mastodon API."""

    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    PUT = "PUT"
    DELETE = "DELETE"


ParameterValue = str | int | bool | Iterable[str | int | bool]


class Parameters:
    """Ordered multi-map of query or form parameters.

    Keys may repeat. Appending a list stores one `key[]` entry per element,
    which is how Mastodon expects array parameters (e.g. `status_ids[]`).
    """

    def __init__(self, pairs: Iterable[tuple[str, str]] | None = None):
        self._pairs: list[tuple[str, str]] = list(pairs) if pairs else []

    @staticmethod
    def _to_str(value: str | int | bool) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def append(self, key: str, value: ParameterValue) -> "Parameters":
        """Append a value (or every element of a list) under `key`.

        Returns:
            Parameters: This instance, to allow chaining while building.
        """
        if isinstance(value, str | int | bool):
            self._pairs.append((key, self._to_str(value)))
        else:
            array_key = key if key.endswith("[]") else f"{key}[]"
            for element in value:
                self._pairs.append((array_key, self._to_str(element)))
        return self

    def extend(self, other: "Parameters") -> "Parameters":
        self._pairs.extend(other.items())
        return self

    def copy(self) -> "Parameters":
        return Parameters(self._pairs)

    def without(self, *keys: str) -> "Parameters":
        """Return a copy with every entry for the given keys removed."""
        return Parameters((k, v) for k, v in self._pairs if k not in keys)

    def get(self, key: str) -> str | None:
        """Return the first value stored under `key`, if any."""
        for k, v in self._pairs:
            if k == key:
                return v
        return None

    def items(self) -> list[tuple[str, str]]:
        return list(self._pairs)

    def to_query(self) -> str:
        """Url-encode the parameters, preserving order and repeated keys."""
        return str(httpx.QueryParams(self._pairs))

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __bool__(self) -> bool:
        return bool(self._pairs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Parameters):
            return NotImplemented
        return self._pairs == other._pairs

    def __repr__(self) -> str:
        return f"Parameters({self._pairs!r})"


PreRequestHook = Callable[[str, str, list[tuple[str, str]], httpx.Headers], None]
"""Type alias for a pre-request hook.

Pre-request hooks are called before an HTTP request is sent.

Args:
    method (str): The HTTP method of the request (e.g., "GET", "POST").
    url (str): The full URL of the request, without query string.
    params (list[tuple[str, str]]): A mutable list of parameter pairs.
        Hooks can modify this list in place.
    headers (httpx.Headers): A mutable `httpx.Headers` object. Hooks can
        modify this object in place.
Return:
    None: Hooks are expected to modify arguments in-place or perform side effects.
"""

PostRequestHook = Callable[[httpx.Response], None]
"""Type alias for a post-request hook.

Post-request hooks are called with the raw `httpx.Response` as soon as it is
received, before status checks and before any decoding.

Return:
    None: Hooks are expected to perform side effects.
"""
