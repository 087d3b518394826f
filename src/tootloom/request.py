# tootloom/request.py
"""Typed, deferred requests against a Mastodon instance.

A `MastodonRequest` pairs one HTTP call (verb, path, parameters) with a
function that decodes the response body into a typed value. Building a request
performs no I/O. Every call to `execute()` or `execute_async()` sends exactly
one HTTP request and decodes its body afresh; nothing is cached or retried.
"""

import json
from collections.abc import Awaitable, Callable
from typing import Any, Generic, Protocol, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from .exceptions import DecodeError, MastodonError
from .log_config import logger
from .types import Method, Parameters

T = TypeVar("T")
M = TypeVar("M")

Decoder = Callable[[str], T]
"""Maps a raw response body (text) to a value."""

JsonHook = Callable[[str], None]
"""Receives the raw response body before it is decoded."""


class Transport(Protocol):
    """The single outbound call a request needs: send once, return the response.

    Implementations raise `TransportFailure` when no response was received and
    `HttpError` for non-success statuses.
    """

    def send(
        self, method: Method, path: str, params: Parameters | None = None
    ) -> httpx.Response: ...

    def send_async(
        self, method: Method, path: str, params: Parameters | None = None
    ) -> Awaitable[httpx.Response]: ...


class MastodonRequest(Generic[T]):
    """A re-executable unit of one HTTP call plus a decode step.

    Attributes:
        method: HTTP verb of the call.
        path: Path relative to the transport's base URL.
        params: Query (GET/DELETE) or form (POST/PUT/PATCH) parameters.
    """

    def __init__(
        self,
        transport: Transport,
        method: Method,
        path: str,
        decode: Decoder[T],
        params: Parameters | None = None,
        *,
        json_hooks: tuple[JsonHook, ...] = (),
    ):
        self._transport = transport
        self.method = method
        self.path = path
        self.params = params.copy() if params is not None else Parameters()
        self._decode = decode
        self._json_hooks = json_hooks

    def _replace(self, **changes: Any) -> "MastodonRequest[T]":
        fields = {
            "transport": self._transport,
            "method": self.method,
            "path": self.path,
            "decode": self._decode,
            "params": self.params,
            "json_hooks": self._json_hooks,
        }
        fields.update(changes)
        return type(self)(**fields)

    def with_json_hook(self, hook: JsonHook) -> "MastodonRequest[T]":
        """Return a new request that hands each raw body to `hook` before decoding.

        This request is left unchanged.
        """
        return self._replace(json_hooks=(*self._json_hooks, hook))

    def with_parameters(self, params: Parameters) -> "MastodonRequest[T]":
        """Return a copy of this request with a different parameter set."""
        return self._replace(params=params)

    def execute(self) -> T:
        """Send the request, block until the response arrives, and decode it.

        Returns:
            T: The decoded value.

        Raises:
            TransportFailure: If no response was received.
            HttpError: If the server answered with a 4xx/5xx status.
            DecodeError: If the body could not be decoded (including
                `CodecFormatError` for a rejected scalar value).
        """
        response = self._transport.send(self.method, self.path, self.params)
        return self._handle_response(response)

    async def execute_async(self) -> T:
        """Asynchronous variant of `execute()` with the same failure taxonomy.

        Cancelling the awaiting task while the call is in flight aborts the
        call. Once the response has been read, decoding completes before
        control returns to the event loop.
        """
        response = await self._transport.send_async(
            self.method, self.path, self.params
        )
        return self._handle_response(response)

    def perform(self) -> None:
        """Send the request and check its status without decoding the body."""
        self._transport.send(self.method, self.path, self.params)

    async def perform_async(self) -> None:
        await self._transport.send_async(self.method, self.path, self.params)

    def _handle_response(self, response: httpx.Response) -> T:
        body = response.text
        for hook in self._json_hooks:
            try:
                hook(body)
            except Exception as e:
                logger.opt(exception=True).error(
                    f"Error executing JSON hook {getattr(hook, '__name__', str(hook))}: {e}",
                )
        return self._decode_body(body, response)

    def _decode_body(self, body: str, response: httpx.Response) -> T:
        return run_decoder(self._decode, body)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.method.value} {self.path!r}, "
            f"params={self.params.items()!r})"
        )


def run_decoder(decode: Decoder[M], body: str) -> M:
    """Apply `decode` to `body`, surfacing any failure as a `DecodeError`."""
    try:
        return decode(body)
    except MastodonError:
        raise
    except Exception as e:
        target = getattr(decode, "target", getattr(decode, "__name__", "value"))
        raise DecodeError(
            f"Could not decode response body: {e}", target=target, body=body
        ) from e


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


def _adapter_decoder(adapter: TypeAdapter[M], target: str) -> Decoder[M]:
    def decode(body: str) -> M:
        try:
            return adapter.validate_json(body)
        except ValidationError as e:
            raise DecodeError(
                f"Response did not match {target}: {e.error_count()} error(s); "
                f"first: {e.errors()[0]['msg']}",
                target=target,
                body=body,
            ) from e

    decode.target = target  # type: ignore[attr-defined]
    return decode


def model_decoder(model: type[M]) -> Decoder[M]:
    """Decoder for a JSON object validated into `model`."""
    return _adapter_decoder(TypeAdapter(model), _type_name(model))


def list_decoder(model: type[M]) -> Decoder[list[M]]:
    """Decoder for a JSON array whose elements are validated into `model`."""
    return _adapter_decoder(TypeAdapter(list[model]), f"list[{_type_name(model)}]")


def json_decoder() -> Decoder[Any]:
    """Decoder that returns the parsed JSON payload as plain Python data."""

    def decode(body: str) -> Any:
        try:
            return json.loads(body)
        except ValueError as e:
            raise DecodeError(
                f"Response body is not valid JSON: {e}", target="json", body=body
            ) from e

    decode.target = "json"  # type: ignore[attr-defined]
    return decode
