"""HTTP transport and request factory for a single Mastodon instance.

This module provides the MastodonClient class. It owns the httpx clients,
applies authentication and request hooks, and maps every outcome of one HTTP
exchange onto the tootloom error taxonomy. It also builds the typed
`MastodonRequest` objects used by endpoint-specific code.

The client makes exactly one attempt per send: no retries, no caching and no
rate-limit throttling happen here.
"""

import ssl
from http import HTTPStatus
from typing import Self, TypeVar, get_origin

import certifi
import httpx

from .auth import AuthStrategy, NoAuth, StaticTokenAuth
from .config import ClientSettings, get_settings
from .entities import InstanceVersion
from .exceptions import (
    HttpError,
    MastodonError,
    RateLimitError,
    TransportFailure,
    TransportFailureKind,
)
from .log_config import logger
from .pageable import PageableRequest
from .pagination import Range
from .request import (
    Decoder,
    MastodonRequest,
    json_decoder,
    list_decoder,
    model_decoder,
)
from .semver import SemanticVersion
from .types import Method, Parameters

T = TypeVar("T")

_QUERY_METHODS = frozenset([Method.GET, Method.DELETE])
_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"
_INSTANCE_PATHS = ("api/v2/instance", "api/v1/instance")


def _is_type_form(decode: object) -> bool:
    """True for types like `Account` or `list[Account]`, False for functions."""
    return isinstance(decode, type) or get_origin(decode) is not None


class MastodonClient:
    """Synchronous and asynchronous HTTP transport for one Mastodon instance.

    The client implements the `Transport` protocol consumed by
    `MastodonRequest`: `send()` blocks the calling thread, `send_async()` runs
    on the caller's event loop. Requests built by this client keep a reference
    to it and share its connection pools, but each execution has its own
    request/response lifecycle.

    Typical usage:
    ```python
    with MastodonClient("mastodon.social") as client:
        page = client.pageable_request("api/v1/timelines/public", Status).execute()
        for status in page:
            print(status.content)
        older = page.next_request()
    ```

    Attributes:
        _settings: Configuration settings for the client.
        _instance_name: Host name of the Mastodon instance.
        _base_url: URL that request paths are resolved against.
        _auth_strategy: Authentication strategy instance.
        _http_client: The httpx.Client used by `send()`.
        _async_http_client: The httpx.AsyncClient used by `send_async()`. When
            none is given, it is created on the first async send.
        _should_close_client: Whether this instance created (and so owns)
            the sync client.
        _should_close_async_client: Whether this instance owns the async client.
    """

    def __init__(
        self,
        instance_name: str,
        settings: ClientSettings | None = None,
        auth_strategy: AuthStrategy | None = None,
        *,
        access_token: str | None = None,
        base_url: str | None = None,
        http_client: httpx.Client | None = None,
        async_http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the MastodonClient.

        Authentication is resolved in this order: an explicit `auth_strategy`,
        then `access_token`, then `settings.access_token`, then no auth.

        Args:
            instance_name: Host name of the instance, e.g. "mastodon.social".
            settings: Client settings. If None, loaded via `get_settings()`.
            auth_strategy: Optional explicit authentication strategy.
            access_token: Optional bearer token, overriding the settings token.
            base_url: Optional override for the URL paths are resolved against.
                Defaults to `<scheme>://<instance_name>[:<port>]`.
            http_client: Optional pre-configured httpx.Client.
            async_http_client: Optional pre-configured httpx.AsyncClient.
        """
        self._settings = settings or get_settings()
        self._instance_name = instance_name
        self._base_url: str = (base_url or self._default_base_url()).rstrip("/")

        if auth_strategy is not None:
            self._auth_strategy: AuthStrategy = auth_strategy
        elif token := access_token or self._settings.access_token:
            self._auth_strategy = StaticTokenAuth(token=token)
        else:
            self._auth_strategy = NoAuth()
        logger.info(
            f"Using authentication strategy: {type(self._auth_strategy).__name__}"
        )

        self._should_close_client = http_client is None
        self._http_client = http_client or httpx.Client(**self._client_options())
        self._should_close_async_client = async_http_client is None
        self._async_http_client: httpx.AsyncClient | None = async_http_client

        logger.debug(f"MastodonClient initialized for {self._base_url}.")

    def _default_base_url(self) -> str:
        port = f":{self._settings.port}" if self._settings.port else ""
        return f"{self._settings.scheme}://{self._instance_name}{port}"

    def _client_options(self) -> dict:
        """Options shared by the default sync and async httpx clients."""
        try:
            verify_ssl: ssl.SSLContext | bool = ssl.create_default_context(
                cafile=certifi.where()
            )
            logger.debug("Using certifi SSL context.")
        except Exception:
            verify_ssl = True
            logger.warning(
                "certifi not found or failed to load. Using default SSL verification."
            )
        return {
            "timeout": self._settings.request_timeout,
            "verify": verify_ssl,
            "headers": {"User-Agent": self._settings.user_agent},
        }

    @property
    def instance_name(self) -> str:
        return self._instance_name

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_async_client(self) -> httpx.AsyncClient:
        if self._async_http_client is None:
            self._async_http_client = httpx.AsyncClient(**self._client_options())
            logger.debug("Created async HTTP client on first async send.")
        return self._async_http_client

    # --- Transport ---

    def _build_request(
        self,
        http_client: httpx.Client | httpx.AsyncClient,
        method: Method,
        path: str,
        params: Parameters | None,
    ) -> httpx.Request:
        """Build the outgoing request: run pre-request hooks, then apply auth."""
        method = Method(method)
        url = f"{self._base_url}/{path.lstrip('/')}"
        if method is Method.PATCH and not params:
            raise ValueError("PATCH request not possible without parameters")

        hook_params = params.items() if params is not None else []
        hook_headers = httpx.Headers()
        if self._settings.pre_request_hooks:
            logger.debug(
                f"Executing {len(self._settings.pre_request_hooks)} pre-request hooks "
                f"for {method.value} {url}"
            )
            for hook in self._settings.pre_request_hooks:
                try:
                    hook(method.value, url, hook_params, hook_headers)
                except Exception as e:
                    logger.opt(exception=True).error(
                        f"Error executing pre-request hook {getattr(hook, '__name__', str(hook))}: {e}",
                    )

        if method in _QUERY_METHODS:
            request = http_client.build_request(
                method.value, url, params=hook_params, headers=hook_headers
            )
        else:
            hook_headers.setdefault("Content-Type", _FORM_CONTENT_TYPE)
            request = http_client.build_request(
                method.value,
                url,
                content=Parameters(hook_params).to_query(),
                headers=hook_headers,
            )

        self._auth_strategy.authenticate(request)
        if not request.headers.get("User-Agent"):
            request.headers["User-Agent"] = self._settings.user_agent

        if self._settings.debug:
            logger.info(f"{request.method} {request.url}")
        logger.debug(f"Sending request: {request.method} {request.url}")
        return request

    @staticmethod
    def _transport_failure(
        error: httpx.RequestError, request: httpx.Request
    ) -> TransportFailure:
        """Classify an httpx exception raised before any response arrived."""
        if isinstance(error, httpx.TimeoutException):
            kind = TransportFailureKind.TIMEOUT
            message = "Request timed out"
        elif isinstance(error, httpx.ConnectError):
            cause = error.__cause__ or error.__context__
            if isinstance(cause, ssl.SSLError) or "ssl" in str(error).lower():
                kind = TransportFailureKind.TLS
                message = f"TLS handshake failed: {error}"
            else:
                kind = TransportFailureKind.CONNECT
                message = f"Could not connect: {error}"
        elif isinstance(error, httpx.NetworkError):
            kind = TransportFailureKind.NETWORK
            message = f"Network error: {error}"
        elif isinstance(error, httpx.ProtocolError | httpx.TooManyRedirects):
            kind = TransportFailureKind.PROTOCOL
            message = f"Protocol error: {error}"
        else:
            kind = TransportFailureKind.NETWORK
            message = f"Request not executed due to network IO issue: {error}"
        logger.debug(f"{message} for {request.url}")
        return TransportFailure(message, kind=kind, request=request)

    def _check_response(self, response: httpx.Response) -> httpx.Response:
        """Run post-request hooks, then raise for non-success statuses."""
        logger.debug(
            f"Received response: {response.status_code} for {response.request.url}"
        )
        logger.trace(f"Response Headers: {response.headers}")

        for hook in self._settings.post_request_hooks:
            try:
                hook(response)
            except Exception as e:
                logger.opt(exception=True).error(
                    f"Error executing post-request hook {getattr(hook, '__name__', str(hook))}: {e}",
                )

        if response.status_code >= HTTPStatus.BAD_REQUEST:
            error_class = (
                RateLimitError
                if response.status_code == HTTPStatus.TOO_MANY_REQUESTS
                else HttpError
            )
            raise error_class(
                f"API request failed with status {response.status_code}",
                status_code=response.status_code,
                body=response.text,
                response=response,
                request=response.request,
            )
        return response

    def send(
        self, method: Method, path: str, params: Parameters | None = None
    ) -> httpx.Response:
        """Send one request and block until the response has been read.

        Raises:
            TransportFailure: If no response was received.
            HttpError: If the response status is 4xx/5xx.
        """
        request = self._build_request(self._http_client, method, path, params)
        try:
            response = self._http_client.send(request)
        except httpx.RequestError as e:
            raise self._transport_failure(e, request) from e
        return self._check_response(response)

    async def send_async(
        self, method: Method, path: str, params: Parameters | None = None
    ) -> httpx.Response:
        """Asynchronous variant of `send()` with identical failure semantics."""
        http_client = self._get_async_client()
        request = self._build_request(http_client, method, path, params)
        try:
            response = await http_client.send(request)
        except httpx.RequestError as e:
            raise self._transport_failure(e, request) from e
        return self._check_response(response)

    # --- Request factories ---

    def request(
        self,
        path: str,
        decode: Decoder[T] | type[T] | None = None,
        *,
        method: Method = Method.GET,
        params: Parameters | None = None,
    ) -> MastodonRequest[T]:
        """Build a deferred request whose body decodes into a single value.

        Args:
            path: Endpoint path, e.g. "api/v1/accounts/verify_credentials".
            decode: A decode function, or a pydantic model class to validate
                the JSON body into. None returns the parsed JSON as-is.
            method: HTTP verb.
            params: Query or form parameters.
        """
        if decode is None:
            decoder: Decoder[T] = json_decoder()
        elif _is_type_form(decode):
            decoder = model_decoder(decode)
        else:
            decoder = decode
        return MastodonRequest(self, method, path, decoder, params)

    def pageable_request(
        self,
        path: str,
        decode: Decoder[list[T]] | type[T],
        *,
        method: Method = Method.GET,
        params: Parameters | None = None,
        range: Range | None = None,
    ) -> PageableRequest[T]:
        """Build a deferred request for one page of a list endpoint.

        Args:
            path: Endpoint path, e.g. "api/v1/timelines/public".
            decode: A decode function for the whole JSON array, or the pydantic
                model class of one item.
            method: HTTP verb.
            params: Endpoint parameters. Pagination keys here define the range
                when `range` is not given.
            range: The page window to request. Defaults to the first page.
        """
        decoder = list_decoder(decode) if _is_type_form(decode) else decode
        return PageableRequest(self, method, path, decoder, params, range=range)

    def perform_action(
        self,
        path: str,
        method: Method = Method.POST,
        params: Parameters | None = None,
    ) -> None:
        """Perform an action immediately, raising on failure and ignoring the body."""
        self.send(method, path, params)

    # --- Instance version ---

    def instance_version(self) -> SemanticVersion:
        """Fetch the server version, trying `api/v2/instance` before `api/v1/instance`.

        Paths are resolved against `base_url`, so this expects the client to
        point at the instance root (the default).

        Raises:
            MastodonError: If neither endpoint returned a version.
        """
        last_error: MastodonError | None = None
        for path in _INSTANCE_PATHS:
            try:
                info = self.request(path, InstanceVersion).execute()
            except HttpError as e:
                logger.debug(f"{path} answered {e.status_code}, trying next endpoint")
                last_error = e
                continue
            except MastodonError as e:
                raise MastodonError("Unable to fetch instance version") from e
            return SemanticVersion(info.version)
        raise MastodonError("Unable to fetch instance version") from last_error

    async def instance_version_async(self) -> SemanticVersion:
        """Asynchronous variant of `instance_version()`."""
        last_error: MastodonError | None = None
        for path in _INSTANCE_PATHS:
            try:
                info = await self.request(path, InstanceVersion).execute_async()
            except HttpError as e:
                logger.debug(f"{path} answered {e.status_code}, trying next endpoint")
                last_error = e
                continue
            except MastodonError as e:
                raise MastodonError("Unable to fetch instance version") from e
            return SemanticVersion(info.version)
        raise MastodonError("Unable to fetch instance version") from last_error

    # --- Lifecycle ---

    def _owns_open_async_client(self) -> bool:
        return (
            self._should_close_async_client
            and self._async_http_client is not None
            and not self._async_http_client.is_closed
        )

    def close(self) -> None:
        """Close the sync HTTP client if this instance created it.

        The async client, created only once `send_async()` is used, can only be
        closed from a coroutine: use `aclose()` or `async with` for that.
        """
        if self._should_close_client and not self._http_client.is_closed:
            self._http_client.close()
            logger.debug("MastodonClient sync HTTP client closed.")
        if self._owns_open_async_client():
            logger.warning(
                "MastodonClient async HTTP client is still open, call aclose() to close it."
            )

    async def aclose(self) -> None:
        """Close every HTTP client this instance created."""
        if self._owns_open_async_client():
            await self._async_http_client.aclose()
            logger.debug("MastodonClient async HTTP client closed.")
        self.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        await self.aclose()
