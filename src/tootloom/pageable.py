# tootloom/pageable.py
"""Paginated results for list-shaped Mastodon endpoints.

A `PageableRequest` decodes a JSON array into items and derives the ranges
for the neighbouring pages from the response's `Link` header. The resulting
`Pageable` never performs I/O: continuing means building a new request with
`next_request()` or `prev_request()` and executing it.
"""

from collections.abc import Callable, Iterator
from typing import Any, Generic, TypeVar

import httpx

from .pagination import PAGINATION_KEYS, Range, derive_ranges
from .request import (
    Decoder,
    JsonHook,
    MastodonRequest,
    Transport,
    json_decoder,
    run_decoder,
)
from .types import Method, Parameters

T = TypeVar("T")


class Pageable(Generic[T]):
    """One decoded page of a collection and the ranges around it.

    Attributes:
        items: The decoded items of this page, in server order.
        next_range: Range of the next (older) page, or None at the end.
        prev_range: Range of the previous (newer) page, or None at the start.
        raw: The page's JSON payload as plain Python data.
    """

    __slots__ = ("_items", "_next_range", "_prev_range", "_raw", "_request_factory")

    def __init__(
        self,
        items: list[T],
        next_range: Range | None = None,
        prev_range: Range | None = None,
        *,
        raw: Any = None,
        request_factory: Callable[[Range], "PageableRequest[T]"] | None = None,
    ):
        self._items = tuple(items)
        self._next_range = next_range
        self._prev_range = prev_range
        self._raw = raw
        self._request_factory = request_factory

    @property
    def items(self) -> list[T]:
        return list(self._items)

    @property
    def next_range(self) -> Range | None:
        return self._next_range

    @property
    def prev_range(self) -> Range | None:
        return self._prev_range

    @property
    def raw(self) -> Any:
        return self._raw

    @property
    def has_next(self) -> bool:
        return self._next_range is not None

    @property
    def has_prev(self) -> bool:
        return self._prev_range is not None

    def _request_for(
        self, range_: Range | None, limit: int | None
    ) -> "PageableRequest[T] | None":
        if range_ is None or self._request_factory is None:
            return None
        if limit is not None:
            range_ = range_.with_limit(limit)
        return self._request_factory(range_)

    def next_request(self, limit: int | None = None) -> "PageableRequest[T] | None":
        """Build the request for the next (older) page, if there is one.

        Args:
            limit: Overrides the page size carried over from the `Link` header.
        """
        return self._request_for(self._next_range, limit)

    def prev_request(self, limit: int | None = None) -> "PageableRequest[T] | None":
        """Build the request for the previous (newer) page, if there is one."""
        return self._request_for(self._prev_range, limit)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def __repr__(self) -> str:
        return (
            f"Pageable(items={len(self._items)}, next={self._next_range!r}, "
            f"prev={self._prev_range!r})"
        )


class PageableRequest(MastodonRequest[Pageable[T]]):
    """A `MastodonRequest` whose result is a `Pageable` page of items.

    The pagination keys (`max_id`, `min_id`, `since_id`, `limit`) of the
    parameter set are owned by `range`; everything else is the request
    template reused for continuation pages. Without an explicit `range`, the
    range is read from those keys; passing both is an error.
    """

    def __init__(
        self,
        transport: Transport,
        method: Method,
        path: str,
        decode: Decoder[list[T]],
        params: Parameters | None = None,
        *,
        range: Range | None = None,
        json_hooks: tuple[JsonHook, ...] = (),
    ):
        params = params if params is not None else Parameters()
        paging = [key for key, _ in params if key in PAGINATION_KEYS]
        if range is None:
            range = Range.from_parameters(params)
        elif paging:
            raise ValueError(
                f"Pagination keys {paging} conflict with the explicit range {range!r}"
            )
        self.range = range
        base = params.without(*PAGINATION_KEYS)
        super().__init__(
            transport,
            method,
            path,
            decode,  # type: ignore[arg-type]
            self.range.to_parameters(base.copy()),
            json_hooks=json_hooks,
        )
        self._base_params = base

    def _replace(self, **changes: Any) -> "PageableRequest[T]":
        fields = {
            "transport": self._transport,
            "method": self.method,
            "path": self.path,
            "decode": self._decode,
            "params": self._base_params,
            "range": self.range,
            "json_hooks": self._json_hooks,
        }
        fields.update(changes)
        return PageableRequest(**fields)

    def for_range(self, range: Range) -> "PageableRequest[T]":
        """Return this request re-anchored on `range`, otherwise identical."""
        return self._replace(range=range)

    def continuation(self, range: Range) -> "PageableRequest[T]":
        """Like `for_range`, keeping this request's page size if `range` has none."""
        if range.limit is None and self.range.limit is not None:
            range = range.with_limit(self.range.limit)
        return self.for_range(range)

    def _decode_body(self, body: str, response: httpx.Response) -> Pageable[T]:
        items = run_decoder(self._decode, body)
        raw = run_decoder(json_decoder(), body)
        next_range, prev_range = derive_ranges(response.headers)
        return Pageable(
            list(items),
            next_range,
            prev_range,
            raw=raw,
            request_factory=self.continuation,
        )
