# tootloom/pagination.py
"""Cursor model for Mastodon's `Link`-header pagination.

Mastodon list endpoints answer with a header such as::

    Link: <https://example.social/api/v1/timelines/public?max_id=109>; rel="next",
          <https://example.social/api/v1/timelines/public?min_id=120>; rel="prev"

A `Range` describes which window of a collection to request. `derive_ranges`
turns the header of one page into the ranges for its neighbours. Deriving a
continuation is best effort: a missing or malformed relation only means there
is no page in that direction.
"""

import re
from collections.abc import Mapping
from enum import Enum
from typing import Any, Self

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .log_config import logger
from .types import Parameters


class Direction(str, Enum):
    """Which side of the anchor id a page lies on.

    The value is the query parameter Mastodon uses for that direction.
    """

    BEFORE = "max_id"
    AFTER = "min_id"
    SINCE = "since_id"


class Range(BaseModel):
    """A requested page window: an optional anchor id, its direction, and a limit.

    Attributes:
        anchor: The id the window is anchored on, or None for the first page.
        direction: Where the window lies relative to `anchor`. Set if and only
            if `anchor` is set.
        limit: Maximum number of items to return, or None for the server default.
    """

    model_config = ConfigDict(frozen=True)

    anchor: str | None = None
    direction: Direction | None = None
    limit: int | None = Field(default=None, gt=0)

    @field_validator("anchor", mode="before")
    @classmethod
    def coerce_anchor(cls, v: Any) -> Any:
        """Accept integer ids, Mastodon ids are strings on the wire."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @model_validator(mode="after")
    def check_anchor_direction(self) -> Self:
        if (self.anchor is None) != (self.direction is None):
            raise ValueError("anchor and direction must be given together")
        return self

    @classmethod
    def before(cls, anchor: str | int, limit: int | None = None) -> "Range":
        """Items older than `anchor` (`max_id`)."""
        return cls(anchor=anchor, direction=Direction.BEFORE, limit=limit)

    @classmethod
    def after(cls, anchor: str | int, limit: int | None = None) -> "Range":
        """Items immediately newer than `anchor` (`min_id`)."""
        return cls(anchor=anchor, direction=Direction.AFTER, limit=limit)

    @classmethod
    def since(cls, anchor: str | int, limit: int | None = None) -> "Range":
        """The newest items, stopping at `anchor` (`since_id`)."""
        return cls(anchor=anchor, direction=Direction.SINCE, limit=limit)

    def with_limit(self, limit: int | None) -> "Range":
        return self.model_copy(update={"limit": limit})

    def to_parameters(self, parameters: Parameters | None = None) -> Parameters:
        """Append this range's query parameters to `parameters` (or a new set)."""
        parameters = parameters if parameters is not None else Parameters()
        if self.anchor is not None and self.direction is not None:
            parameters.append(self.direction.value, self.anchor)
        if self.limit is not None:
            parameters.append("limit", self.limit)
        return parameters

    @classmethod
    def from_parameters(cls, parameters: Parameters) -> "Range":
        """Build the range spelled out by the pagination keys of `parameters`.

        Raises:
            ValueError: If more than one anchor key is set, or the limit is not
                a positive integer.
        """
        anchors = [
            (direction, parameters.get(direction.value))
            for direction in Direction
            if parameters.get(direction.value) is not None
        ]
        if len(anchors) > 1:
            keys = ", ".join(direction.value for direction, _ in anchors)
            raise ValueError(
                f"Only one of max_id, min_id or since_id may be set, got {keys}"
            )
        limit = parameters.get("limit")
        if anchors:
            direction, anchor = anchors[0]
            return cls(anchor=anchor, direction=direction, limit=limit)
        return cls(limit=limit)


PAGINATION_KEYS = ("max_id", "min_id", "since_id", "limit")

_LINK_ENTRY = re.compile(r"\s*<([^>]*)>\s*((?:;[^,]*)?)")
_REL_PARAM = re.compile(r';\s*rel\s*=\s*(?:"([^"]*)"|([^\s;,"]+))', re.IGNORECASE)


def parse_link_header(value: str | None) -> dict[str, str]:
    """Parse an RFC 8288 `Link` header into a mapping of relation name to URL.

    Entries without a `rel` parameter, or that cannot be parsed at all, are
    skipped. If a relation appears twice, the first occurrence wins.

    Args:
        value: The raw header value, or None if the header is absent.

    Returns:
        dict[str, str]: Relation names (lower-cased) mapped to target URLs.
    """
    links: dict[str, str] = {}
    if not value:
        return links

    position = 0
    while position < len(value):
        match = _LINK_ENTRY.match(value, position)
        if match is None:
            # Skip to the next entry
            comma = value.find(",", position)
            if comma == -1:
                break
            position = comma + 1
            continue

        url, params = match.group(1).strip(), match.group(2)
        rel_match = _REL_PARAM.search(params)
        if rel_match and url:
            rel_value = rel_match.group(1) or rel_match.group(2) or ""
            for rel in rel_value.split():
                links.setdefault(rel.lower(), url)
        else:
            logger.trace(f"Ignoring Link entry without usable rel: {match.group(0)!r}")

        position = match.end()
        comma = value.find(",", position)
        if comma == -1:
            break
        position = comma + 1

    return links


def _parse_limit(raw: str | None) -> int | None:
    if raw is None or not raw.isdigit():
        return None
    limit = int(raw)
    return limit if limit > 0 else None


def range_from_url(url: str, rel: str) -> Range | None:
    """Build the `Range` a `next` or `prev` link URL points at.

    `next` links carry `max_id`. `prev` links carry `min_id`, or `since_id`
    on older servers. Returns None when the expected anchor is missing.
    """
    try:
        query = httpx.URL(url).params
    except httpx.InvalidURL:
        logger.debug(f"Ignoring unparsable {rel} link URL: {url!r}")
        return None

    limit = _parse_limit(query.get("limit"))
    if rel == "next":
        if max_id := query.get("max_id"):
            return Range.before(max_id, limit)
    elif rel == "prev":
        if min_id := query.get("min_id"):
            return Range.after(min_id, limit)
        if since_id := query.get("since_id"):
            return Range.since(since_id, limit)

    logger.debug(f"No anchor id in {rel} link, no continuation: {url!r}")
    return None


def derive_ranges(
    headers: httpx.Headers | Mapping[str, str],
) -> tuple[Range | None, Range | None]:
    """Derive the (next, previous) ranges from a list response's headers.

    This is a pure function of the headers and never raises for malformed
    pagination metadata.

    Returns:
        tuple[Range | None, Range | None]: The range for the next (older) page
            and the range for the previous (newer) page. Either is None when
            the response does not offer a continuation in that direction.
    """
    if not isinstance(headers, httpx.Headers):
        headers = httpx.Headers(headers)
    links = parse_link_header(headers.get("link"))
    next_url = links.get("next")
    prev_url = links.get("prev") or links.get("previous")
    next_range = range_from_url(next_url, "next") if next_url else None
    prev_range = range_from_url(prev_url, "prev") if prev_url else None
    return next_range, prev_range
