"""Tests for paginated results and continuation requests."""

import pytest
from pydantic import BaseModel

from tootloom.client import MastodonClient
from tootloom.codecs import Dimension, DimensionField
from tootloom.entities import Status
from tootloom.pageable import Pageable, PageableRequest
from tootloom.pagination import Range
from tootloom.types import Parameters

TIMELINE = "https://inst/api/v1/timelines/public"


class Picture(BaseModel):
    dimension: DimensionField


def test_timeline_page_with_next_link(client: MastodonClient, httpx_mock):
    httpx_mock.add_response(
        json=[{"dimension": "800x600"}],
        headers={"Link": f'<{TIMELINE}?max_id=10>; rel="next"'},
    )

    page = client.pageable_request("timelines/public", Picture).execute()

    assert page.items == [Picture(dimension=Dimension(width=800, height=600))]
    assert page.next_range == Range.before("10")
    assert page.prev_range is None
    assert page.has_next and not page.has_prev
    assert page.raw == [{"dimension": "800x600"}]


def test_page_without_link_header(client: MastodonClient, httpx_mock):
    httpx_mock.add_response(json=[])

    page = client.pageable_request("timelines/public", Picture).execute()

    assert len(page) == 0
    assert page.next_range is None and page.prev_range is None
    assert page.next_request() is None
    assert page.prev_request() is None


def test_next_request_continues_with_same_template(client: MastodonClient, httpx_mock):
    httpx_mock.add_response(
        url=f"{TIMELINE}?local=true&limit=2",
        json=[{"id": "12"}, {"id": "11"}],
        headers={
            "Link": (
                f'<{TIMELINE}?local=true&max_id=11&limit=2>; rel="next", '
                f'<{TIMELINE}?local=true&min_id=12&limit=2>; rel="prev"'
            )
        },
    )
    httpx_mock.add_response(
        url=f"{TIMELINE}?local=true&max_id=11&limit=2", json=[{"id": "10"}]
    )
    first = client.pageable_request(
        "timelines/public",
        Status,
        params=Parameters().append("local", True),
        range=Range(limit=2),
    )

    page = first.execute()
    next_request = page.next_request()
    older = next_request.execute()

    assert [status.id for status in page] == ["12", "11"]
    assert page.prev_range == Range.after("12", 2)
    assert isinstance(next_request, PageableRequest)
    assert next_request.range == Range.before("11", 2)
    assert [status.id for status in older] == ["10"]
    assert first.range == Range(limit=2)


def test_next_request_limit_override(client: MastodonClient, httpx_mock):
    httpx_mock.add_response(
        json=[],
        headers={"Link": f'<{TIMELINE}?max_id=5&limit=20>; rel="next"'},
    )

    page = client.pageable_request("timelines/public", Status).execute()

    assert page.next_request(limit=40).params.items() == [
        ("max_id", "5"),
        ("limit", "40"),
    ]


def test_next_request_keeps_page_size_when_link_has_no_limit(
    client: MastodonClient, httpx_mock
):
    httpx_mock.add_response(
        json=[{"id": "12"}, {"id": "11"}],
        headers={"Link": f'<{TIMELINE}?max_id=11>; rel="next"'},
    )
    first = client.pageable_request("timelines/public", Status, range=Range(limit=2))

    next_request = first.execute().next_request()

    assert next_request.range == Range.before("11", 2)
    assert ("limit", "2") in next_request.params.items()


def test_link_limit_wins_over_original_page_size(client: MastodonClient, httpx_mock):
    httpx_mock.add_response(
        json=[],
        headers={"Link": f'<{TIMELINE}?max_id=11&limit=5>; rel="next"'},
    )
    first = client.pageable_request("timelines/public", Status, range=Range(limit=2))

    assert first.execute().next_request().range == Range.before("11", 5)


def test_range_is_read_from_pagination_params(client: MastodonClient):
    params = Parameters().append("limit", 40)

    request = client.pageable_request("timelines/public", Status, params=params)

    assert request.range == Range(limit=40)
    assert request.params.items() == [("limit", "40")]


def test_anchor_in_params_becomes_range(client: MastodonClient):
    params = Parameters().append("tag", "python").append("max_id", "99")

    request = client.pageable_request("timelines/public", Status, params=params)

    assert request.range == Range.before("99")
    assert request.params.items() == [("tag", "python"), ("max_id", "99")]
    # The range stays authoritative for continuation pages
    assert request.for_range(Range.since("3")).params.items() == [
        ("tag", "python"),
        ("since_id", "3"),
    ]


def test_pagination_params_conflicting_with_range_are_rejected(
    client: MastodonClient,
):
    params = Parameters().append("max_id", "99").append("tag", "python")

    with pytest.raises(ValueError, match="max_id"):
        client.pageable_request(
            "timelines/public", Status, params=params, range=Range.since("3")
        )


def test_two_anchor_params_are_rejected(client: MastodonClient):
    params = Parameters().append("max_id", "99").append("since_id", "3")

    with pytest.raises(ValueError, match="Only one of"):
        client.pageable_request("timelines/public", Status, params=params)


def test_pageable_is_a_plain_sequence():
    page = Pageable(["a", "b"], Range.before("b"))

    assert list(page) == ["a", "b"]
    assert page[1] == "b"
    # No request factory, nothing to continue with
    assert page.next_request() is None
    assert "next=" in repr(page)
