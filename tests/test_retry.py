"""Tests for the opt-in retry helpers."""

import httpx
import pytest

from tootloom.client import MastodonClient
from tootloom.entities import Account
from tootloom.exceptions import DecodeError, HttpError, TransportFailure
from tootloom.retry import execute_with_retry, execute_with_retry_async, is_retryable

ACCOUNT_JSON = {"id": "1", "username": "alice", "acct": "alice"}


def test_is_retryable():
    assert is_retryable(TransportFailure("down"))
    assert is_retryable(HttpError("busy", status_code=503))
    assert is_retryable(HttpError("slow down", status_code=429))
    assert not is_retryable(HttpError("missing", status_code=404))
    assert not is_retryable(DecodeError("bad"))
    assert not is_retryable(None)


def test_retries_server_error_then_succeeds(client: MastodonClient, httpx_mock):
    httpx_mock.add_response(status_code=500)
    httpx_mock.add_response(json=ACCOUNT_JSON)

    account = execute_with_retry(
        client.request("accounts/1", Account), max_retries=2, backoff_factor=0
    )

    assert account.id == "1"
    assert len(httpx_mock.get_requests()) == 2


def test_retries_transport_failure(client: MastodonClient, httpx_mock):
    httpx_mock.add_exception(httpx.ConnectError("Connection refused"))
    httpx_mock.add_response(json=ACCOUNT_JSON)

    account = execute_with_retry(
        client.request("accounts/1", Account), max_retries=1, backoff_factor=0
    )

    assert account.username == "alice"


def test_gives_up_after_max_retries(client: MastodonClient, httpx_mock):
    httpx_mock.add_response(status_code=503, is_reusable=True)

    with pytest.raises(HttpError) as exc_info:
        execute_with_retry(
            client.request("accounts/1", Account), max_retries=2, backoff_factor=0
        )

    assert exc_info.value.status_code == 503
    assert len(httpx_mock.get_requests()) == 3


def test_does_not_retry_client_errors(client: MastodonClient, httpx_mock):
    httpx_mock.add_response(status_code=404, json={"error": "Record not found"})

    with pytest.raises(HttpError):
        execute_with_retry(
            client.request("accounts/1", Account), max_retries=3, backoff_factor=0
        )

    assert len(httpx_mock.get_requests()) == 1


@pytest.mark.asyncio
async def test_async_retry(async_client: MastodonClient, httpx_mock):
    httpx_mock.add_response(status_code=429)
    httpx_mock.add_response(json=ACCOUNT_JSON)

    account = await execute_with_retry_async(
        async_client.request("accounts/1", Account), max_retries=1, backoff_factor=0
    )

    assert account.id == "1"
    assert len(httpx_mock.get_requests()) == 2
