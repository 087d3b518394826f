# tests/conftest.py
import pytest
import pytest_asyncio

from tootloom.client import MastodonClient
from tootloom.config import ClientSettings


@pytest.fixture
def settings() -> ClientSettings:
    """Settings isolated from any local .env file."""
    return ClientSettings(_env_file=None, access_token=None)


@pytest.fixture
def client(settings: ClientSettings):
    """A client for a fictional instance, closed after the test."""
    client = MastodonClient("inst", settings, base_url="https://inst/api/v1")
    yield client
    client.close()


@pytest_asyncio.fixture
async def async_client(settings: ClientSettings):
    """A client whose async transport is closed after the test."""
    client = MastodonClient("inst", settings, base_url="https://inst/api/v1")
    yield client
    await client.aclose()
