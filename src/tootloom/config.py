# tootloom/config.py
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .types import PostRequestHook, PreRequestHook

DEFAULT_USER_AGENT = "tootloom/0.1.0"


class ClientSettings(BaseSettings):
    """
    Manages user-configurable settings for the Mastodon client, loaded from
    environment variables (prefixed with 'TOOTLOOM_') or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "secrets.env"),  # Look in both .env and secrets.env
        env_file_encoding="utf-8",
        env_prefix="TOOTLOOM_",
        extra="ignore",  # Ignore extra fields found in environment
        case_sensitive=False,
        arbitrary_types_allowed=True,  # Allow hook callables
    )

    # --- Transport Settings ---
    request_timeout: float = Field(
        default=30.0, description="Transport timeout in seconds"
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header for requests",
    )
    scheme: str = Field(
        default="https", description="URL scheme used to reach the instance"
    )
    port: int | None = Field(
        default=None, description="Port of the instance, if not the scheme default"
    )
    debug: bool = Field(
        default=False, description="Log every accessed URL at INFO level"
    )

    # --- Authentication ---
    access_token: str | None = Field(
        default=None, description="OAuth bearer token for the instance (optional)"
    )

    # --- Caller-side Retry Helper ---
    max_retries: int = Field(
        default=3, description="Retries used by tootloom.retry helpers"
    )
    backoff_factor: float = Field(
        default=0.5, description="Exponential backoff multiplier (seconds)"
    )

    # --- Hook Settings ---
    pre_request_hooks: list[PreRequestHook] = Field(
        default_factory=list,
        description="List of hooks to call before a request is sent.",
    )
    post_request_hooks: list[PostRequestHook] = Field(
        default_factory=list,
        description="List of hooks to call after a response is received.",
    )


@lru_cache
def get_settings() -> ClientSettings:
    """
    Provides access to the client settings.

    Settings are loaded from environment variables or .env/secrets.env files.
    The instance is cached for performance.

    Returns:
        ClientSettings: The settings instance.
    """
    return ClientSettings()
