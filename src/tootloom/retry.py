# tootloom/retry.py
"""Opt-in retry helpers for `MastodonRequest` executions.

A `MastodonRequest` performs exactly one HTTP call per execution. Callers who
want transient failures retried wrap the execution with these helpers, each
attempt being a complete, independent `execute()`.
"""

from typing import TypeVar

import tenacity
from tenacity import AsyncRetrying, Retrying, stop_after_attempt, wait_exponential

from .config import get_settings
from .exceptions import HttpError, TransportFailure
from .log_config import logger
from .request import MastodonRequest

T = TypeVar("T")

RETRYABLE_STATUS_CODES: frozenset[int] = frozenset([429, 500, 502, 503, 504])
"""HTTP status codes considered transient."""


def is_retryable(exc: BaseException | None) -> bool:
    """Whether `exc` is a transient failure worth another attempt."""
    if isinstance(exc, TransportFailure):
        return True
    return isinstance(exc, HttpError) and exc.status_code in RETRYABLE_STATUS_CODES


def _should_retry(retry_state: tenacity.RetryCallState) -> bool:
    outcome = retry_state.outcome
    if not outcome or not outcome.failed:
        return False
    exc = outcome.exception()
    if is_retryable(exc):
        url = getattr(getattr(exc, "request", None), "url", "N/A")
        logger.warning(f"Retrying due to {type(exc).__name__} for {url}")
        return True
    return False


def _before_retry_sleep(retry_state: tenacity.RetryCallState) -> None:
    """Log details before tenacity sleeps between attempts."""
    if not retry_state.outcome:
        return
    exc = retry_state.outcome.exception()
    sleep_time = (
        getattr(retry_state.next_action, "sleep", 0) if retry_state.next_action else 0
    )
    logger.info(
        f"Retrying request in {sleep_time:.2f} seconds after "
        f"{retry_state.attempt_number} attempt(s) due to: {type(exc).__name__} - {exc}"
    )


def _retry_options(max_retries: int | None, backoff_factor: float | None) -> dict:
    settings = get_settings()
    if max_retries is None:
        max_retries = settings.max_retries
    if backoff_factor is None:
        backoff_factor = settings.backoff_factor
    return {
        "stop": stop_after_attempt(max_retries + 1),  # +1 for initial attempt
        "wait": wait_exponential(multiplier=backoff_factor),
        "retry": _should_retry,
        "reraise": True,
        "before_sleep": _before_retry_sleep,
    }


def execute_with_retry(
    request: MastodonRequest[T],
    *,
    max_retries: int | None = None,
    backoff_factor: float | None = None,
) -> T:
    """Execute `request`, retrying transient failures with exponential backoff.

    Args:
        request: The request to execute.
        max_retries: Retries after the first attempt. Defaults to
            `settings.max_retries`.
        backoff_factor: Multiplier for the exponential wait, in seconds.
            Defaults to `settings.backoff_factor`.

    Returns:
        T: The decoded result of the first successful attempt.

    Raises:
        MastodonError: The last error, once retries are exhausted or the
            failure is not transient (e.g. a 404 or a `DecodeError`).
    """
    retrying = Retrying(**_retry_options(max_retries, backoff_factor))
    return retrying(request.execute)


async def execute_with_retry_async(
    request: MastodonRequest[T],
    *,
    max_retries: int | None = None,
    backoff_factor: float | None = None,
) -> T:
    """Asynchronous variant of `execute_with_retry()`."""
    retrying = AsyncRetrying(**_retry_options(max_retries, backoff_factor))
    return await retrying(request.execute_async)
