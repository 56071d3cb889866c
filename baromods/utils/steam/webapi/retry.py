"""
Retry with exponential backoff for Steam WebAPI calls.

Transient failures (rate limiting, 5xx answers, timeouts, dropped connections)
are retried here so callers only ever see the final outcome of a request.
"""

import time
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, TypeVar

import requests
from loguru import logger

from baromods.utils.constants import STEAM_REQUEST_TIMEOUT

F = TypeVar("F", bound=Callable[..., Any])

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


@dataclass
class RetryConfig:
    """
    Retry behaviour of WebAPI requests.

    :param max_retries: attempts made after the first one
    :param backoff_factor: delay before retry n is backoff_factor * 2 ** n seconds
    :param max_backoff: upper bound of a single delay, in seconds
    :param retry_on_timeout: whether a timed out request is retried
    :param retry_on_connection_error: whether a failed connection is retried
    """

    max_retries: int = 3
    backoff_factor: float = 1.0
    max_backoff: float = 30.0
    retry_on_timeout: bool = True
    retry_on_connection_error: bool = True

    def delay(self, attempt: int) -> float:
        return min(self.backoff_factor * (2**attempt), self.max_backoff)


def should_retry_exception(exc: Exception, config: RetryConfig) -> bool:
    """
    Tell whether a failed request is worth another attempt.

    HTTP 429 and 500/502/503/504 are retried. Other HTTP errors are client
    errors and are not. Timeouts and connection errors follow the config.
    """
    if isinstance(exc, requests.HTTPError):
        if exc.response is None:
            return False
        return exc.response.status_code in RETRYABLE_STATUS_CODES

    # Timeout is checked first, ConnectTimeout is both
    if isinstance(exc, requests.Timeout):
        return config.retry_on_timeout

    if isinstance(exc, requests.ConnectionError):
        return config.retry_on_connection_error

    return False


def retry_webapi_call(config: RetryConfig) -> Callable[[F], F]:
    """
    Decorate a function so that retryable request failures are attempted again.

    Usage:
        @retry_webapi_call(config=RetryConfig(max_retries=3))
        def fetch():
            return requests.post("https://api.steampowered.com/...")

    The last exception is re-raised once retries are exhausted.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if not should_retry_exception(e, config):
                        logger.debug(
                            f"{func.__name__} failed with non-retryable error: "
                            f"{e.__class__.__name__}"
                        )
                        raise

                    if attempt >= config.max_retries:
                        logger.warning(
                            f"{func.__name__} failed after {config.max_retries} retry attempts: "
                            f"{e.__class__.__name__}"
                        )
                        raise

                    delay = config.delay(attempt)
                    logger.info(
                        f"{func.__name__} attempt {attempt + 1}/{config.max_retries + 1} failed "
                        f"({e.__class__.__name__}), retrying in {delay:.1f}s..."
                    )
                    time.sleep(delay)
                    attempt += 1

        return wrapper  # type: ignore

    return decorator


def webapi_post_with_retry(
    url: str,
    data: dict[str, str],
    config: RetryConfig | None = None,
    timeout: float = STEAM_REQUEST_TIMEOUT,
) -> requests.Response:
    """
    POST a form to the Steam WebAPI, retrying transient failures.

    Non 2xx answers are raised as requests.HTTPError so they go through the retry policy.

    :param url: endpoint to post to
    :param data: form fields
    :param config: retry configuration, defaults to RetryConfig()
    :param timeout: per attempt timeout in seconds
    :return: the successful response
    :raises requests.RequestException: when the request fails for good
    """
    if config is None:
        config = RetryConfig()

    @retry_webapi_call(config=config)
    def _post() -> requests.Response:
        response = requests.post(url, data=data, timeout=timeout)
        response.raise_for_status()
        return response

    return _post()
