"""HTTP GET with retries for exchange REST endpoints."""

import logging
import time
from typing import Any, Callable, Optional

import requests

from download_ticks.errors import FetchError, ResponseFormatError

logger = logging.getLogger(__name__)

# Rate limits and IP bans in progress; every 5xx is retried as well.
RATE_LIMIT_STATUS = {418, 429}

DEFAULT_USER_AGENT = "download-ticks"


def create_session(user_agent: str = DEFAULT_USER_AGENT) -> requests.Session:
    """Create a requests session with JSON headers."""
    session = requests.Session()
    session.headers.update({
        "Accept": "application/json",
        "User-Agent": user_agent,
    })
    return session


def is_retryable(status_code: int) -> bool:
    """Whether a failed response is worth another attempt."""
    return status_code in RATE_LIMIT_STATUS or status_code >= 500


def _retry_after(response: requests.Response, default: float) -> float:
    """Seconds to wait before retrying, honouring a Retry-After header."""
    value = response.headers.get("Retry-After")
    if value is None:
        return default
    try:
        return max(float(value), 0.0)
    except ValueError:
        return default


def fetch_json(
    session: requests.Session,
    url: str,
    params: Optional[dict[str, Any]] = None,
    retries: int = 3,
    pause: float = 3.0,
    timeout: float = 30.0,
    error_message: Optional[Callable[[Any], Optional[str]]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Any:
    """GET ``url`` and decode the JSON body, retrying transient failures.

    Connection errors, timeouts, bodies cut off mid-transfer, HTTP 418/429
    and 5xx responses are retried up to ``retries`` attempts in total,
    sleeping ``pause`` seconds between attempts. Other HTTP errors and
    request failures fail immediately.

    Args:
        session: Session used for the request.
        url: Endpoint URL.
        params: Query-string parameters.
        retries: Total number of attempts (at least one is made).
        pause: Seconds to wait between attempts.
        timeout: Per-request timeout in seconds.
        error_message: Extracts an exchange error message from a decoded body.
        sleep: Sleep function, replaceable in tests.

    Returns:
        The decoded JSON payload.

    Raises:
        FetchError: If the request fails or the exchange reports an error.
        ResponseFormatError: If the body is not valid JSON.
    """
    attempts = max(retries, 1)
    last_error: Optional[FetchError] = None

    for attempt in range(1, attempts + 1):
        wait = pause
        try:
            logger.debug("GET %s params=%s (attempt %d/%d)", url, params, attempt, attempts)
            response = session.get(url, params=params, timeout=timeout)
        except (
            requests.ConnectionError,
            requests.Timeout,
            requests.exceptions.ChunkedEncodingError,
        ) as e:
            last_error = FetchError(f"Request to {url} failed: {e}")
        except requests.RequestException as e:
            raise FetchError(f"Request to {url} failed: {e}") from e
        else:
            if response.ok:
                return _decode(response, url, error_message)

            message = _describe_failure(response, error_message)
            last_error = FetchError(message, status_code=response.status_code)
            if not is_retryable(response.status_code):
                raise last_error
            wait = _retry_after(response, pause)

        if attempt < attempts:
            logger.warning("Attempt %d/%d failed: %s. Retrying in %.1fs", attempt, attempts, last_error, wait)
            sleep(wait)

    logger.error("Giving up on %s after %d attempts", url, attempts)
    raise last_error


def _decode(
    response: requests.Response,
    url: str,
    error_message: Optional[Callable[[Any], Optional[str]]],
) -> Any:
    try:
        payload = response.json()
    except ValueError as e:
        raise ResponseFormatError(f"Response from {url} is not valid JSON: {e}") from e

    if error_message:
        message = error_message(payload)
        if message:
            raise FetchError(f"Exchange error: {message}", status_code=response.status_code)
    return payload


def _describe_failure(
    response: requests.Response,
    error_message: Optional[Callable[[Any], Optional[str]]],
) -> str:
    """Build a readable message for a failed response."""
    detail = None
    if error_message:
        try:
            detail = error_message(response.json())
        except ValueError:
            detail = None
    if not detail:
        detail = response.text[:200] or response.reason
    return f"HTTP {response.status_code} from {response.url}: {detail}"
